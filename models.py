"""Shared typed models for the artwork aggregator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class Provider(str, Enum):
    """Catalog that produced a record. Attribution only, never used for dedupe."""

    MET = "met"
    AIC = "aic"


@dataclass(frozen=True, slots=True)
class ArtworkRecord:
    """Normalized artwork record emitted by every provider adapter."""

    id: str
    title: str
    artist: str
    thumbnail_url: str
    provider: Provider
    date_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire shape consumed by the mobile client."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "dateText": self.date_text,
            "thumb": self.thumbnail_url,
            "source": self.provider.value,
        }


@dataclass(frozen=True, slots=True)
class RankedQuery:
    query: str
    records: tuple[ArtworkRecord, ...]
    cap: int


class ArtworkProvider(Protocol):
    provider: Provider

    def search(self, keyword: str, max_results: int) -> list[ArtworkRecord]:
        ...


def as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None


def is_native_id(value: Any) -> bool:
    """True for a non-bool int or a non-blank string."""
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or as_str(value) is not None


def check_max_results(max_results: int) -> None:
    if max_results < 1:
        raise ValueError(f"max_results must be >= 1, got {max_results}")
