"""Merge provider result lists and drop duplicate artworks by content identity."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from models import ArtworkRecord

_WHITESPACE_RE = re.compile(r"\s+")

LOGGER = logging.getLogger(__name__)


def normalize(text: str | None) -> str:
    """Case-fold and strip punctuation so equivalent display strings compare equal.

    Lower-cases, collapses whitespace runs to one space, drops every character
    that is not a Unicode letter, number or whitespace, then collapses and
    trims again so removed punctuation cannot leave double spaces behind.
    """
    if not text:
        return ""
    value = _WHITESPACE_RE.sub(" ", text.lower())
    value = "".join(ch for ch in value if ch.isalnum() or ch.isspace())
    return _WHITESPACE_RE.sub(" ", value).strip()


def identity_key(record: ArtworkRecord) -> str:
    return f"{normalize(record.artist)}|{normalize(record.title)}"


def merge(*record_lists: Iterable[ArtworkRecord]) -> list[ArtworkRecord]:
    """Concatenate lists in call order, keeping the first record per identity key.

    The same physical work can be listed by both providers under different
    native ids, so identity is artist + title rather than ``id``. With inputs
    passed as (met, aic) the Met record wins on collision.
    """
    seen: set[str] = set()
    merged: list[ArtworkRecord] = []
    total = 0

    for records in record_lists:
        for record in records:
            total += 1
            key = identity_key(record)
            if key in seen:
                continue
            seen.add(key)
            merged.append(record)

    LOGGER.debug("Merge: input=%s unique=%s duplicates=%s", total, len(merged), total - len(merged))
    return merged
