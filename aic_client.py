"""Art Institute of Chicago API adapter (single search request, inline items)."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from fetcher import FetchError, fetch_with_timeout
from models import ArtworkRecord, Provider, as_str, check_max_results, is_native_id

AIC_SEARCH_URL = os.getenv("AIC_SEARCH_URL", "https://api.artic.edu/api/v1/artworks/search")
AIC_IIIF_BASE_URL = os.getenv("AIC_IIIF_BASE_URL", "https://www.artic.edu/iiif/2")
AIC_FIELDS = "id,title,image_id,artist_title,date_display"
THUMBNAIL_WIDTH = 600

LOGGER = logging.getLogger(__name__)


def iiif_thumbnail_url(image_id: str, width: int = THUMBNAIL_WIDTH) -> str:
    """Build a fetchable IIIF image URL scaled to a fixed width."""
    return f"{AIC_IIIF_BASE_URL.rstrip('/')}/{image_id}/full/{width},/0/default.jpg"


class AicProvider:
    """One search call with inline items; response order is preserved."""

    provider = Provider.AIC

    def __init__(self, timeout_ms: int | None = None, session: requests.Session | None = None) -> None:
        self.timeout_ms = timeout_ms
        self.session = session

    def search(self, keyword: str, max_results: int) -> list[ArtworkRecord]:
        check_max_results(max_results)

        params = {"q": keyword, "fields": AIC_FIELDS, "limit": max_results}
        try:
            response = fetch_with_timeout(
                AIC_SEARCH_URL, params=params, timeout_ms=self.timeout_ms, session=self.session
            )
        except FetchError as exc:
            LOGGER.warning("AIC search: request failed for keyword=%r: %s", keyword, exc)
            return []

        if not response.ok:
            LOGGER.warning("AIC search: HTTP %s for keyword=%r", response.status_code, keyword)
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            LOGGER.warning("AIC search: non-JSON body for keyword=%r: %s", keyword, exc)
            return []

        records = _parse_search_payload(payload, max_results)
        LOGGER.info("AIC search: keyword=%r records=%s", keyword, len(records))
        return records


def _parse_search_payload(payload: Any, max_results: int) -> list[ArtworkRecord]:
    """Parse the search payload, skipping items without an id or image."""
    items = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        return []

    parsed: list[ArtworkRecord] = []
    for item in items[:max_results]:
        if not isinstance(item, dict):
            continue

        native_id = item.get("id")
        image_id = as_str(item.get("image_id"))
        if not is_native_id(native_id) or not image_id:
            continue

        parsed.append(
            ArtworkRecord(
                id=f"{Provider.AIC.value}:{native_id}",
                title=as_str(item.get("title")) or "",
                artist=as_str(item.get("artist_title")) or "",
                thumbnail_url=iiif_thumbnail_url(image_id),
                provider=Provider.AIC,
                date_text=as_str(item.get("date_display")),
            )
        )

    return parsed
