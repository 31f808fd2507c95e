"""Metropolitan Museum of Art collection adapter.

Two phases: the search endpoint resolves a keyword to object ids, then one
detail request per id is dispatched concurrently. Detail failures are
per-item and never fail the whole search.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

import requests

from fetcher import FetchError, fetch_with_timeout
from models import ArtworkRecord, Provider, as_str, check_max_results, is_native_id

MET_SEARCH_URL = os.getenv(
    "MET_SEARCH_URL", "https://collectionapi.metmuseum.org/public/collection/v1/search"
)
MET_OBJECT_URL = os.getenv(
    "MET_OBJECT_URL", "https://collectionapi.metmuseum.org/public/collection/v1/objects/"
)

LOGGER = logging.getLogger(__name__)


class MetProvider:
    """Search for object ids, then fetch each object's detail record."""

    provider = Provider.MET

    def __init__(self, timeout_ms: int | None = None, session: requests.Session | None = None) -> None:
        self.timeout_ms = timeout_ms
        self.session = session

    def search(self, keyword: str, max_results: int) -> list[ArtworkRecord]:
        check_max_results(max_results)

        object_ids = self._search_ids(keyword, max_results)
        if not object_ids:
            LOGGER.info("Met search: keyword=%r returned no object ids", keyword)
            return []

        records: list[ArtworkRecord] = []
        failed = 0
        malformed = 0
        with ThreadPoolExecutor(max_workers=len(object_ids)) as executor:
            futures = {executor.submit(self._fetch_detail, oid): oid for oid in object_ids}
            for future in as_completed(futures):
                try:
                    record = future.result()
                except (FetchError, ValueError) as exc:
                    failed += 1
                    LOGGER.debug("Met detail: object_id=%s dropped: %s", futures[future], exc)
                    continue
                if record is None:
                    malformed += 1
                    continue
                records.append(record)

        LOGGER.info(
            "Met search: keyword=%r ids=%s records=%s failed=%s malformed=%s",
            keyword,
            len(object_ids),
            len(records),
            failed,
            malformed,
        )
        return records

    def _search_ids(self, keyword: str, limit: int) -> list[int | str]:
        params = {"hasImages": "true", "artistOrCulture": "true", "q": keyword}
        try:
            response = fetch_with_timeout(
                MET_SEARCH_URL, params=params, timeout_ms=self.timeout_ms, session=self.session
            )
        except FetchError as exc:
            LOGGER.warning("Met search: request failed for keyword=%r: %s", keyword, exc)
            return []

        if not response.ok:
            LOGGER.warning(
                "Met search: HTTP %s for keyword=%r", response.status_code, keyword
            )
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            LOGGER.warning("Met search: non-JSON body for keyword=%r: %s", keyword, exc)
            return []

        raw_ids = payload.get("objectIDs") if isinstance(payload, dict) else None
        if not isinstance(raw_ids, list):
            return []

        # dict.fromkeys keeps order and makes ids unique within this provider
        ids = list(dict.fromkeys(oid for oid in raw_ids if is_native_id(oid)))
        return ids[:limit]

    def _fetch_detail(self, object_id: int | str) -> ArtworkRecord | None:
        response = fetch_with_timeout(
            f"{MET_OBJECT_URL}{object_id}", timeout_ms=self.timeout_ms, session=self.session
        )
        if not response.ok:
            raise FetchError(f"HTTP {response.status_code}")
        return _parse_object(response.json())


def _parse_object(payload: Any) -> ArtworkRecord | None:
    """Map one object-detail payload, or None when required fields are missing."""
    if not isinstance(payload, dict):
        return None

    object_id = payload.get("objectID")
    image = as_str(payload.get("primaryImageSmall"))
    if not is_native_id(object_id) or not image:
        return None

    return ArtworkRecord(
        id=f"{Provider.MET.value}:{object_id}",
        title=as_str(payload.get("title")) or "",
        artist=as_str(payload.get("artistDisplayName")) or "",
        thumbnail_url=image,
        provider=Provider.MET,
        date_text=as_str(payload.get("objectDate")),
    )
