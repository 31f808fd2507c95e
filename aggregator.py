"""Search entry points: parallel provider fan-out, merge and ranking."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from aic_client import AicProvider
from dedupe import merge
from met_client import MetProvider
from models import ArtworkProvider, ArtworkRecord, RankedQuery
from ranking import DEFAULT_CAP, rank

LOGGER = logging.getLogger(__name__)


def default_providers() -> list[ArtworkProvider]:
    """Met first so its records win dedupe collisions."""
    return [MetProvider(), AicProvider()]


def fetch_merged(
    keyword: str,
    max_results: int,
    providers: Sequence[ArtworkProvider] | None = None,
) -> list[ArtworkRecord]:
    """Query every provider concurrently and merge their lists in provider order.

    Adapters absorb their own network failures and return [], so an exception
    here is a programming error and propagates.
    """
    if providers is None:
        providers = default_providers()

    with ThreadPoolExecutor(max_workers=max(len(providers), 1)) as executor:
        futures = [executor.submit(p.search, keyword, max_results) for p in providers]
        results = [future.result() for future in futures]

    merged = merge(*results)
    LOGGER.info(
        "Fetch merged: keyword=%r per_provider=%s merged=%s",
        keyword,
        [len(r) for r in results],
        len(merged),
    )
    return merged


def run_search(
    query: str,
    cap: int = DEFAULT_CAP,
    providers: Sequence[ArtworkProvider] | None = None,
    max_results: int | None = None,
) -> RankedQuery:
    """Fetch, merge and rank records for one user query.

    A blank query returns an empty result without touching the network.
    max_results is the per-provider fetch size; reads SEARCH_MAX_RESULTS
    (default 30) when omitted.
    """
    if not query or not query.strip():
        return RankedQuery(query=query, records=(), cap=cap)

    if max_results is None:
        max_results = int(os.getenv("SEARCH_MAX_RESULTS", "30"))

    merged = fetch_merged(query.strip(), max_results, providers)
    ranked = rank(merged, query, cap=cap)
    return RankedQuery(query=query, records=tuple(ranked), cap=cap)


def search(query: str) -> list[ArtworkRecord]:
    return list(run_search(query).records)
