"""Fuzzy ranking of merged artwork records against a free-text query."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from rapidfuzz import fuzz, utils

from models import ArtworkRecord

# (field, weight) pairs; weights sum to 1 and act as exponents on the field distance.
FIELD_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("artist", 0.7),
    ("title", 0.3),
)
# Distance on a 0-1 scale, 0 is a perfect match. Lower is stricter.
MATCH_THRESHOLD = 0.42
MIN_MATCH_CHAR_LENGTH = 2
FALLBACK_MIN_RESULTS = 6
DEFAULT_CAP = 60

_MIN_RATIO = (1.0 - MATCH_THRESHOLD) * 100.0

LOGGER = logging.getLogger(__name__)


def rank(records: Sequence[ArtworkRecord], query: str, cap: int = DEFAULT_CAP) -> list[ArtworkRecord]:
    """Rank records for a query, best match first.

    Runs the fuzzy pass; when it finds fewer than FALLBACK_MIN_RESULTS records,
    appends case-insensitive substring matches it missed. The result is
    truncated to ``cap``. No match yields an empty list.
    """
    if cap < 0:
        raise ValueError(f"cap must be >= 0, got {cap}")

    ranked = fuzzy_search(records, query)
    fuzzy_count = len(ranked)
    if fuzzy_count < FALLBACK_MIN_RESULTS:
        ranked = ranked + substring_fallback(records, query, exclude_ids={r.id for r in ranked})

    LOGGER.info(
        "Rank: query=%r candidates=%s fuzzy=%s with_fallback=%s cap=%s",
        query,
        len(records),
        fuzzy_count,
        len(ranked),
        cap,
    )
    return ranked[:cap]


def fuzzy_search(records: Sequence[ArtworkRecord], query: str) -> list[ArtworkRecord]:
    """Approximate weighted match on artist and title, ordered by ascending score."""
    processed_query = utils.default_process(query or "")
    if len(processed_query) < MIN_MATCH_CHAR_LENGTH:
        return []

    scored: list[tuple[float, int, ArtworkRecord]] = []
    for index, record in enumerate(records):
        score = _record_score(record, processed_query)
        if score is not None:
            scored.append((score, index, record))

    scored.sort(key=lambda item: (item[0], item[1]))
    return [record for _, _, record in scored]


def substring_fallback(
    records: Sequence[ArtworkRecord],
    query: str,
    exclude_ids: set[str] | frozenset[str] = frozenset(),
) -> list[ArtworkRecord]:
    """Records whose artist or title contains the raw query, case-insensitively.

    Unlike the fuzzy pass there is no minimum fragment length, so a
    one-character query can still match here. A blank query matches nothing.
    """
    needle = (query or "").lower()
    if not needle.strip():
        return []
    matches: list[ArtworkRecord] = []
    seen = set(exclude_ids)
    for record in records:
        if record.id in seen:
            continue
        if needle in (record.artist or "").lower() or needle in (record.title or "").lower():
            seen.add(record.id)
            matches.append(record)
    return matches


def _record_score(record: ArtworkRecord, processed_query: str) -> float | None:
    """Weighted product over matching fields, or None when no field matches."""
    total = 1.0
    matched = False
    for field, weight in FIELD_WEIGHTS:
        distance = _field_distance(getattr(record, field), processed_query)
        if distance is None:
            continue
        matched = True
        total *= max(distance, sys.float_info.epsilon) ** weight
    return total if matched else None


def _field_distance(value: str | None, processed_query: str) -> float | None:
    processed = utils.default_process(value or "")
    if len(processed) < MIN_MATCH_CHAR_LENGTH:
        return None
    # A field shorter than the query is compared whole, otherwise the field
    # itself would be found inside the query.
    if len(processed) < len(processed_query):
        ratio = fuzz.ratio(processed_query, processed)
    else:
        ratio = fuzz.partial_ratio(processed_query, processed)
    if ratio < _MIN_RATIO:
        return None
    return 1.0 - ratio / 100.0
