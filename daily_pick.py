"""Pick of the day: one random artwork drawn through a bounded keyword retry loop."""

from __future__ import annotations

import logging
import os
import random
from collections.abc import Sequence

from aggregator import fetch_merged
from models import ArtworkProvider, ArtworkRecord

# Well-known artists keep the hit rate high on both catalogs.
POPULAR_KEYWORDS: tuple[str, ...] = (
    "Van Gogh",
    "Monet",
    "Picasso",
    "Rembrandt",
    "Da Vinci",
    "Matisse",
    "Klimt",
    "Renoir",
    "Degas",
    "Goya",
    "Cézanne",
    "Turner",
)
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_PICK_MAX_RESULTS = 50

LOGGER = logging.getLogger(__name__)


def pick_of_the_day(
    max_attempts: int | None = None,
    providers: Sequence[ArtworkProvider] | None = None,
    max_results: int | None = None,
    rng: random.Random | None = None,
) -> ArtworkRecord | None:
    """Return one uniformly sampled artwork, or None when every attempt came back empty.

    Each attempt picks a random keyword, queries both providers and merges
    the results; the first non-empty merge ends the loop. None is a normal
    outcome ("no pick available"), never an error.

    Args:
        max_attempts: Upper bound on provider round-trips. Reads
            PICK_MAX_ATTEMPTS env var if not supplied; defaults to 3.
        providers: Adapters to query; defaults to Met + AIC.
        max_results: Per-provider fetch size for each attempt. Reads
            PICK_MAX_RESULTS env var if not supplied; defaults to 50.
        rng: Source of randomness, injectable for reproducible runs.
    """
    if max_attempts is None:
        max_attempts = int(os.getenv("PICK_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))
    if max_results is None:
        max_results = int(os.getenv("PICK_MAX_RESULTS", DEFAULT_PICK_MAX_RESULTS))
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if rng is None:
        rng = random.Random()

    for attempt in range(1, max_attempts + 1):
        keyword = rng.choice(POPULAR_KEYWORDS)
        merged = fetch_merged(keyword, max_results, providers)
        if merged:
            pick = rng.choice(merged)
            LOGGER.info(
                "Pick of the day: attempt %s/%s keyword=%r candidates=%s picked=%s",
                attempt,
                max_attempts,
                keyword,
                len(merged),
                pick.id,
            )
            return pick

        LOGGER.info(
            "Pick of the day: attempt %s/%s keyword=%r returned nothing",
            attempt,
            max_attempts,
            keyword,
        )

    LOGGER.warning("Pick of the day: no artwork after %s attempts", max_attempts)
    return None
