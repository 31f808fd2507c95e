"""
Backend-for-frontend HTTP API.

Exposes the two operations the mobile client consumes:
- GET /api/search?q=... -> {"query", "count", "items": [...]}
- GET /api/today        -> {"item": {...} | null}

Run with ``python main.py --mode serve`` or ``uvicorn api:app``.
"""

from __future__ import annotations

import logging
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query

from aggregator import run_search
from daily_pick import pick_of_the_day

LOGGER = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application, loading .env for call-time settings."""
    load_dotenv()
    app = FastAPI(
        title="Artwork Aggregator API",
        description="Merged, de-duplicated and ranked artwork search over the Met and AIC collections",
        version="0.1.0",
    )

    @app.get("/ping")
    def ping() -> dict[str, str]:
        """Health check endpoint."""
        return {"message": "pong"}

    @app.get("/api/search")
    def search_artworks(q: str = Query(default="", description="Free-text query")) -> dict[str, Any]:
        try:
            ranked = run_search(q)
        except Exception as exc:  # broad by design: any failure here means the service is down
            LOGGER.exception("Search failed for query=%r: %s", q, exc)
            raise HTTPException(status_code=503, detail="search service unavailable") from exc

        return {
            "query": ranked.query,
            "count": len(ranked.records),
            "items": [record.to_dict() for record in ranked.records],
        }

    @app.get("/api/today")
    def today_pick() -> dict[str, Any]:
        """A null item means no pick was available, not an error."""
        try:
            pick = pick_of_the_day()
        except Exception as exc:  # broad by design, see search_artworks
            LOGGER.exception("Pick of the day failed: %s", exc)
            raise HTTPException(status_code=503, detail="pick service unavailable") from exc

        return {"item": pick.to_dict() if pick is not None else None}

    return app


app = create_app()
