"""Tests for provider fan-out, merge ordering and the search entry points."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock, patch

import pytest

import aggregator
from models import ArtworkRecord, Provider


def _record(record_id: str, artist: str, title: str) -> ArtworkRecord:
    provider = Provider.MET if record_id.startswith("met:") else Provider.AIC
    return ArtworkRecord(
        id=record_id,
        title=title,
        artist=artist,
        thumbnail_url=f"https://img.example/{record_id}.jpg",
        provider=provider,
    )


class _StubProvider:
    def __init__(self, provider: Provider, records: list[ArtworkRecord], before=None) -> None:
        self.provider = provider
        self.records = records
        self.before = before
        self.calls: list[tuple[str, int]] = []

    def search(self, keyword: str, max_results: int) -> list[ArtworkRecord]:
        self.calls.append((keyword, max_results))
        if self.before is not None:
            self.before()
        return list(self.records)


def test_fetch_merged_puts_met_first_even_when_aic_finishes_first() -> None:
    aic_done = threading.Event()
    met = _StubProvider(
        Provider.MET,
        [_record("met:1", "Claude Monet", "Water Lilies")],
        before=lambda: aic_done.wait(timeout=5),
    )
    aic = _StubProvider(
        Provider.AIC,
        [_record("aic:1", "CLAUDE MONET", "water lilies"), _record("aic:2", "Degas", "Dancers")],
        before=aic_done.set,
    )

    merged = aggregator.fetch_merged("monet", 10, providers=[met, aic])

    assert [r.id for r in merged] == ["met:1", "aic:2"]
    assert met.calls == [("monet", 10)]
    assert aic.calls == [("monet", 10)]


def test_fetch_merged_runs_providers_concurrently() -> None:
    """Both providers must be in flight at once for the barrier to release."""
    barrier = threading.Barrier(2, timeout=5)
    met = _StubProvider(Provider.MET, [_record("met:1", "Goya", "Majas")], before=barrier.wait)
    aic = _StubProvider(Provider.AIC, [], before=barrier.wait)

    merged = aggregator.fetch_merged("goya", 5, providers=[met, aic])

    assert [r.id for r in merged] == ["met:1"]
    assert not barrier.broken


def test_fetch_merged_propagates_programming_errors() -> None:
    broken = MagicMock()
    broken.search.side_effect = ValueError("max_results must be >= 1, got 0")

    with pytest.raises(ValueError):
        aggregator.fetch_merged("goya", 0, providers=[broken])


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_blank_query_skips_providers(query: str) -> None:
    with patch("aggregator.fetch_merged") as mock_fetch:
        ranked = aggregator.run_search(query)

    mock_fetch.assert_not_called()
    assert ranked.records == ()


def test_run_search_ranks_merged_records() -> None:
    merged = [
        _record("aic:1", "Katsushika Hokusai", "Monet's Garden Study"),
        _record("met:1", "Claude Monet", "Water Lilies"),
        _record("met:2", "Edgar Degas", "Dancers"),
    ]

    with patch("aggregator.fetch_merged", return_value=merged) as mock_fetch:
        ranked = aggregator.run_search("  monet ", cap=60, max_results=12)

    mock_fetch.assert_called_once_with("monet", 12, None)
    assert ranked.query == "  monet "
    assert ranked.cap == 60
    assert [r.id for r in ranked.records] == ["met:1", "aic:1"]


def test_run_search_reads_max_results_from_env() -> None:
    with patch.dict("os.environ", {"SEARCH_MAX_RESULTS": "7"}), \
         patch("aggregator.fetch_merged", return_value=[]) as mock_fetch:
        aggregator.run_search("rembrandt")

    assert mock_fetch.call_args.args[1] == 7


def test_run_search_applies_cap() -> None:
    merged = [_record(f"met:{i}", "Claude Monet", f"Haystacks {i}") for i in range(10)]

    with patch("aggregator.fetch_merged", return_value=merged):
        ranked = aggregator.run_search("monet", cap=4)

    assert len(ranked.records) == 4


def test_search_returns_plain_list() -> None:
    merged = [_record("met:1", "Claude Monet", "Water Lilies")]

    with patch("aggregator.fetch_merged", return_value=merged):
        result = aggregator.search("monet")

    assert result == merged


def test_search_with_no_matches_is_empty_not_error() -> None:
    with patch("aggregator.fetch_merged", return_value=[]):
        assert aggregator.search("xyzxyzxyz") == []


def test_default_providers_order() -> None:
    providers = aggregator.default_providers()

    assert [p.provider for p in providers] == [Provider.MET, Provider.AIC]
