"""Tests for the CLI entrypoint (main.main)."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

import main
from models import ArtworkRecord, Provider, RankedQuery

_RECORD = ArtworkRecord(
    id="met:436535",
    title="Wheat Field with Cypresses",
    artist="Vincent van Gogh",
    thumbnail_url="https://images.metmuseum.org/small.jpg",
    provider=Provider.MET,
    date_text="1889",
)


def test_search_mode_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    ranked = RankedQuery(query="gogh", records=(_RECORD,), cap=5)

    with patch("main.run_search", return_value=ranked) as mock_search:
        code = main.main(["--mode", "search", "--query", "gogh", "--cap", "5", "--json"])

    assert code == 0
    mock_search.assert_called_once_with("gogh", cap=5)
    printed = json.loads(capsys.readouterr().out)
    assert printed[0]["id"] == "met:436535"
    assert printed[0]["source"] == "met"


def test_search_mode_reports_no_matches(capsys: pytest.CaptureFixture[str]) -> None:
    with patch("main.run_search", return_value=RankedQuery(query="zz", records=(), cap=60)):
        code = main.main(["--query", "zz"])

    assert code == 0
    assert "No matches" in capsys.readouterr().out


def test_search_mode_failure_exits_non_zero() -> None:
    with patch("main.run_search", side_effect=RuntimeError("boom")):
        assert main.main(["--query", "gogh"]) == 1


def test_pick_mode_prints_record(capsys: pytest.CaptureFixture[str]) -> None:
    with patch("main.pick_of_the_day", return_value=_RECORD) as mock_pick:
        code = main.main(["--mode", "pick", "--max-attempts", "2"])

    assert code == 0
    mock_pick.assert_called_once_with(max_attempts=2)
    out = capsys.readouterr().out
    assert "Wheat Field with Cypresses (1889) - Vincent van Gogh" in out


def test_pick_mode_without_pick_is_not_a_failure(capsys: pytest.CaptureFixture[str]) -> None:
    with patch("main.pick_of_the_day", return_value=None):
        code = main.main(["--mode", "pick", "--json"])

    assert code == 0
    assert json.loads(capsys.readouterr().out) is None
