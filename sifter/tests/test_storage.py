"""
Tests for watchlist and scan-history stores.

Tests verify:
    - Watchlist add / refresh / remove / contains, in memory and on disk
    - History is newest first and capped at history_max_entries
    - JSON stores survive a reload and tolerate corrupt files
"""

import json
import os

import pytest

from sifter.config import SifterConfig
from sifter.storage.stores import (
    InMemoryHistory,
    InMemoryWatchlist,
    JsonFileHistory,
    JsonFileWatchlist,
)


# ── Watchlist ─────────────────────────────────────────────────────────────────

def test_watchlist_add_and_remove(rich_report, clean_report):
    watchlist = InMemoryWatchlist()
    entry = watchlist.add(rich_report)
    watchlist.add(clean_report)

    assert entry.canonical_name == "moon-rocket,-inc."
    assert entry.risk_score == 75
    assert entry.verdict == "reject"
    assert [e.display_name for e in watchlist.list()] == ["Moon Rocket, Inc.", "Solid Protocol"]
    assert watchlist.contains("solid-protocol")

    assert watchlist.remove("solid-protocol") is True
    assert watchlist.remove("solid-protocol") is False
    assert not watchlist.contains("solid-protocol")


def test_watchlist_refresh_keeps_added_at(make_obs, make_report):
    watchlist = InMemoryWatchlist()
    first = watchlist.add(make_report("Moon", make_obs(default=20)))
    second = watchlist.add(make_report("Moon", make_obs(default=80)))
    assert len(watchlist.list()) == 1
    assert second.added_at == first.added_at
    assert second.risk_score == 80


def test_json_watchlist_persists(tmp_path, rich_report):
    path = str(tmp_path / "watchlist.json")
    JsonFileWatchlist(path).add(rich_report)

    reloaded = JsonFileWatchlist(path)
    assert reloaded.contains("moon-rocket,-inc.")
    assert reloaded.list()[0].risk_score == 75

    reloaded.remove("moon-rocket,-inc.")
    with open(path, encoding="utf-8") as fh:
        assert json.load(fh) == []


def test_failed_flush_leaves_no_partial_file(tmp_path, rich_report, monkeypatch):
    def fail_rename(src, dst):
        raise OSError("read-only filesystem")

    monkeypatch.setattr(os, "replace", fail_rename)
    with pytest.raises(OSError):
        JsonFileWatchlist(str(tmp_path / "watchlist.json")).add(rich_report)
    assert os.listdir(tmp_path) == []


def test_json_watchlist_skips_malformed_rows(tmp_path):
    path = tmp_path / "watchlist.json"
    path.write_text(json.dumps([{"canonical_name": "only-a-name"}]))
    assert JsonFileWatchlist(str(path)).list() == []


# ── History ───────────────────────────────────────────────────────────────────

def test_history_newest_first(rich_report, clean_report):
    history = InMemoryHistory()
    history.record(rich_report)
    history.record(clean_report)
    recent = history.recent()
    assert [e.display_name for e in recent] == ["Solid Protocol", "Moon Rocket, Inc."]
    assert recent[1].tier == "HIGH"
    assert recent[1].scanned_at == "2026-03-01T12:00:00+00:00"
    assert history.recent(limit=1) == recent[:1]


def test_history_is_capped(make_obs, make_report):
    history = InMemoryHistory(SifterConfig(history_max_entries=3))
    for i in range(5):
        history.record(make_report(f"P{i}", make_obs(default=10)))
    assert [e.display_name for e in history.recent()] == ["P4", "P3", "P2"]


def test_history_clear(clean_report):
    history = InMemoryHistory()
    history.record(clean_report)
    history.clear()
    assert history.recent() == []


def test_json_history_persists(tmp_path, rich_report, clean_report):
    path = str(tmp_path / "history" / "scans.json")
    history = JsonFileHistory(path)
    history.record(rich_report)
    history.record(clean_report)

    reloaded = JsonFileHistory(path)
    assert [e.display_name for e in reloaded.recent()] == ["Solid Protocol", "Moon Rocket, Inc."]

    reloaded.clear()
    assert JsonFileHistory(path).recent() == []


def test_json_history_tolerates_corrupt_file(tmp_path, clean_report):
    path = tmp_path / "scans.json"
    path.write_text("{not json")
    history = JsonFileHistory(str(path))
    assert history.recent() == []
    history.record(clean_report)
    assert len(JsonFileHistory(str(path)).recent()) == 1
