"""
Tests for observation-file loading and single-project analysis.

Tests verify:
    - load_projects() accepts a single object, a list, or {"projects": [...]}
    - Identity accepts camelCase, snake_case or a bare name
    - analyze_project() scores, times and records to history
"""

import json

import pytest

from sifter.exceptions import ScoreOutOfRange, SifterError, UnknownMetric
from sifter.metrics.catalog import DEFAULT_CATALOG
from sifter.pipeline import (
    analyze_project,
    identity_from_dict,
    load_observations,
    load_projects,
    project_from_dict,
)
from sifter.storage.stores import InMemoryHistory


# ── Helpers ───────────────────────────────────────────────────────────────────

def observation_rows(default=40, overrides=None):
    overrides = overrides or {}
    return [
        {"key": d.key, "score": overrides.get(d.key, default), "confidence": 90}
        for d in DEFAULT_CATALOG.all()
    ]


def project_row(name, default=40):
    return {
        "identity": {"displayName": name, "platform": "discord", "sources": ["https://discord.gg/x"]},
        "scannedAt": "2026-02-01T00:00:00+00:00",
        "observations": observation_rows(default),
    }


def write_json(tmp_path, data, name="input.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# ── Loading ───────────────────────────────────────────────────────────────────

def test_load_single_object(tmp_path):
    projects = load_projects(write_json(tmp_path, project_row("Solo")))
    assert len(projects) == 1
    assert projects[0].name == "Solo"
    assert projects[0].identity.platform == "discord"
    assert projects[0].scanned_at == "2026-02-01T00:00:00+00:00"
    assert len(projects[0].observations) == 13


def test_load_list_and_wrapped(tmp_path):
    rows = [project_row("A"), project_row("B")]
    assert [p.name for p in load_projects(write_json(tmp_path, rows, "list.json"))] == ["A", "B"]
    wrapped = write_json(tmp_path, {"projects": rows}, "wrapped.json")
    assert [p.name for p in load_projects(wrapped)] == ["A", "B"]


def test_load_observations(tmp_path):
    observations = load_observations(write_json(tmp_path, project_row("Solo", default=70)))
    assert {o.score for o in observations} == {70.0}
    assert load_observations(write_json(tmp_path, [], "empty.json")) == []


def test_load_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops")
    with pytest.raises(ValueError):
        load_projects(str(path))


def test_observation_without_score_raises(tmp_path):
    row = project_row("A")
    del row["observations"][0]["score"]
    with pytest.raises(KeyError):
        load_projects(write_json(tmp_path, row))


def test_identity_forms():
    assert identity_from_dict("Bare Name").canonical_name == "bare-name"
    snake = identity_from_dict({"display_name": "Snake", "canonical_name": "snake-v1"})
    assert (snake.display_name, snake.canonical_name) == ("Snake", "snake-v1")
    assert identity_from_dict({}).display_name == "Unknown project"


def test_project_name_fallback():
    item = project_from_dict({"name": "Legacy", "observations": []})
    assert item.name == "Legacy"
    assert item.observations == []


# ── Analysis ──────────────────────────────────────────────────────────────────

def test_analyze_project(tmp_path):
    item = load_projects(write_json(tmp_path, project_row("Solo", default=40)))[0]
    history = InMemoryHistory()
    report = analyze_project(item.identity, item.observations, scanned_at=item.scanned_at, history=history)

    assert report.score == 40
    assert report.verdict == "flag"
    assert report.tier == "MODERATE"
    assert report.confidence == 90
    assert report.scanned_at == "2026-02-01T00:00:00+00:00"
    assert isinstance(report.processing_time_ms, int)
    assert report.processing_time_ms >= 0
    assert history.recent()[0].display_name == "Solo"


def test_analyze_project_accepts_identity_dict(make_obs):
    report = analyze_project({"displayName": "Dict Project"}, make_obs(default=10))
    assert report.identity.canonical_name == "dict-project"
    assert report.verdict == "pass"


def test_analyze_project_propagates_validation_errors():
    history = InMemoryHistory()
    rows = observation_rows()
    rows[0]["key"] = "moonPotential"
    item = project_from_dict({"identity": "Bad", "observations": rows})
    with pytest.raises(UnknownMetric):
        analyze_project(item.identity, item.observations, history=history)
    assert history.recent() == []


def test_analyze_project_rejects_string_scores(make_obs):
    """Unconverted strings fail validation instead of reaching evidence generation."""
    history = InMemoryHistory()
    obs = make_obs(default=50)
    for o in obs:
        o.score = "50"
        o.confidence = "80"
    with pytest.raises(ScoreOutOfRange) as exc:
        analyze_project("Stringly", obs, history=history)
    assert isinstance(exc.value, SifterError)
    assert history.recent() == []


def test_loaded_string_scores_are_coerced():
    rows = observation_rows()
    for row in rows:
        row["score"] = "50"
    item = project_from_dict({"identity": "Coerced", "observations": rows})
    report = analyze_project(item.identity, item.observations)
    assert report.score == 50
