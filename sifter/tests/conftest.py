"""
sifter/tests/conftest.py: Shared pytest fixtures for the Sifter test suite.

Fixtures:
    make_obs            Factory: {key: score} → list of 13 MetricObservation.
    make_report         Factory: (name, observations) → deterministic Report.
    scenario_a_obs      Scenario A (composite 33, flag, MODERATE).
    rich_report         Report for a high-risk project with facts and flags.
    clean_report        Report for a low-risk project.
    fixed_time          ISO timestamp used for deterministic reports.
"""

import pytest

from sifter.metrics.catalog import DEFAULT_CATALOG
from sifter.metrics.scoring import MetricObservation, compute_composite
from sifter.reports.assembler import ProjectIdentity, assemble_report

FIXED_TIME = "2026-03-01T12:00:00+00:00"


# ── Pytest configuration hooks ────────────────────────────────────────────────

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests that post to real webhook endpoints (deselected by default, "
        "pass --run-integration or -m integration to enable)",
    )


def pytest_addoption(parser):
    """Add --run-integration CLI flag to enable integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that call real external endpoints.",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration or -m integration is given."""
    markexpr = config.getoption("-m", default="")
    if "integration" in markexpr:
        return
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="Integration test -- pass --run-integration or -m integration to run"
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ── Helpers ───────────────────────────────────────────────────────────────────

def build_observations(scores=None, default=0.0, confidence=100.0, flags=None, facts=None):
    """
    One observation per catalog metric.

    Args:
        scores:     {key: score} overrides; every other metric gets default.
        default:    Score for metrics not in scores.
        confidence: Confidence for every observation.
        flags:      {key: [flag, ...]}.
        facts:      {key: {fact: value}}.
    """
    scores = scores or {}
    flags = flags or {}
    facts = facts or {}
    return [
        MetricObservation(
            key=d.key,
            score=float(scores.get(d.key, default)),
            confidence=confidence,
            flags=list(flags.get(d.key, [])),
            facts=dict(facts.get(d.key, {})),
        )
        for d in DEFAULT_CATALOG.all()
    ]


def build_report(name, observations, scanned_at=FIXED_TIME, processing_time_ms=42, sources=None):
    composite = compute_composite(observations)
    identity = ProjectIdentity(
        display_name=name,
        platform="twitter",
        sources=sources if sources is not None else [f"https://x.com/{name.lower().replace(' ', '')}"],
    )
    return assemble_report(
        identity,
        composite,
        observations,
        generated_at=FIXED_TIME,
        scanned_at=scanned_at,
        processing_time_ms=processing_time_ms,
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def fixed_time() -> str:
    return FIXED_TIME


@pytest.fixture
def make_obs():
    return build_observations


@pytest.fixture
def scenario_a_obs():
    return build_observations({"contaminatedNetwork": 92, "teamIdentity": 85, "tokenomics": 60})


@pytest.fixture
def rich_report():
    """Rejected project with flags, facts and associated entities."""
    observations = build_observations(
        scores={
            "contaminatedNetwork": 95,
            "teamIdentity": 88,
            "teamCompetence": 70,
            "tokenomics": 82,
            "mercenaryKeywords": 75,
            "founderDistraction": 55,
        },
        default=65,
        confidence=80,
        flags={
            "contaminatedNetwork": ["Linked to rugged project, PumpCo", "Shared moderators"],
            "teamIdentity": ["Anonymous team"],
            "tokenomics": ["No vesting", "Team holds 40% of supply"],
            "mercenaryKeywords": ["'wen moon' spam"],
        },
        facts={
            "contaminatedNetwork": {
                "entities": ["Shill Agency", {"name": "Moon Capital"}],
                "rugged_projects": ["SafeMoon2", "ElonDoge"],
            },
            "teamIdentity": {"team_members": ["anon_dev", "cryptoking"], "verified_members": 0},
            "tokenomics": {"contract_address": "0xdeadbeef", "chain": "BSC",
                           "team_allocation": 0.4, "liquidity_locked": False},
            "githubAuthenticity": {"repo_url": "https://github.com/example/moon"},
        },
    )
    return build_report("Moon Rocket, Inc.", observations)


@pytest.fixture
def clean_report():
    observations = build_observations(default=10, confidence=90)
    return build_report("Solid Protocol", observations)


@pytest.fixture
def make_report():
    return build_report
