"""
Tests for composite scoring, verdict and tier classification.

Tests verify:
    - Tier and verdict boundary tables
    - Verdict and tier are monotonic in the composite score
    - Scenarios A, B and C from the reference calibration
    - Half-up rounding (x.5 always rounds up, including fractional composites)
    - Every validation error: empty, unknown, duplicate, missing, out of range, non-numeric
    - Contributions are sorted by contribution, ties broken by catalog order
"""

import pytest

from sifter.config import SifterConfig
from sifter.exceptions import (
    DuplicateObservation,
    EmptyObservationSet,
    MissingObservation,
    ScoreOutOfRange,
    UnknownMetric,
    WeightSumError,
)
from sifter.metrics.catalog import MetricCatalog, MetricDefinition
from sifter.metrics.scoring import (
    VERDICTS,
    MetricObservation,
    classify_tier,
    classify_verdict,
    compute_composite,
    round_half_up,
)


# ── Classification tables ─────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "score,tier",
    [(0, "LOW"), (24, "LOW"), (25, "MODERATE"), (49, "MODERATE"),
     (50, "ELEVATED"), (74, "ELEVATED"), (75, "HIGH"), (100, "HIGH")],
)
def test_tier_boundaries(score, tier):
    assert classify_tier(score) == tier


@pytest.mark.parametrize(
    "score,verdict",
    [(0, "pass"), (29, "pass"), (30, "flag"), (59, "flag"), (60, "reject"), (100, "reject")],
)
def test_verdict_boundaries(score, verdict):
    assert classify_verdict(score) == verdict


def test_tier_ladder_has_no_gaps():
    """Every integer score maps to exactly one tier, and tiers never go backwards."""
    order = ["LOW", "MODERATE", "ELEVATED", "HIGH"]
    tiers = [classify_tier(s) for s in range(101)]
    assert set(tiers) == set(order)
    ranks = [order.index(t) for t in tiers]
    assert ranks == sorted(ranks)


def test_verdict_monotonic():
    ranks = [VERDICTS.index(classify_verdict(s)) for s in range(101)]
    assert ranks == sorted(ranks)


def test_thresholds_come_from_config():
    strict = SifterConfig(verdict_flag_min=10, verdict_reject_min=20)
    assert classify_verdict(15, strict) == "flag"
    assert classify_verdict(20, strict) == "reject"


# ── Rounding ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("value,expected", [(2.5, 3), (3.5, 4), (32.49, 32), (32.5, 33), (0.0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


# ── Scenarios ─────────────────────────────────────────────────────────────────

def test_scenario_a(scenario_a_obs):
    """92×0.19 + 85×0.13 + 60×0.07 = 32.73 → 33, flag, MODERATE."""
    result = compute_composite(scenario_a_obs)
    assert result.score == 33
    assert result.verdict == "flag"
    assert result.tier == "MODERATE"


def test_scenario_b(make_obs):
    result = compute_composite(make_obs(default=90))
    assert result.score == 90
    assert result.verdict == "reject"
    assert result.tier == "HIGH"


def test_scenario_c(make_obs):
    result = compute_composite(make_obs(default=10))
    assert result.score == 10
    assert result.verdict == "pass"
    assert result.tier == "LOW"


def test_all_zero_and_all_hundred(make_obs):
    assert compute_composite(make_obs(default=0)).score == 0
    assert compute_composite(make_obs(default=100)).score == 100


def test_composite_monotonic_in_single_metric(make_obs):
    previous = -1
    for s in range(0, 101, 5):
        score = compute_composite(make_obs({"contaminatedNetwork": s}, default=40)).score
        assert score >= previous
        previous = score


# ── Confidence ────────────────────────────────────────────────────────────────

def test_confidence_is_rounded_mean(make_obs):
    obs = make_obs(default=50, confidence=80)
    obs[0].confidence = 93.0
    result = compute_composite(obs)
    # (12 × 80 + 93) / 13 = 81.0
    assert result.confidence == 81


# ── Contributions ─────────────────────────────────────────────────────────────

def test_contributions_sorted_descending(scenario_a_obs):
    result = compute_composite(scenario_a_obs)
    keys = [c.key for c in result.contributions]
    assert keys[:3] == ["contaminatedNetwork", "teamIdentity", "tokenomics"]
    values = [c.contribution for c in result.contributions]
    assert values == sorted(values, reverse=True)


def test_contribution_ties_follow_catalog_order(make_obs):
    """All-zero scores tie at 0; the breakdown falls back to declaration order."""
    result = compute_composite(make_obs(default=0))
    assert [c.order for c in result.contributions] == list(range(13))


def test_contribution_values(scenario_a_obs):
    result = compute_composite(scenario_a_obs)
    by_key = {c.key: c for c in result.contributions}
    assert by_key["contaminatedNetwork"].contribution == pytest.approx(17.48)
    assert by_key["teamIdentity"].contribution == pytest.approx(11.05)
    assert by_key["tokenomics"].contribution == pytest.approx(4.2)
    assert by_key["contaminatedNetwork"].status == "critical"


# ── Validation errors ─────────────────────────────────────────────────────────

def test_empty_observations_raise():
    with pytest.raises(EmptyObservationSet):
        compute_composite([])


def test_missing_metric_raises_and_is_not_zero_filled(make_obs):
    obs = [o for o in make_obs(default=50) if o.key != "busFactor"]
    with pytest.raises(MissingObservation) as exc:
        compute_composite(obs)
    assert exc.value.missing == ["busFactor"]


def test_unknown_metric_raises(make_obs):
    obs = make_obs(default=50) + [MetricObservation("moonPotential", 10)]
    with pytest.raises(UnknownMetric):
        compute_composite(obs)


def test_duplicate_metric_raises(make_obs):
    obs = make_obs(default=50)
    obs.append(MetricObservation("tokenomics", 20))
    with pytest.raises(DuplicateObservation) as exc:
        compute_composite(obs)
    assert exc.value.key == "tokenomics"


@pytest.mark.parametrize("bad", [-1, 100.5, 150, float("nan")])
def test_score_out_of_range_raises(make_obs, bad):
    obs = make_obs(default=50)
    obs[3].score = bad
    with pytest.raises(ScoreOutOfRange):
        compute_composite(obs)


def test_confidence_out_of_range_raises(make_obs):
    obs = make_obs(default=50)
    obs[0].confidence = 101
    with pytest.raises(ScoreOutOfRange) as exc:
        compute_composite(obs)
    assert exc.value.field_name == "confidence"


def test_bad_catalog_weights_raise():
    catalog = MetricCatalog([MetricDefinition("a", "A", 40, "a"), MetricDefinition("b", "B", 40, "b")])
    with pytest.raises(WeightSumError):
        compute_composite([MetricObservation("a", 10), MetricObservation("b", 10)], catalog)


def test_custom_catalog_scoring():
    catalog = MetricCatalog([MetricDefinition("a", "A", 75, "a"), MetricDefinition("b", "B", 25, "b")])
    result = compute_composite([MetricObservation("a", 40), MetricObservation("b", 100)], catalog)
    assert result.score == 55
    assert result.verdict == "flag"


def test_observation_from_dict():
    obs = MetricObservation.from_dict({"key": "busFactor", "score": "70", "flags": ["solo dev"]})
    assert obs.score == 70.0
    assert obs.confidence == 100.0
    assert obs.flags == ["solo dev"]
    assert obs.facts == {}


def test_exact_half_composite_rounds_up(make_obs):
    """Fractional scores summing to exactly 29.5 score 30 and flag."""
    obs = make_obs({
        "teamIdentity": 27.0,
        "teamCompetence": 9.5,
        "contaminatedNetwork": 44.1,
        "mercenaryKeywords": 17.0,
        "messageTimeEntropy": 7.9,
        "accountAgeEntropy": 17.7,
        "tweetFocus": 27.4,
        "githubAuthenticity": 56.3,
        "busFactor": 17.4,
        "artificialHype": 86.6,
        "founderDistraction": 16.3,
        "engagementAuthenticity": 12.2,
        "tokenomics": 27.1,
    })
    result = compute_composite(obs)
    assert result.score == 30
    assert result.verdict == "flag"
    assert result.tier == "MODERATE"


def test_fractional_confidence_mean_rounds_up(make_obs):
    obs = make_obs(default=50, confidence=80)
    obs[0].confidence = 86.5
    # (12 × 80 + 86.5) / 13 = 80.5
    assert compute_composite(obs).confidence == 81


@pytest.mark.parametrize("bad", ["50", b"50", None, True])
def test_non_numeric_score_raises(make_obs, bad):
    obs = make_obs(default=50)
    obs[2].score = bad
    with pytest.raises(ScoreOutOfRange):
        compute_composite(obs)


def test_non_numeric_confidence_raises(make_obs):
    obs = make_obs(default=50)
    obs[5].confidence = "80"
    with pytest.raises(ScoreOutOfRange) as exc:
        compute_composite(obs)
    assert exc.value.field_name == "confidence"
