"""
sifter/metrics/scoring.py: Composite risk score, verdict, and tier.

The scoring engine is the single place where the composite score and its
classifications are computed. Every other module (reports, exports, batch)
consumes a CompositeResult and never re-derives the thresholds.

Composite:
    score = round_half_up( Σ observation.score × definition.weight / 100 )

Verdict (from config):
    score >= 60  → 'reject'
    score >= 30  → 'flag'
    otherwise    → 'pass'

Tier (from config.tier_ladder):
    < 25 LOW, < 50 MODERATE, < 75 ELEVATED, >= 75 HIGH

Confidence:
    round_half_up(mean of per-metric confidences), clamped to [0, 100].

Missing observations are a hard error. A metric that was never observed is
not the same as a metric observed at zero risk, and silently zero-filling it
would lower the composite score.
"""

import logging
import math
import numbers
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

import numpy as np

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.exceptions import (
    DuplicateObservation,
    EmptyObservationSet,
    MissingObservation,
    ScoreOutOfRange,
    UnknownMetric,
)
from sifter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog, metric_status

logger = logging.getLogger(__name__)

VERDICTS = ("pass", "flag", "reject")


def _exact(value) -> Decimal:
    """Decimal of the shortest float repr, so 9.5 stays 9.5 and 0.1 stays 0.1."""
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_half_up(value) -> int:
    """Round to the nearest integer with .5 going up (2.5 → 3, not 2)."""
    return int(_exact(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class MetricObservation:
    """
    One observation of a single risk metric for one project.

    Fields:
        key:        Metric key from the catalog.
        score:      Risk score, 0 (clean) to 100 (worst).
        confidence: Collector confidence in the score, 0-100.
        flags:      Short red-flag strings, e.g. 'Anonymous team'.
        facts:      Contextual facts for the evidence narrative (team
                    members, repo URL, contract address, associated
                    entities, ...). Never used in the score itself.
    """

    key: str
    score: float
    confidence: float = 100.0
    flags: list = field(default_factory=list)
    facts: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "MetricObservation":
        return cls(
            key=str(data["key"]),
            score=float(data["score"]),
            confidence=float(data.get("confidence", 100.0)),
            flags=[str(f) for f in data.get("flags") or []],
            facts=dict(data.get("facts") or {}),
        )


@dataclass
class MetricContribution:
    """
    A single metric's share of the composite score.

    contribution = score × weight / 100, unrounded.
    """

    key: str
    display_name: str
    score: float
    weight: int
    contribution: float
    confidence: float
    status: str
    order: int


@dataclass
class CompositeResult:
    """
    Output of compute_composite().

    Fields:
        score:         Composite risk score (integer, 0-100).
        verdict:       'pass' | 'flag' | 'reject'.
        tier:          'LOW' | 'MODERATE' | 'ELEVATED' | 'HIGH'.
        confidence:    Aggregate confidence (integer, 0-100).
        contributions: Per-metric contributions, sorted by contribution
                       descending with ties broken by catalog order.
    """

    score: int
    verdict: str
    tier: str
    confidence: int
    contributions: list = field(default_factory=list)


def classify_verdict(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Map a composite score to 'pass' / 'flag' / 'reject'."""
    if score >= config.verdict_reject_min:
        return "reject"
    if score >= config.verdict_flag_min:
        return "flag"
    return "pass"


def classify_tier(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Map a composite score to its risk tier using config.tier_ladder."""
    for upper, tier in config.tier_ladder:
        if score < upper:
            return tier
    return config.tier_ladder[-1][1]


def sort_contributions(contributions: Iterable[MetricContribution]) -> list:
    """Contribution descending, ties broken by catalog declaration order."""
    return sorted(contributions, key=lambda c: (-c.contribution, c.order))


def _check_range(key: str, field_name: str, value: float) -> None:
    # Numeric strings are rejected here; MetricObservation.from_dict coerces them.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ScoreOutOfRange(key, field_name, value)
    v = float(value)
    if math.isnan(v) or v < 0 or v > 100:
        raise ScoreOutOfRange(key, field_name, value)


def validate_observations(
    observations: list,
    catalog: MetricCatalog = DEFAULT_CATALOG,
) -> dict:
    """
    Validate an observation set against the catalog.

    Checks, in order: non-empty, every key known, no duplicates, scores and
    confidences in [0, 100], and every catalog metric present.

    Returns:
        Dict mapping metric key → MetricObservation.

    Raises:
        EmptyObservationSet, UnknownMetric, DuplicateObservation,
        ScoreOutOfRange, MissingObservation.
    """
    if not observations:
        raise EmptyObservationSet("No metric observations supplied")

    by_key: dict = {}
    for obs in observations:
        if obs.key not in catalog:
            raise UnknownMetric(obs.key)
        if obs.key in by_key:
            raise DuplicateObservation(obs.key)
        _check_range(obs.key, "score", obs.score)
        _check_range(obs.key, "confidence", obs.confidence)
        by_key[obs.key] = obs

    missing = [key for key in catalog.keys() if key not in by_key]
    if missing:
        raise MissingObservation(missing)

    return by_key


def compute_composite(
    observations: list,
    catalog: MetricCatalog = DEFAULT_CATALOG,
    config: SifterConfig = DEFAULT_CONFIG,
) -> CompositeResult:
    """
    Aggregate one observation per catalog metric into a CompositeResult.

    Args:
        observations: List of MetricObservation, exactly one per catalog key.
        catalog:      MetricCatalog; its weights must sum to 100.
        config:       SifterConfig with verdict / tier thresholds.

    Returns:
        CompositeResult with score, verdict, tier, confidence and sorted
        per-metric contributions.

    Raises:
        WeightSumError (from the catalog) and every error raised by
        validate_observations().
    """
    catalog.validate_weights()
    by_key = validate_observations(observations, catalog)

    contributions: list[MetricContribution] = []
    for definition in catalog.all():
        obs = by_key[definition.key]
        score = float(obs.score)
        contributions.append(
            MetricContribution(
                key=definition.key,
                display_name=definition.display_name,
                score=score,
                weight=definition.weight,
                contribution=score * definition.weight / 100,
                confidence=float(obs.confidence),
                status=metric_status(score, config),
                order=definition.order,
            )
        )

    # Exact decimal sum: an x.5 composite always rounds up.
    weighted_sum = sum(_exact(c.score) * c.weight for c in contributions) / 100
    composite = int(np.clip(round_half_up(weighted_sum), 0, 100))

    mean_confidence = sum(_exact(c.confidence) for c in contributions) / len(contributions)
    confidence = int(np.clip(round_half_up(mean_confidence), 0, 100))

    result = CompositeResult(
        score=composite,
        verdict=classify_verdict(composite, config),
        tier=classify_tier(composite, config),
        confidence=confidence,
        contributions=sort_contributions(contributions),
    )

    logger.debug(
        "Composite computed: score=%d verdict=%s tier=%s confidence=%d.",
        result.score,
        result.verdict,
        result.tier,
        result.confidence,
    )
    return result
