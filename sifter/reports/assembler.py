"""
sifter/reports/assembler.py: Report assembly.

Combines a project identity, its CompositeResult and the raw observations
into a Report: one evidence block per metric, the breakdown sorted by
contribution, and the recommendation ladder for the composite score.

assemble_report() does no I/O. The only non-deterministic input is the
generation timestamp, and callers that need reproducible output pass it in.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.evidence.block import EvidenceBlock, Facts
from sifter.evidence.generator import generate_evidence
from sifter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog
from sifter.metrics.scoring import CompositeResult, validate_observations
from sifter.reports.assessment import recommendation_for

logger = logging.getLogger(__name__)


@dataclass
class ProjectIdentity:
    """
    Who the report is about.

    Fields:
        display_name:   Name as shown to users, e.g. 'Moonbeam Finance'.
        canonical_name: Normalised identifier, e.g. 'moonbeam-finance'.
        platform:       Where the project was discovered ('twitter', 'discord', ...).
        sources:        URLs / handles the observations were collected from.
    """

    display_name: str
    canonical_name: str = ""
    platform: str = "unknown"
    sources: list = field(default_factory=list)

    def __post_init__(self):
        if not self.canonical_name:
            self.canonical_name = "-".join(self.display_name.lower().split())


@dataclass
class MetricBreakdownEntry:
    """
    One row of a report's metric breakdown.

    Fields:
        key:          Metric key.
        name:         Display name.
        score:        Metric risk score, 0-100.
        weight:       Catalog weight.
        contribution: score × weight / 100, unrounded.
        status:       'low' | 'moderate' | 'high' | 'critical'.
        confidence:   Collector confidence, 0-100.
        flags:        Red-flag strings from the observation.
        evidence:     EvidenceBlock narrative.
        order:        Catalog declaration index (tie-breaker).
    """

    key: str
    name: str
    score: float
    weight: int
    contribution: float
    status: str
    confidence: float
    flags: list
    evidence: EvidenceBlock
    order: int


@dataclass
class Report:
    """
    Everything known about one analysed project.

    Created once per request; exporters read it and never modify it.
    """

    identity: ProjectIdentity
    composite: CompositeResult
    breakdown: list
    recommendations: list
    generated_at: str
    scanned_at: Optional[str] = None
    processing_time_ms: Optional[int] = None
    associated_entities: list = field(default_factory=list)
    version: str = DEFAULT_CONFIG.report_version

    @property
    def name(self) -> str:
        return self.identity.display_name

    @property
    def score(self) -> int:
        return self.composite.score

    @property
    def verdict(self) -> str:
        return self.composite.verdict

    @property
    def tier(self) -> str:
        return self.composite.tier

    @property
    def confidence(self) -> int:
        return self.composite.confidence

    def all_flags(self) -> list:
        """Every observation flag, in breakdown order, duplicates removed."""
        seen: list = []
        for entry in self.breakdown:
            for flag in entry.flags:
                if flag not in seen:
                    seen.append(flag)
        return seen

    def top_red_flag(self) -> Optional[str]:
        flags = self.all_flags()
        return flags[0] if flags else None


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def collect_entities(observations: list) -> list:
    """Associated entity names from every observation's facts, first seen first."""
    names: list = []
    for obs in observations:
        for name in Facts(obs.facts).items("entities"):
            if name not in names:
                names.append(name)
    return names


def assemble_report(
    identity: ProjectIdentity,
    composite: CompositeResult,
    observations: list,
    catalog: MetricCatalog = DEFAULT_CATALOG,
    config: SifterConfig = DEFAULT_CONFIG,
    generated_at: Optional[str] = None,
    scanned_at: Optional[str] = None,
    processing_time_ms: Optional[int] = None,
    associated_entities: Optional[list] = None,
) -> Report:
    """
    Build a Report from a scored observation set.

    Args:
        identity:            ProjectIdentity of the analysed project.
        composite:           CompositeResult from compute_composite().
        observations:        The same observations the composite was computed from.
        catalog:             MetricCatalog used for scoring.
        config:              SifterConfig for evidence / recommendation bands.
        generated_at:        ISO timestamp; defaults to now (UTC).
        scanned_at:          ISO timestamp of data collection, if known.
        processing_time_ms:  Wall time of the analysis, if measured.
        associated_entities: Entity names; collected from observation facts
                             ('entities') when not given.

    Returns:
        Report with exactly one breakdown entry (and evidence block) per metric.
    """
    by_key = validate_observations(observations, catalog)

    breakdown: list[MetricBreakdownEntry] = []
    for contribution in composite.contributions:
        obs = by_key[contribution.key]
        breakdown.append(
            MetricBreakdownEntry(
                key=contribution.key,
                name=contribution.display_name,
                score=contribution.score,
                weight=contribution.weight,
                contribution=contribution.contribution,
                status=contribution.status,
                confidence=contribution.confidence,
                flags=list(obs.flags),
                evidence=generate_evidence(obs.key, obs.score, obs.facts, config, catalog),
                order=contribution.order,
            )
        )

    if associated_entities is None:
        associated_entities = collect_entities(observations)

    report = Report(
        identity=identity,
        composite=composite,
        breakdown=breakdown,
        recommendations=recommendation_for(composite.score, config).as_list(),
        generated_at=generated_at or _utc_now(),
        scanned_at=scanned_at,
        processing_time_ms=processing_time_ms,
        associated_entities=list(associated_entities),
        version=config.report_version,
    )

    logger.debug(
        "Assembled report for %s: %d metrics, score=%d.",
        identity.display_name,
        len(breakdown),
        composite.score,
    )
    return report


def detailed_analysis(report: Report, config: SifterConfig = DEFAULT_CONFIG) -> dict:
    """
    Critical metrics and headline flags for the DETAILED ANALYSIS block.

    Returns:
        {'critical': [metric names scoring >= critical_metric_min],
         'flags':    [first detailed_analysis_max_flags flags]}
    """
    critical = [e.name for e in report.breakdown if e.score >= config.critical_metric_min]
    flags = [flag for e in report.breakdown for flag in e.flags]
    return {"critical": critical, "flags": flags[: config.detailed_analysis_max_flags]}
