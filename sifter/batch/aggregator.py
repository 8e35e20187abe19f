"""
sifter/batch/aggregator.py: Batch scoring and summary statistics.

Runs the engine over up to config.batch_max_projects projects on a bounded
thread pool and rolls the results up into a BatchSummary.

Counting rules:
    total    = projects that produced a score (passed + flagged + rejected)
    errors   = projects whose scoring raised; recorded, never counted in total
    average  = round_half_up(mean(scores)) over scored projects, 0 if none
    red_flag_distribution counts each distinct flag once per flagged or
    rejected project.

Cancellation:
    Set the threading.Event passed as cancel_event. Projects not yet started
    are marked 'cancelled'; projects already scored are kept, and the summary
    is built from them with cancelled=True.
"""

import logging
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from sifter.batch.entities import flag_entities
from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.exceptions import CapacityExceeded
from sifter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog
from sifter.metrics.scoring import compute_composite, round_half_up
from sifter.reports.assembler import ProjectIdentity, Report, assemble_report

logger = logging.getLogger(__name__)

STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"
STATUS_CANCELLED = "cancelled"


@dataclass
class ProjectInput:
    """
    A raw, not-yet-scored project.

    Fields:
        identity:     ProjectIdentity (a bare display name is accepted too).
        observations: One MetricObservation per catalog metric.
        scanned_at:   ISO timestamp of data collection, if known.
    """

    identity: Union[ProjectIdentity, str]
    observations: list
    scanned_at: Optional[str] = None

    @property
    def name(self) -> str:
        if isinstance(self.identity, ProjectIdentity):
            return self.identity.display_name
        return str(self.identity)


@dataclass
class BatchProject:
    """
    Outcome for one project in a batch.

    Fields:
        name:               Display name.
        status:             'completed' | 'error' | 'cancelled'.
        risk_score:         Composite score, None unless completed.
        verdict:            'pass' | 'flag' | 'reject', None unless completed.
        tier:               Risk tier, None unless completed.
        confidence:         Composite confidence, None unless completed.
        red_flags:          Distinct observation flags in breakdown order.
        processing_time_ms: Wall time spent on the project.
        scanned_at:         ISO timestamp of data collection.
        associated_entities: Entity names carried over from the report.
        report:             Full Report, None unless completed.
        error:              Error message for failed projects.
    """

    name: str
    status: str
    risk_score: Optional[int] = None
    verdict: Optional[str] = None
    tier: Optional[str] = None
    confidence: Optional[int] = None
    red_flags: list = field(default_factory=list)
    processing_time_ms: Optional[int] = None
    scanned_at: Optional[str] = None
    associated_entities: list = field(default_factory=list)
    report: Optional[Report] = None
    error: Optional[str] = None

    @classmethod
    def from_report(cls, report: Report, processing_time_ms: Optional[int] = None) -> "BatchProject":
        return cls(
            name=report.name,
            status=STATUS_COMPLETED,
            risk_score=report.score,
            verdict=report.verdict,
            tier=report.tier,
            confidence=report.confidence,
            red_flags=report.all_flags(),
            processing_time_ms=(
                processing_time_ms if processing_time_ms is not None else report.processing_time_ms
            ),
            scanned_at=report.scanned_at,
            associated_entities=list(report.associated_entities),
            report=report,
        )


@dataclass
class BatchSummary:
    """
    Aggregate statistics over one batch.

    Fields:
        total:                 Scored projects (passed + flagged + rejected).
        passed:                Verdict 'pass'.
        flagged:               Verdict 'flag'.
        rejected:              Verdict 'reject'.
        average_risk_score:    round_half_up(mean(scores)); 0 for an empty batch.
        processing_time_ms:    Wall time of the whole batch.
        red_flag_distribution: flag → number of flagged/rejected projects raising it.
        errors:                [{'project': name, 'error': message}, ...]
        cancelled:             True if the batch was cancelled before finishing.
    """

    total: int
    passed: int
    flagged: int
    rejected: int
    average_risk_score: int
    processing_time_ms: int = 0
    red_flag_distribution: dict = field(default_factory=dict)
    errors: list = field(default_factory=list)
    cancelled: bool = False


@dataclass
class BatchResult:
    """Per-project outcomes (input order), their summary, and flagged entities."""

    projects: list
    summary: BatchSummary
    flagged_entities: list = field(default_factory=list)


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def summarize_batch(
    projects: list,
    processing_time_ms: int = 0,
    cancelled: bool = False,
) -> BatchSummary:
    """
    Roll BatchProjects up into a BatchSummary.

    Only completed projects count toward total and the verdict counts;
    failed projects are listed under errors.
    """
    scored = [p for p in projects if p.status == STATUS_COMPLETED]
    verdicts = Counter(p.verdict for p in scored)

    scores = [p.risk_score for p in scored]
    average = round_half_up(float(np.mean(scores))) if scores else 0

    distribution: Counter = Counter()
    for p in scored:
        if p.verdict in ("flag", "reject"):
            distribution.update(set(p.red_flags))

    errors = [
        {"project": p.name, "error": p.error or "Unknown error"}
        for p in projects
        if p.status == STATUS_ERROR
    ]

    return BatchSummary(
        total=len(scored),
        passed=verdicts.get("pass", 0),
        flagged=verdicts.get("flag", 0),
        rejected=verdicts.get("reject", 0),
        average_risk_score=average,
        processing_time_ms=processing_time_ms,
        red_flag_distribution=dict(distribution.most_common()),
        errors=errors,
        cancelled=cancelled,
    )


def score_project(
    item: ProjectInput,
    catalog: MetricCatalog = DEFAULT_CATALOG,
    config: SifterConfig = DEFAULT_CONFIG,
) -> BatchProject:
    """Score and assemble one raw project. Raises on invalid observations."""
    started = time.perf_counter()
    identity = item.identity
    if not isinstance(identity, ProjectIdentity):
        identity = ProjectIdentity(display_name=str(identity))

    composite = compute_composite(item.observations, catalog, config)
    elapsed = _elapsed_ms(started)
    report = assemble_report(
        identity,
        composite,
        item.observations,
        catalog,
        config,
        scanned_at=item.scanned_at,
        processing_time_ms=elapsed,
    )
    return BatchProject.from_report(report, elapsed)


def _process(item, catalog, config, cancel_event) -> BatchProject:
    if isinstance(item, Report):
        return BatchProject.from_report(item)
    name = item.name if isinstance(item, ProjectInput) else str(item)
    if cancel_event is not None and cancel_event.is_set():
        return BatchProject(name=name, status=STATUS_CANCELLED)
    if not isinstance(item, ProjectInput):
        raise TypeError(f"Unsupported batch item: {type(item).__name__}")
    return score_project(item, catalog, config)


def _item_name(item) -> str:
    if isinstance(item, (Report, ProjectInput)):
        return item.name
    return str(item)


def run_batch(
    items: list,
    catalog: MetricCatalog = DEFAULT_CATALOG,
    config: SifterConfig = DEFAULT_CONFIG,
    cancel_event: Optional[threading.Event] = None,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """
    Score a batch of projects and summarise the results.

    Args:
        items:        Ordered list of Report (already scored) or ProjectInput.
        catalog:      MetricCatalog; shared read-only across workers.
        config:       SifterConfig with the batch cap and worker count.
        cancel_event: Optional threading.Event; set it to stop further work.
        max_workers:  Override for config.batch_max_workers.

    Returns:
        BatchResult with projects in input order, the summary and flagged entities.

    Raises:
        CapacityExceeded: more than config.batch_max_projects items.
    """
    if len(items) > config.batch_max_projects:
        raise CapacityExceeded(len(items), config.batch_max_projects)

    started = time.perf_counter()
    workers = max(1, min(max_workers or config.batch_max_workers, len(items) or 1))
    total = len(items)
    logger.info("Batch started: %d projects, %d workers.", total, workers)

    outcomes: list = [None] * total
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures_to_index = {
            executor.submit(_process, item, catalog, config, cancel_event): index
            for index, item in enumerate(items)
        }

        completed = 0
        for future in as_completed(futures_to_index):
            index = futures_to_index[future]
            name = _item_name(items[index])
            completed += 1
            try:
                outcomes[index] = future.result()
                logger.debug("Processed %d/%d: %s", completed, total, name)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Scoring failed for %s: %s", name, exc)
                outcomes[index] = BatchProject(name=name, status=STATUS_ERROR, error=str(exc))

    cancelled = cancel_event is not None and cancel_event.is_set()
    summary = summarize_batch(outcomes, _elapsed_ms(started), cancelled)
    entities = flag_entities(outcomes, config)

    logger.info(
        "Batch finished: %d scored (%d pass / %d flag / %d reject), %d errors%s.",
        summary.total,
        summary.passed,
        summary.flagged,
        summary.rejected,
        len(summary.errors),
        ", cancelled" if cancelled else "",
    )
    return BatchResult(projects=outcomes, summary=summary, flagged_entities=entities)
