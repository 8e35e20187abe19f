"""
sifter/pipeline.py: Single-call analysis entry points.

Provides analyze_project(), which validates, scores and assembles one
project into a Report, and load_projects(), which reads observation files
produced by the data-collection layer.

Usage:
    from sifter.pipeline import analyze_project, load_projects
    for item in load_projects("observations.json"):
        report = analyze_project(item.identity, item.observations)
        print(report.score, report.verdict)

Input file format (JSON): a single project object, a list of them, or
{"projects": [...]}. Each project object:

    {
      "identity": {"displayName": "...", "canonicalName": "...",
                   "platform": "...", "sources": ["..."]},
      "scannedAt": "2026-01-01T00:00:00+00:00",
      "observations": [
        {"key": "teamIdentity", "score": 85, "confidence": 90,
         "flags": ["Anonymous team"], "facts": {...}},
        ...
      ]
    }
"""

import json
import logging
import time
from typing import Optional

from sifter.batch.aggregator import ProjectInput
from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog
from sifter.metrics.scoring import MetricObservation, compute_composite
from sifter.reports.assembler import ProjectIdentity, Report, assemble_report

logger = logging.getLogger(__name__)


def identity_from_dict(data) -> ProjectIdentity:
    """Accepts camelCase wire keys or snake_case; a bare string is a display name."""
    if isinstance(data, str):
        return ProjectIdentity(display_name=data)
    return ProjectIdentity(
        display_name=str(data.get("displayName") or data.get("display_name") or "Unknown project"),
        canonical_name=str(data.get("canonicalName") or data.get("canonical_name") or ""),
        platform=str(data.get("platform") or "unknown"),
        sources=[str(s) for s in data.get("sources") or []],
    )


def project_from_dict(data: dict) -> ProjectInput:
    identity = data.get("identity") or data.get("name") or "Unknown project"
    return ProjectInput(
        identity=identity_from_dict(identity),
        observations=[MetricObservation.from_dict(o) for o in data.get("observations") or []],
        scanned_at=data.get("scannedAt") or data.get("scanned_at"),
    )


def load_projects(path: str) -> list:
    """
    Load one or more projects from a JSON observation file.

    Returns:
        List of ProjectInput, in file order.

    Raises:
        OSError, json.JSONDecodeError: unreadable or invalid file.
        KeyError / ValueError: an observation without key or score.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    if isinstance(data, dict) and "projects" in data:
        rows = data["projects"]
    elif isinstance(data, list):
        rows = data
    else:
        rows = [data]

    projects = [project_from_dict(row) for row in rows]
    logger.info("Loaded %d project(s) from %s", len(projects), path)
    return projects


def load_observations(path: str) -> list:
    """Observations of the first project in a JSON observation file."""
    projects = load_projects(path)
    return projects[0].observations if projects else []


def analyze_project(
    identity,
    observations: list,
    catalog: MetricCatalog = DEFAULT_CATALOG,
    config: SifterConfig = DEFAULT_CONFIG,
    scanned_at: Optional[str] = None,
    history=None,
) -> Report:
    """
    Score one project and assemble its Report.

    Args:
        identity:     ProjectIdentity, identity dict, or display name.
        observations: One MetricObservation per catalog metric.
        catalog:      MetricCatalog.
        config:       SifterConfig.
        scanned_at:   ISO timestamp of data collection.
        history:      Optional HistoryStore; the finished report is recorded.

    Returns:
        Report with processing_time_ms set.

    Raises:
        Every validation error from compute_composite().
    """
    if not isinstance(identity, ProjectIdentity):
        identity = identity_from_dict(identity)

    started = time.perf_counter()
    composite = compute_composite(observations, catalog, config)
    report = assemble_report(
        identity,
        composite,
        observations,
        catalog,
        config,
        scanned_at=scanned_at,
    )
    report.processing_time_ms = int(round((time.perf_counter() - started) * 1000))

    logger.info(
        "Analysed %s: score=%d verdict=%s tier=%s (%dms).",
        identity.display_name,
        report.score,
        report.verdict,
        report.tier,
        report.processing_time_ms,
    )

    if history is not None:
        history.record(report)
    return report
