"""
sifter/export/formats.py: CSV, JSON, plain-text and partner-packet exports.

Serialisers take a Report (or batch outcomes) and return a string; nothing
here touches the filesystem except write_export(), which is the single
place where an export is persisted and the only function that converts an
I/O error into a result value instead of raising.

CSV is written with pandas (RFC 4180 minimal quoting: only values holding
a comma, quote or newline are quoted). JSON is a lossless superset of the
Report, so report_from_json(to_json(r)) == r.
"""

import io
import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pandas as pd

from sifter.batch.aggregator import STATUS_COMPLETED, BatchResult, BatchSummary
from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.evidence.block import EvidenceBlock
from sifter.metrics.scoring import CompositeResult, MetricContribution, round_half_up
from sifter.reports.assembler import (
    MetricBreakdownEntry,
    ProjectIdentity,
    Report,
    detailed_analysis,
)
from sifter.reports.assessment import final_assessment

logger = logging.getLogger(__name__)

METRIC_CSV_COLUMNS = [
    "Metric", "Name", "Score", "Status", "Confidence",
    "Weight", "Contribution", "Flags", "Evidence",
]

BATCH_CSV_COLUMNS = [
    "Project", "Risk Score", "Verdict", "Top Red Flag", "Flag Count",
    "Status", "Processing Time", "Scanned At", "Recommendation",
]

SUMMARY_CSV_COLUMNS = [
    "Project", "Canonical Name", "Risk Score", "Verdict", "Risk Tier",
    "Confidence", "Processing Time", "Scanned At", "Sources",
]


def _num(value) -> str:
    """92.0 → '92', 17.48 → '17.48'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{round(value, 2):g}"


def _frame_to_csv(rows: list, columns: list) -> str:
    df = pd.DataFrame(rows, columns=columns, dtype=object)
    return df.to_csv(index=False, lineterminator="\n")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Filenames ─────────────────────────────────────────────────────────────────

def sanitize_filename(name: str) -> str:
    """
    Make a display name safe for use as a filename stem.

    Non-alphanumerics become '_', the result is lowercased, runs of '_'
    collapse to one and leading/trailing '_' are trimmed.
    'Moon Finance (V2)!' → 'moon_finance_v2'.
    """
    stem = re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()
    stem = re.sub(r"_+", "_", stem)
    return stem.strip("_")


def export_filename(kind: str, name: str = "", date: Optional[str] = None) -> str:
    """
    Conventional filename for an export kind.

    kinds: 'metrics_csv', 'analysis_json', 'report_html', 'report_txt',
           'batch_csv', 'summary_csv', 'combined_json', 'partner_packet'.
    """
    stem = sanitize_filename(name) or "project"
    date = date or datetime.now(timezone.utc).strftime("%Y-%m-%d")
    names = {
        "metrics_csv": f"{stem}_metrics.csv",
        "analysis_json": f"{stem}_analysis.json",
        "report_html": f"{stem}_report.html",
        "report_txt": f"{stem}_research_report.txt",
        "batch_csv": f"batch_analysis_{date}.csv",
        "summary_csv": f"all_analyses_summary_{date}.csv",
        "combined_json": f"all_analyses_combined_{date}.json",
        "partner_packet": "partner_packet.json",
    }
    try:
        return names[kind]
    except KeyError:
        raise ValueError(f"Unknown export kind: {kind!r}") from None


# ── CSV ───────────────────────────────────────────────────────────────────────

def to_csv(report: Report) -> str:
    """Per-metric CSV, one row per breakdown entry (contribution order)."""
    rows = [
        {
            "Metric": entry.key,
            "Name": entry.name,
            "Score": _num(entry.score),
            "Status": entry.status.upper(),
            "Confidence": f"{_num(entry.confidence)}%",
            "Weight": f"{entry.weight}%",
            "Contribution": f"{_num(entry.contribution)}%",
            "Flags": "; ".join(entry.flags) or "None",
            "Evidence": entry.evidence.to_markdown() if entry.evidence else "N/A",
        }
        for entry in report.breakdown
    ]
    return _frame_to_csv(rows, METRIC_CSV_COLUMNS)


def batch_rows(projects: list, config: SifterConfig = DEFAULT_CONFIG) -> list:
    rows = []
    for p in projects:
        scored = p.status == STATUS_COMPLETED and p.risk_score is not None
        rows.append(
            {
                "Project": p.name,
                "Risk Score": str(p.risk_score) if p.risk_score is not None else "N/A",
                "Verdict": p.verdict.upper() if p.verdict else "UNKNOWN",
                "Top Red Flag": p.red_flags[0] if p.red_flags else "None",
                "Flag Count": str(len(p.red_flags)),
                "Status": p.status.upper(),
                "Processing Time": (
                    f"{p.processing_time_ms}ms" if p.processing_time_ms is not None else "N/A"
                ),
                "Scanned At": p.scanned_at or "Not scanned",
                "Recommendation": (
                    final_assessment(p.risk_score, config) if scored else "Incomplete"
                ),
            }
        )
    return rows


def batch_to_dataframe(batch, config: SifterConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Batch outcomes as a DataFrame with the batch CSV columns."""
    projects = batch.projects if isinstance(batch, BatchResult) else list(batch)
    return pd.DataFrame(batch_rows(projects, config), columns=BATCH_CSV_COLUMNS, dtype=object)


def batch_to_csv(batch, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Per-project batch CSV. Accepts a BatchResult or a list of BatchProject."""
    projects = batch.projects if isinstance(batch, BatchResult) else list(batch)
    return _frame_to_csv(batch_rows(projects, config), BATCH_CSV_COLUMNS)


def reports_to_csv(reports: list) -> str:
    """One summary row per report."""
    rows = [
        {
            "Project": r.name,
            "Canonical Name": r.identity.canonical_name,
            "Risk Score": str(r.score),
            "Verdict": r.verdict.upper(),
            "Risk Tier": r.tier,
            "Confidence": f"{r.confidence}%",
            "Processing Time": (
                f"{r.processing_time_ms}ms" if r.processing_time_ms is not None else "N/A"
            ),
            "Scanned At": r.scanned_at or "Not scanned",
            "Sources": str(len(r.identity.sources)),
        }
        for r in reports
    ]
    return _frame_to_csv(rows, SUMMARY_CSV_COLUMNS)


# ── JSON ──────────────────────────────────────────────────────────────────────

def _contribution_dict(c: MetricContribution) -> dict:
    return {
        "key": c.key,
        "name": c.display_name,
        "score": c.score,
        "weight": c.weight,
        "contribution": c.contribution,
        "confidence": c.confidence,
        "status": c.status,
        "order": c.order,
    }


def _metric_dict(entry: MetricBreakdownEntry) -> dict:
    return {
        "key": entry.key,
        "name": entry.name,
        "score": entry.score,
        "weight": entry.weight,
        "contribution": entry.contribution,
        "status": entry.status,
        "confidence": entry.confidence,
        "flags": list(entry.flags),
        "order": entry.order,
        "evidence": entry.evidence.to_dict(),
        "evidenceText": entry.evidence.to_markdown(),
    }


def report_to_dict(report: Report) -> dict:
    """The Report JSON document as a plain dict."""
    c = report.composite
    return {
        "metadata": {
            "projectName": report.identity.display_name,
            "canonicalName": report.identity.canonical_name,
            "platform": report.identity.platform,
            "scannedAt": report.scanned_at,
            "riskScore": c.score,
            "verdict": c.verdict,
            "riskTier": c.tier,
            "confidence": c.confidence,
            "processingTime": report.processing_time_ms,
        },
        "overallRisk": {
            "score": c.score,
            "verdict": c.verdict,
            "tier": c.tier,
            "confidence": c.confidence,
            "breakdown": [_contribution_dict(x) for x in c.contributions],
        },
        "metrics": [_metric_dict(e) for e in report.breakdown],
        "sources": list(report.identity.sources),
        "recommendations": list(report.recommendations),
        "associatedEntities": list(report.associated_entities),
        "generatedAt": report.generated_at,
        "version": report.version,
    }


def to_json(report: Report, indent: int = 2) -> str:
    return json.dumps(report_to_dict(report), indent=indent, default=str)


def report_from_dict(data: dict) -> Report:
    """Rebuild a Report from report_to_dict() output."""
    meta = data["metadata"]
    overall = data["overallRisk"]
    composite = CompositeResult(
        score=overall["score"],
        verdict=overall["verdict"],
        tier=overall["tier"],
        confidence=overall["confidence"],
        contributions=[
            MetricContribution(
                key=b["key"],
                display_name=b["name"],
                score=b["score"],
                weight=b["weight"],
                contribution=b["contribution"],
                confidence=b["confidence"],
                status=b["status"],
                order=b["order"],
            )
            for b in overall.get("breakdown", [])
        ],
    )
    breakdown = [
        MetricBreakdownEntry(
            key=m["key"],
            name=m["name"],
            score=m["score"],
            weight=m["weight"],
            contribution=m["contribution"],
            status=m["status"],
            confidence=m["confidence"],
            flags=list(m.get("flags", [])),
            evidence=EvidenceBlock.from_dict(m["evidence"]),
            order=m["order"],
        )
        for m in data.get("metrics", [])
    ]
    identity = ProjectIdentity(
        display_name=meta["projectName"],
        canonical_name=meta.get("canonicalName", ""),
        platform=meta.get("platform", "unknown"),
        sources=list(data.get("sources", [])),
    )
    return Report(
        identity=identity,
        composite=composite,
        breakdown=breakdown,
        recommendations=list(data.get("recommendations", [])),
        generated_at=data["generatedAt"],
        scanned_at=meta.get("scannedAt"),
        processing_time_ms=meta.get("processingTime"),
        associated_entities=list(data.get("associatedEntities", [])),
        version=data.get("version", DEFAULT_CONFIG.report_version),
    )


def report_from_json(text: str) -> Report:
    return report_from_dict(json.loads(text))


def reports_to_json(
    reports: list,
    generated_at: Optional[str] = None,
    config: SifterConfig = DEFAULT_CONFIG,
) -> str:
    """Combined document: batch-level metadata plus a compact entry per report."""
    scores = [r.score for r in reports]
    document = {
        "metadata": {
            "totalProjects": len(reports),
            "averageRiskScore": round_half_up(sum(scores) / len(scores)) if scores else 0,
            "passed": sum(1 for r in reports if r.verdict == "pass"),
            "flagged": sum(1 for r in reports if r.verdict == "flag"),
            "rejected": sum(1 for r in reports if r.verdict == "reject"),
            "generatedAt": generated_at or _utc_now(),
            "version": config.report_version,
        },
        "projects": [
            {
                "name": r.name,
                "canonicalName": r.identity.canonical_name,
                "riskScore": r.score,
                "verdict": r.verdict,
                "riskTier": r.tier,
                "confidence": r.confidence,
                "sources": list(r.identity.sources),
                "metrics": [
                    {"key": e.key, "name": e.name, "score": e.score, "status": e.status}
                    for e in r.breakdown
                ],
            }
            for r in reports
        ],
    }
    return json.dumps(document, indent=2, default=str)


# ── Plain-text research report ────────────────────────────────────────────────

def _section(title: str) -> list:
    return [title, "-" * len(title)]


def to_text(report: Report, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """
    Plain-text research report.

    Also the fallback rendering when HTML generation fails.
    """
    c = report.composite
    analysed = report.scanned_at or report.generated_at
    lines = [
        f"PROJECT: {report.identity.display_name}",
        f"CANONICAL: {report.identity.canonical_name}",
        f"ANALYSIS DATE: {(analysed or '')[:10] or 'Unknown'}",
        f"RISK SCORE: {c.score}/100",
        f"VERDICT: {c.verdict.upper()}",
        f"RISK TIER: {c.tier}",
        f"CONFIDENCE: {c.confidence}%",
        "",
    ]

    lines += _section("SOURCES")
    lines += list(report.identity.sources) or ["No sources"]
    lines.append("")

    lines += _section("METRIC BREAKDOWN")
    lines += [f"{e.name}: {_num(e.score)}/100 ({e.status.upper()})" for e in report.breakdown]
    lines.append("")

    lines += _section("RECOMMENDATIONS")
    if report.recommendations:
        lines += [f"{i}. {rec}" for i, rec in enumerate(report.recommendations, start=1)]
    else:
        lines.append("No specific recommendations")
    lines.append("")

    lines += _section("DETAILED ANALYSIS")
    analysis = detailed_analysis(report, config)
    if analysis["critical"]:
        lines.append("CRITICAL RISKS DETECTED:")
        lines += [f"• {name}" for name in analysis["critical"]]
        lines.append("")
    if analysis["flags"]:
        lines.append("KEY FLAGS:")
        lines += [f"• {flag}" for flag in analysis["flags"]]
        lines.append("")
    if not analysis["critical"] and not analysis["flags"]:
        lines += ["No critical risks or flags detected.", ""]

    lines += _section("FINAL ASSESSMENT")
    lines.append(final_assessment(c.score, config))
    lines.append("")
    lines.append(f"GENERATED: {report.generated_at}")
    lines.append(f"ANALYZED: {analysed or 'Unknown'}")
    lines.append(f"VERSION: {report.version} Research Edition")
    return "\n".join(lines) + "\n"


# ── Partner packet ────────────────────────────────────────────────────────────

def project_highlights(report: Report) -> dict:
    """
    Strengths and considerations for a partner hand-off.

    Returns:
        {'strengths': [...], 'considerations': [...]}, each non-empty.
    """
    scores = {e.key: e.score for e in report.breakdown}
    strengths = []
    if scores.get("teamIdentity", 100) < 30:
        strengths.append("Fully doxxed team with strong credentials")
    if scores.get("contaminatedNetwork", 100) < 20:
        strengths.append("Clean network with no connections to known bad actors")
    if scores.get("tokenomics", 100) < 30:
        strengths.append("Fair tokenomics with reasonable vesting")

    considerations = []
    if scores.get("mercenaryKeywords", 0) > 60:
        considerations.append("Community shows high mercenary discourse")
    if scores.get("founderDistraction", 0) > 50:
        considerations.append("Founder appears distracted by multiple projects")
    if scores.get("busFactor", 0) > 70:
        considerations.append("High dependency on few team members")

    return {
        "strengths": strengths or ["Solid fundamentals across key metrics"],
        "considerations": considerations or ["Standard due diligence recommended"],
    }


def build_partner_packet(
    summary: BatchSummary,
    projects: list,
    generated_at: Optional[str] = None,
) -> dict:
    """
    Partner packet for external hand-off of selected batch projects.

    Args:
        summary:      BatchSummary of the batch the projects came from.
        projects:     Selected BatchProjects.
        generated_at: ISO timestamp; defaults to now (UTC).
    """
    entries = []
    for p in projects:
        entry = {
            "name": p.name,
            "riskScore": p.risk_score or 0,
            "verdict": p.verdict or "unknown",
            "redFlags": list(p.red_flags),
            "processingTime": p.processing_time_ms or 0,
            "scannedAt": p.scanned_at,
        }
        if p.report is not None:
            entry.update(project_highlights(p.report))
        entries.append(entry)

    return {
        "summary": {
            "total": summary.total,
            "passed": summary.passed,
            "flagged": summary.flagged,
            "rejected": summary.rejected,
            "averageRiskScore": summary.average_risk_score,
            "processingTime": summary.processing_time_ms,
            "redFlagDistribution": dict(summary.red_flag_distribution),
            "generatedAt": generated_at or _utc_now(),
        },
        "projects": entries,
    }


def partner_packet_to_json(packet: dict) -> str:
    return json.dumps(packet, indent=2, default=str)


# ── File output ───────────────────────────────────────────────────────────────

@dataclass
class ExportResult:
    """
    Outcome of persisting an export.

    Fields:
        ok:    True if the file was written.
        path:  Absolute path written (or attempted).
        error: Error message when ok is False.
    """

    ok: bool
    path: str
    error: Optional[str] = None


def _discard(tmp_path: str) -> None:
    if os.path.exists(tmp_path):
        try:
            os.remove(tmp_path)
        except OSError as e:
            logger.warning("Could not remove partial export %s: %s", tmp_path, e)


def write_export(content, directory: str, filename: str) -> ExportResult:
    """
    Write str or bytes content to directory/filename.

    Writes to a .tmp sibling first and renames it into place. OS errors are
    logged and returned in the ExportResult, never raised.
    """
    path = os.path.abspath(os.path.join(directory, filename))
    tmp_path = path + ".tmp"
    mode = "wb" if isinstance(content, bytes) else "w"
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if mode == "wb":
            with open(tmp_path, mode) as fh:
                fh.write(content)
        else:
            with open(tmp_path, mode, encoding="utf-8", newline="") as fh:
                fh.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error("Failed to write export to %s: %s", path, e)
        _discard(tmp_path)
        return ExportResult(ok=False, path=path, error=str(e))

    logger.info("Export written: %s", path)
    return ExportResult(ok=True, path=path)


def read_csv(text: str) -> pd.DataFrame:
    """Parse CSV text produced by this module back into a string DataFrame."""
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
