"""
sifter/export/html_report.py: Self-contained HTML report.

The document is print-ready (browser "Save as PDF") and carries its own
stylesheet, so it can be mailed or archived as a single file. Evidence
narratives are converted from their light markdown:

    **bold**          → <strong>
    *italic*          → <em>
    'Header:' lines   → section header
    '- item'          → bullet
    '  - item'        → sub-bullet
    ``` fences        → dropped

All text is HTML-escaped before the markdown substitutions run. Missing
optional fields render as defaults ('Unknown', 'No sources', ...).
"""

import base64
import html
import logging
import re
from typing import Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.export.formats import ExportResult, export_filename, to_text, write_export
from sifter.reports.assembler import Report, detailed_analysis
from sifter.reports.assessment import detailed_assessment, final_assessment, risk_color

logger = logging.getLogger(__name__)

_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")

_STYLE = """
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       margin: 0; padding: 20px; background: #f5f5f5; color: #333; }
.report { max-width: 1100px; margin: 0 auto; background: #fff; border-radius: 12px;
          box-shadow: 0 4px 20px rgba(0,0,0,0.1); overflow: hidden; }
.header { padding: 32px; color: #fff; }
.header h1 { margin: 0 0 8px 0; font-size: 28px; }
.summary { display: flex; flex-wrap: wrap; gap: 16px; padding: 24px 32px; }
.summary .cell { flex: 1 1 160px; background: #fafafa; border-radius: 8px; padding: 12px; }
.summary .label { font-size: 12px; color: #777; text-transform: uppercase; }
.summary .value { font-size: 22px; font-weight: 700; }
.section { padding: 8px 32px 24px 32px; }
.section h2 { border-bottom: 2px solid #eee; padding-bottom: 6px; }
.metric { border: 1px solid #eee; border-radius: 8px; padding: 16px; margin-bottom: 16px;
          page-break-inside: avoid; }
.metric-head { display: flex; justify-content: space-between; align-items: center; }
.metric-name { font-weight: 700; font-size: 16px; }
.badge { border-radius: 12px; padding: 4px 10px; color: #fff; font-weight: 700; }
.status-low { background: #10b981; } .status-moderate { background: #3b82f6; }
.status-high { background: #f59e0b; } .status-critical { background: #ef4444; }
.meta { font-size: 13px; color: #666; margin: 8px 0; }
.flag { background: #fff4f4; border-left: 3px solid #ef4444; padding: 4px 8px; margin: 4px 0; }
.ev-header { font-weight: 700; margin: 14px 0 6px 0; color: #1a237e; }
.ev-bullet { margin: 0 0 4px 20px; }
.ev-sub { margin: 0 0 4px 40px; font-size: 13px; color: #555; }
.ev-text { margin: 6px 0; line-height: 1.6; }
.footer { padding: 16px 32px; font-size: 12px; color: #888; border-top: 1px solid #eee; }
img.chart { max-width: 100%; }
@media print { body { background: #fff; padding: 0; } .report { box-shadow: none; } }
"""


def _inline(text: str) -> str:
    escaped = html.escape(text, quote=False)
    escaped = _BOLD.sub(r"<strong>\1</strong>", escaped)
    return _ITALIC.sub(r"<em>\1</em>", escaped)


def markdown_to_html(text: str) -> str:
    """Convert an evidence narrative's light markdown to HTML fragments."""
    parts = []
    for raw in (text or "").split("\n"):
        stripped = raw.strip()
        if stripped.startswith("```"):
            continue
        if not stripped:
            continue
        if raw.startswith("  - ") or raw.startswith("    - "):
            parts.append(f'<div class="ev-sub">&#9675; {_inline(stripped[2:])}</div>')
        elif stripped.startswith("- "):
            parts.append(f'<div class="ev-bullet">&bull; {_inline(stripped[2:])}</div>')
        elif stripped.endswith(":"):
            parts.append(f'<div class="ev-header">{_inline(stripped)}</div>')
        else:
            parts.append(f'<div class="ev-text">{_inline(stripped)}</div>')
    return "\n".join(parts)


def _metric_card(entry) -> str:
    flags = "".join(f'<div class="flag">{html.escape(f)}</div>' for f in entry.flags)
    evidence = markdown_to_html(entry.evidence.to_markdown()) if entry.evidence else ""
    status = entry.status or "low"
    return f"""
<div class="metric">
  <div class="metric-head">
    <div class="metric-name">{html.escape(entry.name)}</div>
    <div class="badge status-{html.escape(status)}">{entry.score:g}/100</div>
  </div>
  <div class="meta">Status: <strong>{html.escape(status.upper())}</strong> &middot;
    Confidence: {entry.confidence:g}% &middot; Weight: {entry.weight}% &middot;
    Contribution: {entry.contribution:.2f}</div>
  {flags}
  <div class="evidence">{evidence}</div>
</div>"""


def to_html(
    report: Report,
    config: SifterConfig = DEFAULT_CONFIG,
    chart_png: Optional[bytes] = None,
) -> str:
    """
    Render a Report as a standalone HTML document.

    Args:
        report:    Report to render.
        config:    SifterConfig for recommendation bands and colours.
        chart_png: Optional PNG (e.g. viz.figures.contribution_chart) to embed.
    """
    identity = report.identity
    c = report.composite
    colour = risk_color(c.score, config)
    title = html.escape(identity.display_name or "Unknown project")

    sources = identity.sources or []
    sources_html = (
        "<ul>" + "".join(f"<li>{html.escape(str(s))}</li>" for s in sources) + "</ul>"
        if sources else "<p>No sources</p>"
    )
    recs_html = (
        "<ol>" + "".join(f"<li>{html.escape(r)}</li>" for r in report.recommendations) + "</ol>"
        if report.recommendations else "<p>No specific recommendations</p>"
    )

    analysis = detailed_analysis(report, config)
    analysis_html = ""
    if analysis["critical"]:
        analysis_html += "<h3>Critical risks detected</h3><ul>" + "".join(
            f"<li>{html.escape(n)}</li>" for n in analysis["critical"]) + "</ul>"
    if analysis["flags"]:
        analysis_html += "<h3>Key flags</h3><ul>" + "".join(
            f"<li>{html.escape(f)}</li>" for f in analysis["flags"]) + "</ul>"
    if not analysis_html:
        analysis_html = "<p>No critical risks or flags detected.</p>"

    entities_html = ""
    if report.associated_entities:
        entities_html = (
            '<div class="section"><h2>Associated Entities</h2><ul>'
            + "".join(f"<li>{html.escape(e)}</li>" for e in report.associated_entities)
            + "</ul></div>"
        )

    chart_html = ""
    if chart_png:
        encoded = base64.b64encode(chart_png).decode("ascii")
        chart_html = (
            '<div class="section"><h2>Contribution Chart</h2>'
            f'<img class="chart" alt="Metric contributions" src="data:image/png;base64,{encoded}"/></div>'
        )

    processing = f"{report.processing_time_ms}ms" if report.processing_time_ms is not None else "N/A"
    metrics_html = "".join(_metric_card(e) for e in report.breakdown)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>SIFTER Research Report - {title}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="report">
<div class="header" style="background: {colour};">
  <h1>{title}</h1>
  <div>{html.escape(identity.canonical_name or "")} &middot; {html.escape(identity.platform or "unknown")}</div>
</div>
<div class="summary">
  <div class="cell"><div class="label">Risk Score</div><div class="value">{c.score}/100</div></div>
  <div class="cell"><div class="label">Verdict</div><div class="value">{html.escape(c.verdict.upper())}</div></div>
  <div class="cell"><div class="label">Risk Tier</div><div class="value">{html.escape(c.tier)}</div></div>
  <div class="cell"><div class="label">Confidence</div><div class="value">{c.confidence}%</div></div>
</div>
<div class="section">
  <h2>Final Assessment</h2>
  <p><strong>{html.escape(final_assessment(c.score, config))}</strong></p>
  <p>{html.escape(detailed_assessment(c.score, config))}</p>
</div>
<div class="section"><h2>Recommendations</h2>{recs_html}</div>
<div class="section"><h2>Detailed Analysis</h2>{analysis_html}</div>
{chart_html}
<div class="section"><h2>Metric Breakdown</h2>{metrics_html}</div>
{entities_html}
<div class="section"><h2>Sources</h2>{sources_html}</div>
<div class="footer">
  Generated by {html.escape(report.version)} &middot; {html.escape(report.generated_at or "")}
  &middot; Scanned: {html.escape(report.scanned_at or "Not scanned")} &middot; Processing: {processing}
</div>
</div>
</body>
</html>
"""


def export_report_document(
    report: Report,
    directory: str,
    config: SifterConfig = DEFAULT_CONFIG,
    chart_png: Optional[bytes] = None,
) -> ExportResult:
    """
    Write the HTML report, falling back to the plain-text report.

    If HTML rendering raises, the text rendering is written instead as
    {name}_research_report.txt and a warning is logged.
    """
    try:
        content = to_html(report, config, chart_png)
        filename = export_filename("report_html", report.name)
    except Exception as e:  # noqa: BLE001
        logger.warning("HTML rendering failed for %s (%s); writing text report.", report.name, e)
        content = to_text(report, config)
        filename = export_filename("report_txt", report.name)
    return write_export(content, directory, filename)
