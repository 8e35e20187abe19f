"""
sifter/viz/figures.py: Report and batch figures.

Figures are returned as PNG bytes rather than written to disk, so the HTML
exporter can embed them inline and callers decide where (if anywhere) to
persist them.

Usage:
    from sifter.viz.figures import contribution_chart, risk_distribution_chart
    png = contribution_chart(report)
    png = risk_distribution_chart(batch_result.projects)
"""

import io
import logging
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.reports.assessment import risk_color

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Palette: one colour per metric status, plus verdict band colours
# ---------------------------------------------------------------------------
STATUS_COLOR = {
    "low": "#10b981",
    "moderate": "#3b82f6",
    "high": "#f59e0b",
    "critical": "#ef4444",
}
C_DARK = "#1A2B3C"
C_LIGHT = "#F4F6F8"

STYLE = {
    "figure.facecolor": "white",
    "axes.facecolor": C_LIGHT,
    "axes.edgecolor": C_DARK,
    "axes.labelcolor": C_DARK,
    "xtick.color": C_DARK,
    "ytick.color": C_DARK,
    "text.color": C_DARK,
    "grid.color": "white",
    "grid.linewidth": 1.0,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "font.family": "DejaVu Sans",
}


def _to_png(fig, dpi: int = 120) -> bytes:
    buf = io.BytesIO()
    fig.tight_layout()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()


def contribution_chart(report, config: SifterConfig = DEFAULT_CONFIG) -> bytes:
    """
    Horizontal bar chart of each metric's contribution to the composite.

    Bars follow the report breakdown (largest contribution on top) and are
    coloured by metric status.
    """
    plt.rcParams.update(STYLE)
    entries = list(report.breakdown)
    names = [e.name for e in entries][::-1]
    values = [e.contribution for e in entries][::-1]
    colors = [STATUS_COLOR.get(e.status, C_DARK) for e in entries][::-1]

    fig, ax = plt.subplots(figsize=(8, 5))
    y = np.arange(len(names))
    ax.barh(y, values, color=colors, edgecolor="white", linewidth=0.8, zorder=3)
    ax.set_yticks(y)
    ax.set_yticklabels(names, fontsize=9)
    ax.set_xlabel("Contribution to composite risk score (points)", fontsize=10)
    ax.set_title(
        f"{report.name}: composite {report.score}/100 ({report.tier})",
        fontsize=12, fontweight="bold", pad=10,
        color=risk_color(report.score, config),
    )
    ax.xaxis.grid(True, zorder=0)
    ax.set_xlim(left=0)

    handles = [mpatches.Patch(color=c, label=s) for s, c in STATUS_COLOR.items()]
    ax.legend(handles=handles, fontsize=8, loc="lower right", title="Metric status")
    return _to_png(fig)


def risk_distribution_chart(projects: list, config: SifterConfig = DEFAULT_CONFIG) -> Optional[bytes]:
    """
    Histogram of composite scores across a batch, with verdict cut-offs.

    Returns None when no project in the batch has a score.
    """
    scores = [p.risk_score for p in projects if p is not None and p.risk_score is not None]
    if not scores:
        logger.info("No scored projects; skipping risk distribution chart.")
        return None

    plt.rcParams.update(STYLE)
    fig, ax = plt.subplots(figsize=(8, 4.5))
    bins = np.linspace(0, 100, 21)
    _, edges, patches = ax.hist(scores, bins=bins, color=STATUS_COLOR["low"],
                                edgecolor="white", linewidth=0.8, zorder=3)

    for i, left in enumerate(edges[:-1]):
        if left >= config.verdict_reject_min:
            patches[i].set_facecolor(STATUS_COLOR["critical"])
        elif left >= config.verdict_flag_min:
            patches[i].set_facecolor(STATUS_COLOR["high"])

    for threshold, label in (
        (config.verdict_flag_min, f"flag ({config.verdict_flag_min})"),
        (config.verdict_reject_min, f"reject ({config.verdict_reject_min})"),
    ):
        ax.axvline(threshold, color=C_DARK, linestyle="--", linewidth=1.2, zorder=4)
        ax.text(threshold + 1, ax.get_ylim()[1] * 0.92, label, fontsize=9)

    ax.set_xlabel("Composite risk score", fontsize=10)
    ax.set_ylabel("Projects", fontsize=10)
    ax.set_title(f"Risk distribution: {len(scores)} projects", fontsize=12, fontweight="bold")
    ax.set_xlim(0, 100)
    ax.yaxis.grid(True, zorder=0)
    return _to_png(fig)
