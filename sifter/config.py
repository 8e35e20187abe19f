"""
sifter/config.py: All tunable parameters for the Sifter risk engine.

No threshold should ever be hardcoded in a scoring, evidence, or export
module. Every verdict cut-off, tier boundary, band edge, and batch limit
lives here so that calibration changes are a single-file diff.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SifterConfig:
    """
    Immutable configuration for the Sifter scoring pipeline.

    Override by constructing a new SifterConfig with the desired values.
    """

    # ── Verdict (pass / flag / reject) ────────────────────────────────────────
    verdict_flag_min: int = 30
    # Composite score at or above this value is at least 'flag'.

    verdict_reject_min: int = 60
    # Composite score at or above this value is 'reject'.

    # ── Risk tier ladder ──────────────────────────────────────────────────────
    tier_ladder: tuple = (
        (25, "LOW"),
        (50, "MODERATE"),
        (75, "ELEVATED"),
        (101, "HIGH"),
    )
    # (exclusive upper bound, tier). Scores are integers in [0, 100], so the
    # final bound of 101 closes the ladder: every score maps to exactly one tier.

    # ── Per-metric status bands ───────────────────────────────────────────────
    status_ladder: tuple = (
        (30, "low"),
        (50, "moderate"),
        (70, "high"),
        (101, "critical"),
    )
    # Display status of a single metric observation (CSV 'Status' column).

    # ── Evidence template bands ───────────────────────────────────────────────
    evidence_high_min: int = 60
    # Metric score at or above this value selects the 'high' narrative.

    evidence_medium_min: int = 30
    # Metric score at or above this value (and below high) selects 'medium'.

    # ── Recommendation ladder ─────────────────────────────────────────────────
    recommendation_bands: tuple = (80, 60, 40, 20)
    # Lower edges of the five recommendation bands, highest first:
    # >=80, 60-79, 40-59, 20-39, <20.

    critical_metric_min: int = 80
    # Metric score at or above this value is listed under CRITICAL RISKS in the
    # detailed analysis block of text/HTML reports.

    detailed_analysis_max_flags: int = 5
    # Maximum number of metric flags quoted in the detailed analysis block.

    # ── Batch processing ──────────────────────────────────────────────────────
    batch_max_projects: int = 100
    # Hard cap per batch. Larger batches are refused, never truncated.

    batch_max_workers: int = 8
    # Bounded worker pool size for batch scoring.

    # ── Entity flagging ───────────────────────────────────────────────────────
    entity_risk_threshold: int = 60
    # Only projects with composite score strictly above this value contribute
    # their associated entities to cross-project flagging.

    entity_min_cooccurrence: int = 2
    # An entity is flagged once it appears in at least this many high-risk
    # projects within the same batch.

    # ── Export / integrations ─────────────────────────────────────────────────
    webhook_timeout_seconds: float = 10.0
    # Timeout for webhook POSTs. Failures are reported, never raised.

    report_version: str = "Sifter 1.0"
    # Version string stamped into JSON exports and footers.

    share_base_url: str = "https://sifter.app/report"
    # Base URL used to build shareable report links.

    # ── History ───────────────────────────────────────────────────────────────
    history_max_entries: int = 50
    # Recent-scan history keeps at most this many entries (newest first).


# Singleton default: import this everywhere instead of constructing anew.
DEFAULT_CONFIG = SifterConfig()
