"""
sifter.metrics: Metric catalog and composite scoring.

Modules:
    catalog:  The 13 metric definitions, weights and status bands.
    scoring:  Observation validation, composite score, verdict and tier.

All thresholds live in sifter.config.SifterConfig.
"""

from sifter.metrics.catalog import (
    DEFAULT_CATALOG,
    MetricCatalog,
    MetricDefinition,
    metric_status,
)
from sifter.metrics.scoring import (
    CompositeResult,
    MetricContribution,
    MetricObservation,
    classify_tier,
    classify_verdict,
    compute_composite,
)
