"""
sifter/evidence/generator.py: Evidence narrative selection.

Picks the (metric, band) template, renders it against the observation's
facts and wraps the result in an EvidenceBlock. Generation is pure: the same
(metric_key, score, facts) always produces the same block.

Bands (from config):
    score >= evidence_high_min (60)    → 'high'
    score >= evidence_medium_min (30)  → 'medium'
    otherwise                          → 'low'
"""

import logging
from typing import Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.evidence.block import (
    SECTION_FINDINGS,
    SECTION_RED_FLAGS,
    SECTION_SOURCES,
    EvidenceBlock,
    EvidenceSection,
    Facts,
)
from sifter.evidence.templates import TEMPLATES, generic_template
from sifter.metrics.catalog import DEFAULT_CATALOG, MetricCatalog, format_metric_name

logger = logging.getLogger(__name__)

NO_RED_FLAGS = "No red flags identified for this metric"


def evidence_band(score: float, config: SifterConfig = DEFAULT_CONFIG) -> str:
    """Map a metric score to its narrative band: 'high' | 'medium' | 'low'."""
    if score >= config.evidence_high_min:
        return "high"
    if score >= config.evidence_medium_min:
        return "medium"
    return "low"


def generate_evidence(
    metric_key: str,
    score: float,
    facts: Optional[dict] = None,
    config: SifterConfig = DEFAULT_CONFIG,
    catalog: MetricCatalog = DEFAULT_CATALOG,
) -> EvidenceBlock:
    """
    Build the EvidenceBlock for one metric observation.

    Unknown metric keys get a generic block named after the key rather than
    an error, and missing or malformed facts fall back to boilerplate text.

    Args:
        metric_key: Catalog key, e.g. 'teamIdentity'.
        score:      Metric score, 0-100.
        facts:      Free-form fact dict from the data-collection layer.
        config:     SifterConfig with the evidence band thresholds.
        catalog:    Used only to resolve display names for the fallback.

    Returns:
        EvidenceBlock with sections Key Findings, Red Flags, Evidence Sources.
    """
    band = evidence_band(score, config)
    view = Facts(facts)

    fn = TEMPLATES.get((metric_key, band))
    if fn is not None:
        narrative = fn(score, view)
    else:
        definition = catalog.get(metric_key)
        name = definition.display_name if definition else format_metric_name(metric_key)
        logger.debug("No template for %s/%s; using generic narrative.", metric_key, band)
        narrative = generic_template(name, band, score, view)

    sources = [s for s in narrative.sources if s]
    block = EvidenceBlock(
        metric_key=metric_key,
        band=band,
        score=score,
        headline=narrative.headline,
        sections=[
            EvidenceSection(SECTION_FINDINGS, list(narrative.findings)),
            EvidenceSection(SECTION_RED_FLAGS, list(narrative.red_flags) or [NO_RED_FLAGS]),
            EvidenceSection(SECTION_SOURCES, sources),
        ],
        sources=sources,
    )
    return block
