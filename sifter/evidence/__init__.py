"""
sifter.evidence: Per-metric evidence narratives.

Modules:
    block:      EvidenceBlock, EvidenceSection and the forgiving Facts view.
    templates:  The (metric, band) template registry.
    generator:  Band selection and generate_evidence().
"""

from sifter.evidence.block import ANALYSIS_COMPLETE_MARKER, EvidenceBlock, EvidenceSection, Facts
from sifter.evidence.generator import evidence_band, generate_evidence
