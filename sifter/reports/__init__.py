"""
sifter.reports: Report model and assembly.

Modules:
    assembler:   ProjectIdentity, Report and assemble_report().
    assessment:  Score-banded recommendations, assessments and colours.
"""

from sifter.reports.assembler import (
    MetricBreakdownEntry,
    ProjectIdentity,
    Report,
    assemble_report,
)
from sifter.reports.assessment import Recommendation, final_assessment, recommendation_for
