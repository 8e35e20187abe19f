"""
sifter.batch: Batch screening.

Modules:
    aggregator:  run_batch(), BatchProject, BatchSummary, BatchResult.
    entities:    Cross-project entity flagging on a project–entity graph.
"""

from sifter.batch.aggregator import (
    BatchProject,
    BatchResult,
    BatchSummary,
    ProjectInput,
    run_batch,
    summarize_batch,
)
from sifter.batch.entities import FlaggedEntity, flag_entities
