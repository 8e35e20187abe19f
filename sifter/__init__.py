"""
sifter: Composite risk scoring and report generation for crypto projects.

Turns 13 weighted risk observations about a project into a composite score,
a pass / flag / reject verdict, a risk tier and per-metric evidence, then
exports the result as CSV, JSON, HTML, chat-webhook payloads or batch
partner packets.

Packages:
    sifter.metrics:  Metric catalog and composite scoring.
    sifter.evidence: Per-metric evidence narratives.
    sifter.reports:  Report model, assembly and recommendations.
    sifter.export:   CSV / JSON / HTML / webhook / share.
    sifter.batch:    Batch screening and entity flagging.
    sifter.storage:  Watchlist and history stores.
    sifter.viz:      matplotlib figures.
"""

__version__ = "1.0.0"
