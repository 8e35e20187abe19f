"""
sifter.export: Serialising reports and batches.

Modules:
    formats:      CSV, JSON, plain text, partner packet and file output.
    html_report:  Self-contained HTML report with markdown evidence.
    webhook:      Slack / Teams / generic payloads and delivery.
    share:        Clipboard and social share targets.

Export-side failures are returned (ExportResult, bool) rather than raised.
"""

from sifter.export.formats import (
    ExportResult,
    batch_to_csv,
    build_partner_packet,
    report_from_json,
    sanitize_filename,
    to_csv,
    to_json,
    to_text,
    write_export,
)
from sifter.export.html_report import to_html
from sifter.export.share import share
from sifter.export.webhook import send_webhook, to_webhook_payload
