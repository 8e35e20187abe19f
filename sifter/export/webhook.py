"""
sifter/export/webhook.py: Chat-webhook payloads and delivery.

Payload shapes:
    slack    Attachment with short fields (score, verdict, tier, confidence).
    teams    Office 365 connector MessageCard with facts.
    generic  The Report JSON document / partner packet, unchanged.

Both a Report and a partner packet (dict with 'summary' and 'projects') can
be sent. Delivery uses only the stdlib (urllib.request) with a bounded
timeout; send_webhook() returns False on non-2xx responses or network
errors and never raises.
"""

import json
import logging
import time
import urllib.error
import urllib.request
from datetime import datetime
from typing import Optional, Union

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.export.formats import report_to_dict
from sifter.reports.assembler import Report
from sifter.reports.assessment import chat_color, risk_color, risk_summary

logger = logging.getLogger(__name__)

PLATFORMS = ("slack", "teams", "generic")

BATCH_COLOR = "#007bff"
BATCH_THEME = "0076D7"


def _epoch(iso: Optional[str], fallback: float) -> int:
    if iso:
        try:
            return int(datetime.fromisoformat(iso.replace("Z", "+00:00")).timestamp())
        except ValueError:
            logger.debug("Unparseable timestamp %r; using fallback.", iso)
    return int(fallback)


def _is_packet(data) -> bool:
    return isinstance(data, dict) and "projects" in data and "summary" in data


# ── Slack ─────────────────────────────────────────────────────────────────────

def _slack_report(report: Report, config: SifterConfig, now: float) -> dict:
    c = report.composite
    return {
        "attachments": [{
            "color": chat_color(c.score, config),
            "title": f"Sifter Analysis: {report.name}",
            "fields": [
                {"title": "Risk Score", "value": f"{c.score}/100", "short": True},
                {"title": "Verdict", "value": c.verdict.upper(), "short": True},
                {"title": "Risk Tier", "value": c.tier, "short": True},
                {"title": "Confidence", "value": f"{c.confidence}%", "short": True},
            ],
            "footer": report.version,
            "ts": _epoch(report.scanned_at or report.generated_at, now),
        }]
    }


def _slack_packet(packet: dict, config: SifterConfig, now: float) -> dict:
    s = packet["summary"]
    return {
        "attachments": [{
            "color": BATCH_COLOR,
            "title": "Sifter Batch Analysis Report",
            "fields": [
                {"title": "Total Projects", "value": str(s["total"]), "short": True},
                {"title": "Passed", "value": str(s["passed"]), "short": True},
                {"title": "Flagged", "value": str(s["flagged"]), "short": True},
                {"title": "Rejected", "value": str(s["rejected"]), "short": True},
                {"title": "Avg Risk Score", "value": f"{float(s['averageRiskScore']):.1f}", "short": True},
            ],
            "footer": f"{config.report_version} • Batch Analysis",
            "ts": int(now),
        }]
    }


# ── Teams ─────────────────────────────────────────────────────────────────────

def _teams_report(report: Report, config: SifterConfig) -> dict:
    c = report.composite
    return {
        "@type": "MessageCard",
        "@context": "http://schema.org/extensions",
        "themeColor": risk_color(c.score, config).lstrip("#"),
        "summary": f"Sifter Analysis: {report.name}",
        "sections": [{
            "activityTitle": f"Sifter Analysis: {report.name}",
            "activitySubtitle": f"Risk Score: {c.score}/100",
            "facts": [
                {"name": "Verdict", "value": c.verdict.upper()},
                {"name": "Risk Tier", "value": c.tier},
                {"name": "Confidence", "value": f"{c.confidence}%"},
            ],
            "text": risk_summary(c.score, c.verdict, c.tier, c.confidence),
        }],
    }


def _teams_packet(packet: dict) -> dict:
    s = packet["summary"]
    return {
        "@type": "MessageCard",
        "@context": "http://schema.org/extensions",
        "themeColor": BATCH_THEME,
        "summary": "Sifter Batch Analysis Report",
        "sections": [{
            "activityTitle": "Sifter Batch Analysis Report",
            "activitySubtitle": f"{s['total']} projects analyzed",
            "facts": [
                {"name": "Passed", "value": str(s["passed"])},
                {"name": "Flagged", "value": str(s["flagged"])},
                {"name": "Rejected", "value": str(s["rejected"])},
                {"name": "Average Risk", "value": f"{float(s['averageRiskScore']):.1f}"},
            ],
            "text": f"Analysis completed at {s.get('generatedAt', 'unknown time')}",
        }],
    }


def to_webhook_payload(
    data: Union[Report, dict],
    platform: str = "generic",
    config: SifterConfig = DEFAULT_CONFIG,
    now: Optional[float] = None,
) -> dict:
    """
    Build the webhook body for a Report or a partner packet.

    Args:
        data:     Report, or partner packet dict from build_partner_packet().
        platform: 'slack' | 'teams' | 'generic'.
        config:   SifterConfig for colours and the version footer.
        now:      Epoch seconds for timestamps that have no source value.

    Raises:
        ValueError: unknown platform.
    """
    if platform not in PLATFORMS:
        raise ValueError(f"Unknown webhook platform: {platform!r} (expected one of {PLATFORMS})")
    now = time.time() if now is None else now
    packet = _is_packet(data)

    if platform == "slack":
        return _slack_packet(data, config, now) if packet else _slack_report(data, config, now)
    if platform == "teams":
        return _teams_packet(data) if packet else _teams_report(data, config)
    return data if packet else report_to_dict(data)


def send_webhook(
    url: str,
    payload: dict,
    timeout: Optional[float] = None,
    config: SifterConfig = DEFAULT_CONFIG,
) -> bool:
    """
    POST a JSON payload to a webhook URL.

    Returns:
        True on a 2xx response; False on HTTP errors, network errors or
        timeouts. Never raises.
    """
    timeout = config.webhook_timeout_seconds if timeout is None else timeout
    try:
        body = json.dumps(payload, default=str).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=body,
            headers={"Content-Type": "application/json", "User-Agent": "sifter/1.0"},
            method="POST",
        )
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = getattr(resp, "status", None) or resp.getcode()
            if 200 <= status < 300:
                logger.info("Webhook delivered (HTTP %d).", status)
                return True
            logger.warning("Webhook returned HTTP %d.", status)
            return False
    except urllib.error.HTTPError as exc:
        logger.warning("Webhook HTTP %d: %s", exc.code, exc.reason)
        return False
    except urllib.error.URLError as exc:
        logger.warning("Webhook network error: %s", exc.reason)
        return False
    except Exception as exc:  # noqa: BLE001
        logger.warning("Webhook delivery failed: %s", exc)
        return False


def post_to_webhook(
    url: str,
    data: Union[Report, dict],
    platform: str = "generic",
    config: SifterConfig = DEFAULT_CONFIG,
) -> bool:
    """Format data for the platform and send it. Never raises."""
    try:
        payload = to_webhook_payload(data, platform, config)
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("Could not build %s webhook payload: %s", platform, exc)
        return False
    return send_webhook(url, payload, config=config)
