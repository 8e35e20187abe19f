"""
Tests for webhook payloads and delivery.

Tests verify:
    - Slack and Teams payloads for a single report and for a partner packet
    - The generic payload is the Report JSON document / packet unchanged
    - send_webhook() returns True on 2xx and False on HTTP and network errors
    - Unknown platforms raise in to_webhook_payload() but not in post_to_webhook()

Integration tests (skipped by default) post to SIFTER_WEBHOOK_URL.
Run with: pytest -m integration
"""

import json
import os
import urllib.error
from datetime import datetime

import pytest

from sifter.batch.aggregator import run_batch
from sifter.export.formats import build_partner_packet, report_to_dict
from sifter.export.webhook import post_to_webhook, send_webhook, to_webhook_payload

NOW = 1_700_000_000.0


# ── Helpers ───────────────────────────────────────────────────────────────────

class FakeResponse:
    def __init__(self, status):
        self.status = status

    def getcode(self):
        return self.status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def capture_urlopen(monkeypatch):
    """Patch urlopen; returns the list of captured (request, timeout) calls."""
    calls = []

    def install(status=200, error=None):
        def fake_urlopen(req, timeout=None):
            calls.append((req, timeout))
            if error is not None:
                raise error
            return FakeResponse(status)

        monkeypatch.setattr("urllib.request.urlopen", fake_urlopen)
        return calls

    return install


@pytest.fixture
def packet(rich_report, clean_report, fixed_time):
    result = run_batch([rich_report, clean_report])
    return build_partner_packet(result.summary, result.projects, generated_at=fixed_time)


# ── Payloads ──────────────────────────────────────────────────────────────────

def test_slack_report_payload(rich_report, fixed_time):
    payload = to_webhook_payload(rich_report, "slack", now=NOW)
    attachment = payload["attachments"][0]
    assert attachment["color"] == "#ff9900"
    assert attachment["title"] == "Sifter Analysis: Moon Rocket, Inc."
    fields = {f["title"]: f["value"] for f in attachment["fields"]}
    assert fields == {
        "Risk Score": "75/100",
        "Verdict": "REJECT",
        "Risk Tier": "HIGH",
        "Confidence": "80%",
    }
    assert attachment["footer"] == "Sifter 1.0"
    assert attachment["ts"] == int(datetime.fromisoformat(fixed_time).timestamp())


def test_slack_report_without_timestamps_uses_now(make_obs, make_report):
    report = make_report("Undated", make_obs(default=10), scanned_at=None)
    report.generated_at = "not a date"
    payload = to_webhook_payload(report, "slack", now=NOW)
    assert payload["attachments"][0]["ts"] == int(NOW)
    assert payload["attachments"][0]["color"] == "#00ff00"


def test_teams_report_payload(rich_report):
    payload = to_webhook_payload(rich_report, "teams")
    assert payload["@type"] == "MessageCard"
    assert payload["themeColor"] == "f59e0b"
    section = payload["sections"][0]
    assert section["activitySubtitle"] == "Risk Score: 75/100"
    facts = {f["name"]: f["value"] for f in section["facts"]}
    assert facts == {"Verdict": "REJECT", "Risk Tier": "HIGH", "Confidence": "80%"}
    assert section["text"].startswith("REJECT\nRisk Score: 75/100 (HIGH)")


def test_slack_packet_payload(packet):
    payload = to_webhook_payload(packet, "slack", now=NOW)
    attachment = payload["attachments"][0]
    assert attachment["color"] == "#007bff"
    assert attachment["title"] == "Sifter Batch Analysis Report"
    fields = {f["title"]: f["value"] for f in attachment["fields"]}
    assert fields["Total Projects"] == "2"
    assert fields["Rejected"] == "1"
    assert fields["Avg Risk Score"] == "43.0"
    assert attachment["ts"] == int(NOW)


def test_teams_packet_payload(packet, fixed_time):
    payload = to_webhook_payload(packet, "teams")
    assert payload["themeColor"] == "0076D7"
    section = payload["sections"][0]
    assert section["activitySubtitle"] == "2 projects analyzed"
    assert section["text"] == f"Analysis completed at {fixed_time}"


def test_generic_payloads(rich_report, packet):
    assert to_webhook_payload(rich_report) == report_to_dict(rich_report)
    assert to_webhook_payload(packet, "generic") is packet


def test_unknown_platform_raises(rich_report):
    with pytest.raises(ValueError):
        to_webhook_payload(rich_report, "discord")


# ── Delivery ──────────────────────────────────────────────────────────────────

def test_send_webhook_success(capture_urlopen):
    calls = capture_urlopen(status=204)
    assert send_webhook("https://hooks.example.com/x", {"text": "hi"}) is True
    req, timeout = calls[0]
    assert req.get_method() == "POST"
    assert req.get_header("Content-type") == "application/json"
    assert json.loads(req.data.decode("utf-8")) == {"text": "hi"}
    assert timeout == 10.0


def test_send_webhook_non_2xx(capture_urlopen):
    capture_urlopen(status=302)
    assert send_webhook("https://hooks.example.com/x", {}) is False


def test_send_webhook_http_error(capture_urlopen):
    capture_urlopen(error=urllib.error.HTTPError(
        "https://hooks.example.com/x", 500, "Server Error", hdrs=None, fp=None))
    assert send_webhook("https://hooks.example.com/x", {}) is False


def test_send_webhook_network_error(capture_urlopen):
    capture_urlopen(error=urllib.error.URLError("connection refused"))
    assert send_webhook("https://hooks.example.com/x", {}, timeout=1) is False


def test_send_webhook_timeout(capture_urlopen):
    capture_urlopen(error=TimeoutError("timed out"))
    assert send_webhook("https://hooks.example.com/x", {}) is False


def test_post_to_webhook(capture_urlopen, rich_report):
    calls = capture_urlopen(status=200)
    assert post_to_webhook("https://hooks.example.com/x", rich_report, "slack") is True
    body = json.loads(calls[0][0].data.decode("utf-8"))
    assert "attachments" in body


def test_post_to_webhook_unknown_platform(capture_urlopen, rich_report):
    calls = capture_urlopen(status=200)
    assert post_to_webhook("https://hooks.example.com/x", rich_report, "discord") is False
    assert calls == []


# ── Integration ───────────────────────────────────────────────────────────────

@pytest.mark.integration
def test_post_real_webhook(rich_report):
    url = os.environ.get("SIFTER_WEBHOOK_URL")
    if not url:
        pytest.skip("SIFTER_WEBHOOK_URL not set")
    platform = os.environ.get("SIFTER_WEBHOOK_PLATFORM", "generic")
    assert post_to_webhook(url, rich_report, platform) is True
