"""
Tests for report sharing.

Tests verify:
    - Share text and link formats
    - Twitter and LinkedIn intents go through the injected opener
    - Clipboard receives text plus link
    - Failures return False instead of raising
"""

from urllib.parse import parse_qs, urlparse

from sifter.config import SifterConfig
from sifter.export.share import (
    linkedin_share_url,
    share,
    share_text,
    share_url,
    twitter_intent_url,
)


class Recorder:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def __call__(self, value):
        self.calls.append(value)
        return self.result


def test_share_text(rich_report):
    assert share_text(rich_report) == (
        "Sifter Analysis: Moon Rocket, Inc.\nRisk Score: 75/100 (REJECT)\nHIGH Risk"
    )


def test_share_url(rich_report):
    assert share_url(rich_report) == "https://sifter.app/report/moon_rocket_inc"
    custom = SifterConfig(share_base_url="https://example.org/r/")
    assert share_url(rich_report, custom) == "https://example.org/r/moon_rocket_inc"


def test_intent_urls():
    tweet = urlparse(twitter_intent_url("Risk 75/100 & more", "https://x.test/a?b=1"))
    query = parse_qs(tweet.query)
    assert tweet.netloc == "twitter.com"
    assert query["text"] == ["Risk 75/100 & more"]
    assert query["url"] == ["https://x.test/a?b=1"]

    linkedin = urlparse(linkedin_share_url("https://x.test/a"))
    assert parse_qs(linkedin.query)["url"] == ["https://x.test/a"]


def test_share_to_clipboard(rich_report):
    clipboard = Recorder()
    assert share(rich_report, "clipboard", clipboard=clipboard) is True
    assert clipboard.calls == [share_text(rich_report) + "\n\nhttps://sifter.app/report/moon_rocket_inc"]


def test_share_to_twitter(rich_report):
    opener = Recorder()
    assert share(rich_report, "twitter", url="https://x.test/r", opener=opener) is True
    assert opener.calls[0].startswith("https://twitter.com/intent/tweet?")
    assert parse_qs(urlparse(opener.calls[0]).query)["url"] == ["https://x.test/r"]


def test_share_to_linkedin(rich_report):
    opener = Recorder()
    assert share(rich_report, "linkedin", opener=opener) is True
    assert opener.calls[0].startswith("https://www.linkedin.com/sharing/share-offsite/")


def test_share_unknown_target(rich_report):
    opener, clipboard = Recorder(), Recorder()
    assert share(rich_report, "myspace", opener=opener, clipboard=clipboard) is False
    assert opener.calls == [] and clipboard.calls == []


def test_share_failure_returns_false(rich_report):
    def broken(_):
        raise OSError("no display")

    assert share(rich_report, "twitter", opener=broken) is False
    assert share(rich_report, "clipboard", clipboard=Recorder(result=False)) is False
