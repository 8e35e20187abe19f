"""
sifter/export/share.py: Sharing a report summary.

Targets:
    clipboard  Copy the share text and link.
    twitter    Open a tweet intent with the share text and link.
    linkedin   Open LinkedIn's share-offsite dialog for the link.

The clipboard writer and browser opener are injectable so callers (and
tests) control the side effect. share() returns a bool and never raises.
"""

import logging
import shutil
import subprocess
import urllib.parse
import webbrowser
from typing import Callable, Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.export.formats import sanitize_filename
from sifter.reports.assembler import Report

logger = logging.getLogger(__name__)

TARGETS = ("clipboard", "twitter", "linkedin")

# (command, args) tried in order for the system clipboard.
_CLIPBOARD_COMMANDS = (
    ("pbcopy", []),
    ("wl-copy", []),
    ("xclip", ["-selection", "clipboard"]),
    ("xsel", ["--clipboard", "--input"]),
    ("clip", []),
)


def share_text(report: Report) -> str:
    c = report.composite
    return (
        f"Sifter Analysis: {report.name}\n"
        f"Risk Score: {c.score}/100 ({c.verdict.upper()})\n"
        f"{c.tier} Risk"
    )


def share_url(report: Report, config: SifterConfig = DEFAULT_CONFIG) -> str:
    slug = sanitize_filename(report.identity.canonical_name or report.name)
    return f"{config.share_base_url.rstrip('/')}/{slug}"


def twitter_intent_url(text: str, url: str) -> str:
    return (
        "https://twitter.com/intent/tweet?"
        f"text={urllib.parse.quote(text, safe='')}&url={urllib.parse.quote(url, safe='')}"
    )


def linkedin_share_url(url: str) -> str:
    return f"https://www.linkedin.com/sharing/share-offsite/?url={urllib.parse.quote(url, safe='')}"


def system_clipboard(text: str) -> bool:
    """Copy text with the first available platform clipboard command."""
    for command, args in _CLIPBOARD_COMMANDS:
        path = shutil.which(command)
        if not path:
            continue
        completed = subprocess.run([path, *args], input=text.encode("utf-8"), timeout=5, check=False)
        return completed.returncode == 0
    logger.warning("No clipboard command available.")
    return False


def share(
    report: Report,
    target: str = "clipboard",
    url: Optional[str] = None,
    clipboard: Optional[Callable[[str], bool]] = None,
    opener: Optional[Callable[[str], bool]] = None,
    config: SifterConfig = DEFAULT_CONFIG,
) -> bool:
    """
    Share a report summary.

    Args:
        report:    Report to share.
        target:    'clipboard' | 'twitter' | 'linkedin'.
        url:       Link to share; defaults to share_url(report).
        clipboard: Callable(text) -> bool; defaults to system_clipboard.
        opener:    Callable(url) -> bool; defaults to webbrowser.open.
        config:    SifterConfig with share_base_url.

    Returns:
        True if the share action succeeded, False otherwise.
    """
    clipboard = clipboard or system_clipboard
    opener = opener or webbrowser.open
    try:
        text = share_text(report)
        link = url or share_url(report, config)
        if target == "twitter":
            return bool(opener(twitter_intent_url(text, link)))
        if target == "linkedin":
            return bool(opener(linkedin_share_url(link)))
        if target == "clipboard":
            return bool(clipboard(f"{text}\n\n{link}"))
        logger.warning("Unknown share target %r (expected one of %s).", target, TARGETS)
        return False
    except Exception as exc:  # noqa: BLE001
        logger.warning("Share to %s failed: %s", target, exc)
        return False
