"""
sifter/storage/stores.py: Watchlist and scan-history persistence.

The scoring core never touches storage. Callers inject a store at the
boundary (CLI, pipeline) and hand it finished Reports.

Implementations:
    InMemoryWatchlist / InMemoryHistory    Process-local, for tests and one-shot runs.
    JsonFileWatchlist / JsonFileHistory    A single JSON file, written atomically
                                           (write .tmp, rename).

History keeps the newest config.history_max_entries scans, newest first.
"""

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from sifter.config import DEFAULT_CONFIG, SifterConfig
from sifter.reports.assembler import Report

logger = logging.getLogger(__name__)


@dataclass
class WatchlistEntry:
    """A project the user is tracking."""

    canonical_name: str
    display_name: str
    risk_score: int
    verdict: str
    added_at: str


@dataclass
class HistoryEntry:
    """One completed scan."""

    canonical_name: str
    display_name: str
    risk_score: int
    verdict: str
    tier: str
    confidence: int
    scanned_at: Optional[str]
    generated_at: str


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _atomic_write_json(path: str, data) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError):
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def _read_json_list(path: str) -> list:
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, OSError):
        logger.warning("Corrupt store file %s; starting empty.", path)
        return []
    return data if isinstance(data, list) else []


# ── Watchlist ─────────────────────────────────────────────────────────────────

class WatchlistStore(ABC):
    """Tracked projects keyed by canonical name."""

    @abstractmethod
    def add(self, report: Report) -> WatchlistEntry:
        """Add or refresh a project from its latest report."""

    @abstractmethod
    def remove(self, canonical_name: str) -> bool:
        """Remove a project; False if it was not on the list."""

    @abstractmethod
    def list(self) -> list:
        """All entries, in the order they were first added."""

    def contains(self, canonical_name: str) -> bool:
        return any(e.canonical_name == canonical_name for e in self.list())


class InMemoryWatchlist(WatchlistStore):

    def __init__(self):
        self._entries: dict = {}
        self._lock = threading.Lock()

    def add(self, report: Report) -> WatchlistEntry:
        with self._lock:
            previous = self._entries.get(report.identity.canonical_name)
            entry = WatchlistEntry(
                canonical_name=report.identity.canonical_name,
                display_name=report.name,
                risk_score=report.score,
                verdict=report.verdict,
                added_at=previous.added_at if previous else _utc_now(),
            )
            self._entries[entry.canonical_name] = entry
            return entry

    def remove(self, canonical_name: str) -> bool:
        with self._lock:
            return self._entries.pop(canonical_name, None) is not None

    def list(self) -> list:
        with self._lock:
            return list(self._entries.values())


class JsonFileWatchlist(InMemoryWatchlist):
    """Watchlist persisted to a JSON file after every change."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        for row in _read_json_list(path):
            try:
                entry = WatchlistEntry(**row)
            except TypeError:
                logger.warning("Skipping malformed watchlist row in %s: %r", path, row)
                continue
            self._entries[entry.canonical_name] = entry

    def _flush(self) -> None:
        _atomic_write_json(self.path, [asdict(e) for e in self.list()])

    def add(self, report: Report) -> WatchlistEntry:
        entry = super().add(report)
        self._flush()
        return entry

    def remove(self, canonical_name: str) -> bool:
        removed = super().remove(canonical_name)
        if removed:
            self._flush()
        return removed


# ── History ───────────────────────────────────────────────────────────────────

class HistoryStore(ABC):
    """Recent scans, newest first, capped at a fixed size."""

    @abstractmethod
    def record(self, report: Report) -> HistoryEntry:
        """Record a finished scan."""

    @abstractmethod
    def recent(self, limit: Optional[int] = None) -> list:
        """Newest-first entries, optionally limited."""

    @abstractmethod
    def clear(self) -> None:
        """Drop all history."""


class InMemoryHistory(HistoryStore):

    def __init__(self, config: SifterConfig = DEFAULT_CONFIG):
        self.max_entries = config.history_max_entries
        self._entries: list = []
        self._lock = threading.Lock()

    def record(self, report: Report) -> HistoryEntry:
        entry = HistoryEntry(
            canonical_name=report.identity.canonical_name,
            display_name=report.name,
            risk_score=report.score,
            verdict=report.verdict,
            tier=report.tier,
            confidence=report.confidence,
            scanned_at=report.scanned_at,
            generated_at=report.generated_at,
        )
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self.max_entries:]
        return entry

    def recent(self, limit: Optional[int] = None) -> list:
        with self._lock:
            entries = list(self._entries)
        return entries[:limit] if limit else entries

    def clear(self) -> None:
        with self._lock:
            self._entries = []


class JsonFileHistory(InMemoryHistory):
    """History persisted to a JSON file after every change."""

    def __init__(self, path: str, config: SifterConfig = DEFAULT_CONFIG):
        super().__init__(config)
        self.path = path
        for row in _read_json_list(path)[: self.max_entries]:
            try:
                self._entries.append(HistoryEntry(**row))
            except TypeError:
                logger.warning("Skipping malformed history row in %s: %r", path, row)

    def _flush(self) -> None:
        _atomic_write_json(self.path, [asdict(e) for e in self.recent()])

    def record(self, report: Report) -> HistoryEntry:
        entry = super().record(report)
        self._flush()
        return entry

    def clear(self) -> None:
        super().clear()
        self._flush()
