"""
sifter.storage: Watchlist and scan-history stores.

Stores are injected at the boundary; the scoring core never imports them.
"""

from sifter.storage.stores import (
    HistoryEntry,
    HistoryStore,
    InMemoryHistory,
    InMemoryWatchlist,
    JsonFileHistory,
    JsonFileWatchlist,
    WatchlistEntry,
    WatchlistStore,
)
