"""
Watchlist persistence: an ordered, duplicate-free list of coin ids.
"""

import json
import logging
from typing import Callable, Optional

from core.storage import KeyValueStorage, StorageChange

logger = logging.getLogger(__name__)

WATCHLIST_STORAGE_KEY = "cryptoquick_watchlist"


class WatchlistStore:
    """
    Reads and writes the watchlist through a KeyValueStorage.

    With no storage every read is empty and every write does nothing.
    Storage failures are logged at debug level and otherwise ignored.
    """

    def __init__(self, storage: Optional[KeyValueStorage]):
        self._storage = storage

    def get(self) -> list[str]:
        if self._storage is None:
            return []

        try:
            stored = self._storage.get(WATCHLIST_STORAGE_KEY)
            if not stored:
                return []
            parsed = json.loads(stored)
        except (OSError, ValueError) as e:
            logger.debug(f"Error reading watchlist: {e}")
            return []

        if not isinstance(parsed, list):
            return []

        ids: list[str] = []
        for coin_id in parsed:
            if isinstance(coin_id, str) and coin_id not in ids:
                ids.append(coin_id)
        return ids

    def add(self, coin_id: str) -> None:
        if self._storage is None:
            return

        watchlist = self.get()
        if coin_id in watchlist:
            return
        self._write(watchlist + [coin_id])

    def remove(self, coin_id: str) -> None:
        if self._storage is None:
            return

        self._write([c for c in self.get() if c != coin_id])

    def contains(self, coin_id: str) -> bool:
        return coin_id in self.get()

    def toggle(self, coin_id: str) -> bool:
        """Add or remove the id. Returns the new membership."""
        if self.contains(coin_id):
            self.remove(coin_id)
            return False
        self.add(coin_id)
        return self.contains(coin_id)

    def subscribe(self, listener: Callable[[StorageChange], None]) -> Callable[[], None]:
        """Listen for watchlist changes from this process or another instance."""
        if self._storage is None:
            return lambda: None

        def on_change(change: StorageChange):
            if change.key == WATCHLIST_STORAGE_KEY:
                listener(change)

        return self._storage.subscribe(on_change)

    def _write(self, watchlist: list[str]) -> None:
        try:
            self._storage.set(WATCHLIST_STORAGE_KEY, json.dumps(watchlist))
        except (OSError, ValueError) as e:
            logger.debug(f"Error writing watchlist: {e}")
            return
        self._storage.notify(WATCHLIST_STORAGE_KEY)
