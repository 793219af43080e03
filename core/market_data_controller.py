import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from core.coin_cache import CoinCacheStore
from core.coin_search import filter_coins
from core.coingecko_client import CoinGeckoClient
from core.errors import CoinGeckoError
from core.models import AdjacentCoins, Coin, CoinDetail
from core.navigation import get_adjacent_coins
from core.storage import StorageChange
from core.watchlist import WatchlistStore

logger = logging.getLogger(__name__)


class _RequestTokens:
    """Monotonic request ids; only the newest request may publish its result."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._latest = next(self._counter)
            return self._latest

    def is_latest(self, token: int) -> bool:
        with self._lock:
            return token == self._latest


class CoinListController(QObject):
    """
    State behind the coin list page.
    Decouples data loading, cache fallback and filtering from the UI.
    """

    loading_started = pyqtSignal()
    state_changed = pyqtSignal()
    _load_finished = pyqtSignal(int, object, object)  # token, coins, error

    def __init__(
        self,
        client: CoinGeckoClient,
        cache: CoinCacheStore,
        watchlist: WatchlistStore,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._client = client
        self._cache = cache
        self._watchlist = watchlist
        self._tokens = _RequestTokens()

        self.coins: list[Coin] = []
        self.loading = False
        self.error: Optional[CoinGeckoError] = None
        self.is_showing_cached = False
        self._search_query = ""
        self._favorites_only = False

        self._load_finished.connect(self._apply_result)
        self._unsubscribe = self._watchlist.subscribe(self._on_watchlist_changed)

    @property
    def search_query(self) -> str:
        return self._search_query

    @search_query.setter
    def search_query(self, query: str):
        self._search_query = query
        self.state_changed.emit()

    @property
    def favorites_only(self) -> bool:
        return self._favorites_only

    @favorites_only.setter
    def favorites_only(self, enabled: bool):
        self._favorites_only = enabled
        self.state_changed.emit()

    @property
    def watchlist(self) -> list[str]:
        return self._watchlist.get()

    def filtered_coins(self) -> list[Coin]:
        return filter_coins(
            self.coins, self._search_query, self._watchlist.get(), self._favorites_only
        )

    def toggle_favorite(self, coin_id: str) -> bool:
        return self._watchlist.toggle(coin_id)

    def load_coins(self):
        """Fetch the top coins on the calling thread."""
        token = self._begin_load()
        coins, error = self._fetch()
        self._apply_result(token, coins, error)

    def request_load(self):
        """Fetch the top coins on a background thread."""
        token = self._begin_load()

        def _worker():
            coins, error = self._fetch()
            self._load_finished.emit(token, coins, error)

        threading.Thread(target=_worker, daemon=True).start()

    def shutdown(self):
        self._unsubscribe()

    def _begin_load(self) -> int:
        token = self._tokens.next()
        self.loading = True
        self.error = None
        self.is_showing_cached = False
        self.loading_started.emit()
        return token

    def _fetch(self) -> tuple[Optional[list[Coin]], Optional[CoinGeckoError]]:
        try:
            return self._client.fetch_coins(), None
        except CoinGeckoError as e:
            return None, e

    def _apply_result(
        self, token: int, coins: Optional[list[Coin]], error: Optional[CoinGeckoError]
    ):
        if not self._tokens.is_latest(token):
            logger.debug(f"Discarding result of superseded coin list request {token}")
            return

        self.loading = False

        if error is None:
            self.coins = coins
            self._cache.save(coins)
        else:
            cached = self._cache.get()
            if cached:
                logger.info(f"Showing {len(cached)} cached coins after fetch failure: {error}")
                self.coins = cached
                self.is_showing_cached = True
            else:
                self.coins = []
                self.error = error

        self.state_changed.emit()

    def _on_watchlist_changed(self, change: StorageChange):
        logger.debug(f"Watchlist changed ({change.origin.value})")
        self.state_changed.emit()


@dataclass
class DetailState:
    """What the detail page should show for one coin."""

    coin_id: str
    coin: Optional[CoinDetail] = None
    is_cached: bool = False
    not_found: bool = False
    error: Optional[CoinGeckoError] = None
    loading: bool = False


class CoinDetailController(QObject):
    """
    State behind the coin detail page.

    Only the HTTP request runs on the worker thread. Cache reads and writes
    happen in ``_apply_result`` on the thread that owns the controller, after
    superseded requests have been dropped.
    """

    loading_started = pyqtSignal(str)
    detail_changed = pyqtSignal(object)  # DetailState
    adjacent_changed = pyqtSignal(str, object)  # coin_id, AdjacentCoins
    _load_finished = pyqtSignal(int, str, object, object)  # token, coin_id, detail, error
    _adjacent_finished = pyqtSignal(int, str, object)

    def __init__(
        self,
        client: CoinGeckoClient,
        cache: CoinCacheStore,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._client = client
        self._cache = cache
        self._tokens = _RequestTokens()
        self._adjacent_tokens = _RequestTokens()
        self.state: Optional[DetailState] = None

        self._load_finished.connect(self._apply_result)
        self._adjacent_finished.connect(self._apply_adjacent)

    def load_detail(self, coin_id: str) -> DetailState:
        """Load a coin on the calling thread and publish the resulting state."""
        token = self._begin_load(coin_id)
        detail, error = self._fetch(coin_id)
        self._apply_result(token, coin_id, detail, error)
        return self.state

    def request_detail(self, coin_id: str):
        token = self._begin_load(coin_id)

        def _worker():
            detail, error = self._fetch(coin_id)
            self._load_finished.emit(token, coin_id, detail, error)

        threading.Thread(target=_worker, daemon=True).start()

    def load_adjacent(self, coin_id: str) -> AdjacentCoins:
        token = self._adjacent_tokens.next()
        adjacent = get_adjacent_coins(coin_id, self._cache, self._client)
        self._apply_adjacent(token, coin_id, adjacent)
        return adjacent

    def request_adjacent(self, coin_id: str):
        token = self._adjacent_tokens.next()

        def _worker():
            adjacent = get_adjacent_coins(coin_id, self._cache, self._client)
            self._adjacent_finished.emit(token, coin_id, adjacent)

        threading.Thread(target=_worker, daemon=True).start()

    def _begin_load(self, coin_id: str) -> int:
        token = self._tokens.next()
        self.state = DetailState(coin_id=coin_id, loading=True)
        self.loading_started.emit(coin_id)
        return token

    def _fetch(self, coin_id: str) -> tuple[Optional[CoinDetail], Optional[CoinGeckoError]]:
        try:
            return self._client.fetch_coin_detail(coin_id), None
        except CoinGeckoError as e:
            return None, e

    def _resolve(
        self, coin_id: str, detail: Optional[CoinDetail], error: Optional[CoinGeckoError]
    ) -> DetailState:
        if error is None:
            self._cache.update_description(detail)
            return DetailState(coin_id=coin_id, coin=detail)

        if error.is_not_found:
            return DetailState(coin_id=coin_id, not_found=True)

        cached = self._cache.get_detail(coin_id)
        if cached is not None:
            logger.info(f"Showing cached detail for {coin_id} after fetch failure: {error}")
            return DetailState(coin_id=coin_id, coin=cached, is_cached=True)
        return DetailState(coin_id=coin_id, error=error)

    def _apply_result(
        self,
        token: int,
        coin_id: str,
        detail: Optional[CoinDetail],
        error: Optional[CoinGeckoError],
    ):
        if not self._tokens.is_latest(token):
            logger.debug(f"Discarding result of superseded detail request for {coin_id}")
            return
        self.state = self._resolve(coin_id, detail, error)
        self.detail_changed.emit(self.state)

    def _apply_adjacent(self, token: int, coin_id: str, adjacent: AdjacentCoins):
        if not self._adjacent_tokens.is_latest(token):
            return
        self.adjacent_changed.emit(coin_id, adjacent)
