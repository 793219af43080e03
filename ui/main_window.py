"""
Main application window using Fluent Design.
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QResizeEvent
from PyQt6.QtWidgets import QMainWindow, QStackedWidget, QVBoxLayout, QWidget

from config.settings import SettingsManager, get_settings_manager
from core.coin_cache import COINS_CACHE_KEY, CoinCacheStore
from core.coingecko_client import CoinGeckoClient
from core.market_data_controller import CoinDetailController, CoinListController
from core.storage import JsonFileStorage
from core.storage_watcher import StorageWatcher
from core.watchlist import WATCHLIST_STORAGE_KEY, WatchlistStore
from ui.pages.coin_detail_page import CoinDetailPage
from ui.pages.coin_list_page import CoinListPage
from ui.styles.theme import apply_theme, next_theme_mode, window_stylesheet
from ui.widgets.toolbar import Toolbar

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window: toolbar over a list page and a detail page."""

    def __init__(self, settings_manager: Optional[SettingsManager] = None):
        super().__init__()

        self._settings_manager = settings_manager or get_settings_manager()
        settings = self._settings_manager.settings
        self._pending_size: Optional[tuple[int, int]] = None

        apply_theme(settings.theme_mode)

        # Core components
        self._storage: Optional[JsonFileStorage] = None
        self._storage_watcher: Optional[StorageWatcher] = None
        try:
            self._storage = JsonFileStorage(self._settings_manager.data_dir)
            self._storage_watcher = StorageWatcher(
                self._storage, [WATCHLIST_STORAGE_KEY, COINS_CACHE_KEY], self
            )
        except OSError as e:
            logger.warning(f"Local storage unavailable, running without cache: {e}")

        self._client = CoinGeckoClient.from_settings(settings)
        self._cache = CoinCacheStore(self._storage)
        self._watchlist = WatchlistStore(self._storage)
        self._list_controller = CoinListController(self._client, self._cache, self._watchlist, self)
        self._detail_controller = CoinDetailController(self._client, self._cache, self)

        self._setup_ui()
        self._connect_signals()

        self._list_controller.request_load()

    def _setup_ui(self):
        self.setWindowTitle("Crypto Quick")
        settings = self._settings_manager.settings
        self.resize(settings.window_width, settings.window_height)
        self.setMinimumSize(360, 480)

        central = QWidget()
        central.setObjectName("centralWidget")
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 4, 0, 0)
        layout.setSpacing(4)

        self.toolbar = Toolbar()
        self.toolbar.set_theme_mode(settings.theme_mode)
        layout.addWidget(self.toolbar)

        self.stack = QStackedWidget()
        self.list_page = CoinListPage(self._list_controller)
        self.detail_page = CoinDetailPage(self._detail_controller, self._watchlist)
        self.stack.addWidget(self.list_page)
        self.stack.addWidget(self.detail_page)
        layout.addWidget(self.stack, 1)

        self._apply_stylesheet()

    def _connect_signals(self):
        self.toolbar.back_clicked.connect(self._show_list)
        self.toolbar.refresh_clicked.connect(self._refresh)
        self.toolbar.theme_clicked.connect(self._cycle_theme)

        self.list_page.coin_selected.connect(self._show_detail)
        self.detail_page.coin_selected.connect(self._show_detail)
        self.detail_page.back_requested.connect(self._show_list)

    def _show_list(self):
        self.stack.setCurrentWidget(self.list_page)
        self.toolbar.set_back_visible(False)

    def _show_detail(self, coin_id: str):
        logger.debug(f"Opening detail for {coin_id}")
        self.detail_page.show_coin(coin_id)
        self.stack.setCurrentWidget(self.detail_page)
        self.toolbar.set_back_visible(True)

    def _refresh(self):
        if self.stack.currentWidget() is self.detail_page:
            self.detail_page.reload()
        else:
            self._list_controller.request_load()

    def _cycle_theme(self):
        theme_mode = next_theme_mode(self._settings_manager.settings.theme_mode)
        self._settings_manager.update_theme(theme_mode)
        apply_theme(theme_mode)
        self.toolbar.set_theme_mode(theme_mode)
        self._apply_stylesheet()
        # Cards pick their colors when built
        self.list_page.render()
        if self._detail_controller.state is not None and not self._detail_controller.state.loading:
            self.detail_page.render(self._detail_controller.state)

    def _apply_stylesheet(self):
        self.centralWidget().setStyleSheet(window_stylesheet())

    def resizeEvent(self, event: QResizeEvent):
        super().resizeEvent(event)
        if self.windowState() == Qt.WindowState.WindowNoState:
            self._pending_size = (event.size().width(), event.size().height())

    def closeEvent(self, event):
        size = self._pending_size
        if size:
            self._settings_manager.update_window_size(*size)
        self._list_controller.shutdown()
        self.detail_page.shutdown()
        if self._storage_watcher:
            self._storage_watcher.stop()
        super().closeEvent(event)
