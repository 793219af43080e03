"""
Label that shows an image downloaded from a URL.
"""

from typing import Optional

from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtGui import QPixmap
from PyQt6.QtNetwork import QNetworkAccessManager, QNetworkProxy, QNetworkReply, QNetworkRequest
from PyQt6.QtWidgets import QLabel, QWidget

from config.settings import get_settings_manager


class RemoteImageLabel(QLabel):
    """Square image label; hides itself when the download fails."""

    def __init__(self, size: int, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._size = size
        self._url = ""
        self.setFixedSize(size, size)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._network_manager = QNetworkAccessManager(self)
        self._configure_proxy()
        self._network_manager.finished.connect(self._on_image_loaded)

    def _configure_proxy(self):
        proxy_settings = get_settings_manager().settings.proxy
        if not proxy_settings.enabled:
            return

        proxy = QNetworkProxy()
        if proxy_settings.type.lower() == 'http':
            proxy.setType(QNetworkProxy.ProxyType.HttpProxy)
        else:
            proxy.setType(QNetworkProxy.ProxyType.Socks5Proxy)
        proxy.setHostName(proxy_settings.host)
        proxy.setPort(proxy_settings.port)
        if proxy_settings.username:
            proxy.setUser(proxy_settings.username)
        if proxy_settings.password:
            proxy.setPassword(proxy_settings.password)
        self._network_manager.setProxy(proxy)

    def load(self, url: str):
        if not url:
            self.clear_image()
            return
        if url == self._url:
            return
        self._url = url
        self.show()

        request = QNetworkRequest(QUrl(url))
        # Set a user agent to avoid being blocked
        request.setHeader(QNetworkRequest.KnownHeaders.UserAgentHeader, "Mozilla/5.0")
        self._network_manager.get(request)

    def clear_image(self):
        """Drop the current image; a later load() of the same URL fetches again."""
        self._url = ""
        self.clear()
        self.hide()

    def _on_image_loaded(self, reply: QNetworkReply):
        if reply.request().url().toString() != self._url:
            reply.deleteLater()
            return

        pixmap = QPixmap()
        if reply.error() == QNetworkReply.NetworkError.NoError and pixmap.loadFromData(reply.readAll()):
            self.setPixmap(
                pixmap.scaled(
                    self._size,
                    self._size,
                    Qt.AspectRatioMode.KeepAspectRatio,
                    Qt.TransformationMode.SmoothTransformation,
                )
            )
        else:
            self.hide()
        reply.deleteLater()
