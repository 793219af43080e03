from unittest.mock import patch

import pytest
from PyQt6.QtGui import QPixmap

from config.settings import SettingsManager
from ui.widgets.remote_image import RemoteImageLabel


@pytest.fixture
def label(qapp, tmp_path):
    with patch(
        "ui.widgets.remote_image.get_settings_manager",
        return_value=SettingsManager(tmp_path),
    ):
        label = RemoteImageLabel(32)
    yield label
    label.deleteLater()


def test_empty_url_clears_previous_image(label):
    pixmap = QPixmap(32, 32)
    label._url = "https://example.com/btc.png"
    label.setPixmap(pixmap)
    label.show()

    label.load("")

    assert label.pixmap().isNull()
    assert label.isHidden()
    assert label._url == ""


def test_same_url_is_not_requested_twice(label):
    with patch.object(label._network_manager, "get") as get:
        label.load("https://example.com/eth.png")
        label.load("https://example.com/eth.png")

    assert get.call_count == 1
    assert not label.isHidden()
