import os
import sys
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    return QApplication.instance() or QApplication(sys.argv)


@pytest.fixture
def wait_until(qapp):
    """Pump the Qt event loop until ``condition()`` holds or the timeout expires."""

    def _wait(condition, timeout=2.0):
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                return False
            qapp.processEvents()
            time.sleep(0.01)
        return True

    return _wait
