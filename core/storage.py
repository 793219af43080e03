"""
Key-value storage used by the watchlist and coin cache stores.

Values are raw strings (the stores keep JSON in them). Every storage object
owns a list of listeners that hear about changes to any key, both the ones
written through it and the ones another process made.
"""

import logging
import re
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ChangeOrigin(Enum):
    LOCAL = "local"
    EXTERNAL = "external"


@dataclass(frozen=True)
class StorageChange:
    key: str
    origin: ChangeOrigin


Listener = Callable[[StorageChange], None]


class KeyValueStorage(ABC):
    """Abstract string store with change notifications."""

    def __init__(self):
        self._listeners: list[Listener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener again.
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def notify(self, key: str, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> None:
        """Deliver a change to every listener."""
        change = StorageChange(key, origin)
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(change)
            except Exception as e:
                logger.error(f"Storage listener failed for {key}: {e}", exc_info=True)


class MemoryStorage(KeyValueStorage):
    """In-process storage, used in tests and when no data directory is writable."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage(KeyValueStorage):
    """
    Stores each key in its own ``<key>.json`` file inside a directory.

    The last text read or written per key is remembered so that a file
    watcher can tell our own writes from writes made by another instance.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path):
        super().__init__()
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)
        self._known: dict[str, Optional[str]] = {}

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{self.SUFFIX}"

    def key_for(self, path: Path) -> Optional[str]:
        path = Path(path)
        if path.parent != self.directory or path.suffix != self.SUFFIX:
            return None
        return path.stem

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            self._known[key] = None
            return None
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        self._known[key] = text
        return text

    def set(self, key: str, value: str) -> None:
        with open(self.path_for(key), "w", encoding="utf-8") as f:
            f.write(value)
        self._known[key] = value

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
        self._known[key] = None

    def check_external_change(self, key: str) -> bool:
        """
        Compare the file on disk with what this instance last saw, and
        notify listeners with an EXTERNAL change when they differ.
        """
        path = self.path_for(key)
        try:
            current = path.read_text(encoding="utf-8") if path.exists() else None
        except OSError as e:
            logger.debug(f"Could not re-read {path}: {e}")
            return False

        if key in self._known and self._known[key] == current:
            return False

        self._known[key] = current
        logger.debug(f"External change detected for {key}")
        self.notify(key, ChangeOrigin.EXTERNAL)
        return True
