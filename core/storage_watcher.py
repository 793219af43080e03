import logging
from typing import Optional

from PyQt6.QtCore import QFileSystemWatcher, QObject

from core.storage import JsonFileStorage

logger = logging.getLogger(__name__)


class StorageWatcher(QObject):
    """
    Forwards file modifications made by other running instances to
    JsonFileStorage listeners.
    """

    def __init__(self, storage: JsonFileStorage, keys: list[str], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._storage = storage
        self._keys = list(keys)
        self._watcher = QFileSystemWatcher(self)
        self._watcher.fileChanged.connect(self._on_file_changed)
        self._watcher.directoryChanged.connect(self._on_directory_changed)

        self._watcher.addPath(str(storage.directory))
        self._watch_existing_files()

    def _watch_existing_files(self):
        watched = set(self._watcher.files())
        for key in self._keys:
            path = self._storage.path_for(key)
            if path.exists() and str(path) not in watched:
                self._watcher.addPath(str(path))

    def _on_file_changed(self, path: str):
        key = self._storage.key_for(path)
        if key in self._keys:
            self._storage.check_external_change(key)
        # Editors and atomic writers replace the file, which drops the watch
        self._watch_existing_files()

    def _on_directory_changed(self, _path: str):
        # A key file was created or deleted
        self._watch_existing_files()
        for key in self._keys:
            self._storage.check_external_change(key)

    def stop(self):
        paths = self._watcher.files() + self._watcher.directories()
        if paths:
            self._watcher.removePaths(paths)
        logger.debug("Storage watcher stopped")
