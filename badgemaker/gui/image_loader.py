"""Background image decoding for the editor window.

Each task carries the ``LoadToken`` it was started with; the session decides
on arrival whether the result is still wanted.
"""
from __future__ import annotations

from typing import Callable

from PIL import Image
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

from badgemaker.session import LoadToken


class _LoadSignals(QObject):
    finished = pyqtSignal(object, object)  # (LoadToken, Image.Image | None)


class ImageLoadTask(QRunnable):
    def __init__(self, token: LoadToken, reader: Callable[[], Image.Image | None]) -> None:
        super().__init__()
        self.token = token
        self.signals = _LoadSignals()
        self._reader = reader

    def run(self) -> None:
        # Readers never raise; a failed decode arrives as None.
        image = self._reader()
        self.signals.finished.emit(self.token, image)


class ImageLoader(QObject):
    """Runs readers on the global thread pool and reports back on the GUI thread."""

    loaded = pyqtSignal(object, object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pool = QThreadPool.globalInstance()
        self._pending: dict[LoadToken, ImageLoadTask] = {}

    def submit(self, token: LoadToken, reader: Callable[[], Image.Image | None]) -> None:
        task = ImageLoadTask(token, reader)
        self._pending[token] = task
        task.signals.finished.connect(self._on_finished)
        self._pool.start(task)

    @pyqtSlot(object, object)
    def _on_finished(self, token: LoadToken, image: Image.Image | None) -> None:
        self._pending.pop(token, None)
        self.loaded.emit(token, image)
