"""BadgePreviewCanvas widget.

Shows the rendered badge aspect-fitted inside the widget and routes mouse
and wheel input to the interaction functions. Only presses and wheel ticks
that land on the photo window are consumed.
"""
from __future__ import annotations

from pathlib import Path

from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QPainter, QPixmap
from PyQt6.QtWidgets import QLabel, QWidget

from badgemaker import interaction
from badgemaker.constants import SUPPORTED_EXTENSIONS
from badgemaker.interaction import Viewport
from badgemaker.models import PixelRegion, SessionState


class BadgePreviewCanvas(QLabel):
    viewChanged = pyqtSignal()
    photoDropped = pyqtSignal(object)  # Path

    def __init__(self, state: SessionState, parent: QWidget | None = None) -> None:
        super().__init__("Loading template…", parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setMinimumSize(320, 320)
        self.setAcceptDrops(True)
        self.setMouseTracking(True)
        self._state = state
        self._pixmap: QPixmap | None = None
        self._photo_window: PixelRegion | None = None

    def set_badge(self, pixmap: QPixmap | None, photo_window: PixelRegion | None) -> None:
        self._pixmap = pixmap
        self._photo_window = photo_window
        if pixmap is None:
            self.setText("Template image unavailable")
            interaction.end_pan(self._state)
            self.unsetCursor()
        else:
            self.setText("")
        self.update()

    def _display_rect(self) -> QRectF | None:
        if self._pixmap is None or self._pixmap.isNull():
            return None
        content = self.contentsRect()
        if content.width() <= 0 or content.height() <= 0:
            return None
        scale = min(
            content.width() / float(self._pixmap.width()),
            content.height() / float(self._pixmap.height()),
        )
        draw_w = self._pixmap.width() * scale
        draw_h = self._pixmap.height() * scale
        center = QRectF(content).center()
        return QRectF(center.x() - draw_w * 0.5, center.y() - draw_h * 0.5, draw_w, draw_h)

    def _viewport(self) -> Viewport | None:
        rect = self._display_rect()
        if rect is None or self._pixmap is None:
            return None
        return Viewport(
            left=rect.left(),
            top=rect.top(),
            display_width=rect.width(),
            display_height=rect.height(),
            canvas_width=self._pixmap.width(),
            canvas_height=self._pixmap.height(),
        )

    def _update_cursor(self, x: float, y: float) -> None:
        if self._state.panning:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            return
        viewport = self._viewport()
        if viewport is not None and self._photo_window is not None and interaction.hit_photo_window(
            viewport, self._photo_window, x, y
        ):
            self.setCursor(Qt.CursorShape.OpenHandCursor)
        else:
            self.unsetCursor()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        viewport = self._viewport()
        if (
            event.button() == Qt.MouseButton.LeftButton
            and viewport is not None
            and self._photo_window is not None
        ):
            pos = event.position()
            if interaction.pointer_down(self._state, viewport, self._photo_window, pos.x(), pos.y()):
                self._update_cursor(pos.x(), pos.y())
                event.accept()
                return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        pos = event.position()
        if interaction.pointer_move(self._state, pos.x(), pos.y()):
            self.viewChanged.emit()
            event.accept()
            return
        self._update_cursor(pos.x(), pos.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton and interaction.end_pan(self._state):
            pos = event.position()
            self._update_cursor(pos.x(), pos.y())
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def leaveEvent(self, event) -> None:  # type: ignore[override]
        if interaction.end_pan(self._state):
            self.unsetCursor()
        super().leaveEvent(event)

    def wheelEvent(self, event) -> None:  # type: ignore[override]
        viewport = self._viewport()
        if viewport is None or self._photo_window is None:
            super().wheelEvent(event)
            return
        pos = event.position()
        # Qt reports positive angle delta when scrolling up; the interaction
        # layer expects positive values for scrolling down.
        delta_y = -event.angleDelta().y()
        if interaction.wheel(self._state, viewport, self._photo_window, pos.x(), pos.y(), delta_y):
            self.viewChanged.emit()
            event.accept()
            return
        super().wheelEvent(event)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if _first_image_path(event.mimeData()) is not None:
            event.acceptProposedAction()
            return
        super().dragEnterEvent(event)

    def dropEvent(self, event) -> None:  # type: ignore[override]
        path = _first_image_path(event.mimeData())
        if path is None:
            super().dropEvent(event)
            return
        event.acceptProposedAction()
        self.photoDropped.emit(path)

    def paintEvent(self, event) -> None:  # type: ignore[override]
        super().paintEvent(event)
        draw_rect = self._display_rect()
        if draw_rect is None or self._pixmap is None:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.drawPixmap(
            draw_rect,
            self._pixmap,
            QRectF(0, 0, self._pixmap.width(), self._pixmap.height()),
        )
        painter.end()


def _first_image_path(mime_data) -> Path | None:
    if mime_data is None or not mime_data.hasUrls():
        return None
    for url in mime_data.urls():
        if not url.isLocalFile():
            continue
        path = Path(url.toLocalFile())
        if path.suffix.lower() in SUPPORTED_EXTENSIONS:
            return path
    return None
