from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any

from PIL import Image
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QImage, QKeySequence, QPixmap
from PyQt6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QTabBar,
    QVBoxLayout,
    QWidget,
)

from badgemaker import interaction
from badgemaker.config import optional_path
from badgemaker.constants import SUPPORTED_EXTENSIONS, ZOOM_MAX, ZOOM_MIN
from badgemaker.gui.image_loader import ImageLoader
from badgemaker.gui.preview_canvas import BadgePreviewCanvas
from badgemaker.log import get_logger
from badgemaker.models import BadgeTemplate
from badgemaker.session import BadgeSession, LoadToken, read_photo, read_template_asset

_log = get_logger("gui")

_SLIDER_SCALE = 100


def pil_to_qpixmap(image: Image.Image) -> QPixmap:
    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    q_image = QImage(data, rgba.width, rgba.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(q_image.copy())


def _photo_file_filter() -> str:
    patterns = " ".join(f"*{ext}" for ext in sorted(SUPPORTED_EXTENSIONS))
    return f"Images ({patterns});;All Files (*.*)"


class BadgeMakerWindow(QMainWindow):
    def __init__(
        self,
        templates: dict[str, BadgeTemplate],
        config: dict[str, Any],
        *,
        startup_template: str | None = None,
        startup_photo: Path | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Badge Maker")
        self.resize(1100, 860)
        self.setMinimumSize(760, 640)

        self.config = config
        self.session = BadgeSession(
            templates,
            initial_template=startup_template or str(config.get("default_template") or ""),
            name_max_length=int(config.get("name_max_length") or 30),
        )
        self._template_ids = list(templates)
        self._last_photo_dir = ""

        self.loader = ImageLoader(self)
        self.loader.loaded.connect(self._on_image_loaded)

        self._setup_ui()
        self._setup_shortcuts()
        self._select_template(self.session.state.template_id)
        if startup_photo is not None:
            self.open_photo(startup_photo)

    def _setup_ui(self) -> None:
        root = QWidget()
        self.setCentralWidget(root)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        template_group = QGroupBox("Choose Badge Type")
        template_layout = QVBoxLayout(template_group)
        self.template_tabs = QTabBar()
        for template_id in self._template_ids:
            self.template_tabs.addTab(self.session.templates[template_id].title)
        self.template_tabs.setCurrentIndex(self._template_ids.index(self.session.state.template_id))
        self.template_tabs.currentChanged.connect(self._on_template_tab_changed)
        template_layout.addWidget(self.template_tabs)
        layout.addWidget(template_group)

        input_group = QGroupBox("Upload & Customize")
        input_layout = QHBoxLayout(input_group)
        upload_button = QPushButton("Choose Photo")
        upload_button.clicked.connect(self.pick_photo)
        input_layout.addWidget(upload_button)

        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("Enter your name")
        self.name_edit.setMaxLength(self.session.name_max_length)
        self.name_edit.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.name_edit.textChanged.connect(self._on_name_changed)
        input_layout.addWidget(self.name_edit, stretch=1)
        layout.addWidget(input_group)

        self.preview = BadgePreviewCanvas(self.session.state)
        self.preview.viewChanged.connect(self._on_view_changed)
        self.preview.photoDropped.connect(self.open_photo)
        layout.addWidget(self.preview, stretch=1)

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(QLabel("Adjust Size"))
        zoom_out_button = QPushButton("−")
        zoom_out_button.setFixedWidth(36)
        zoom_out_button.clicked.connect(self._on_zoom_out)
        zoom_row.addWidget(zoom_out_button)

        self.zoom_slider = QSlider(Qt.Orientation.Horizontal)
        self.zoom_slider.setRange(int(ZOOM_MIN * _SLIDER_SCALE), int(ZOOM_MAX * _SLIDER_SCALE))
        self.zoom_slider.setSingleStep(1)
        self.zoom_slider.valueChanged.connect(self._on_zoom_slider)
        zoom_row.addWidget(self.zoom_slider, stretch=1)

        zoom_in_button = QPushButton("+")
        zoom_in_button.setFixedWidth(36)
        zoom_in_button.clicked.connect(self._on_zoom_in)
        zoom_row.addWidget(zoom_in_button)

        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self._on_reset_view)
        zoom_row.addWidget(reset_button)

        self.zoom_label = QLabel("100%")
        self.zoom_label.setMinimumWidth(48)
        zoom_row.addWidget(self.zoom_label)
        layout.addLayout(zoom_row)

        self.export_button = QPushButton("Download Badge")
        self.export_button.setEnabled(False)
        self.export_button.clicked.connect(self.export_badge)
        layout.addWidget(self.export_button)

        self.setStatusBar(self.statusBar())

    def _setup_shortcuts(self) -> None:
        open_action = QAction("Open Photo", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.pick_photo)
        self.addAction(open_action)

        save_action = QAction("Download Badge", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self.export_badge)
        self.addAction(save_action)

    def _set_status(self, message: str) -> None:
        self.statusBar().showMessage(message)

    # Template

    def _on_template_tab_changed(self, index: int) -> None:
        if 0 <= index < len(self._template_ids):
            self._select_template(self._template_ids[index])

    def _select_template(self, template_id: str) -> None:
        token = self.session.select_template(template_id)
        self.loader.submit(token, partial(read_template_asset, self.session.template))
        self._set_status(f"Loading template: {self.session.template.title}")
        self.refresh()

    # Photo

    def pick_photo(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(self, "Choose Photo", self._last_photo_dir, _photo_file_filter())
        if file_path:
            self.open_photo(Path(file_path))

    def open_photo(self, path: Path) -> None:
        self._last_photo_dir = str(path.parent)
        token = self.session.begin_photo_load()
        self.loader.submit(token, partial(read_photo, path))
        self._set_status(f"Loading photo: {path.name}")

    def _on_image_loaded(self, token: LoadToken, image: Image.Image | None) -> None:
        if token.slot == BadgeSession.TEMPLATE_SLOT:
            applied = self.session.apply_template_image(token, image)
            if applied:
                if image is None:
                    self._set_status("Template image could not be loaded. Select the template again to retry.")
                else:
                    self._set_status(f"Template ready: {self.session.template.title}")
        else:
            applied = self.session.apply_photo(token, image)
            if applied:
                self._set_status("Photo ready. Drag to move, scroll to zoom." if image is not None else "Photo could not be read.")
        if applied:
            self.refresh()

    # View

    def _on_view_changed(self) -> None:
        self.refresh()

    def _on_zoom_slider(self, value: int) -> None:
        current = int(round(self.session.state.view.zoom * _SLIDER_SCALE))
        if value == current:
            return
        interaction.set_zoom(self.session.state, value / float(_SLIDER_SCALE))
        self.refresh()

    def _on_zoom_in(self) -> None:
        interaction.zoom_in(self.session.state)
        self.refresh()

    def _on_zoom_out(self) -> None:
        interaction.zoom_out(self.session.state)
        self.refresh()

    def _on_reset_view(self) -> None:
        interaction.reset_view(self.session.state)
        self.refresh()

    def _on_name_changed(self, text: str) -> None:
        self.session.set_name(text)
        self.refresh()

    def _sync_zoom_controls(self) -> None:
        zoom = self.session.state.view.zoom
        slider_value = int(round(zoom * _SLIDER_SCALE))
        if self.zoom_slider.value() != slider_value:
            self.zoom_slider.blockSignals(True)
            self.zoom_slider.setValue(slider_value)
            self.zoom_slider.blockSignals(False)
        self.zoom_label.setText(f"{round(zoom * 100)}%")

    def refresh(self) -> None:
        """Re-render from scratch after any state change."""
        result = self.session.render()
        if result is None:
            self.preview.set_badge(None, None)
        else:
            self.preview.set_badge(pil_to_qpixmap(result.image), result.geometry.photo_window)
        self.export_button.setEnabled(self.session.can_export)
        self._sync_zoom_controls()

    # Export

    def export_badge(self) -> None:
        if not self.session.can_export:
            self._set_status("Nothing to export yet.")
            return
        default_dir = optional_path(self.config.get("export_dir")) or Path(self._last_photo_dir or ".")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            "Download Badge",
            str(default_dir / self.session.export_filename()),
            "PNG (*.png)",
        )
        if not file_path:
            return
        target = Path(file_path)
        if target.suffix.lower() != ".png":
            target = target.with_suffix(".png")
        try:
            target.write_bytes(self.session.export_png())
        except (OSError, RuntimeError) as exc:
            _log.error("export failed %s: %s", target, exc)
            QMessageBox.critical(self, "Export failed", str(exc))
            return
        _log.info("exported badge %s", target)
        self._set_status(f"Saved: {target}")
