from __future__ import annotations

import sys
from pathlib import Path


def launch_gui(startup_template: str | None = None, startup_photo: Path | None = None) -> None:
    from PyQt6.QtWidgets import QApplication

    from badgemaker.config import get_default_log_path, load_config, optional_path
    from badgemaker.gui.editor import BadgeMakerWindow
    from badgemaker.log import get_log_file_path, setup_logging
    from badgemaker.template_loader import load_templates

    config = load_config()
    if get_log_file_path() is None:
        setup_logging(str(config.get("log_level") or "info"), get_default_log_path())
    templates = load_templates(
        optional_path(config.get("template_dir")),
        default_font=optional_path(config.get("font_path")),
    )

    app = QApplication.instance() or QApplication(sys.argv)
    window = BadgeMakerWindow(
        templates,
        config,
        startup_template=startup_template,
        startup_photo=startup_photo,
    )
    window.show()
    app.exec()
