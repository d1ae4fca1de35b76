from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from core.config import AppConfig
from core.logging import setup_logging
from core.paths import APP_NAME, ensure_runtime_directories
from i18n.i18n import initialize_i18n, tr
from ui.main_window import MainWindow


def main() -> int:
    ensure_runtime_directories()

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    config = AppConfig()
    initialize_i18n(config.get_language())

    logger, log_emitter = setup_logging(level=config.get_log_level())
    logger.info(tr("startup.config_loaded", path=str(config.path)))

    window = MainWindow(config=config, logger=logger, log_emitter=log_emitter)
    window.show()
    logger.info(tr("startup.ready"))

    exit_code = app.exec()
    logger.info("Application exited with code %s", exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
