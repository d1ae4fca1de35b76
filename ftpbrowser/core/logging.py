from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from core.paths import get_logs_dir

LOGGER_NAME = "ftpbrowser"
LOG_FILE_NAME = "ftpbrowser.log"


class LogEmitter(QObject):
    log_message = Signal(str)


class QtSignalLogHandler(logging.Handler):
    """Forwards formatted records to the UI thread through a Qt signal."""

    def __init__(self, emitter: LogEmitter) -> None:
        super().__init__()
        self._emitter = emitter

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._emitter.log_message.emit(self.format(record))
        except Exception:
            self.handleError(record)


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{message} ({record.levelname.lower()})"
        return message


def parse_level(value: object, default: int = logging.INFO) -> int:
    level = logging.getLevelName(str(value or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, logs_dir: Path | None = None) -> tuple[logging.Logger, LogEmitter]:
    log_file = (logs_dir or get_logs_dir()) / LOG_FILE_NAME

    file_handler = RotatingFileHandler(
        filename=log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    emitter = LogEmitter()
    signal_handler = QtSignalLogHandler(emitter)
    signal_handler.setFormatter(_ConsoleFormatter(fmt="[%(asctime)s] %(message)s", datefmt="%H:%M:%S"))
    signal_handler.setLevel(max(level, logging.INFO))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(file_handler)
    logger.addHandler(signal_handler)

    # aioftp logs every command; only its problems belong in our file.
    aioftp_logger = logging.getLogger("aioftp")
    aioftp_logger.setLevel(logging.WARNING)
    aioftp_logger.propagate = False
    for handler in list(aioftp_logger.handlers):
        aioftp_logger.removeHandler(handler)
    aioftp_logger.addHandler(file_handler)

    return logger, emitter
