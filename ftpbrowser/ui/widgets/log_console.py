from __future__ import annotations

from PySide6.QtWidgets import QGroupBox, QHBoxLayout, QPlainTextEdit, QPushButton, QVBoxLayout, QWidget

from core.logging import LogEmitter
from i18n.i18n import get_i18n, tr


class LogConsole(QWidget):
    MAX_LINES = 2000

    def __init__(self, emitter: LogEmitter) -> None:
        super().__init__()
        self._emitter = emitter

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._group = QGroupBox()
        group_layout = QVBoxLayout(self._group)

        self._text_edit = QPlainTextEdit()
        self._text_edit.setReadOnly(True)
        self._text_edit.setMaximumBlockCount(self.MAX_LINES)
        group_layout.addWidget(self._text_edit)

        button_row = QHBoxLayout()
        button_row.addStretch(1)
        self._clear_button = QPushButton()
        self._clear_button.clicked.connect(self._text_edit.clear)
        button_row.addWidget(self._clear_button)
        group_layout.addLayout(button_row)

        layout.addWidget(self._group)

        self._emitter.log_message.connect(self.append_log)
        get_i18n().language_changed.connect(self.retranslate_ui)
        self.retranslate_ui()

    def append_log(self, message: str) -> None:
        self._text_edit.appendPlainText(message)
        scrollbar = self._text_edit.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def retranslate_ui(self, _language: str | None = None) -> None:
        self._group.setTitle(tr("log.title"))
        self._clear_button.setText(tr("log.clear"))
