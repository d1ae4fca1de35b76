from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QModelIndex, QThread, Qt
from PySide6.QtGui import QCloseEvent, QStandardItem, QStandardItemModel
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QSpinBox,
    QSplitter,
    QStyle,
    QTreeView,
    QVBoxLayout,
    QWidget,
)

from core.browser.browser_service import RemoteBrowser
from core.browser.listing_worker import ListingWorker
from core.browser.session import BrowserSession
from core.config import AppConfig
from core.listing import remote_paths
from core.listing.models import Entry, format_progress, format_size
from core.logging import LogEmitter
from core.profiles.models import Profile
from core.remote.client_base import RemoteClient
from core.remote.client_factory import create_client
from core.remote.connect_worker import ConnectWorker
from core.transfers.download_manager import DownloadManager
from core.transfers.transfer_models import DrainSummary, TransferOutcome, TransferTask, WalkResult
from i18n.i18n import get_i18n, tr
from ui.widgets.log_console import LogConsole

_ENTRY_ROLE = Qt.ItemDataRole.UserRole + 1
_PARENT_ROW_NAME = ".."


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig, logger: logging.Logger, log_emitter: LogEmitter) -> None:
        super().__init__()
        self._config = config
        self._logger = logger

        self._session = BrowserSession()
        self._client: RemoteClient | None = None
        self._pending_client: RemoteClient | None = None
        self._browser: RemoteBrowser | None = None
        self._downloads: DownloadManager | None = None

        self._connect_thread: QThread | None = None
        self._connect_worker: ConnectWorker | None = None
        self._listing_thread: QThread | None = None
        self._listing_worker: ListingWorker | None = None
        self._listing_mode = "visit"

        self.resize(1000, 720)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(8)

        connection_row = QHBoxLayout()
        self._host_label = QLabel()
        self._host_edit = QLineEdit(self._config.get_host())
        self._port_label = QLabel()
        self._port_spin = QSpinBox()
        self._port_spin.setRange(1, 65535)
        self._port_spin.setValue(self._config.get_port())
        self._protocol_combo = QComboBox()
        self._protocol_combo.addItem("FTP", "ftp")
        self._protocol_combo.addItem("FTPS", "ftps")
        self._protocol_combo.setCurrentIndex(max(0, self._protocol_combo.findData(self._config.get_protocol())))
        self._username_label = QLabel()
        self._username_edit = QLineEdit(self._config.get_username())
        self._password_label = QLabel()
        self._password_edit = QLineEdit()
        self._password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self._connect_button = QPushButton()
        self._disconnect_button = QPushButton()

        for widget in (
            self._host_label,
            self._host_edit,
            self._port_label,
            self._port_spin,
            self._protocol_combo,
            self._username_label,
            self._username_edit,
            self._password_label,
            self._password_edit,
            self._connect_button,
            self._disconnect_button,
        ):
            connection_row.addWidget(widget)
        layout.addLayout(connection_row)

        path_row = QHBoxLayout()
        self._back_button = QPushButton()
        self._refresh_button = QPushButton()
        self._path_label = QLabel()
        self._path_edit = QLineEdit()
        self._path_edit.setReadOnly(True)
        path_row.addWidget(self._back_button)
        path_row.addWidget(self._refresh_button)
        path_row.addWidget(self._path_label)
        path_row.addWidget(self._path_edit, 1)
        layout.addLayout(path_row)

        self._file_model = QStandardItemModel(self)
        self._file_view = QTreeView()
        self._file_view.setModel(self._file_model)
        self._file_view.setRootIsDecorated(False)
        self._file_view.setAlternatingRowColors(True)
        self._file_view.setUniformRowHeights(True)

        self._log_console = LogConsole(log_emitter)

        splitter = QSplitter(Qt.Orientation.Vertical)
        splitter.addWidget(self._file_view)
        splitter.addWidget(self._log_console)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, 1)

        download_row = QHBoxLayout()
        self._download_button = QPushButton()
        self._cancel_button = QPushButton()
        self._status_label = QLabel()
        self._progress_bar = QProgressBar()
        self._progress_bar.setRange(0, 100)
        self._progress_bar.setValue(0)
        download_row.addWidget(self._download_button)
        download_row.addWidget(self._cancel_button)
        download_row.addWidget(self._status_label, 1)
        download_row.addWidget(self._progress_bar, 1)
        layout.addLayout(download_row)

        self._connect_button.clicked.connect(self._on_connect_clicked)
        self._disconnect_button.clicked.connect(self._on_disconnect_clicked)
        self._back_button.clicked.connect(self._on_back_clicked)
        self._refresh_button.clicked.connect(self._on_refresh_clicked)
        self._file_view.doubleClicked.connect(self._on_item_double_clicked)
        self._download_button.clicked.connect(self._on_download_clicked)
        self._cancel_button.clicked.connect(self._on_cancel_clicked)
        get_i18n().language_changed.connect(self.retranslate_ui)

        self.retranslate_ui()
        self._update_button_states()

    def retranslate_ui(self, _language: str | None = None) -> None:
        self.setWindowTitle(tr("app.title"))
        self._host_label.setText(tr("connection.host"))
        self._port_label.setText(tr("connection.port"))
        self._username_label.setText(tr("connection.username"))
        self._password_label.setText(tr("connection.password"))
        self._connect_button.setText(tr("connection.connect"))
        self._disconnect_button.setText(tr("connection.disconnect"))
        self._back_button.setText(tr("browser.back"))
        self._refresh_button.setText(tr("browser.refresh"))
        self._path_label.setText(tr("browser.current_path"))
        self._download_button.setText(tr("downloads.download"))
        self._cancel_button.setText(tr("downloads.cancel"))
        self._file_model.setHorizontalHeaderLabels(
            [
                tr("browser.column.name"),
                tr("browser.column.size"),
                tr("browser.column.type"),
                tr("browser.column.date"),
            ]
        )
        self._file_view.setColumnWidth(0, 260)
        self._file_view.setColumnWidth(1, 100)
        self._file_view.setColumnWidth(2, 90)

    def _update_button_states(self) -> None:
        connected = self._session.connected
        connecting = self._connect_thread is not None
        listing = self._listing_thread is not None
        busy = self._downloads is not None and self._downloads.is_busy()

        for widget in (self._host_edit, self._port_spin, self._protocol_combo, self._username_edit, self._password_edit):
            widget.setEnabled(not connected and not connecting)
        self._connect_button.setEnabled(not connected and not connecting)
        self._disconnect_button.setEnabled(connected)
        self._back_button.setEnabled(connected and not listing)
        self._refresh_button.setEnabled(connected and not listing)
        self._download_button.setEnabled(connected)
        self._cancel_button.setEnabled(busy)

    def _on_connect_clicked(self) -> None:
        if self._connect_thread is not None:
            return

        host = self._host_edit.text().strip()
        if host == "":
            self._logger.warning(tr("connection.log.host_required"))
            return

        profile = Profile(
            host=host,
            port=self._port_spin.value(),
            username=self._username_edit.text().strip() or "anonymous",
            protocol=str(self._protocol_combo.currentData()),
            remote_path=self._config.get_remote_path(),
        )
        self._config.set_connection(profile.host, profile.port, profile.username, profile.protocol)

        try:
            client = create_client(
                profile=profile,
                password=self._password_edit.text(),
                logger=self._logger,
                timeout_seconds=self._config.get_timeout_seconds(),
            )
        except ValueError as error:
            self._logger.error(tr("connection.log.failed", error=str(error)))
            return

        self._logger.info(tr("connection.log.connecting", target=profile.display_name))

        thread = QThread(self)
        worker = ConnectWorker(client=client, logger=self._logger)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_connect_finished)
        worker.failed.connect(self._on_connect_failed)
        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(self._on_connect_closed)

        self._pending_client = client
        self._connect_thread = thread
        self._connect_worker = worker
        self._update_button_states()
        thread.start()

    def _on_connect_finished(self, success: bool, message: str) -> None:
        client = self._pending_client
        self._pending_client = None
        if not success or client is None:
            self._logger.error(tr("connection.log.failed", error=message))
            return

        self._client = client
        self._browser = RemoteBrowser(
            client=client,
            fallback_policy=self._config.get_listing_fallback(),
            logger=self._logger.getChild("browser"),
        )
        self._downloads = DownloadManager(
            client=client,
            logger=self._logger.getChild("transfers"),
            fallback_policy=self._config.get_listing_fallback(),
            tick_interval_ms=self._config.get_tick_interval_ms(),
            parent=self,
        )
        self._downloads.task_changed.connect(self._on_download_task_changed)
        self._downloads.progress.connect(self._on_download_progress)
        self._downloads.task_finished.connect(self._on_download_task_finished)
        self._downloads.walk_finished.connect(self._on_walk_finished)
        self._downloads.all_finished.connect(self._on_downloads_finished)
        self._downloads.busy_changed.connect(self._on_busy_changed)

        self._session.set_connected(True)
        self._logger.info(tr("connection.log.connected"))
        self._start_listing(self._config.get_remote_path(), mode="refresh")

    def _on_busy_changed(self, _busy: bool) -> None:
        self._update_button_states()

    def _on_connect_failed(self, message: str) -> None:
        self._pending_client = None
        self._logger.error(tr("connection.log.failed", error=message))

    def _on_connect_closed(self) -> None:
        self._connect_thread = None
        self._connect_worker = None
        self._update_button_states()

    def _on_disconnect_clicked(self) -> None:
        if self._downloads is not None:
            self._downloads.shutdown()
            self._downloads.deleteLater()
            self._downloads = None
        self._client = None
        self._browser = None

        self._session.set_connected(False)
        self._file_model.removeRows(0, self._file_model.rowCount())
        self._path_edit.setText(self._session.current_path)
        self._progress_bar.setValue(0)
        self._status_label.clear()
        self._logger.info(tr("connection.log.disconnected"))
        self._update_button_states()

    def _on_back_clicked(self) -> None:
        if not self._session.connected:
            return
        target = self._session.back_target()
        if target is None:
            return
        self._start_listing(target, mode="back")

    def _on_refresh_clicked(self) -> None:
        if self._session.connected:
            self._start_listing(self._session.current_path, mode="refresh")

    def _on_item_double_clicked(self, index: QModelIndex) -> None:
        if not self._session.connected or not index.isValid():
            return

        name_item = self._file_model.item(index.row(), 0)
        if name_item is None:
            return

        if name_item.text() == _PARENT_ROW_NAME:
            self._on_back_clicked()
            return

        entry = name_item.data(_ENTRY_ROLE)
        if not isinstance(entry, Entry):
            return

        if entry.is_directory:
            self._start_listing(self._session.child_path(entry.name), mode="visit")
            return

        self._logger.info(
            tr(
                "browser.log.file_info",
                name=entry.name,
                size=format_size(entry.size_bytes),
                date=entry.modified or "-",
            )
        )

    def _start_listing(self, remote_path: str, mode: str) -> None:
        if self._listing_thread is not None or self._browser is None:
            return

        self._listing_mode = mode
        self._logger.info(tr("browser.log.listing", path=remote_path))

        thread = QThread(self)
        worker = ListingWorker(browser=self._browser, remote_path=remote_path)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_listing_finished)
        worker.failed.connect(self._on_listing_failed)
        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(self._on_listing_closed)

        self._listing_thread = thread
        self._listing_worker = worker
        self._update_button_states()
        thread.start()

    def _on_listing_finished(self, remote_path: str, entries: object) -> None:
        if not self._session.connected or not isinstance(entries, list):
            return

        if self._listing_mode == "back":
            self._session.go_back()
        else:
            self._session.visit(remote_path, remember=self._listing_mode == "visit")

        self._populate_entries(entries)
        self._path_edit.setText(self._session.current_path)

    def _on_listing_failed(self, remote_path: str, message: str) -> None:
        self._logger.error(tr("browser.log.listing_failed", path=remote_path, error=message))

    def _on_listing_closed(self) -> None:
        self._listing_thread = None
        self._listing_worker = None
        self._update_button_states()

    def _populate_entries(self, entries: list[Entry]) -> None:
        self._file_model.removeRows(0, self._file_model.rowCount())

        if not self._session.at_root:
            parent_item = QStandardItem(_PARENT_ROW_NAME)
            parent_item.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogToParent))
            parent_row = [parent_item, QStandardItem(""), QStandardItem(tr("browser.type.directory")), QStandardItem("")]
            for item in parent_row:
                item.setEditable(False)
            self._file_model.appendRow(parent_row)

        dir_icon = self.style().standardIcon(QStyle.StandardPixmap.SP_DirIcon)
        file_icon = self.style().standardIcon(QStyle.StandardPixmap.SP_FileIcon)

        for entry in entries:
            name_item = QStandardItem(entry.name)
            name_item.setIcon(dir_icon if entry.is_directory else file_icon)
            name_item.setData(entry, _ENTRY_ROLE)
            size_item = QStandardItem("" if entry.is_directory else format_size(entry.size_bytes))
            type_item = QStandardItem(
                tr("browser.type.directory") if entry.is_directory else tr("browser.type.file")
            )
            row = [name_item, size_item, type_item, QStandardItem(entry.modified)]
            for item in row:
                item.setEditable(False)
            self._file_model.appendRow(row)

    def _selected_entry(self) -> Entry | None:
        index = self._file_view.currentIndex()
        if not index.isValid():
            return None
        name_item = self._file_model.item(index.row(), 0)
        if name_item is None:
            return None
        entry = name_item.data(_ENTRY_ROLE)
        return entry if isinstance(entry, Entry) else None

    def _on_download_clicked(self) -> None:
        if not self._session.connected or self._downloads is None:
            return

        entry = self._selected_entry()
        if entry is None:
            QMessageBox.warning(self, tr("downloads.dialog.warning_title"), tr("downloads.dialog.select_first"))
            return

        remote_path = self._session.child_path(entry.name) if entry.is_directory else self._file_remote_path(entry)
        download_dir = self._config.get_download_dir()

        if entry.is_directory:
            chosen = QFileDialog.getExistingDirectory(self, tr("downloads.dialog.choose_dir"), download_dir)
            if chosen == "":
                return
            self._config.set_download_dir(chosen)
            local_path = Path(chosen) / entry.name
        else:
            chosen, _filter = QFileDialog.getSaveFileName(
                self,
                tr("downloads.dialog.save_file"),
                str(Path(download_dir) / entry.name),
            )
            if chosen == "":
                return
            local_path = Path(chosen)
            self._config.set_download_dir(str(local_path.parent))

        self._logger.info(tr("downloads.log.queued", remote=remote_path, local=str(local_path)))
        self._downloads.download_selection(
            remote_path=remote_path,
            local_path=local_path,
            is_directory=entry.is_directory,
            display_name=entry.name,
            size_hint=entry.size_bytes,
        )
        self._update_button_states()

    def _file_remote_path(self, entry: Entry) -> str:
        return remote_paths.join(self._session.current_path, entry.name)

    def _on_cancel_clicked(self) -> None:
        if self._downloads is None:
            return
        self._downloads.cancel_all()
        self._logger.info(tr("downloads.log.cancel_requested"))

    def _on_download_task_changed(self, task: object) -> None:
        if not isinstance(task, TransferTask):
            return
        self._progress_bar.setValue(0)
        self._status_label.setText(tr("downloads.status.current", name=task.display_name))

    def _on_download_progress(self, received: object, total: object) -> None:
        if self._downloads is None:
            return
        received_bytes = int(received)
        total_bytes = int(total)
        if total_bytes > 0:
            percent = min(100, int(received_bytes * 100 / total_bytes))
        else:
            percent = min(99, received_bytes // 1024)
        self._progress_bar.setValue(percent)
        self._status_label.setText(
            tr(
                "downloads.status.progress",
                name=self._downloads.current_label(),
                progress=format_progress(received_bytes, total_bytes),
            )
        )

    def _on_download_task_finished(self, outcome: object) -> None:
        if not isinstance(outcome, TransferOutcome):
            return
        task = outcome.task
        if outcome.success:
            if not task.is_directory:
                self._logger.info(tr("downloads.log.file_done", name=task.display_name))
        elif outcome.cancelled:
            self._logger.warning(tr("downloads.log.file_cancelled", name=task.display_name))
        else:
            self._logger.error(tr("downloads.log.task_failed", name=task.display_name, error=outcome.message))

    def _on_walk_finished(self, result: object) -> None:
        if not isinstance(result, WalkResult):
            return
        if result.success:
            self._logger.info(
                tr("downloads.log.walk_done", path=result.remote_root, directories=result.directories, files=result.files)
            )
        elif not result.cancelled:
            self._logger.warning(
                tr("downloads.log.walk_partial", path=result.remote_root, failures=len(result.failures))
            )

    def _on_downloads_finished(self, summary: object) -> None:
        if not isinstance(summary, DrainSummary):
            return
        if summary.cancelled:
            self._status_label.setText(tr("downloads.status.cancelled"))
        else:
            self._progress_bar.setValue(100)
            self._status_label.setText(tr("downloads.status.all_done"))
        self._logger.info(
            tr(
                "downloads.log.all_done",
                succeeded=summary.succeeded,
                failed=summary.failed,
                size=format_size(summary.bytes_received),
            )
        )
        self._update_button_states()

    def closeEvent(self, event: QCloseEvent) -> None:
        if self._downloads is not None:
            self._downloads.shutdown()
        for thread in (self._listing_thread, self._connect_thread):
            if thread is not None:
                thread.quit()
                thread.wait()
        super().closeEvent(event)
