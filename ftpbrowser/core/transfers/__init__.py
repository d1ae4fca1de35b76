from core.transfers.directory_walker import DirectoryWalker
from core.transfers.download_manager import DownloadManager
from core.transfers.task_queue import TransferTaskQueue
from core.transfers.transfer_driver import TransferDriver
from core.transfers.transfer_models import (
    DrainSummary,
    TransferOutcome,
    TransferTask,
    WalkFailure,
    WalkFailureKind,
    WalkResult,
)
from core.transfers.walk_worker import WalkWorker

__all__ = [
    "DirectoryWalker",
    "DownloadManager",
    "DrainSummary",
    "TransferDriver",
    "TransferOutcome",
    "TransferTask",
    "TransferTaskQueue",
    "WalkFailure",
    "WalkFailureKind",
    "WalkResult",
    "WalkWorker",
]
