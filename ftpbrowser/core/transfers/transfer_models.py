from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from core.listing import remote_paths


class WalkFailureKind(str, Enum):
    LISTING = "listing"
    LOCAL_DIR = "local_dir"
    DEPTH_LIMIT = "depth_limit"


@dataclass(slots=True)
class TransferTask:
    remote_path: str
    local_path: Path
    is_directory: bool
    size_bytes: int = 0
    display_name: str = ""

    def __post_init__(self) -> None:
        self.remote_path = remote_paths.normalize(self.remote_path, directory=self.is_directory)
        self.local_path = Path(self.local_path)
        self.size_bytes = max(0, int(self.size_bytes))
        if self.display_name.strip() == "":
            self.display_name = remote_paths.last_component(self.remote_path)


@dataclass(slots=True)
class WalkFailure:
    remote_path: str
    local_path: Path
    kind: WalkFailureKind
    message: str


@dataclass(slots=True)
class WalkResult:
    remote_root: str
    directories: int = 0
    files: int = 0
    failures: list[WalkFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.failures and not self.cancelled


@dataclass(slots=True)
class TransferOutcome:
    task: TransferTask
    success: bool
    message: str
    bytes_received: int = 0
    cancelled: bool = False


@dataclass(slots=True)
class DrainSummary:
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    bytes_received: int = 0
    cancelled: bool = False

    def record(self, outcome: TransferOutcome) -> None:
        self.attempted += 1
        self.bytes_received += outcome.bytes_received
        if outcome.success:
            self.succeeded += 1
        elif not outcome.cancelled:
            self.failed += 1
