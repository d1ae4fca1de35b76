from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class FallbackPolicy(str, Enum):
    SKIP = "skip"
    GUESS = "guess"

    @classmethod
    def from_value(cls, value: object) -> FallbackPolicy:
        cleaned = str(value or "").strip().lower()
        for policy in cls:
            if policy.value == cleaned:
                return policy
        return cls.SKIP


@dataclass(slots=True)
class Entry:
    name: str
    is_directory: bool
    size_bytes: int = 0
    modified: str = ""
    type_guessed: bool = False

    @property
    def type_label(self) -> str:
        return "Directory" if self.is_directory else "File"


@dataclass(slots=True)
class ListingParseResult:
    entries: list[Entry] = field(default_factory=list)
    skipped_lines: list[str] = field(default_factory=list)


_UNITS = (
    (1024 * 1024 * 1024, "GB"),
    (1024 * 1024, "MB"),
    (1024, "KB"),
)


def format_size(size_bytes: int) -> str:
    size = max(0, int(size_bytes))
    for threshold, unit in _UNITS:
        if size >= threshold:
            return f"{size / threshold:.2f} {unit}"
    return f"{size} B"


def format_progress(received: int, total: int) -> str:
    received = max(0, int(received))
    total = int(total)

    divisor = 1
    unit = "B"
    for threshold, candidate in _UNITS:
        if received >= threshold:
            divisor = threshold
            unit = candidate
            break

    if divisor == 1:
        total_text = str(total) if total > 0 else "?"
        return f"{received} / {total_text} {unit}"

    total_text = f"{total / divisor:.2f}" if total > 0 else "?"
    return f"{received / divisor:.2f} / {total_text} {unit}"
