from __future__ import annotations

import logging
import re
from typing import Iterable

from core.listing.models import Entry, FallbackPolicy, ListingParseResult


class ListingParser:
    """Turns raw directory-listing lines into :class:`Entry` records.

    Listing text is not self-describing, so every line is tried against the
    known dialects in a fixed order and the first match wins:

    1. Unix long format (``ls -l`` style, as sent by most servers).
    2. Windows/DOS format (``MM-DD-YY HH:MMAM <DIR> name``).
    3. Degenerate Unix format: a ``d``/``-`` prefixed line whose last field is
       taken as the name, without size or date.
    4. The fallback policy, for lines nothing else recognised.

    ``.`` and ``..`` never appear in the result, and ``total N`` summary lines
    are dropped before any dialect is tried.
    """

    UNIX_RE = re.compile(
        r"^(?P<type>[-dlbcps])(?P<perms>[rwxsStTl-]{9})[+@.]?\s+"
        r"(?P<links>\d+)\s+"
        r"(?P<owner>\S+)\s+"
        r"(?:(?P<group>\S+)\s+)?"
        r"(?P<size>\d+)\s+"
        r"(?P<modified>\w+\s+\d+\s+[\d:]+)\s+"
        r"(?P<name>.+)$"
    )
    WINDOWS_RE = re.compile(
        r"^(?P<date>\d{2}-\d{2}-(?:\d{4}|\d{2}))\s+"
        r"(?P<time>\d{1,2}:\d{2}\s?[AaPp][Mm])\s+"
        r"(?P<size>(?i:<DIR>)|\d+)\s+"
        r"(?P<name>.+)$"
    )
    DEGENERATE_RE = re.compile(r"^(?P<type>[d-])\S+\s+(?:.*\s+)?(?P<name>\S+)$")

    _TOTAL_RE = re.compile(r"^total\s+\d+$", re.IGNORECASE)
    _CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
    _LINK_ARROW = " -> "

    def __init__(
        self,
        fallback_policy: FallbackPolicy = FallbackPolicy.SKIP,
        logger: logging.Logger | None = None,
    ) -> None:
        self._fallback_policy = fallback_policy
        self._logger = logger or logging.getLogger("ftpbrowser.listing")

    @property
    def fallback_policy(self) -> FallbackPolicy:
        return self._fallback_policy

    def parse(self, lines: Iterable[str]) -> list[Entry]:
        return self.parse_with_report(lines).entries

    def parse_with_report(self, lines: Iterable[str]) -> ListingParseResult:
        result = ListingParseResult()

        for raw_line in lines:
            line = raw_line.rstrip("\r\n")
            if line.strip() == "" or self._TOTAL_RE.match(line.strip()):
                continue

            entry = self.parse_line(line)
            if entry is None:
                if self._is_dot_entry(line):
                    continue
                result.skipped_lines.append(line)
                self._logger.debug("Unrecognized listing line skipped: %r", line)
                continue

            result.entries.append(entry)

        if result.skipped_lines:
            self._logger.info(
                "Listing parsed: entries=%s skipped=%s",
                len(result.entries),
                len(result.skipped_lines),
            )
        return result

    def parse_line(self, line: str) -> Entry | None:
        """Return the entry described by one line, or ``None`` when the line is
        unrecognised, names ``.``/``..`` or yields an empty name."""
        for matcher in (self._match_unix, self._match_windows, self._match_degenerate, self._match_fallback):
            matched, entry = matcher(line)
            if matched:
                return entry
        return None

    def _match_unix(self, line: str) -> tuple[bool, Entry | None]:
        match = self.UNIX_RE.match(line)
        if match is None:
            return False, None

        entry_type = match.group("type")
        name = match.group("name")
        if entry_type == "l" and self._LINK_ARROW in name:
            name = name.split(self._LINK_ARROW, 1)[0]

        is_directory = entry_type == "d"
        return True, self._build_entry(
            name=name,
            is_directory=is_directory,
            size_bytes=0 if is_directory else int(match.group("size")),
            modified=" ".join(match.group("modified").split()),
        )

    def _match_windows(self, line: str) -> tuple[bool, Entry | None]:
        match = self.WINDOWS_RE.match(line)
        if match is None:
            return False, None

        size_token = match.group("size")
        is_directory = size_token.upper() == "<DIR>"
        return True, self._build_entry(
            name=match.group("name"),
            is_directory=is_directory,
            size_bytes=0 if is_directory else int(size_token),
            modified=f"{match.group('date')} {match.group('time')}",
        )

    def _match_degenerate(self, line: str) -> tuple[bool, Entry | None]:
        match = self.DEGENERATE_RE.match(line)
        if match is None:
            return False, None

        return True, self._build_entry(
            name=match.group("name"),
            is_directory=match.group("type") == "d",
        )

    def _match_fallback(self, line: str) -> tuple[bool, Entry | None]:
        if self._fallback_policy != FallbackPolicy.GUESS:
            return False, None

        parts = line.split()
        if not parts:
            return False, None

        # Unreliable: a dot in the name is the only hint left.
        name = parts[-1]
        return True, self._build_entry(
            name=name,
            is_directory="." not in name,
            type_guessed=True,
        )

    def _build_entry(
        self,
        name: str,
        is_directory: bool,
        size_bytes: int = 0,
        modified: str = "",
        type_guessed: bool = False,
    ) -> Entry | None:
        cleaned = self.clean_name(name)
        if cleaned in {"", ".", ".."}:
            return None

        return Entry(
            name=cleaned,
            is_directory=is_directory,
            size_bytes=max(0, size_bytes),
            modified=modified,
            type_guessed=type_guessed,
        )

    def _is_dot_entry(self, line: str) -> bool:
        parts = line.split()
        return bool(parts) and self.clean_name(parts[-1]) in {".", ".."}

    @classmethod
    def clean_name(cls, name: str) -> str:
        return cls._CONTROL_RE.sub("", name).strip()


def parse(lines: Iterable[str], fallback_policy: FallbackPolicy = FallbackPolicy.SKIP) -> list[Entry]:
    return ListingParser(fallback_policy=fallback_policy).parse(lines)
