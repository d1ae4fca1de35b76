from __future__ import annotations

from core.listing.models import FallbackPolicy
from core.listing.parser import ListingParser, parse


def test_unix_directory_and_file() -> None:
    entries = parse(
        [
            "drwxr-xr-x    2 user     group        4096 Jan 01 12:00 docs",
            "-rw-r--r--    1 user     group        1234 Feb 13  2021 notes.txt",
        ]
    )

    assert [entry.name for entry in entries] == ["docs", "notes.txt"]
    assert entries[0].is_directory is True
    assert entries[0].size_bytes == 0
    assert entries[0].modified == "Jan 01 12:00"
    assert entries[1].is_directory is False
    assert entries[1].size_bytes == 1234
    assert entries[1].modified == "Feb 13 2021"


def test_unix_line_without_group_column() -> None:
    entries = parse(["-rw-r--r--   1 owner   512 Mar 3 09:15 small.bin"])

    assert len(entries) == 1
    assert entries[0].name == "small.bin"
    assert entries[0].size_bytes == 512


def test_names_with_spaces_are_kept() -> None:
    entries = parse(["-rw-r--r-- 1 user group 10 Jan 1 12:00 my holiday photo.jpg"])

    assert entries[0].name == "my holiday photo.jpg"


def test_windows_dir_and_file() -> None:
    entries = parse(
        [
            "01-15-24  03:22PM       <DIR>          Reports",
            "01-15-24  03:25PM              20480 budget.xlsx",
        ]
    )

    assert entries[0].name == "Reports"
    assert entries[0].is_directory is True
    assert entries[0].modified == "01-15-24 03:22PM"
    assert entries[1].name == "budget.xlsx"
    assert entries[1].is_directory is False
    assert entries[1].size_bytes == 20480


def test_windows_dir_marker_is_case_insensitive() -> None:
    entries = parse(["01-15-24  03:22PM       <dir>          lower"])

    assert len(entries) == 1
    assert entries[0].name == "lower"
    assert entries[0].is_directory is True
    assert entries[0].size_bytes == 0


def test_dot_entries_never_returned() -> None:
    parser = ListingParser(fallback_policy=FallbackPolicy.GUESS)
    result = parser.parse_with_report(
        [
            "drwxr-xr-x 2 user group 4096 Jan 1 12:00 .",
            "drwxr-xr-x 2 user group 4096 Jan 1 12:00 ..",
            "01-15-24  03:22PM       <DIR>          ..",
            "-rw-r--r-- 1 user group 3 Jan 1 12:00 .hidden",
        ]
    )

    assert [entry.name for entry in result.entries] == [".hidden"]
    assert result.skipped_lines == []


def test_carriage_returns_are_stripped() -> None:
    entries = parse(["-rw-r--r-- 1 user group 7 Jan 1 12:00 file.txt\r\n"])

    assert entries[0].name == "file.txt"


def test_total_line_and_blank_lines_dropped() -> None:
    parser = ListingParser()
    result = parser.parse_with_report(["total 12", "", "   ", "drwxr-xr-x 2 u g 4096 Jan 1 12:00 a"])

    assert [entry.name for entry in result.entries] == ["a"]
    assert result.skipped_lines == []


def test_degenerate_unix_line() -> None:
    entries = parse(["drwxr-xr-x  folder", "-rw-r--r--  data.csv"])

    assert entries[0].name == "folder"
    assert entries[0].is_directory is True
    assert entries[1].name == "data.csv"
    assert entries[1].is_directory is False
    assert entries[1].size_bytes == 0


def test_symlink_treated_as_file_without_target() -> None:
    entries = parse(["lrwxrwxrwx 1 user group 11 Jan 1 12:00 current -> release-1.2"])

    assert entries[0].name == "current"
    assert entries[0].is_directory is False
    assert entries[0].size_bytes == 11


def test_unrecognized_lines_skipped_by_default() -> None:
    parser = ListingParser()
    result = parser.parse_with_report(["this is not a listing line", "readme.txt"])

    assert result.entries == []
    assert result.skipped_lines == ["this is not a listing line", "readme.txt"]


def test_guess_policy_uses_dot_heuristic() -> None:
    entries = parse(["something odd archive", "mystery readme.txt"], fallback_policy=FallbackPolicy.GUESS)

    assert entries[0].name == "archive"
    assert entries[0].is_directory is True
    assert entries[0].type_guessed is True
    assert entries[1].name == "readme.txt"
    assert entries[1].is_directory is False
    assert entries[1].type_guessed is True


def test_server_order_preserved() -> None:
    entries = parse(
        [
            "-rw-r--r-- 1 u g 1 Jan 1 12:00 zeta.txt",
            "drwxr-xr-x 2 u g 4096 Jan 1 12:00 alpha",
            "-rw-r--r-- 1 u g 1 Jan 1 12:00 beta.txt",
        ]
    )

    assert [entry.name for entry in entries] == ["zeta.txt", "alpha", "beta.txt"]


def test_fallback_policy_from_value() -> None:
    assert FallbackPolicy.from_value("GUESS") is FallbackPolicy.GUESS
    assert FallbackPolicy.from_value("skip") is FallbackPolicy.SKIP
    assert FallbackPolicy.from_value("nonsense") is FallbackPolicy.SKIP
    assert FallbackPolicy.from_value(None) is FallbackPolicy.SKIP


def test_reference_lines() -> None:
    unix_dir = parse(["drwxr-xr-x 2 root root 4096 Jun 12 12:00 pub"])
    unix_file = parse(["-rw-r--r-- 1 ftp ftp 1024 Jun 12 12:00 readme.txt"])
    windows_dir = parse(["06-12-23 12:00PM <DIR> images"])

    assert (unix_dir[0].name, unix_dir[0].is_directory, unix_dir[0].modified) == ("pub", True, "Jun 12 12:00")
    assert (unix_file[0].name, unix_file[0].is_directory, unix_file[0].size_bytes) == ("readme.txt", False, 1024)
    assert (windows_dir[0].name, windows_dir[0].is_directory) == ("images", True)
