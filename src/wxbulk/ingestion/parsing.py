"""Cell converters and a line reader shared by the QCLCD file parsers."""

import csv
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterator

MISSING = "M"
TRACE = "T"
VARIABLE = "VR"

# QCLCD files are published as US-ASCII
ENCODING = "ascii"


def parse_optional_float(value: str) -> float | None:
    """Parse a numeric cell; blank and 'M' (missing) become None."""
    value = value.strip()
    if not value or value == MISSING:
        return None
    return float(value)


def parse_optional_int(value: str) -> int | None:
    value = value.strip()
    if not value or value == MISSING:
        return None
    return int(value)


def parse_precipitation(value: str) -> float | None:
    """Like parse_optional_float, but 'T' (trace amount) counts as 0.0."""
    if value.strip() == TRACE:
        return 0.0
    return parse_optional_float(value)


def parse_wind_direction(value: str) -> int | None:
    """Degrees from north; 'VR' (variable) has no direction."""
    if value.strip() == VARIABLE:
        return None
    return parse_optional_int(value)


def parse_date(value: str) -> date:
    """Convert YYYYMMDD to a date."""
    return datetime.strptime(value.strip(), "%Y%m%d").date()


def parse_time(value: str) -> time:
    """Convert HHMM to a time. Leading zeros may be dropped (e.g. '51' -> 00:51)."""
    value = value.strip()
    if not value.isdigit() or len(value) > 4:
        raise ValueError(f"invalid time {value!r}")
    value = value.zfill(4)
    return time(int(value[:2]), int(value[2:]))


def open_records(path: str | Path, delimiter: str) -> Iterator[tuple[int, list[str]]]:
    """Open a delimited file and return an iterator over (line number, cells).

    The file is opened immediately, so an unreadable path raises OSError at
    call time rather than on first iteration. The header line is skipped and
    blank lines are ignored.
    """
    f = open(path, newline="", encoding=ENCODING, errors="replace")
    return _iter_records(f, delimiter)


def _iter_records(f, delimiter: str) -> Iterator[tuple[int, list[str]]]:
    with f:
        reader = csv.reader(f, delimiter=delimiter)
        next(reader, None)  # skip header
        for line_num, row in enumerate(reader, start=2):
            if not row or all(cell.strip() == "" for cell in row):
                continue
            yield line_num, row
