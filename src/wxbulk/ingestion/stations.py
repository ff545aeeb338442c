"""Station metadata: parsing and the in-memory WBAN lookup table."""

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from wxbulk.errors import ParseSkip
from wxbulk.ingestion.parsing import open_records, parse_optional_float, parse_optional_int

logger = logging.getLogger(__name__)

STATION_DELIMITER = "|"
STATION_FIELD_COUNT = 15


@dataclass(frozen=True)
class Station:
    wban: str
    wmo: str
    call_sign: str
    climate_division_code: str
    climate_division_state_code: str
    climate_division_station_code: str
    name: str
    state: str
    location: str
    latitude: float | None
    longitude: float | None
    ground_height: int | None
    station_height: int | None
    barometer: int | None
    time_zone: int | None


def parse_station(row: list[str], line_num: int = 0) -> Station:
    """Parse one pipe-delimited station record.

    Raises ParseSkip if the record is short, has no WBAN, or carries
    non-numeric coordinates or heights.
    """
    if len(row) < STATION_FIELD_COUNT:
        raise ParseSkip(line_num, f"expected {STATION_FIELD_COUNT} fields, got {len(row)}")
    cells = [cell.strip() for cell in row]
    if not cells[0]:
        raise ParseSkip(line_num, "missing WBAN")
    try:
        return Station(
            wban=cells[0],
            wmo=cells[1],
            call_sign=cells[2],
            climate_division_code=cells[3],
            climate_division_state_code=cells[4],
            climate_division_station_code=cells[5],
            name=cells[6],
            state=cells[7],
            location=cells[8],
            latitude=parse_optional_float(cells[9]),
            longitude=parse_optional_float(cells[10]),
            ground_height=parse_optional_int(cells[11]),
            station_height=parse_optional_int(cells[12]),
            barometer=parse_optional_int(cells[13]),
            time_zone=parse_optional_int(cells[14]),
        )
    except ValueError as e:
        raise ParseSkip(line_num, str(e)) from e


def load_station_index(path: str | Path) -> Mapping[str, Station]:
    """Load a QCLCD station file into a read-only mapping keyed by WBAN.

    Malformed records are skipped. If a WBAN appears twice the later record
    wins. Raises OSError if the file cannot be opened.
    """
    stations: dict[str, Station] = {}
    skipped = 0
    for line_num, row in open_records(path, STATION_DELIMITER):
        try:
            station = parse_station(row, line_num)
        except ParseSkip as e:
            skipped += 1
            logger.warning("Skipping malformed station record: %s", e)
            continue
        if station.wban in stations:
            logger.warning("Duplicate WBAN %s at line %d replaces earlier record", station.wban, line_num)
        stations[station.wban] = station

    logger.info("Loaded %d stations from %s (%d skipped)", len(stations), path, skipped)
    return MappingProxyType(stations)
