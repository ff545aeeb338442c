"""Hourly observations: parsing, validity filtering and the station join."""

import logging
from dataclasses import dataclass
from datetime import date, time
from pathlib import Path
from typing import Iterator, Mapping

from wxbulk.errors import ParseSkip
from wxbulk.ingestion.parsing import (
    open_records,
    parse_date,
    parse_optional_float,
    parse_optional_int,
    parse_precipitation,
    parse_time,
    parse_wind_direction,
)
from wxbulk.ingestion.stations import Station
from wxbulk.ingestion.stats import PipelineStats

logger = logging.getLogger(__name__)

OBSERVATION_DELIMITER = ","
OBSERVATION_FIELD_COUNT = 44

# Column positions in the QCLCD hourly file
COL_WBAN = 0
COL_DATE = 1
COL_TIME = 2
COL_STATION_TYPE = 3
COL_SKY_CONDITION = 4
COL_VISIBILITY = 6
COL_DRY_BULB_CELSIUS = 12
COL_WET_BULB_CELSIUS = 16
COL_DEW_POINT_CELSIUS = 20
COL_RELATIVE_HUMIDITY = 22
COL_WIND_SPEED = 24
COL_WIND_DIRECTION = 26
COL_STATION_PRESSURE = 30
COL_SEA_LEVEL_PRESSURE = 36
COL_HOURLY_PRECIP = 40


@dataclass(frozen=True)
class RawObservation:
    wban: str
    date: date
    time: time
    station_type: int | None
    sky_condition: str
    visibility: float | None
    dry_bulb_celsius: float | None
    wet_bulb_celsius: float | None
    dew_point_celsius: float | None
    relative_humidity: float | None
    wind_speed: float | None
    wind_direction: int | None
    station_pressure: float | None
    sea_level_pressure: float | None
    hourly_precip: float | None


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one line: an observation, or the reason it is invalid."""

    line_num: int
    observation: RawObservation | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.observation is not None


@dataclass(frozen=True)
class JoinedRecord:
    observation: RawObservation
    station: Station


def parse_observation(row: list[str], line_num: int = 0) -> RawObservation:
    """Parse one comma-delimited QCLCD hourly record.

    Missing values ('M' or blank) become None. Raises ParseSkip for short
    lines and cells that cannot be converted.
    """
    if len(row) < OBSERVATION_FIELD_COUNT:
        raise ParseSkip(line_num, f"expected {OBSERVATION_FIELD_COUNT} fields, got {len(row)}")
    wban = row[COL_WBAN].strip()
    if not wban:
        raise ParseSkip(line_num, "missing WBAN")
    try:
        return RawObservation(
            wban=wban,
            date=parse_date(row[COL_DATE]),
            time=parse_time(row[COL_TIME]),
            station_type=parse_optional_int(row[COL_STATION_TYPE]),
            sky_condition=row[COL_SKY_CONDITION].strip(),
            visibility=parse_optional_float(row[COL_VISIBILITY]),
            dry_bulb_celsius=parse_optional_float(row[COL_DRY_BULB_CELSIUS]),
            wet_bulb_celsius=parse_optional_float(row[COL_WET_BULB_CELSIUS]),
            dew_point_celsius=parse_optional_float(row[COL_DEW_POINT_CELSIUS]),
            relative_humidity=parse_optional_float(row[COL_RELATIVE_HUMIDITY]),
            wind_speed=parse_optional_float(row[COL_WIND_SPEED]),
            wind_direction=parse_wind_direction(row[COL_WIND_DIRECTION]),
            station_pressure=parse_optional_float(row[COL_STATION_PRESSURE]),
            sea_level_pressure=parse_optional_float(row[COL_SEA_LEVEL_PRESSURE]),
            hourly_precip=parse_precipitation(row[COL_HOURLY_PRECIP]),
        )
    except ValueError as e:
        raise ParseSkip(line_num, str(e)) from e


def read_observations(path: str | Path) -> Iterator[ParseResult]:
    """Yield a ParseResult for every record in file order.

    Raises OSError immediately if the file cannot be opened.
    """
    records = open_records(path, OBSERVATION_DELIMITER)
    return _parse_all(records)


def _parse_all(records: Iterator[tuple[int, list[str]]]) -> Iterator[ParseResult]:
    for line_num, row in records:
        try:
            yield ParseResult(line_num, observation=parse_observation(row, line_num))
        except ParseSkip as e:
            yield ParseResult(line_num, error=e.reason)


def join_observations(
    path: str | Path,
    stations: Mapping[str, Station],
    stats: PipelineStats | None = None,
) -> Iterator[JoinedRecord]:
    """Stream observations joined to their station (strict inner join).

    Invalid lines and observations whose WBAN is not in ``stations`` are
    dropped and counted. The file is opened on call; records are produced
    lazily, one at a time, in file order.
    """
    stats = stats if stats is not None else PipelineStats()
    return _join(read_observations(path), stations, stats)


def _join(
    results: Iterator[ParseResult],
    stations: Mapping[str, Station],
    stats: PipelineStats,
) -> Iterator[JoinedRecord]:
    for result in results:
        stats.incr("parsed")
        if not result.is_valid:
            stats.incr("skipped_invalid")
            logger.debug("Skipping invalid observation at line %d: %s", result.line_num, result.error)
            continue
        observation = result.observation
        station = stations.get(observation.wban)
        if station is None:
            stats.incr("unmatched")
            continue
        yield JoinedRecord(observation, station)
