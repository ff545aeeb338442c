"""Map joined records onto rows of the weather data table."""

from datetime import datetime
from typing import NamedTuple

from wxbulk.ingestion.observations import JoinedRecord


class StorageRow(NamedTuple):
    """One row of the destination table, in WEATHER_COLUMNS order."""

    wban: str
    date_time: datetime
    temperature: float | None
    wind_speed: float | None
    station_pressure: float | None
    sky_condition: str | None


def convert(record: JoinedRecord) -> StorageRow:
    obs = record.observation
    return StorageRow(
        wban=record.station.wban,
        date_time=datetime.combine(obs.date, obs.time),
        temperature=obs.dry_bulb_celsius,
        wind_speed=obs.wind_speed,
        station_pressure=obs.station_pressure,
        sky_condition=obs.sky_condition or None,
    )
