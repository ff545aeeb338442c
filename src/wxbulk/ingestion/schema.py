"""Weather data table schema."""

from wxbulk.database.service import qualified_name

WEATHER_COLUMNS = [
    "wban",
    "date_time",
    "temperature",
    "wind_speed",
    "station_pressure",
    "sky_condition",
]


def weather_table_ddl(schema: str | None, table: str) -> str:
    """DDL for the destination table; portable between PostgreSQL and SQLite."""
    name = qualified_name(schema, table)
    index = f"idx_{table}_wban_date_time"
    return f"""
CREATE TABLE IF NOT EXISTS {name} (
    wban             VARCHAR(10)  NOT NULL,
    date_time        TIMESTAMP    NOT NULL,
    temperature      REAL,
    wind_speed       REAL,
    station_pressure REAL,
    sky_condition    VARCHAR(255)
);
CREATE INDEX IF NOT EXISTS {index} ON {name}(wban, date_time);
"""
