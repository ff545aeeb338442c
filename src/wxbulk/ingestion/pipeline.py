"""End-to-end load: stations -> observations -> join -> convert -> batch -> bulk write."""

import logging
from contextlib import closing
from pathlib import Path
from typing import Iterator, Mapping

from wxbulk.config import LoaderConfig
from wxbulk.database.service import DatabaseService, qualified_name
from wxbulk.ingestion.batching import iter_batches
from wxbulk.ingestion.converter import StorageRow, convert
from wxbulk.ingestion.observations import join_observations
from wxbulk.ingestion.schema import WEATHER_COLUMNS, weather_table_ddl
from wxbulk.ingestion.stations import Station, load_station_index
from wxbulk.ingestion.stats import PipelineStats
from wxbulk.ingestion.writer import BatchingSink, BatchWriter

logger = logging.getLogger(__name__)


def ensure_weather_schema(service: DatabaseService, schema: str | None, table: str) -> None:
    """Create the destination schema and table if they don't exist."""
    if schema:
        service.create_schema(schema)
    service.execute_ddl(weather_table_ddl(schema, table))


def storage_rows(
    observations_path: str | Path,
    stations: Mapping[str, Station],
    stats: PipelineStats,
) -> Iterator[StorageRow]:
    """Lazily produce table rows for every valid observation with a known station."""
    return map(convert, join_observations(observations_path, stations, stats))


def run_pipeline(
    service: DatabaseService,
    stations_path: str | Path,
    observations_path: str | Path,
    config: LoaderConfig,
) -> PipelineStats:
    """Load one month of QCLCD data into ``config.schema``.``config.table``.

    The destination table is created before the observation file is
    opened. A missing input file aborts the run with OSError before any row
    is written. Returns the run counters. Raises WriteError if a batch fails
    and no dead-letter directory is configured; batches already committed
    stay committed.
    """
    stats = PipelineStats()
    table = qualified_name(config.schema, config.table)

    stations = load_station_index(stations_path)
    ensure_weather_schema(service, config.schema, config.table)
    rows = storage_rows(observations_path, stations, stats)

    writer = BatchWriter(
        service,
        table,
        WEATHER_COLUMNS,
        max_retries=config.max_retries,
        base_delay=config.retry_base_delay,
        dead_letter_dir=config.dead_letter_dir,
        stats=stats,
    )
    batches = iter_batches(rows, config.max_batch_size, config.max_batch_latency)
    with closing(batches), BatchingSink(writer, workers=config.flush_workers) as sink:
        for batch in batches:
            sink.submit(batch)

    logger.info(
        "Load complete: %d parsed, %d invalid, %d unmatched, %d written in %d batches, %d failed",
        stats.parsed,
        stats.skipped_invalid,
        stats.unmatched,
        stats.written,
        stats.batches,
        stats.failed_batches,
    )
    return stats
