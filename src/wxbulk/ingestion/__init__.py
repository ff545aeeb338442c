"""QCLCD ingestion: station index, observation join, batching and bulk writes."""

from wxbulk.ingestion.batching import BatchAccumulator, iter_batches
from wxbulk.ingestion.converter import StorageRow, convert
from wxbulk.ingestion.observations import JoinedRecord, RawObservation, join_observations
from wxbulk.ingestion.pipeline import run_pipeline
from wxbulk.ingestion.stations import Station, load_station_index
from wxbulk.ingestion.stats import PipelineStats

__all__ = [
    "BatchAccumulator",
    "JoinedRecord",
    "PipelineStats",
    "RawObservation",
    "Station",
    "StorageRow",
    "convert",
    "iter_batches",
    "join_observations",
    "load_station_index",
    "run_pipeline",
]
