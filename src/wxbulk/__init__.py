"""wxbulk — stream QCLCD weather data into a relational table in batches."""

from wxbulk.config import LoaderConfig
from wxbulk.database import create_service
from wxbulk.errors import ConfigError, ParseSkip, WriteError, WxBulkError
from wxbulk.ingestion.pipeline import run_pipeline
from wxbulk.ingestion.stats import PipelineStats

__all__ = [
    "ConfigError",
    "LoaderConfig",
    "ParseSkip",
    "PipelineStats",
    "WriteError",
    "WxBulkError",
    "create_service",
    "run_pipeline",
]
