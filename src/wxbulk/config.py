"""Loader configuration, read from WXBULK_* environment variables."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

from wxbulk.errors import ConfigError

DEFAULT_DB_URL = "postgresql://postgres@127.0.0.1:5432/sampledb"


@dataclass(frozen=True)
class LoaderConfig:
    """Settings for one load run.

    Batches flush when ``max_batch_size`` rows are buffered or
    ``max_batch_latency`` seconds have passed since the last flush,
    whichever comes first.
    """

    connection_uri: str = DEFAULT_DB_URL
    schema: str | None = "sample"
    table: str = "weather_data"
    max_batch_size: int = 80_000
    max_batch_latency: float = 2.0
    pool_size: int = 4
    flush_workers: int = 1
    max_retries: int = 3
    retry_base_delay: float = 1.0
    dead_letter_dir: Path | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "LoaderConfig":
        """Build a config from the environment, falling back to defaults."""
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}

        if "WXBULK_DB_URL" in env:
            overrides["connection_uri"] = env["WXBULK_DB_URL"]
        if "WXBULK_SCHEMA" in env:
            # An empty value means "no schema" (required for SQLite)
            overrides["schema"] = env["WXBULK_SCHEMA"] or None
        if "WXBULK_TABLE" in env:
            overrides["table"] = env["WXBULK_TABLE"]
        if "WXBULK_DEAD_LETTER_DIR" in env:
            overrides["dead_letter_dir"] = Path(env["WXBULK_DEAD_LETTER_DIR"])

        numeric = {
            "WXBULK_BATCH_SIZE": ("max_batch_size", int),
            "WXBULK_BATCH_LATENCY": ("max_batch_latency", float),
            "WXBULK_POOL_SIZE": ("pool_size", int),
            "WXBULK_FLUSH_WORKERS": ("flush_workers", int),
            "WXBULK_MAX_RETRIES": ("max_retries", int),
            "WXBULK_RETRY_DELAY": ("retry_base_delay", float),
        }
        for var, (name, cast) in numeric.items():
            if var in env:
                try:
                    overrides[name] = cast(env[var])
                except ValueError as e:
                    raise ConfigError(f"{var}={env[var]!r} is not a valid {cast.__name__}") from e

        return cls(**overrides).validate()

    def with_overrides(self, **changes: object) -> "LoaderConfig":
        """Return a copy with every non-None change applied."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigError(f"Unknown config fields: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in changes.items() if v is not None}).validate()

    def validate(self) -> "LoaderConfig":
        if not self.connection_uri:
            raise ConfigError("connection_uri must not be empty")
        if not self.table:
            raise ConfigError("table must not be empty")
        if self.schema and self.connection_uri.startswith("sqlite"):
            raise ConfigError(
                f"SQLite has no schemas; unset schema (got {self.schema!r}) for {self.connection_uri}"
            )
        if self.max_batch_size < 1:
            raise ConfigError(f"max_batch_size must be >= 1, got {self.max_batch_size}")
        if self.max_batch_latency <= 0:
            raise ConfigError(f"max_batch_latency must be > 0, got {self.max_batch_latency}")
        if self.pool_size < 1:
            raise ConfigError(f"pool_size must be >= 1, got {self.pool_size}")
        if not 1 <= self.flush_workers <= self.pool_size:
            raise ConfigError(
                f"flush_workers must be between 1 and pool_size ({self.pool_size}), "
                f"got {self.flush_workers}"
            )
        if self.max_retries < 1:
            raise ConfigError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.retry_base_delay < 0:
            raise ConfigError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        return self
