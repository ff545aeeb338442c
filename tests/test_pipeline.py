"""End-to-end pipeline tests against SQLite."""

import sqlite3

import pytest

from qclcd_samples import observation_line, station_line
from wxbulk.config import LoaderConfig
from wxbulk.errors import WriteError
from wxbulk.ingestion.pipeline import run_pipeline
from wxbulk.ingestion.schema import WEATHER_COLUMNS


def _config(**changes) -> LoaderConfig:
    base = LoaderConfig(connection_uri="sqlite:///unused.db", schema=None, retry_base_delay=0)
    return base.with_overrides(**changes)


def _rows(service):
    with service.transaction():
        return service.execute("SELECT * FROM weather_data ORDER BY rowid")


class TestRunPipeline:
    def test_joins_and_writes_matched_rows(self, db_service, write_stations, write_observations):
        stations = write_stations([station_line("94846", name="ORD")])
        observations = write_observations([observation_line("94846"), observation_line("99999")])

        stats = run_pipeline(db_service, stations, observations, _config())

        rows = _rows(db_service)
        assert rows == [
            {
                "wban": "94846",
                "date_time": "2015-03-01 00:51:00",
                "temperature": pytest.approx(-2.8),
                "wind_speed": 11.0,
                "station_pressure": pytest.approx(29.42),
                "sky_condition": "OVC020",
            }
        ]
        assert list(rows[0]) == WEATHER_COLUMNS
        assert stats.as_dict() == {
            "parsed": 2,
            "skipped_invalid": 0,
            "unmatched": 1,
            "written": 1,
            "batches": 1,
            "failed_batches": 0,
        }

    def test_batches_and_order(self, db_service, write_stations, write_observations):
        stations = write_stations([station_line("94846"), station_line("14819")])
        lines = [
            observation_line(
                "94846" if i % 2 else "14819",
                date=f"201503{i // 24 + 1:02d}",
                time=f"{i % 24:02d}51",
            )
            for i in range(25)
        ]
        observations = write_observations(lines)

        stats = run_pipeline(db_service, stations, observations, _config(max_batch_size=10))

        assert stats.written == 25
        assert stats.batches == 3
        times = [r["date_time"] for r in _rows(db_service)]
        assert times == sorted(times)

    def test_skips_invalid_lines(self, db_service, write_stations, write_observations):
        stations = write_stations([station_line("94846")])
        observations = write_observations(
            [observation_line("94846"), "not,a,record", observation_line("94846", time="9999")]
        )

        stats = run_pipeline(db_service, stations, observations, _config())

        assert stats.written == 1
        assert stats.skipped_invalid == 2

    def test_no_matches_writes_nothing(self, db_service, write_stations, write_observations):
        stations = write_stations([station_line("94846")])
        observations = write_observations([observation_line("11111")])

        stats = run_pipeline(db_service, stations, observations, _config())

        assert stats.batches == 0
        assert _rows(db_service) == []

    def test_missing_observation_file_aborts_before_writing(
        self, db_service, write_stations, tmp_path
    ):
        stations = write_stations([station_line("94846")])
        with pytest.raises(OSError):
            run_pipeline(db_service, stations, tmp_path / "missing.txt", _config())

        assert _rows(db_service) == []

    def test_ddl_failure_aborts_before_reading_observations(
        self, db_service, write_stations, write_observations, monkeypatch
    ):
        stations = write_stations([station_line("94846")])
        observations = write_observations([observation_line("94846")])
        opened = []

        def refuse_ddl(sql):
            raise sqlite3.OperationalError("attempt to write a readonly database")

        def record_join(*args, **kwargs):
            opened.append(args)
            return iter(())

        monkeypatch.setattr(db_service, "execute_ddl", refuse_ddl)
        monkeypatch.setattr("wxbulk.ingestion.pipeline.join_observations", record_join)
        with pytest.raises(sqlite3.OperationalError):
            run_pipeline(db_service, stations, observations, _config())

        assert opened == []

    def test_write_failure_propagates(
        self, db_service, write_stations, write_observations, monkeypatch
    ):
        stations = write_stations([station_line("94846")])
        observations = write_observations([observation_line("94846")])

        def fail(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(db_service, "bulk_copy", fail)
        with pytest.raises(WriteError):
            run_pipeline(db_service, stations, observations, _config(max_retries=2))

    def test_write_failure_dead_lettered(
        self, db_service, write_stations, write_observations, monkeypatch, tmp_path
    ):
        stations = write_stations([station_line("94846")])
        observations = write_observations([observation_line("94846")] * 3)

        def fail(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(db_service, "bulk_copy", fail)
        stats = run_pipeline(
            db_service, stations, observations, _config(dead_letter_dir=tmp_path / "dead")
        )

        assert stats.failed_batches == 1
        assert stats.written == 0
        assert len(list((tmp_path / "dead").iterdir())) == 1
