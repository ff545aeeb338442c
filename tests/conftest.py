"""Shared test fixtures."""

import pytest

from qclcd_samples import OBSERVATION_HEADER, STATION_HEADER
from wxbulk import create_service


@pytest.fixture
def write_stations(tmp_path):
    """Write a station file with the given record lines and return its path."""

    def _write(lines: list[str], name: str = "station.txt"):
        path = tmp_path / name
        path.write_text("\n".join([STATION_HEADER, *lines]) + "\n", encoding="ascii")
        return path

    return _write


@pytest.fixture
def write_observations(tmp_path):
    """Write an hourly observation file with the given record lines and return its path."""

    def _write(lines: list[str], name: str = "hourly.txt"):
        path = tmp_path / name
        path.write_text("\n".join([OBSERVATION_HEADER, *lines]) + "\n", encoding="ascii")
        return path

    return _write


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()
