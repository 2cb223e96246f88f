import sqlite3
from dataclasses import replace

import pytest

from levelmon.collector.config.settings import CollectionSettings
from levelmon.shared.channel import Channel


@pytest.fixture
def settings(tmp_path):
    return CollectionSettings(
        samples_per_collection=3,
        calibration_microsec=70.0,
        simulate_sensor=True,
        millisec_between_readings=0,
        db_filename=str(tmp_path / "levelmon.db"),
    )


@pytest.fixture
def make_settings(settings):
    def _make(**overrides):
        return replace(settings, **overrides)
    return _make


@pytest.fixture
def readings():
    return Channel("reading queue")


@pytest.fixture
def termination():
    return Channel("termination requests")


@pytest.fixture
def fetch_rows():
    def _fetch(path):
        with sqlite3.connect(path) as conn:
            return conn.execute(
                "SELECT id, timestamp, reading FROM collections ORDER BY id"
            ).fetchall()
    return _fetch


class RecordingStorage:
    """Stand-in for ReadingsStorage that records appends in memory."""

    def __init__(self, fail_on=None):
        self.appended = []
        self.fail_on = fail_on
        self.initialized = 0
        self.closed = False

    def initialize(self):
        self.initialized += 1

    def append(self, reading):
        if self.fail_on is not None and len(self.appended) == self.fail_on:
            raise sqlite3.OperationalError("disk I/O error")
        self.appended.append(reading)
        return len(self.appended)

    def close(self):
        self.closed = True


@pytest.fixture
def make_storage():
    return RecordingStorage
