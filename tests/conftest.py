"""Shared pytest fixtures for bullet journal tests."""

import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

from bullet_journal.config import JournalConfig
from bullet_journal.engine import JournalEngine


TODAY = date(2026, 1, 6)
TOMORROW = date(2026, 1, 7)
YESTERDAY = date(2026, 1, 5)


class FakeClock:
    """Settable clock for engine and notifier tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def temp_data_dir():
    """Create a temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_data_dir):
    """Create a test configuration."""
    return JournalConfig(data_dir=temp_data_dir)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 6, 9, 0))


@pytest.fixture
def engine(config, clock):
    """Create a test engine with a fixed clock."""
    return JournalEngine(config, clock=clock)


@pytest.fixture
def write_day(config):
    """Write raw lines to a day file, bypassing the engine."""
    def _write(day, lines):
        path = config.get_day_path(day)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def read_day(config):
    """Read raw lines of a day file, [] if absent."""
    def _read(day):
        path = config.get_day_path(day)
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").split("\n")[:-1]
    return _read
