"""Shared test fixtures."""

from datetime import datetime, timedelta

import pytest

import motormods.config as config_mod
from motormods.backup.manager import BackupManager
from motormods.config import Config
from motormods.context import AppContext

SQLITE_HEADER = b"SQLite format 3\x00"


class FakeClock:
    """Deterministic stand-in for ``datetime.now``."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 1):
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def isolate_config(tmp_path, monkeypatch):
    """Keep tests away from the real settings file and config dir."""
    monkeypatch.setattr(config_mod, "_SETTINGS_FILE",
                        tmp_path / "settings.json")
    monkeypatch.setattr(Config, "APP_CONFIG_DIR", "")
    monkeypatch.setattr(Config, "AUTO_BACKUP_ENABLED", True)
    monkeypatch.setattr(Config, "AUTO_BACKUP_TIME", "23:00")
    monkeypatch.setattr(Config, "BACKUP_RETENTION_DAYS", 30)


@pytest.fixture
def config_dir(tmp_path):
    """Stand-in for the app config directory."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def backups_dir(config_dir):
    return config_dir / "backups"


@pytest.fixture
def context(config_dir):
    return AppContext(config_dir)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 10, 30, 0))


@pytest.fixture
def manager(context, clock):
    """Manager with a controllable clock."""
    return BackupManager(context, clock=clock)


@pytest.fixture
def live_manager(context):
    """Manager on the real clock, for mtime-based scheduling tests."""
    return BackupManager(context)


@pytest.fixture
def db_file(config_dir):
    """A live database file with recognisable content."""
    path = config_dir / "motormods.db"
    path.write_bytes(SQLITE_HEADER + b"live-data" * 100)
    return path
