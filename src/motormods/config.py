"""Application configuration — loads .env, then overrides from settings.json."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Find the project root (where .env lives)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# Runtime settings file for in-app configuration
_SETTINGS_FILE = Path(
    os.getenv(
        "MOTORMODS_SETTINGS_FILE",
        str(_PROJECT_ROOT / "data" / "settings.json"),
    )
)


def _load_settings() -> dict:
    """Load saved runtime settings from JSON file."""
    if _SETTINGS_FILE.exists():
        try:
            return json.loads(_SETTINGS_FILE.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def _save_settings(settings: dict):
    """Persist runtime settings to JSON file."""
    _SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    _SETTINGS_FILE.write_text(
        json.dumps(settings, indent=2), encoding="utf-8"
    )


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Load saved settings once at import time
_runtime = _load_settings()


class Config:
    """Central configuration: .env defaults, settings.json overrides."""

    # Paths
    PROJECT_ROOT: Path = _PROJECT_ROOT
    APP_IDENTIFIER: str = os.getenv(
        "MOTORMODS_APP_IDENTIFIER", "com.motormods.billing"
    )
    # Empty string = use the platform config directory
    APP_CONFIG_DIR: str = _runtime.get(
        "app_config_dir",
        os.getenv("MOTORMODS_CONFIG_DIR", ""),
    )

    # Backups (settings.json overrides .env)
    AUTO_BACKUP_ENABLED: bool = _runtime.get(
        "auto_backup_enabled",
        _env_bool("AUTO_BACKUP_ENABLED", "true"),
    )
    AUTO_BACKUP_TIME: str = _runtime.get(
        "auto_backup_time",
        os.getenv("AUTO_BACKUP_TIME", "23:00"),
    )
    BACKUP_RETENTION_DAYS: int = int(_runtime.get(
        "backup_retention_days",
        os.getenv("BACKUP_RETENTION_DAYS", "30"),
    ))

    # Printing
    PRINT_TIMEOUT: int = int(os.getenv("PRINT_TIMEOUT", "30"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def update_backup_settings(cls, enabled: bool, time: str,
                               retention_days: int):
        """Update automatic backup settings and persist to disk."""
        cls.AUTO_BACKUP_ENABLED = enabled
        cls.AUTO_BACKUP_TIME = time
        cls.BACKUP_RETENTION_DAYS = retention_days

        settings = _load_settings()
        settings["auto_backup_enabled"] = enabled
        settings["auto_backup_time"] = time
        settings["backup_retention_days"] = retention_days
        _save_settings(settings)

    @classmethod
    def update_config_dir(cls, config_dir: str):
        """Point the app at a different config directory and persist.

        An empty string restores the platform default location.
        """
        cls.APP_CONFIG_DIR = config_dir
        settings = _load_settings()
        settings["app_config_dir"] = config_dir
        _save_settings(settings)
