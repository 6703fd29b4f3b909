"""Database backup script — creates a timestamped backup and prunes old ones.

Meant to be run from cron / Task Scheduler. Reads the config directory
and retention period from .env / settings.json.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from motormods.backup.errors import BackupError
from motormods.backup.manager import BackupManager
from motormods.context import AppContext


def backup_database():
    """Copy the database file to the backup directory with a timestamp."""
    manager = BackupManager(AppContext())
    try:
        result = manager.create_backup()
    except BackupError as e:
        print(f"Backup failed: {e}")
        return 1
    print(f"Backup created: {result.path}")

    try:
        removed = manager.prune_backups()
    except BackupError as e:
        print(f"Pruning old backups failed: {e}")
        return 1
    for name in removed:
        print(f"Removed old backup: {name}")
    return 0


if __name__ == "__main__":
    sys.exit(backup_database())
