"""BackupManager — file-level backups of the MotorMods database.

The live database is a single SQLite file inside the app config
directory; backups are plain copies of it in a ``backups/`` folder next
to it:

    <app_config_dir>/
        motormods.db                                  — live database
        backups/
            motormods_backup_<timestamp>.db           — manual/auto backups
            pre_restore_safety_<timestamp>.db         — taken before restore
            pre_import_safety_<timestamp>.db          — taken before import

No manifest is kept; sizes and dates come from ``stat``. Paths are
resolved from the :class:`~motormods.context.AppContext` on every call.
"""

import logging
import os
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator, Optional

from motormods.backup.errors import (
    BackupError,
    BackupIOError,
    InvalidInputError,
    NotFoundError,
)
from motormods.backup.models import BackupFileInfo, BackupResult
from motormods.config import Config
from motormods.context import AppContext
from motormods.utils.constants import (
    BACKUP_EXTENSION,
    BACKUP_PREFIX,
    BACKUPS_DIRNAME,
    DATABASE_FILENAME,
    PRE_IMPORT_PREFIX,
    PRE_RESTORE_PREFIX,
    TIMESTAMP_FORMAT,
    UNKNOWN_TIMESTAMP,
)

logger = logging.getLogger(__name__)


def _format_mtime(timestamp: float) -> str:
    """ISO-8601 local time for a stat mtime, or the placeholder."""
    try:
        return datetime.fromtimestamp(timestamp).astimezone().isoformat()
    except (OverflowError, OSError, ValueError):
        return UNKNOWN_TIMESTAMP


def _has_backup_extension(name: str | Path) -> bool:
    return Path(name).suffix == BACKUP_EXTENSION


class BackupManager:
    """Backup, restore, import, export and delete for the database file."""

    def __init__(self, context: AppContext,
                 clock: Callable[[], datetime] = datetime.now):
        self.context = context
        self._clock = clock

    # ── Paths ───────────────────────────────────────────────────

    def resolve_paths(self) -> tuple[Path, Path]:
        """Return ``(database_path, backups_dir)``.

        Creates the backups directory if it does not exist yet.

        Raises:
            PathResolutionError: If the config directory lookup fails.
            BackupIOError: If the backups directory cannot be created.
        """
        config_dir = self.context.app_config_dir().absolute()
        backups_dir = config_dir / BACKUPS_DIRNAME
        if not backups_dir.is_dir():
            try:
                backups_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Could not create {backups_dir}: {e}")
                raise BackupIOError.wrap(
                    "Failed to create backups directory", e
                ) from e
        return config_dir / DATABASE_FILENAME, backups_dir

    def get_backups_path(self) -> str:
        """Absolute path of the backups directory, for file pickers."""
        _, backups_dir = self.resolve_paths()
        return str(backups_dir)

    # ── Backup ──────────────────────────────────────────────────

    def create_backup(self) -> BackupResult:
        """Copy the live database to a new timestamped backup file.

        Raises:
            NotFoundError: If there is no database file yet.
            BackupIOError: If the copy or the follow-up stat fails.
        """
        db_path, backups_dir = self.resolve_paths()
        if not db_path.exists():
            raise NotFoundError("Database file not found")

        filename = self._timestamped_name(BACKUP_PREFIX)
        backup_path = backups_dir / filename
        self._copy(db_path, backup_path, "Failed to backup database")

        try:
            file_size = backup_path.stat().st_size
        except OSError as e:
            raise BackupIOError.wrap(
                "Failed to get backup metadata", e
            ) from e

        logger.info(f"Backup created: {backup_path} ({file_size} bytes)")
        return BackupResult(
            filename=filename,
            path=str(backup_path),
            file_size=file_size,
            created_at=self._clock().astimezone().isoformat(),
        )

    def list_backups(self) -> list[BackupFileInfo]:
        """All ``.db`` files in the backups directory, newest first.

        Best effort: an unreadable directory gives an empty list and
        unreadable entries are left out.
        """
        _, backups_dir = self.resolve_paths()
        backups = [
            BackupFileInfo(
                filename=entry.name,
                path=entry.path,
                file_size=st.st_size,
                modified_at=_format_mtime(st.st_mtime),
            )
            for entry, st in self._scan(backups_dir)
        ]
        backups.sort(key=lambda b: b.modified_at, reverse=True)
        return backups

    def latest_backup(self) -> Optional[BackupFileInfo]:
        """Most recent regular backup, ignoring safety copies."""
        for info in self.list_backups():
            if info.kind == "backup" and info.modified_at != UNKNOWN_TIMESTAMP:
                return info
        return None

    # ── Restore / import ────────────────────────────────────────

    def restore_database(self, backup_filename: str) -> str:
        """Overwrite the live database with a file from the backups dir.

        The current database (if any) is first copied to a
        ``pre_restore_safety_*`` file. The returned message always names
        the safety file, even when there was nothing to copy.
        """
        self._check_backup_name(backup_filename)
        db_path, backups_dir = self.resolve_paths()
        backup_path = backups_dir / backup_filename
        if not backup_path.exists():
            raise NotFoundError(f"Backup file not found: {backup_filename}")

        safety_filename = self._safety_backup(
            db_path, backups_dir, PRE_RESTORE_PREFIX
        )
        self._copy(backup_path, db_path, "Failed to restore database")

        logger.info(f"Database restored from {backup_filename}")
        return (
            f"Database restored from {backup_filename}. "
            f"Safety backup created: {safety_filename}"
        )

    def import_backup(self, source_path: str | Path) -> str:
        """Overwrite the live database with an external ``.db`` file.

        Raises:
            InvalidInputError: If the source is missing or not a ``.db`` file.
            BackupIOError: If the safety copy or the import copy fails.
        """
        source = Path(source_path)
        if not source.exists():
            raise InvalidInputError("Source backup file not found")
        if not _has_backup_extension(source) or not source.is_file():
            raise InvalidInputError("Invalid backup file. Expected .db file")

        db_path, backups_dir = self.resolve_paths()
        safety_filename = self._safety_backup(
            db_path, backups_dir, PRE_IMPORT_PREFIX
        )
        self._copy(source, db_path, "Failed to import backup")

        logger.info(f"Database imported from {source}")
        return (
            "Database imported from external backup. "
            f"Safety backup created: {safety_filename}"
        )

    # ── Export / delete ─────────────────────────────────────────

    def export_backup(self, backup_filename: str,
                      destination_path: str | Path) -> str:
        """Copy a backup to a caller-chosen location, overwriting it."""
        self._check_backup_name(backup_filename)
        if not str(destination_path).strip():
            raise InvalidInputError("Export destination is required")

        _, backups_dir = self.resolve_paths()
        backup_path = backups_dir / backup_filename
        if not backup_path.exists():
            raise NotFoundError(f"Backup file not found: {backup_filename}")

        self._copy(backup_path, Path(destination_path),
                   "Failed to export backup")
        logger.info(f"Backup {backup_filename} exported to {destination_path}")
        return f"Backup exported to: {destination_path}"

    def delete_backup(self, backup_filename: str) -> str:
        """Permanently remove one ``.db`` file from the backups dir."""
        self._check_backup_name(backup_filename)
        if not _has_backup_extension(backup_filename):
            raise InvalidInputError("Can only delete .db backup files")

        _, backups_dir = self.resolve_paths()
        backup_path = backups_dir / backup_filename
        if not backup_path.exists():
            raise NotFoundError(f"Backup file not found: {backup_filename}")

        try:
            backup_path.unlink()
        except OSError as e:
            logger.error(f"Could not delete {backup_path}: {e}")
            raise BackupIOError.wrap("Failed to delete backup", e) from e

        logger.info(f"Backup deleted: {backup_filename}")
        return f"Backup deleted: {backup_filename}"

    # ── Retention / scheduling ──────────────────────────────────

    def prune_backups(self, retention_days: Optional[int] = None) -> list[str]:
        """Delete backups older than ``retention_days`` days.

        Defaults to ``Config.BACKUP_RETENTION_DAYS``; zero or less keeps
        everything. The newest regular backup is never removed, however
        old it is. Returns the removed file names, sorted.
        """
        if retention_days is None:
            retention_days = Config.BACKUP_RETENTION_DAYS
        if retention_days <= 0:
            return []

        _, backups_dir = self.resolve_paths()
        cutoff = (self._clock() - timedelta(days=retention_days)).timestamp()
        latest = self.latest_backup()
        keep = latest.filename if latest else None

        removed = []
        for entry, st in self._scan(backups_dir):
            if st.st_mtime >= cutoff or entry.name == keep:
                continue
            try:
                os.remove(entry.path)
            except OSError as e:
                logger.error(f"Could not prune {entry.path}: {e}")
                raise BackupIOError.wrap("Failed to delete backup", e) from e
            removed.append(entry.name)

        removed.sort()
        if removed:
            logger.info(
                f"Pruned {len(removed)} backup(s) older than "
                f"{retention_days} days"
            )
        return removed

    def check_and_trigger_auto_backup(self) -> Optional[BackupResult]:
        """Take the scheduled daily backup if it has not happened yet.

        The schedule is ``Config.AUTO_BACKUP_TIME`` ("HH:MM", local).
        A backup is due when no regular backup was written since the
        most recent scheduled time. Old backups are pruned afterwards; a
        pruning failure is logged and does not undo the new backup.
        Returns the new backup, or ``None`` if nothing was done.
        """
        if not Config.AUTO_BACKUP_ENABLED:
            return None

        scheduled = self._last_scheduled_run(Config.AUTO_BACKUP_TIME)
        db_path, _ = self.resolve_paths()
        if not db_path.exists():
            logger.info("Auto-backup skipped: no database file yet")
            return None

        latest = self.latest_backup()
        if latest and datetime.fromisoformat(latest.modified_at) >= scheduled:
            return None

        result = self.create_backup()
        try:
            self.prune_backups()
        except BackupError as e:
            logger.warning(f"Auto-backup created but pruning failed: {e}")
        return result

    # ── Helpers ─────────────────────────────────────────────────

    def _timestamped_name(self, prefix: str) -> str:
        stamp = self._clock().strftime(TIMESTAMP_FORMAT)
        return f"{prefix}{stamp}{BACKUP_EXTENSION}"

    def _safety_backup(self, db_path: Path, backups_dir: Path,
                       prefix: str) -> str:
        """Copy the live database aside before it gets overwritten.

        Returns the safety file name whether or not a copy was made.
        """
        safety_filename = self._timestamped_name(prefix)
        if db_path.exists():
            self._copy(db_path, backups_dir / safety_filename,
                       "Failed to create safety backup")
            logger.info(f"Safety backup created: {safety_filename}")
        return safety_filename

    def _last_scheduled_run(self, time_of_day: str) -> datetime:
        now = self._clock()
        try:
            hour, minute = (int(part) for part in time_of_day.split(":"))
            scheduled = now.replace(hour=hour, minute=minute,
                                    second=0, microsecond=0)
        except (AttributeError, ValueError) as e:
            raise InvalidInputError(
                f"Invalid auto-backup time: {time_of_day!r}"
            ) from e
        if scheduled > now:
            scheduled -= timedelta(days=1)
        return scheduled.astimezone()

    @staticmethod
    def _check_backup_name(name: str):
        """Backup names must be bare file names inside the backups dir."""
        if (not name or name in (".", "..")
                or "/" in name or "\\" in name
                or Path(name).name != name):
            raise InvalidInputError(f"Invalid backup filename: {name}")

    @staticmethod
    def _copy(src: Path, dst: Path, action: str):
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            logger.error(f"{action}: {e}")
            raise BackupIOError.wrap(action, e) from e

    @staticmethod
    def _scan(backups_dir: Path) -> Iterator[tuple[os.DirEntry, os.stat_result]]:
        """Yield ``(entry, stat)`` for readable ``.db`` files."""
        try:
            with os.scandir(backups_dir) as it:
                entries = list(it)
        except OSError as e:
            logger.warning(f"Could not read backups directory {backups_dir}: {e}")
            return

        for entry in entries:
            if not _has_backup_extension(entry.name):
                continue
            try:
                if not entry.is_file():
                    continue
                st = entry.stat()
            except OSError as e:
                logger.warning(f"Skipping unreadable backup {entry.name}: {e}")
                continue
            yield entry, st
