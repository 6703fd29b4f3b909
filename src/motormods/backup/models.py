"""Data models for backup files."""

from dataclasses import dataclass

from motormods.utils.constants import (
    BACKUP_PREFIX,
    PRE_IMPORT_PREFIX,
    PRE_RESTORE_PREFIX,
    SAFETY_PREFIXES,
)


@dataclass
class BackupResult:
    filename: str = ""
    path: str = ""
    file_size: int = 0
    created_at: str = ""  # ISO-8601, local time with offset


@dataclass
class BackupFileInfo:
    filename: str = ""
    path: str = ""
    file_size: int = 0
    modified_at: str = ""  # ISO-8601, or "Unknown"

    @property
    def is_safety_backup(self) -> bool:
        return self.filename.startswith(SAFETY_PREFIXES)

    @property
    def kind(self) -> str:
        """Which operation produced this file, judged by its name."""
        if self.filename.startswith(BACKUP_PREFIX):
            return "backup"
        if self.filename.startswith(PRE_RESTORE_PREFIX):
            return "pre_restore"
        if self.filename.startswith(PRE_IMPORT_PREFIX):
            return "pre_import"
        return "other"
