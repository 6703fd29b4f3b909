"""Application-wide constants."""


# ── Filesystem layout (fixed names, shared with the desktop app) ──
DATABASE_FILENAME = "motormods.db"
BACKUPS_DIRNAME = "backups"
BACKUP_EXTENSION = ".db"

# strftime pattern embedded in every backup filename
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

BACKUP_PREFIX = "motormods_backup_"
PRE_RESTORE_PREFIX = "pre_restore_safety_"
PRE_IMPORT_PREFIX = "pre_import_safety_"
SAFETY_PREFIXES = (PRE_RESTORE_PREFIX, PRE_IMPORT_PREFIX)

# Shown when the filesystem cannot report a modification time
UNKNOWN_TIMESTAMP = "Unknown"

# Receipt printing
RECEIPT_TEMP_FILENAME = "motormods_receipt.txt"
