"""Command line interface for database backups and receipt printing."""

import logging
import sys
from pathlib import Path

from motormods.backup.errors import BackupError, InvalidInputError
from motormods.backup.manager import BackupManager
from motormods.config import Config
from motormods.context import AppContext
from motormods.utils.formatters import format_file_size
from motormods.utils.printing import PrintError, get_receipt_printer

USAGE = """\
Usage: motormods-backup [--config-dir DIR] <command> [args]

Commands:
  create                  Back up the database now
  list                    List backups, newest first
  restore <name>          Restore the database from a backup
  import <path>           Restore the database from an external .db file
  export <name> <dest>    Copy a backup to another location
  delete <name>           Delete a backup
  path                    Show the backups directory
  prune [days]            Delete backups older than the retention period
  auto                    Run the scheduled backup if it is due
  print <file>            Print a plain-text receipt"""


def _create(manager: BackupManager):
    result = manager.create_backup()
    print(f"Backup created: {result.filename} "
          f"({format_file_size(result.file_size)})")


def _list(manager: BackupManager):
    backups = manager.list_backups()
    if not backups:
        print(f"No backups in {manager.get_backups_path()}")
        return
    for info in backups:
        marker = "  (safety)" if info.is_safety_backup else ""
        print(f"{info.modified_at:<34} {format_file_size(info.file_size):>10}"
              f"  {info.filename}{marker}")


def _restore(manager: BackupManager, name: str):
    print(manager.restore_database(name))


def _import(manager: BackupManager, source: str):
    print(manager.import_backup(source))


def _export(manager: BackupManager, name: str, destination: str):
    print(manager.export_backup(name, destination))


def _delete(manager: BackupManager, name: str):
    print(manager.delete_backup(name))


def _path(manager: BackupManager):
    print(manager.get_backups_path())


def _prune(manager: BackupManager, days: str | None = None):
    try:
        retention = int(days) if days is not None else None
    except ValueError as e:
        raise InvalidInputError(
            f"Retention must be a whole number of days: {days}"
        ) from e
    removed = manager.prune_backups(retention)
    for name in removed:
        print(f"Removed old backup: {name}")
    print(f"Pruned {len(removed)} backup(s)")


def _auto(manager: BackupManager):
    result = manager.check_and_trigger_auto_backup()
    if result is None:
        print("No backup due")
    else:
        print(f"Backup created: {result.filename}")


def _print(manager: BackupManager, filepath: str):
    try:
        text = Path(filepath).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Could not read receipt file {filepath}: {e}")
        return 1
    get_receipt_printer().print_receipt(text)
    print("Receipt sent to printer")
    return 0


def _log_level(name: str) -> int:
    """Numeric level for a LOG_LEVEL name; unknown names fall back to INFO."""
    level = logging.getLevelName(str(name).strip().upper())
    if isinstance(level, int):
        return level
    print(f"Unknown LOG_LEVEL {name!r}, using INFO", file=sys.stderr)
    return logging.INFO


# command -> (handler, min args, max args)
COMMANDS = {
    "create": (_create, 0, 0),
    "list": (_list, 0, 0),
    "restore": (_restore, 1, 1),
    "import": (_import, 1, 1),
    "export": (_export, 2, 2),
    "delete": (_delete, 1, 1),
    "path": (_path, 0, 0),
    "prune": (_prune, 0, 1),
    "auto": (_auto, 0, 0),
    "print": (_print, 1, 1),
}


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    config_dir = None
    if args and args[0] == "--config-dir":
        if len(args) < 2:
            print(USAGE)
            return 2
        config_dir, args = args[1], args[2:]

    if not args or args[0] not in COMMANDS:
        print(USAGE)
        return 2

    handler, min_args, max_args = COMMANDS[args[0]]
    params = args[1:]
    if not min_args <= len(params) <= max_args:
        print(USAGE)
        return 2

    logging.basicConfig(
        level=_log_level(Config.LOG_LEVEL),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    manager = BackupManager(AppContext(config_dir))
    try:
        status = handler(manager, *params)
    except (BackupError, PrintError) as e:
        print(f"Error: {e}")
        return 1
    return status or 0


if __name__ == "__main__":
    sys.exit(main())
