"""Tests for the motormods-backup command line."""

import importlib.util
import logging
import os
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from motormods.cli import _log_level, main
from motormods.config import Config

DB_BACKUP_SCRIPT = (
    Path(__file__).resolve().parent.parent / "execution" / "db_backup.py"
)


def _aged(backups_dir, name, days_old):
    backups_dir.mkdir(parents=True, exist_ok=True)
    path = backups_dir / name
    path.write_bytes(b"x")
    stamp = time.time() - days_old * 24 * 60 * 60
    os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def run(config_dir):
    """Invoke the CLI against the temporary config directory."""
    def _run(*args):
        return main(["--config-dir", str(config_dir), *args])
    return _run


class TestUsage:
    def test_no_arguments(self, capsys):
        assert main([]) == 2
        assert "Usage:" in capsys.readouterr().out

    def test_unknown_command(self, run, capsys):
        assert run("explode") == 2
        assert "Usage:" in capsys.readouterr().out

    def test_wrong_arity(self, run, capsys):
        assert run("restore") == 2
        assert run("export", "only-one.db") == 2

    def test_config_dir_without_value(self, capsys):
        assert main(["--config-dir"]) == 2


class TestCommands:
    def test_create_and_list(self, run, db_file, capsys):
        assert run("create") == 0
        out = capsys.readouterr().out
        assert "Backup created: motormods_backup_" in out

        assert run("list") == 0
        assert "motormods_backup_" in capsys.readouterr().out

    def test_list_empty(self, run, backups_dir, capsys):
        assert run("list") == 0
        assert f"No backups in {backups_dir}" in capsys.readouterr().out

    def test_create_without_database(self, run, capsys):
        assert run("create") == 1
        assert "Error: Database file not found" in capsys.readouterr().out

    def test_restore(self, run, db_file, backups_dir, capsys):
        backups_dir.mkdir()
        (backups_dir / "old.db").write_bytes(b"old")
        assert run("restore", "old.db") == 0
        assert "Database restored from old.db" in capsys.readouterr().out
        assert db_file.read_bytes() == b"old"

    def test_import_rejects_txt(self, run, db_file, tmp_path, capsys):
        notes = tmp_path / "notes.txt"
        notes.write_text("x")
        assert run("import", str(notes)) == 1
        assert "Expected .db file" in capsys.readouterr().out

    def test_export(self, run, backups_dir, tmp_path, capsys):
        backups_dir.mkdir()
        (backups_dir / "b.db").write_bytes(b"payload")
        dest = tmp_path / "copy.db"
        assert run("export", "b.db", str(dest)) == 0
        assert dest.read_bytes() == b"payload"

    def test_delete_missing(self, run, capsys):
        assert run("delete", "gone.db") == 1
        assert "Backup file not found: gone.db" in capsys.readouterr().out

    def test_path(self, run, backups_dir, capsys):
        assert run("path") == 0
        assert capsys.readouterr().out.strip() == str(backups_dir)

    def test_prune_bad_days(self, run, capsys):
        assert run("prune", "lots") == 1
        assert "whole number" in capsys.readouterr().out

    def test_prune(self, run, capsys):
        assert run("prune", "30") == 0
        assert "Pruned 0 backup(s)" in capsys.readouterr().out

    def test_auto(self, run, db_file, capsys):
        assert run("auto") == 0
        assert "Backup created" in capsys.readouterr().out
        assert run("auto") == 0
        assert "No backup due" in capsys.readouterr().out

    def test_print(self, run, tmp_path, capsys):
        receipt = tmp_path / "receipt.txt"
        receipt.write_text("Total 10.00", encoding="utf-8")
        with patch("motormods.utils.printing.get_platform",
                   return_value="windows"):
            assert run("print", str(receipt)) == 1
        assert "supported only on Linux" in capsys.readouterr().out

    def test_print_missing_file(self, run, tmp_path, capsys):
        assert run("print", str(tmp_path / "nope.txt")) == 1
        out = capsys.readouterr().out
        assert "Error: Could not read receipt file" in out

    def test_list_marks_safety_backups(self, run, backups_dir, capsys):
        backups_dir.mkdir()
        (backups_dir / "motormods_backup_2024-01-01_00-00-00.db").write_bytes(b"a")
        (backups_dir / "pre_import_safety_2024-01-02_00-00-00.db").write_bytes(b"b")
        assert run("list") == 0
        lines = capsys.readouterr().out.splitlines()
        safety = [l for l in lines if "pre_import_safety_" in l]
        regular = [l for l in lines if "motormods_backup_" in l]
        assert safety[0].endswith("(safety)")
        assert not regular[0].endswith("(safety)")

    def test_auto_succeeds_when_pruning_fails(self, run, db_file, backups_dir,
                                               capsys):
        _aged(backups_dir, "pre_restore_safety_old.db", 90)
        with patch("motormods.backup.manager.os.remove",
                   side_effect=PermissionError(13, "denied")):
            assert run("auto") == 0
        assert "Backup created: motormods_backup_" in capsys.readouterr().out


class TestLogLevel:
    def test_known_names(self):
        assert _log_level("DEBUG") == logging.DEBUG
        assert _log_level(" warning ") == logging.WARNING

    def test_unknown_name_falls_back(self, capsys):
        assert _log_level("verbose") == logging.INFO
        assert "Unknown LOG_LEVEL" in capsys.readouterr().err

    def test_bad_config_level_does_not_crash(self, run, monkeypatch, capsys):
        monkeypatch.setattr(Config, "LOG_LEVEL", "verbose")
        assert run("path") == 0


class TestDbBackupScript:
    @pytest.fixture
    def script(self, config_dir, monkeypatch):
        monkeypatch.setattr(Config, "APP_CONFIG_DIR", str(config_dir))
        spec = importlib.util.spec_from_file_location(
            "db_backup_script", DB_BACKUP_SCRIPT
        )
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_creates_backup(self, script, db_file, backups_dir, capsys):
        assert script.backup_database() == 0
        assert "Backup created:" in capsys.readouterr().out
        assert len(list(backups_dir.glob("motormods_backup_*.db"))) == 1

    def test_missing_database(self, script, capsys):
        assert script.backup_database() == 1
        assert "Backup failed: Database file not found" in capsys.readouterr().out

    def test_prune_failure_is_reported(self, script, db_file, backups_dir,
                                       capsys):
        _aged(backups_dir, "pre_restore_safety_old.db", 90)
        with patch("motormods.backup.manager.os.remove",
                   side_effect=PermissionError(13, "denied")):
            assert script.backup_database() == 1
        out = capsys.readouterr().out
        assert "Backup created:" in out
        assert "Pruning old backups failed" in out
