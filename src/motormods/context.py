"""Application context — tells the backup layer where the app keeps its data."""

from pathlib import Path

from motormods.backup.errors import PathResolutionError
from motormods.config import Config
from motormods.utils.platform import get_config_base_dir


class AppContext:
    """Supplies the application config directory.

    Passed explicitly into :class:`~motormods.backup.manager.BackupManager`
    instead of living in a module-level global. Holds no cached state:
    every :meth:`app_config_dir` call looks the directory up again.
    """

    def __init__(self, config_dir: str | Path | None = None,
                 identifier: str | None = None):
        self._config_dir = Path(config_dir) if config_dir else None
        self.identifier = identifier or Config.APP_IDENTIFIER

    def app_config_dir(self) -> Path:
        """Return the directory holding the database and backups.

        Raises:
            PathResolutionError: If no config directory can be determined.
        """
        if self._config_dir is not None:
            return self._config_dir
        if Config.APP_CONFIG_DIR:
            return Path(Config.APP_CONFIG_DIR)
        base = get_config_base_dir()
        if base is None:
            raise PathResolutionError(
                "Could not determine the application config directory"
            )
        return base / self.identifier
