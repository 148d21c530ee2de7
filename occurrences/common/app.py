"""Per-user data directory of the command line tool."""

import shutil
from pathlib import Path
from tempfile import TemporaryDirectory

from platformdirs import user_data_dir

APP_NAME = "Occurrences"
APP_AUTHOR = "occurrences"
CONFIG_FILE_NAME = "config.json"


class AppDirs:
    """Location of the data directory and of the config file inside it."""

    def __init__(self) -> None:
        """Point at the platform's user data directory."""
        self._temp_dir: TemporaryDirectory | None = None
        self._set_data_dir(Path(user_data_dir(appname=APP_NAME, appauthor=APP_AUTHOR)))

    def _set_data_dir(self, path: Path) -> None:
        self.app_data_dir = path
        self.app_config_path = path / CONFIG_FILE_NAME

    def use_temp_app_data_dir(self) -> None:
        """Keep settings in a throwaway directory for the rest of the process."""
        self._temp_dir = TemporaryDirectory(prefix="occurrences-")
        self._set_data_dir(Path(self._temp_dir.name))

    def remove_app_data_dir(self) -> bool:
        """Delete the data directory. Return whether there was one."""
        if not self.app_data_dir.exists():
            return False
        shutil.rmtree(self.app_data_dir)
        return True


app_dirs = AppDirs()
