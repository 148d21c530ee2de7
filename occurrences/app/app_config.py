"""App configuration."""

from pathlib import Path

from pydantic import BaseModel, Field

from ..common.app import app_dirs
from ..search.session import SearchSettings


class AppConfig(BaseModel):
    """Persisted command line defaults."""

    search: SearchSettings = Field(default_factory=SearchSettings)
    search_hidden: bool = Field(default=False, description="Search hidden files and directories by default.")


def load_config(path: Path | None = None) -> AppConfig:
    """Load the config file, or the defaults if there is none."""
    path = path or app_dirs.app_config_path
    if not path.exists():
        return AppConfig()
    return AppConfig.model_validate_json(path.read_text())


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Write the config file."""
    path = path or app_dirs.app_config_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2))
