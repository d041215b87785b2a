"""
Configuration management using Pydantic Settings.

Two layers:
- ``Settings`` (environment variables with the ``TIMELEDGER_`` prefix or a
  ``.env`` file): where data and configuration live, which database to use
- ``TrackerPreferences`` (``settings.yaml``): the tracker's behaviour, i.e.
  default user, first weekday, tick backend and report template

A broken ``settings.yaml`` surfaces as a ``ValidationError`` naming the file,
never as a half-applied configuration.
"""

import os
from pathlib import Path
from typing import Optional
import yaml

from pydantic import Field, ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from timeledger.domain.errors import ValidationError
from timeledger.domain.models import TrackerPreferences

PREFERENCES_FILE = "settings.yaml"
# Checked before the user's config directory
WORKSPACE_CONFIG = Path("config") / PREFERENCES_FILE


def _platform_base(*unix_parts: str) -> Path:
    if os.name == 'nt':  # Windows
        return Path(os.getenv('APPDATA'))
    return Path.home().joinpath(*unix_parts)


def load_preferences(path: Path) -> TrackerPreferences:
    """
    Read tracker preferences from a YAML file.

    An empty file yields the defaults.

    Raises:
        ValidationError: the file is not valid YAML, not a mapping, or holds
            out-of-range values
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"{path}: invalid YAML: {e}") from e

    if data is None:
        return TrackerPreferences()
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: expected a mapping of preferences")

    try:
        return TrackerPreferences.model_validate(data)
    except PydanticValidationError as e:
        error = ValidationError.from_pydantic(e)
        raise ValidationError(f"{path}: {error}", error.errors) from None


class Settings(BaseSettings):
    """
    Application settings.

    ``config_dir``/``data_dir`` default to the platform's per-user locations
    and are created on construction; ``preferences`` is replaced by the YAML
    file when one exists.
    """
    model_config = SettingsConfigDict(
        env_prefix='TIMELEDGER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    app_name: str = "TimeLedger"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    database_url: Optional[str] = None

    preferences: TrackerPreferences = Field(default_factory=TrackerPreferences)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._init_paths()
        config_file = self.preferences_file()
        if config_file is not None:
            self.preferences = load_preferences(config_file)

    def _init_paths(self):
        folder = self.app_name.lower()
        if self.config_dir is None:
            self.config_dir = _platform_base('.config') / folder
        if self.data_dir is None:
            self.data_dir = _platform_base('.local', 'share') / folder

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def preferences_file(self) -> Optional[Path]:
        """The preferences file in effect, or None when there is none"""
        for candidate in (WORKSPACE_CONFIG, self.config_dir / PREFERENCES_FILE):
            if candidate.exists():
                return candidate
        return None

    def save_preferences(self) -> Path:
        """Write the current preferences to the user's config directory"""
        config_file = self.config_dir / PREFERENCES_FILE
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.preferences.model_dump(), f, default_flow_style=False)
        return config_file

    def get_db_url(self) -> str:
        """``database_url`` if set, else a SQLite file in ``data_dir``"""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'timeledger.db'}"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
