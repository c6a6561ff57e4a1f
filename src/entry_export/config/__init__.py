"""Config – 12-factor settings and loaders."""

from entry_export.config.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)
from entry_export.config.loaders import EnvSettingsLoader, SettingsLoader
from entry_export.config.settings import DEFAULT_DISALLOWED_FIELDS, ExportSettings, Settings

__all__ = [
    "DEFAULT_DISALLOWED_FIELDS",
    "ConfigError",
    "EnvSettingsLoader",
    "ExportSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
