"""Config validation – error types."""
from __future__ import annotations

from entry_export.kernel.errors import BaseError


class ConfigError(BaseError):
    """Raised when configuration cannot be loaded or is invalid."""

    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """Raised when a required setting has no value in any source."""

    default_code = "missing_required_setting"

    def __init__(self, key: str) -> None:
        super().__init__(f"Required setting '{key}' is missing")
        self.key = key


class InvalidSettingValueError(ConfigError):
    """Raised when a setting is present but out of range or uncoercible."""

    default_code = "invalid_setting_value"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Invalid value for setting '{key}': {reason}")
        self.key = key
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
