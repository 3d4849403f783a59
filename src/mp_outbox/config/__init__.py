"""Config – 12-factor settings and loaders."""

from mp_outbox.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    OutboxSettings,
    Settings,
    SettingsLoader,
)
from mp_outbox.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "OutboxSettings",
    "Settings",
    "SettingsLoader",
]
