"""Config validation errors."""
from mp_outbox.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Configuration could not be loaded or does not make sense."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """An ``OUTBOX_*`` style variable without a default was not set."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(
            f"Environment variable {setting_name} is required",
            detail={"setting": setting_name},
        )
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting parsed fine but is out of range."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"{setting_name}={value!r} {reason}",
            detail={"setting": setting_name, "value": value, "reason": reason},
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
