"""Configuration manager for persistent settings stored as JSON."""

import json
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from inkpost.core.models.draft import Identity

from .errors import (
    ConfigurationError,
    FileSystemError,
    InkpostError,
    InvalidConfigError,
    MissingConfigError,
    MissingCredentialsError,
)
from .logging import get_logger, log_call
from .paths import CONFIG_PATH

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        if value.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value.upper()


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    version: str = "0.1.0"
    identity: Identity = Field(default_factory=Identity)
    smtp_username: str = ""
    smtp_app_password: str = ""
    worker_url: str = ""
    api_secret: str = ""
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def require_smtp_credentials(self) -> None:
        """Raise if the SMTP username or app password is missing."""
        if not self.smtp_username or not self.smtp_app_password:
            raise MissingCredentialsError(
                "SMTP username and app password must be configured"
            )

    def require_worker(self) -> None:
        """Raise if the worker URL or shared secret is missing."""
        if not self.worker_url or not self.api_secret:
            raise MissingConfigError("Worker URL and API secret must be configured")


def parse_email_list(text: str) -> List[str]:
    """Split a comma separated edit buffer into a list, dropping empty entries."""
    return [part.strip() for part in text.split(",") if part.strip()]


class ConfigManager:
    """Manages persistent application configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        self.path = Path(config_path) if config_path else CONFIG_PATH
        self.config = self.load()

    def load(self) -> AppConfig:
        """Load configuration from file, falling back to defaults when absent."""

        if not self.path.exists():
            logger.info("No config file found, using default configuration.")
            return AppConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig(**data)
            logger.debug(f"Configuration loaded from {self.path}")
            return config

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            raise InvalidConfigError(
                f"Configuration file is not valid JSON: {str(e)}"
            ) from e
        except PydanticValidationError as e:
            logger.error(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {str(e)}"
            ) from e
        except OSError as e:
            raise FileSystemError(f"Failed to read configuration file: {str(e)}") from e
        except TypeError as e:
            raise InvalidConfigError(
                f"Configuration file must contain a JSON object: {str(e)}"
            ) from e

    def save(self, config: Optional[AppConfig] = None) -> None:
        """Save the current configuration to file."""

        config = config or self.config

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
            logger.debug("Configuration successfully saved.")
        except OSError as e:
            raise FileSystemError(f"Failed to write configuration file: {str(e)}") from e

    @log_call
    def set_config(self, key_path: str, value: Any, persist: bool = True) -> None:
        """Set a configuration value using dot-separated key path."""

        keys = key_path.split(".")
        obj = self.config

        for key in keys[:-1]:
            if not hasattr(obj, key) or not isinstance(getattr(obj, key), BaseModel):
                raise MissingConfigError(
                    f"Configuration path '{key_path}' is invalid: '{key}' not found"
                )
            obj = getattr(obj, key)

        if keys[-1] not in type(obj).model_fields:
            raise MissingConfigError(
                f"Configuration key '{keys[-1]}' does not exist in path '{key_path}'"
            )

        if key_path == "identity.emails" and isinstance(value, str):
            value = parse_email_list(value)

        try:
            updated = obj.model_validate({**obj.model_dump(), keys[-1]: value})
        except PydanticValidationError as e:
            raise InvalidConfigError(
                f"Invalid value for configuration key '{key_path}': {str(e)}"
            ) from e
        setattr(obj, keys[-1], getattr(updated, keys[-1]))

        if persist:
            self.save()

        logger.info(f"Config key '{key_path}' updated.")

    def set_emails(self, text: str, persist: bool = True) -> List[str]:
        """Commit a comma separated edit buffer as the identity's email list."""

        emails = parse_email_list(text)
        self.set_config("identity.emails", emails, persist=persist)
        return emails

    def get_config(self, key_path: str, default: Any = None) -> Any:
        """Read a configuration value using dot-separated key path."""

        obj: Any = self.config
        for key in key_path.split("."):
            if not hasattr(obj, key):
                return default
            obj = getattr(obj, key)
        return obj

    @log_call
    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""

        try:
            logger.warning("Resetting configuration to default values.")
            self.config = AppConfig()
            self.save()
        except InkpostError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Failed to reset configuration to defaults: {str(e)}"
            ) from e
