"""Configuration loading from a TOML file."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from weather_lookup.models.output import OutputType

DEFAULT_CONFIG_PATH = Path("config.toml")


class ConfigError(Exception):
    """Raised when the config file cannot be read or is invalid."""
    pass


class ClientConfig(BaseModel):
    """Credentials and language for the weather API."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    lang: str


class AppConfig(BaseModel):
    """Whole config document."""

    model_config = ConfigDict(frozen=True)

    client: ClientConfig
    output: OutputType = OutputType.table
    level: str | None = None


def load_config(path: Path | None = None) -> AppConfig:
    """Load and validate the application config.

    Args:
        path: Config file location. Defaults to ``config.toml`` in the
            working directory.

    Returns:
        A validated AppConfig.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid TOML or
            does not match the expected shape.
    """
    path = path or DEFAULT_CONFIG_PATH
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {path}: {exc}") from exc
