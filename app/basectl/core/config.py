"""basectl configuration and settings.

This module provides the configuration model and I/O functions for
basectl. Configuration is stored in ~/.config/basectl/config.toml and
supplies defaults for the load restrictor and the git cloner.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from basectl.core.paths import get_config_path
from basectl.loader.restriction import LoadRestriction

logger = logging.getLogger(__name__)

DEFAULT_CLONE_TIMEOUT_SECONDS = 27


class BasectlConfig(BaseModel):
    """Configuration for target resolution.

    Attributes:
        load_restrictor: Restriction applied to local top-level targets.
        git_command: Executable used by the git cloner.
        clone_timeout_seconds: Per-command git timeout when a target sets none.
        clone_temp_dir: Parent directory for clone temp dirs (None = system default).
    """

    model_config = ConfigDict(extra="forbid")

    load_restrictor: Annotated[
        LoadRestriction,
        Field(description="Load restriction for local targets"),
    ] = LoadRestriction.ROOT_ONLY
    git_command: Annotated[
        str,
        Field(min_length=1, description="git executable"),
    ] = "git"
    clone_timeout_seconds: Annotated[
        int,
        Field(ge=1, le=3600, description="Clone timeout in seconds (1-3600)"),
    ] = DEFAULT_CLONE_TIMEOUT_SECONDS
    clone_temp_dir: Annotated[
        Path | None,
        Field(description="Parent directory for temporary clones"),
    ] = None

    @field_validator("load_restrictor", mode="before")
    @classmethod
    def parse_restrictor(cls, v: object) -> object:
        """Accept the kustomize flag spellings as well as enum values."""
        if isinstance(v, str):
            return LoadRestriction.parse(v)
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> BasectlConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated BasectlConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return BasectlConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> BasectlConfig:
    """Load configuration, falling back to defaults when no file exists.

    Parse and validation errors still propagate.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return BasectlConfig()


def save_config(config: BasectlConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The BasectlConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: BasectlConfig) -> dict[str, object]:
    """Convert BasectlConfig to a dictionary for TOML serialization.

    Only includes non-None values, since TOML has no null.
    """
    result: dict[str, object] = {
        "load_restrictor": config.load_restrictor.value,
        "git_command": config.git_command,
        "clone_timeout_seconds": config.clone_timeout_seconds,
    }
    if config.clone_temp_dir is not None:
        result["clone_temp_dir"] = str(config.clone_temp_dir)
    return result
