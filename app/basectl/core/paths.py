"""XDG-compliant path management for basectl.

XDG defaults:
- Config: ~/.config/basectl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "basectl"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/basectl/ (or XDG_CONFIG_HOME/basectl/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/basectl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/basectl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create config directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create config directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
