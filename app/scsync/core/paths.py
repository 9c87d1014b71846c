"""XDG-compliant path management for scsync.

XDG defaults:
- Config: ~/.config/scsync/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "scsync"

# Environment variable overriding the config file location
CONFIG_ENV_VAR = "SCS_GLOBAL_CONFIG"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/scsync/ (or XDG_CONFIG_HOME/scsync/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path(override: Path | None = None) -> Path:
    """Get the configuration file path.

    Precedence: explicit override, then the SCS_GLOBAL_CONFIG environment
    variable, then ~/.config/scsync/config.toml.

    Args:
        override: Path given on the command line, if any.

    Returns:
        Path to the TOML configuration file.
    """
    if override is not None:
        return override
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/scsync/theme.toml
    """
    return get_config_dir() / "theme.toml"
