"""Configuration models and TOML loading.

The configuration file has global keys at the top level and one table per
synchronizer (currently only ``[pacman]``). Both levels are validated with
Pydantic models; the resulting Settings value is frozen and passed
explicitly to every component that needs it.
"""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)

from scsync.core.commands import (
    DEFAULT_REPORT_MESSAGES,
    CommandTable,
    ReportMessages,
    pacman_command_table,
)
from scsync.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError, ConfigSchemaError
from scsync.core.paths import get_config_path
from scsync.utils.formatting import print_warning

logger = logging.getLogger(__name__)

# Keys of the [pacman] table that override a CommandTable field
COMMAND_KEYS: tuple[str, ...] = tuple(f.name for f in dataclasses.fields(CommandTable))


def value_to_command(value: object) -> tuple[str, ...]:
    """Convert a TOML value into a command vector.

    A string is split on whitespace; an array must contain only strings.

    Args:
        value: Raw TOML value.

    Returns:
        The command tokens.

    Raises:
        ValueError: If the value is neither a string nor an array of strings.
    """
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, list | tuple):
        if not all(isinstance(v, str) for v in value):
            msg = "Array contains non-String Elements."
            raise ValueError(msg)
        return tuple(value)
    msg = "Value is not String or Array!"
    raise ValueError(msg)


class GlobalSettings(BaseModel):
    """Top-level options shared by all synchronizers.

    Attributes:
        dry_mode: Print commands instead of running them.
        show_cmds: Echo every mutating command before running it.
        show_cmds_in_dry_mode: Echo commands in dry mode even if show_cmds is off.
        show_reports: Print the up/down diff before applying it.
        sudo_cmd: Privilege escalation prefix for mutating commands.
        error_on_unknown_keys: Treat unknown keys as errors instead of warnings.
        warn_on_duplicates: Warn about duplicated declared packages.
        comment_string: Marker starting a comment in the package file.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    dry_mode: StrictBool = True
    show_cmds: StrictBool = True
    show_cmds_in_dry_mode: StrictBool = True
    show_reports: StrictBool = True
    sudo_cmd: StrictStr = "sudo"
    error_on_unknown_keys: StrictBool = True
    warn_on_duplicates: StrictBool = True
    comment_string: Annotated[StrictStr, Field(min_length=1)] = "#"


class PacmanSettings(BaseModel):
    """The ``[pacman]`` table: declared state and command overrides.

    Command overrides left unset fall back to the pacman defaults built
    with the effective sudo command.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    sudo_cmd: StrictStr | None = None
    packages: tuple[StrictStr, ...] = ()
    groups: tuple[StrictStr, ...] = ()
    blacklist: tuple[StrictStr, ...] = ()
    config_path: StrictStr | None = None

    installed_packages_cmd: tuple[str, ...] | None = None
    dependency_packages_cmd: tuple[str, ...] | None = None
    explicitly_installed_cmd: tuple[str, ...] | None = None
    explicitly_unrequired_cmd: tuple[str, ...] | None = None
    as_explicit_cmd: tuple[str, ...] | None = None
    install_cmd: tuple[str, ...] | None = None
    as_dependency_cmd: tuple[str, ...] | None = None
    remove_cmd: tuple[str, ...] | None = None
    update_cmd: tuple[str, ...] | None = None
    get_orphans_cmd: tuple[str, ...] | None = None
    get_group_packages_cmd: tuple[str, ...] | None = None

    to_install_report_msg: StrictStr = DEFAULT_REPORT_MESSAGES.to_install
    to_mark_explicit_report_msg: StrictStr = DEFAULT_REPORT_MESSAGES.to_mark_explicit
    to_remove_report_msg: StrictStr = DEFAULT_REPORT_MESSAGES.to_remove
    to_mark_dependency_report_msg: StrictStr = DEFAULT_REPORT_MESSAGES.to_mark_dependency

    @field_validator(*COMMAND_KEYS, mode="before")
    @classmethod
    def validate_command(cls, v: object) -> tuple[str, ...] | None:
        """Accept a whitespace-separated string or an array of strings."""
        if v is None:
            return None
        return value_to_command(v)


class Settings(BaseModel):
    """Complete, immutable configuration for one run.

    Attributes:
        global_settings: Top-level options.
        pacman: The pacman synchronizer table.
        base_dir: Directory relative package file paths are resolved against.
    """

    model_config = ConfigDict(frozen=True)

    global_settings: GlobalSettings = Field(default_factory=GlobalSettings)
    pacman: PacmanSettings = Field(default_factory=PacmanSettings)
    base_dir: Path = Path()

    @property
    def sudo_cmd(self) -> str:
        """Effective sudo command (pacman table wins over the global one)."""
        if self.pacman.sudo_cmd is not None:
            return self.pacman.sudo_cmd
        return self.global_settings.sudo_cmd

    @property
    def package_file(self) -> Path | None:
        """Resolved path of the line-oriented package file, if configured."""
        if self.pacman.config_path is None:
            return None
        path = Path(self.pacman.config_path).expanduser()
        return path if path.is_absolute() else self.base_dir / path

    def command_table(self) -> CommandTable:
        """Build the command table from defaults and overrides."""
        overrides = {
            key: value for key in COMMAND_KEYS if (value := getattr(self.pacman, key)) is not None
        }
        return dataclasses.replace(pacman_command_table(self.sudo_cmd), **overrides)

    def report_messages(self) -> ReportMessages:
        """Build the report message prefixes."""
        return ReportMessages(
            to_install=self.pacman.to_install_report_msg,
            to_mark_explicit=self.pacman.to_mark_explicit_report_msg,
            to_remove=self.pacman.to_remove_report_msg,
            to_mark_dependency=self.pacman.to_mark_dependency_report_msg,
        )


def _check_unknown_keys(
    data: dict[str, Any],
    model: type[BaseModel],
    section: str,
    error_on_unknown_keys: bool,
    ignore_tables: bool = False,
) -> None:
    """Report keys the model does not know about.

    Every unknown key is reported on stderr. Afterwards the whole load fails
    unless unknown keys are configured to be ignored.

    Raises:
        ConfigSchemaError: If unknown keys were found and are not allowed.
    """
    unknown = [
        key
        for key, value in data.items()
        if key not in model.model_fields and not (ignore_tables and isinstance(value, dict))
    ]
    if not unknown:
        return

    for key in unknown:
        print_warning(f"Unknown key in {section}: {key}")

    if error_on_unknown_keys:
        msg = "Usage of unknown keys is not allowed."
        raise ConfigSchemaError(msg)
    logger.warning("Ignoring all unknown keys in %s.", section)


def _validate(model: type[BaseModel], data: dict[str, Any], section: str) -> Any:
    """Validate a table, converting Pydantic errors to ConfigSchemaError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigSchemaError(f"Invalid {section}: {e}") from e


def parse_settings(data: dict[str, Any], base_dir: Path | None = None) -> Settings:
    """Build Settings from an already parsed TOML document.

    Args:
        data: Parsed TOML table.
        base_dir: Directory for resolving a relative package file path.

    Returns:
        Validated, frozen Settings.

    Raises:
        ConfigSchemaError: On unknown keys, wrong value types or a missing
            ``[pacman]`` table.
    """
    global_data = {k: v for k, v in data.items() if not isinstance(v, dict)}
    # error_on_unknown_keys must be known before unknown keys are judged
    global_settings: GlobalSettings = _validate(GlobalSettings, global_data, "global configuration")
    _check_unknown_keys(
        data,
        GlobalSettings,
        "global configuration",
        global_settings.error_on_unknown_keys,
        ignore_tables=True,
    )

    pacman_data = data.get("pacman")
    if not isinstance(pacman_data, dict):
        msg = "Could not find valid pacman configuration."
        raise ConfigSchemaError(msg)

    _check_unknown_keys(
        pacman_data, PacmanSettings, "pacman configuration", global_settings.error_on_unknown_keys
    )
    pacman: PacmanSettings = _validate(PacmanSettings, pacman_data, "pacman configuration")

    return Settings(global_settings=global_settings, pacman=pacman, base_dir=base_dir or Path())


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate the configuration file.

    Args:
        path: Path to the config file. If None, the SCS_GLOBAL_CONFIG
            environment variable or the XDG default is used.

    Returns:
        Validated Settings.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigSchemaError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = get_config_path(path)

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}") from e
    except UnicodeDecodeError as e:
        raise ConfigParseError(f"Config {config_path} is not valid UTF-8") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}") from e

    logger.debug("Loaded configuration from %s", config_path)
    return parse_settings(data, base_dir=config_path.parent)


def build_config_document(packages: list[str], dry_mode: bool = True) -> dict[str, Any]:
    """Build a minimal configuration document declaring the given packages.

    Args:
        packages: Package names for ``[pacman].packages``.
        dry_mode: Value written for the top-level ``dry_mode`` key.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return {
        "dry_mode": dry_mode,
        "pacman": {
            "packages": list(packages),
        },
    }


def save_config_document(data: dict[str, Any], path: Path) -> Path:
    """Write a configuration document to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.
    The temporary file is cleaned up on failure.

    Args:
        data: Document to serialize.
        path: Destination path.

    Returns:
        Path where the document was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    import os
    from tempfile import NamedTemporaryFile

    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {path}") from e

    return path
