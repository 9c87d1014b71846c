"""Colour palette for scsync output.

The bundled ``data/theme.toml`` can be partially overridden by
``~/.config/scsync/theme.toml``. An unreadable or invalid user file is
ignored with a warning.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator
from rich.theme import Theme

from scsync.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR_RE = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Named colours, each a #RGB or #RRGGBB hex code."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    added: str = "#c1ff62"
    removed: str = "#f53263"
    changed: str = "#0e8ac8"
    command: str = "#b2bec3"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object) -> str:
        if not isinstance(v, str) or not _HEX_COLOR_RE.fullmatch(v.strip()):
            msg = f"invalid hex color {v!r} (expected #RGB or #RRGGBB)"
            raise ValueError(msg)
        return v.strip()


def read_theme_colors(path: Path) -> dict[str, object]:
    """Return the ``[colors]`` table of a theme file, or {} if there is none.

    Raises:
        OSError: If the file cannot be read.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        colors = tomllib.load(f).get("colors", {})
    return colors if isinstance(colors, dict) else {}


def load_theme() -> ThemeColors:
    """Merge the user theme over the bundled one.

    Returns:
        Validated colours. Falls back to the bundled palette if the user
        file is broken.
    """
    bundled = read_theme_colors(Path(str(resources.files("scsync.data") / "theme.toml")))

    user_path = get_user_theme_path()
    if not user_path.exists():
        return ThemeColors(**bundled)

    try:
        return ThemeColors(**{**bundled, **read_theme_colors(user_path)})
    except (OSError, ValueError) as e:
        logger.warning("Ignoring invalid theme %s: %s", user_path, e)
        return ThemeColors(**bundled)


def get_rich_theme(colors: ThemeColors) -> Theme:
    """Map colours to the Rich styles used by the CLI."""
    styles = colors.model_dump()
    styles["error"] = f"bold {colors.error}"
    styles["command"] = f"dim {colors.command}"
    styles["bold_header"] = f"bold {colors.header}"
    return Theme(styles)


@cache
def get_theme() -> Theme:
    """Rich theme built once per process."""
    return get_rich_theme(load_theme())
