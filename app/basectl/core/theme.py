"""Console colors for basectl.

Defaults can be overridden per color in the ``[colors]`` table of
~/.config/basectl/theme.toml. An unreadable or invalid theme file is logged
and ignored.
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError
from rich.theme import Theme

from basectl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)


def _hex_color(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("color must be a string")
    color = value.strip()
    if not color.startswith("#"):
        raise ValueError("color must start with '#'")
    digits = color[1:]
    if len(digits) not in (3, 6):
        raise ValueError("color must be #RGB or #RRGGBB format")
    try:
        int(digits, 16)
    except ValueError:
        raise ValueError(f"invalid hex color {color!r}") from None
    return color


HexColor = Annotated[str, BeforeValidator(_hex_color)]


class ThemeColors(BaseModel):
    """Colors used by basectl output, as #RGB or #RRGGBB hex codes."""

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"

    # Load restrictions and root kinds
    restricted: HexColor = "#03b971"
    unrestricted: HexColor = "#f5b332"
    remote: HexColor = "#0ec1c8"
    local: HexColor = "#69B9A1"


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Returns:
        Color overrides (string values only), or None if the file is
        missing or unusable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return None
    return {key: value for key, value in table.items() if isinstance(value, str)}


def load_theme(path: Path | None = None) -> ThemeColors:
    """Return the default colors merged with the user's overrides.

    Args:
        path: Theme file to read (default: the user theme path).
    """
    overrides = _load_toml_colors(path or get_user_theme_path())
    if not overrides:
        return ThemeColors()
    try:
        return ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a set of colors (default: load_theme())."""
    colors = colors or load_theme()
    return Theme(
        {
            "text": colors.text,
            "muted": colors.muted,
            "header": colors.header,
            "bold_header": f"bold {colors.header}",
            "border": colors.border,
            "success": colors.success,
            "warning": colors.warning,
            "error": f"bold {colors.error}",
            "restricted": colors.restricted,
            "unrestricted": f"bold {colors.unrestricted}",
            "kind.remote": colors.remote,
            "kind.local": colors.local,
        }
    )


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
