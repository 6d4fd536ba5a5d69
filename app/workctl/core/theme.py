"""Terminal colours for workctl.

Every style the CLI prints with is defined here. Users may override the
colours in the ``[colors]`` table of ~/.config/workctl/theme.toml.
"""

import functools
import logging
import re
import sys
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from workctl.core.paths import get_theme_path

logger = logging.getLogger(__name__)

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]{3}|[0-9a-fA-F]{6}")

# Styles derived from a colour with extra attributes
_DERIVED_STYLES = {
    "error": "bold {error}",
    "bold_header": "bold {header}",
    "dim": "{muted}",
}


class ThemeColors(BaseModel):
    """Hex colours for workctl output (#RRGGBB or #RGB)."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Per-item outcomes
    applied: str = "#c1ff62"
    satisfied: str = "#69B9A1"
    skipped: str = "#b2bec3"
    removed: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Accept only '#' followed by three or six hex digits."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        if not _HEX_DIGITS.fullmatch(color[1:]):
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Returns:
        Colour name to value for every string entry, or None when the
        file is missing, unreadable or has no usable table.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", path, e)
        print(f"Warning: Failed to parse {path}: {e}", file=sys.stderr)
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Invalid 'colors' section in %s", path)
        return None
    return {str(key): value for key, value in table.items() if isinstance(value, str)}


def load_theme(path: Path | None = None) -> ThemeColors:
    """Load colours, applying the user's overrides when present.

    An override that fails validation is reported and the defaults are
    used instead.
    """
    overrides = _load_toml_colors(path or get_theme_path())
    if not overrides:
        return ThemeColors()

    try:
        return ThemeColors.model_validate(overrides)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        print(f"Warning: Invalid theme configuration: {e}", file=sys.stderr)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme: one style per colour plus the derived styles."""
    colors = colors or load_theme()
    values = colors.model_dump()
    styles = dict(values)
    styles.update({name: spec.format(**values) for name, spec in _DERIVED_STYLES.items()})
    return Theme(styles)


@functools.cache
def get_theme() -> Theme:
    """Rich theme for the session, loaded once."""
    return get_rich_theme()
