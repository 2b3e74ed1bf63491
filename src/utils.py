"""
Utility functions for the text scroller.
Provides config loading, color parsing and font loading helpers.
"""

import json
import os
from pathlib import Path

from PIL import ImageFont


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


def load_config() -> dict:
    """Load configuration from settings.json."""
    config_path = get_project_root() / "config" / "settings.json"
    with open(config_path, "r") as f:
        return json.load(f)


def hex_to_rgb(hex_color: str) -> tuple:
    """
    Parse a hex color string to RGB tuple.

    Args:
        hex_color: Hex color string (e.g., "#FFFFFF" or "FFFFFF").

    Returns:
        Tuple of (r, g, b) values.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Invalid hex color format: {hex_color}")
    return (
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16)
    )


def parse_color(color_input) -> tuple:
    """
    Parse a color input (hex string or RGB dict) to RGB tuple.

    Args:
        color_input: Either a hex color string (e.g., "#FFFFFF") or
                     a dictionary with 'r', 'g', 'b' keys.

    Returns:
        Tuple of (r, g, b) values.
    """
    if isinstance(color_input, str):
        return hex_to_rgb(color_input)
    elif isinstance(color_input, dict):
        return (
            color_input.get("r", 255),
            color_input.get("g", 255),
            color_input.get("b", 255)
        )
    else:
        raise ValueError(f"Invalid color format: {color_input}")


def scale_color(rgb: tuple, brightness: int) -> tuple:
    """Scale an RGB tuple by a 0-100 brightness percentage."""
    brightness = max(0, min(100, brightness))
    factor = brightness / 100.0
    return tuple(int(channel * factor) for channel in rgb)


# Loaded fonts keyed by (name, pixel size)
_FONT_CACHE = {}


def load_font(font_name: str, size: int = 12):
    """
    Load a Pillow font file.

    Searches for fonts in the following order:
    1. Font cache
    2. Project assets/fonts directory (assets/fonts/)
    3. System font directory (/usr/share/fonts/truetype/)
    4. The name as given (absolute or relative path)

    TrueType/OpenType fonts are loaded at the given pixel size, anything
    else is treated as a Pillow bitmap font (.pil).

    Args:
        font_name: Name of the font file (e.g., "pixelmix.ttf", "5x7.pil").
        size: Pixel size for scalable fonts.

    Returns:
        Loaded Pillow font.

    Raises:
        FileNotFoundError: If font file cannot be found.
    """
    cache_key = (font_name, size)
    if cache_key in _FONT_CACHE:
        return _FONT_CACHE[cache_key]

    project_font_path = get_project_root() / "assets" / "fonts" / font_name
    system_font_path = Path("/usr/share/fonts/truetype") / font_name

    if os.path.exists(project_font_path):
        font_path = project_font_path
    elif os.path.exists(system_font_path):
        font_path = system_font_path
    else:
        font_path = Path(font_name)
        if not os.path.exists(font_path):
            raise FileNotFoundError(
                f"Font file '{font_name}' not found. "
                f"Tried: {project_font_path}, {system_font_path}, {font_path}"
            )

    if font_path.suffix.lower() in (".ttf", ".otf"):
        font = ImageFont.truetype(str(font_path), size)
    else:
        font = ImageFont.load(str(font_path))

    _FONT_CACHE[cache_key] = font
    return font


def load_font_or_default(font_name: str = None, size: int = 12):
    """Load a font by name, falling back to Pillow's default font."""
    if not font_name:
        return ImageFont.load_default()
    try:
        return load_font(font_name, size)
    except (FileNotFoundError, OSError) as e:
        print(f"Warning: Could not load font {font_name}: {e}. Using default font.")
        return ImageFont.load_default()
