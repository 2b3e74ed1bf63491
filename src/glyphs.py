"""
Glyph matrices and box buffers for the text scroller.
Rasterizes text into a grid of lit/unlit cells using Pillow fonts.
"""

from typing import List, Sequence, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from utils import load_font


class InvalidGlyphError(ValueError):
    """Raised when text rasterizes to an empty or malformed matrix."""


class GlyphMatrix:
    """Immutable grid of pixel intensities (rows x columns)."""

    def __init__(self, rows: Sequence[Sequence[int]]):
        self._rows = tuple(tuple(row) for row in rows)

        if len(self._rows) == 0 or len(self._rows[0]) == 0:
            raise InvalidGlyphError("Invalid text to scroll")

        width = len(self._rows[0])
        if any(len(row) != width for row in self._rows):
            raise InvalidGlyphError("Glyph matrix rows must all have the same length")

    @property
    def rows(self) -> Tuple[Tuple[int, ...], ...]:
        return self._rows

    @property
    def width(self) -> int:
        return len(self._rows[0])

    @property
    def height(self) -> int:
        return len(self._rows)

    def __getitem__(self, y: int) -> Tuple[int, ...]:
        return self._rows[y]

    def __eq__(self, other) -> bool:
        if isinstance(other, GlyphMatrix):
            return self._rows == other._rows
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._rows)

    def __repr__(self) -> str:
        return f"GlyphMatrix({self.width}x{self.height})"


class BoxBuffer:
    """
    Fixed-size output grid the glyph matrix is composited into.

    The same rows are reused for every frame. Consumers that need to keep
    a frame around must call snapshot() instead of holding on to rows.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Box dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self.rows: List[List[int]] = [[0] * width for _ in range(height)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self):
        """Set every cell back to 0 without reallocating."""
        for row in self.rows:
            for x in range(self._width):
                row[x] = 0

    def snapshot(self) -> List[List[int]]:
        """Return a detached copy of the current frame."""
        return [list(row) for row in self.rows]

    def __getitem__(self, y: int) -> List[int]:
        return self.rows[y]

    def __repr__(self) -> str:
        return f"BoxBuffer({self._width}x{self._height})"


FontLike = Union[None, str, ImageFont.ImageFont, ImageFont.FreeTypeFont]


def _resolve_font(font: FontLike, font_pixel_size: int):
    if font is None:
        return ImageFont.load_default()
    if isinstance(font, str):
        return load_font(font, font_pixel_size)
    return font


def _rasterize_char(font, char: str, top: int, height: int) -> List[List[int]]:
    """Draw a single character into a 1-bit strip of the shared line height."""
    width = int(round(font.getlength(char)))
    if width <= 0:
        return []

    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.fontmode = "1"  # no anti-aliasing
    draw.text((0, -top), char, font=font, fill=255)

    pixels = image.load()
    return [[1 if pixels[x, y] > 127 else 0 for x in range(width)] for y in range(height)]


def render_text(
    text: str,
    font: FontLike = None,
    letter_spacing: int = 1,
    font_size: int = 1,
    font_pixel_size: int = 12,
) -> GlyphMatrix:
    """
    Rasterize text into a GlyphMatrix.

    Args:
        text: The text to rasterize.
        font: None for Pillow's default font, a loaded Pillow font, or a
              font file name resolved through utils.load_font().
        letter_spacing: Empty columns inserted between characters.
        font_size: Integer scale factor applied to every cell.
        font_pixel_size: Pixel size used when loading a TrueType font.

    Returns:
        GlyphMatrix with 1 for lit cells and 0 for unlit cells.

    Raises:
        InvalidGlyphError: If the text rasterizes to an empty matrix.
    """
    if letter_spacing < 0:
        raise ValueError(f"letter_spacing must be >= 0, got {letter_spacing}")
    if font_size < 1:
        raise ValueError(f"font_size must be >= 1, got {font_size}")
    if not text:
        raise InvalidGlyphError("Invalid text to scroll")

    pil_font = _resolve_font(font, font_pixel_size)

    # Shared vertical extent so every character lines up on the baseline
    _, top, _, bottom = pil_font.getbbox(text)
    height = bottom - top
    if height <= 0:
        raise InvalidGlyphError("Invalid text to scroll")

    rows: List[List[int]] = [[] for _ in range(height)]
    first = True
    for char in text:
        strip = _rasterize_char(pil_font, char, top, height)
        if not strip:
            continue
        if not first:
            for row in rows:
                row.extend([0] * letter_spacing)
        for row, strip_row in zip(rows, strip):
            row.extend(strip_row)
        first = False

    if font_size > 1:
        rows = scale_rows(rows, font_size)

    return GlyphMatrix(rows)


def scale_rows(rows: Sequence[Sequence[int]], factor: int) -> List[List[int]]:
    """Nearest-neighbour upscale of a cell grid by an integer factor."""
    scaled = []
    for row in rows:
        wide = [value for value in row for _ in range(factor)]
        for _ in range(factor):
            scaled.append(list(wide))
    return scaled
