"""
Blitting of glyph matrices into box buffers.
Copies glyph cells into the box with clipping and optional horizontal tiling.
"""

import math
from typing import Tuple

from glyphs import BoxBuffer, GlyphMatrix


def round_offset(value: float) -> int:
    """Round to the nearest cell, halves towards positive infinity."""
    return int(math.floor(value + 0.5))


def _paint(glyph: GlyphMatrix, box: BoxBuffer, x_offset: int, y_offset: int):
    """Copy one glyph copy into the box, skipping cells outside of it."""
    # Clip the source range once instead of testing every cell
    x_start = max(0, -x_offset)
    x_end = min(glyph.width, box.width - x_offset)
    y_start = max(0, -y_offset)
    y_end = min(glyph.height, box.height - y_offset)
    if x_start >= x_end or y_start >= y_end:
        return

    for y in range(y_start, y_end):
        source = glyph[y]
        target = box.rows[y + y_offset]
        for x in range(x_start, x_end):
            target[x + x_offset] = source[x]


def apply_matrix(
    offset: Tuple[float, float],
    glyph: GlyphMatrix,
    box: BoxBuffer,
    duplicate: bool = False,
    gap: int = 0,
):
    """
    Clear the box and blit the glyph matrix into it at the given offset.

    Args:
        offset: (x, y) placement of the glyph's top-left corner in box cells.
        glyph: Glyph matrix to copy.
        box: Box buffer, mutated in place.
        duplicate: Also paint repeated copies to the left and right of the
                   first one so horizontal motion wraps seamlessly.
        gap: Empty columns between tiled copies.
    """
    if gap < 0:
        raise ValueError(f"gap must be >= 0, got {gap}")

    x_offset = round_offset(offset[0])
    y_offset = round_offset(offset[1])

    box.clear()
    _paint(glyph, box, x_offset, y_offset)

    if not duplicate:
        return

    period = glyph.width + gap

    x = x_offset + period
    while x < box.width:
        _paint(glyph, box, x, y_offset)
        x += period

    x = x_offset - period
    while x + glyph.width > 0:
        _paint(glyph, box, x, y_offset)
        x -= period


def is_matrix_in_box(
    offset: Tuple[float, float],
    glyph_size: Tuple[int, int],
    box_size: Tuple[int, int],
) -> bool:
    """
    Check whether a glyph placed at offset overlaps the box at all.

    Args:
        offset: (x, y) placement of the glyph.
        glyph_size: (width, height) of the glyph matrix.
        box_size: (width, height) of the box.
    """
    x_min = round_offset(offset[0])
    y_min = round_offset(offset[1])
    x_max = x_min + glyph_size[0]
    y_max = y_min + glyph_size[1]
    box_width, box_height = box_size

    return x_min < box_width and x_max > 0 and y_min < box_height and y_max > 0
