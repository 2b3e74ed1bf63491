import random

import pytest

from blit import apply_matrix, is_matrix_in_box, round_offset
from glyphs import BoxBuffer, GlyphMatrix

from conftest import solid_rows


def runs(row):
    """Split a row into (value, length) runs."""
    result = []
    for value in row:
        lit = 1 if value else 0
        if result and result[-1][0] == lit:
            result[-1][1] += 1
        else:
            result.append([lit, 1])
    return [tuple(run) for run in result]


def test_round_offset_halves_go_up():
    assert round_offset(0.5) == 1
    assert round_offset(1.4) == 1
    assert round_offset(-0.5) == 0
    assert round_offset(-1.5) == -1
    assert round_offset(-1.6) == -2


def test_apply_matrix_copies_values_at_offset():
    glyph = GlyphMatrix([[1, 2], [3, 4]])
    box = BoxBuffer(4, 3)

    apply_matrix((1, 1), glyph, box)

    assert box.rows == [
        [0, 0, 0, 0],
        [0, 1, 2, 0],
        [0, 3, 4, 0],
    ]


def test_apply_matrix_clips_instead_of_wrapping():
    glyph = GlyphMatrix([[1, 2, 3], [4, 5, 6]])
    box = BoxBuffer(2, 2)

    apply_matrix((-1, 1), glyph, box)

    assert box.rows == [
        [0, 0],
        [2, 3],
    ]

    apply_matrix((-1, -1), glyph, box)

    assert box.rows == [
        [5, 6],
        [0, 0],
    ]


def test_apply_matrix_clears_stale_cells():
    glyph = GlyphMatrix(solid_rows(2, 2))
    box = BoxBuffer(5, 2)

    apply_matrix((0, 0), glyph, box)
    apply_matrix((3, 0), glyph, box)

    assert box.rows == [[0, 0, 0, 1, 1], [0, 0, 0, 1, 1]]


def test_apply_matrix_keeps_box_rows_in_place():
    glyph = GlyphMatrix(solid_rows(2, 2))
    box = BoxBuffer(5, 2)
    rows = box.rows
    first_row = box.rows[0]

    apply_matrix((1, 0), glyph, box)

    assert box.rows is rows
    assert box.rows[0] is first_row


def test_apply_matrix_fully_outside_leaves_box_empty():
    glyph = GlyphMatrix(solid_rows(3, 3))
    box = BoxBuffer(4, 4)

    apply_matrix((10, -10), glyph, box)

    assert box.rows == [[0] * 4 for _ in range(4)]


def test_apply_matrix_only_writes_covered_cells():
    rng = random.Random(1234)
    for _ in range(200):
        width, height = rng.randint(1, 6), rng.randint(1, 6)
        box_width, box_height = rng.randint(1, 8), rng.randint(1, 8)
        offset = (rng.uniform(-10, 10), rng.uniform(-10, 10))
        glyph = GlyphMatrix(solid_rows(width, height))
        box = BoxBuffer(box_width, box_height)

        apply_matrix(offset, glyph, box)

        ox, oy = round_offset(offset[0]), round_offset(offset[1])
        assert len(box.rows) == box_height
        for y, row in enumerate(box.rows):
            assert len(row) == box_width
            for x, value in enumerate(row):
                covered = ox <= x < ox + width and oy <= y < oy + height
                assert value == (1 if covered else 0)


def test_apply_matrix_rejects_negative_gap():
    glyph = GlyphMatrix(solid_rows(2, 1))
    box = BoxBuffer(4, 1)
    with pytest.raises(ValueError):
        apply_matrix((0, 0), glyph, box, duplicate=True, gap=-1)


def test_tiling_fills_both_sides():
    glyph = GlyphMatrix(solid_rows(3, 1))
    box = BoxBuffer(12, 1)

    apply_matrix((4, 0), glyph, box, duplicate=True, gap=2)

    # copies start at -1, 4 and 9
    assert box.rows[0] == [1, 1, 0, 0, 1, 1, 1, 0, 0, 1, 1, 1]


def test_tiling_rows_match_first_copy():
    glyph = GlyphMatrix([[1, 0], [0, 1]])
    box = BoxBuffer(8, 3)

    apply_matrix((1, 1), glyph, box, duplicate=True, gap=1)

    assert box.rows[0] == [0] * 8
    assert box.rows[1] == [0, 1, 0, 0, 1, 0, 0, 1]
    assert box.rows[2] == [0, 0, 1, 0, 0, 1, 0, 0]


def test_tiling_separates_copies_by_exact_gap():
    rng = random.Random(99)
    for _ in range(200):
        width = rng.randint(1, 5)
        gap = rng.randint(0, 4)
        period = width + gap
        box_width = rng.randint(period, period * 4)
        offset = (rng.uniform(-20, 20), 0)
        glyph = GlyphMatrix(solid_rows(width, 1))
        box = BoxBuffer(box_width, 1)

        apply_matrix(offset, glyph, box, duplicate=True, gap=gap)

        if gap == 0:
            assert box.rows[0] == [1] * box_width
            continue

        row_runs = runs(box.rows[0])
        # Runs touching the box edges may be clipped, interior ones may not
        for value, length in row_runs[1:-1]:
            if value:
                assert length == width
            else:
                assert length == gap
        for value, length in (row_runs[0], row_runs[-1]):
            assert length <= (width if value else gap)


def test_tiling_without_gap_lights_every_column():
    glyph = GlyphMatrix(solid_rows(3, 2))
    box = BoxBuffer(10, 2)

    apply_matrix((-1.2, 0), glyph, box, duplicate=True, gap=0)

    assert box.rows == [[1] * 10, [1] * 10]


def test_is_matrix_in_box_edges():
    assert is_matrix_in_box((0, 0), (4, 2), (10, 5))
    assert is_matrix_in_box((-3, 0), (4, 2), (10, 5))
    assert not is_matrix_in_box((-4, 0), (4, 2), (10, 5))
    assert is_matrix_in_box((9, 4), (4, 2), (10, 5))
    assert not is_matrix_in_box((10, 0), (4, 2), (10, 5))
    assert not is_matrix_in_box((0, 5), (4, 2), (10, 5))
    assert not is_matrix_in_box((0, -2), (4, 2), (10, 5))


def test_is_matrix_in_box_rounds_offset():
    assert not is_matrix_in_box((9.5, 0), (1, 1), (10, 1))
    assert is_matrix_in_box((9.4, 0), (1, 1), (10, 1))
    assert is_matrix_in_box((-0.5, 0), (1, 1), (10, 1))


def test_is_matrix_in_box_matches_brute_force_overlap():
    rng = random.Random(7)
    for _ in range(500):
        width, height = rng.randint(1, 6), rng.randint(1, 6)
        box_width, box_height = rng.randint(1, 8), rng.randint(1, 8)
        offset = (rng.uniform(-12, 12), rng.uniform(-12, 12))
        ox, oy = round_offset(offset[0]), round_offset(offset[1])

        overlap = any(
            0 <= ox + x < box_width and 0 <= oy + y < box_height
            for y in range(height)
            for x in range(width)
        )

        assert is_matrix_in_box(offset, (width, height), (box_width, box_height)) == overlap
