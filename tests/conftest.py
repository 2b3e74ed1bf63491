import pytest


def solid_rows(width, height, value=1):
    """Glyph rows with every cell lit."""
    return [[value] * width for _ in range(height)]


def fixed_provider(rows, calls=None):
    """Glyph provider that ignores the text and returns the given rows."""
    def provider(text, font, **kwargs):
        if calls is not None:
            calls.append((text, font, kwargs))
        return rows
    return provider


@pytest.fixture
def frames():
    """Collects detached copies of every rendered box."""
    collected = []

    def record(box):
        collected.append(box.snapshot())

    record.frames = collected
    return record
