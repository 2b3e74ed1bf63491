"""
Text scroller module for fixed-size pixel boxes.
Provides bounded (scroll once) and infinite (wrap forever) text animation.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from blit import apply_matrix, is_matrix_in_box
from glyphs import BoxBuffer, FontLike, GlyphMatrix, render_text
from utils import load_config, load_font_or_default


RenderCallback = Callable[[BoxBuffer], None]


class DegenerateSpeedError(ValueError):
    """Raised when no axis has a non-zero speed, so there is no tick interval."""


@dataclass
class Box:
    """Dimensions of the output box in cells."""

    width: int
    height: int

    @classmethod
    def from_config(cls, config: dict) -> "Box":
        """Use text_scroller.box if set, otherwise the LED matrix size."""
        matrix_config = config.get("matrix", {})
        box_config = config.get("text_scroller", {}).get("box", {})
        return cls(
            width=box_config.get("width", matrix_config.get("cols", 64)),
            height=box_config.get("height", matrix_config.get("rows", 32)),
        )


@dataclass
class ScrollOptions:
    """Options for a bounded scroll. Speeds are in cells per second."""

    box: Box
    font: FontLike = None
    letter_spacing: Optional[int] = None
    font_size: Optional[int] = None
    speed_x: float = 1
    speed_y: float = 0
    time_before_scroll: float = 1000  # ms

    @classmethod
    def from_config(cls, config: dict) -> "ScrollOptions":
        scroller_config = config.get("text_scroller", {})
        return cls(
            box=Box.from_config(config),
            font=_font_from_config(scroller_config),
            letter_spacing=scroller_config.get("letter_spacing"),
            font_size=scroller_config.get("font_size"),
            speed_x=scroller_config.get("speed_x", 1),
            speed_y=scroller_config.get("speed_y", 0),
            time_before_scroll=scroller_config.get("time_before_scroll", 1000),
        )


@dataclass
class InfiniteScrollOptions:
    """Options for an infinite horizontal scroll."""

    box: Box
    font: FontLike = None
    letter_spacing: Optional[int] = None
    font_size: Optional[int] = None
    speed_x: float = -10
    sep_width: int = 2

    @classmethod
    def from_config(cls, config: dict) -> "InfiniteScrollOptions":
        scroller_config = config.get("text_scroller", {})
        return cls(
            box=Box.from_config(config),
            font=_font_from_config(scroller_config),
            letter_spacing=scroller_config.get("letter_spacing"),
            font_size=scroller_config.get("font_size"),
            speed_x=scroller_config.get("infinite_speed_x", -10),
            sep_width=scroller_config.get("sep_width", 2),
        )


def _font_from_config(scroller_config: dict):
    return load_font_or_default(
        scroller_config.get("font"),
        scroller_config.get("font_pixel_size", 12),
    )


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def compute_interval(*speeds: float) -> float:
    """
    Seconds per tick so the fastest axis moves about one cell per tick.

    Axes with zero speed do not take part.

    Raises:
        DegenerateSpeedError: If every speed is zero.
    """
    intervals = [1 / abs(speed) for speed in speeds if speed != 0]
    if not intervals:
        raise DegenerateSpeedError("At least one axis needs a non-zero speed")
    return min(intervals)


def compute_destination(
    speed_x: float,
    speed_y: float,
    box: Box,
    glyph: GlyphMatrix,
) -> Tuple[float, float]:
    """Offset at which the glyph has fully traversed the box."""
    return (
        _sign(speed_x) * max(box.width, glyph.width),
        _sign(speed_y) * max(box.height, glyph.height),
    )


def restart_offset(speed_x: float, glyph_width: int, box_width: int) -> int:
    """Offset an infinite scroll jumps back to after wrapping."""
    if speed_x < 0:
        return 0
    return -glyph_width + box_width


def rasterize(text: str, font, letter_spacing, font_size, provider=render_text) -> GlyphMatrix:
    """
    Run the glyph provider, leaving unset options to the provider's defaults.

    Provider errors are not caught. Results that are not a GlyphMatrix yet
    (plain nested lists) are validated by wrapping them.
    """
    kwargs = {}
    if letter_spacing is not None:
        kwargs["letter_spacing"] = letter_spacing
    if font_size is not None:
        kwargs["font_size"] = font_size

    matrix = provider(text, font, **kwargs)
    if not isinstance(matrix, GlyphMatrix):
        matrix = GlyphMatrix(matrix)
    return matrix


class FixedRateTimer:
    """Sleeps until the next tick of a fixed-rate schedule on the event loop clock."""

    def __init__(self, interval: float):
        self.interval = interval
        self._deadline: Optional[float] = None

    async def wait(self):
        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._deadline is None:
            self._deadline = now
        self._deadline += self.interval

        delay = self._deadline - now
        if delay < 0:
            # Overran the slot, drop the missed ticks
            self._deadline = now
            delay = 0
        await asyncio.sleep(delay)


class TextScroll:
    """
    Scrolls text once across the box.

    The glyph starts at (0, 0), optionally pauses there, then moves until it
    has travelled max(box, glyph) cells along each moving axis.
    """

    def __init__(
        self,
        text: str,
        options: ScrollOptions,
        on_render: Optional[RenderCallback] = None,
        provider=render_text,
    ):
        """
        Initialize the TextScroll.

        Args:
            text: The text to scroll.
            options: Box size, font and speed options.
            on_render: Optional callback invoked with the box after each frame.
            provider: Glyph provider, called as provider(text, font, **options).

        Raises:
            InvalidGlyphError: If the text rasterizes to an empty matrix.
        """
        self.text = text
        self.options = options
        self.matrix = rasterize(
            text, options.font, options.letter_spacing, options.font_size, provider
        )
        self.box = BoxBuffer(options.box.width, options.box.height)
        self._listeners: List[RenderCallback] = []
        if on_render is not None:
            self.add_listener(on_render)

        self.destination = compute_destination(
            options.speed_x, options.speed_y, options.box, self.matrix
        )
        self.current_x = 0.0
        self.current_y = 0.0
        self.done = False
        self._running = False

    def add_listener(self, callback: RenderCallback):
        """Register another callback for rendered frames."""
        self._listeners.append(callback)

    def remove_listener(self, callback: RenderCallback):
        """Unregister a callback added with add_listener() or on_render."""
        self._listeners.remove(callback)

    def _emit(self):
        for callback in self._listeners:
            callback(self.box)

    @property
    def interval(self) -> float:
        return compute_interval(self.options.speed_x, self.options.speed_y)

    def render_at(self, x: float, y: float):
        """Blit the glyph at (x, y) and emit the frame."""
        apply_matrix((x, y), self.matrix, self.box)
        self._emit()

    def step(self) -> bool:
        """
        Run one animation tick.

        Returns:
            True once the destination has been rendered. Further calls
            after that do nothing.
        """
        if self.done:
            return True

        self.render_at(self.current_x, self.current_y)

        dest_x, dest_y = self.destination
        if self.current_x == dest_x and self.current_y == dest_y:
            self.done = True
            return True

        speed_x = self.options.speed_x
        speed_y = self.options.speed_y
        interval = self.interval

        self.current_x += speed_x * interval
        self.current_y += speed_y * interval

        # Snap to the destination once reached or passed in the travel direction
        if speed_x * (self.current_x - dest_x) >= 0:
            self.current_x = dest_x
        if speed_y * (self.current_y - dest_y) >= 0:
            self.current_y = dest_y
        return False

    def reset(self):
        """Move back to the start so the text can be scrolled again."""
        self.current_x = 0.0
        self.current_y = 0.0
        self.done = False

    async def scroll(self):
        """
        Scroll the text across the box and return once it has left it.

        Raises:
            DegenerateSpeedError: If both speeds are zero.
            RuntimeError: If this scroll is already running.
        """
        interval = self.interval
        if self._running:
            raise RuntimeError("Scroll is already running")
        if self.done:
            return

        self._running = True
        try:
            await self._scroll(interval)
        finally:
            self._running = False

    async def _scroll(self, interval: float):
        time_before_scroll = self.options.time_before_scroll
        box_size = (self.box.width, self.box.height)
        glyph_size = (self.matrix.width, self.matrix.height)
        if time_before_scroll > 0 and is_matrix_in_box(
            (self.current_x, self.current_y), glyph_size, box_size
        ):
            self.render_at(self.current_x, self.current_y)
            await asyncio.sleep(time_before_scroll / 1000)

        timer = FixedRateTimer(interval)
        while True:
            await timer.wait()
            if self.step():
                break


class InfiniteTextScroll:
    """
    Scrolls text horizontally forever, tiled with a gap between copies.

    Starts on construction inside a running event loop, otherwise on the
    first start(), wait() or run(). Runs until stop() is called; wait()
    resolves after the last tick.
    """

    def __init__(
        self,
        text: str,
        options: InfiniteScrollOptions,
        callback: RenderCallback,
        provider=render_text,
    ):
        if options.speed_x == 0:
            raise DegenerateSpeedError("Infinite scroll needs a non-zero speed_x")
        if options.sep_width < 0:
            raise ValueError(f"sep_width must be >= 0, got {options.sep_width}")

        self.text = text
        self.options = options
        self.callback = callback
        self.matrix = rasterize(
            text, options.font, options.letter_spacing, options.font_size, provider
        )
        self.box = BoxBuffer(options.box.width, options.box.height)

        self.interval = compute_interval(options.speed_x)
        self.restart_x = restart_offset(options.speed_x, self.matrix.width, self.box.width)
        self.current_x = 0.0

        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self.done = False

        # Starts right away when built inside a running event loop
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self.start()

    def step(self) -> bool:
        """
        Run one animation tick.

        Returns:
            True if a stop was requested and the loop should end.
        """
        sep_width = self.options.sep_width
        apply_matrix(
            (self.current_x, 0), self.matrix, self.box, duplicate=True, gap=sep_width
        )
        self.callback(self.box)

        if self._stop_event.is_set():
            return True

        self.current_x += self.options.speed_x * self.interval

        # Wrap once the glyph and its gap have fully left the box
        if (
            self.current_x - sep_width >= self.box.width
            or self.current_x + sep_width <= -self.matrix.width
        ):
            self.current_x = self.restart_x
        return False

    def stop(self):
        """Request the loop to end after the current tick."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    async def _loop(self):
        timer = FixedRateTimer(self.interval)
        try:
            while True:
                await timer.wait()
                if self.step():
                    break
        finally:
            self.done = True

    def start(self) -> asyncio.Task:
        """Schedule the loop on the running event loop (only once)."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._loop())
        return self._task

    async def wait(self):
        """Wait for the loop to finish, re-raising any error it ended with."""
        await self.start()

    async def run(self):
        """Start the loop if needed and run it until a stop is requested."""
        await self.wait()


def run(text: str = None, infinite: bool = None):
    """
    Run the text scroller as a standalone module, rendering to the terminal.

    Args:
        text: Text to display. Uses config default if not provided.
        infinite: Whether to wrap forever. Uses config mode if not provided.
    """
    from terminal_output import TerminalOutput

    config = load_config()
    scroller_config = config.get("text_scroller", {})

    if text is None:
        text = scroller_config.get("default_text", "Hello World!")
    if infinite is None:
        infinite = scroller_config.get("mode", "bounded") == "infinite"

    output = TerminalOutput()
    try:
        if infinite:
            scroller = InfiniteTextScroll(
                text, InfiniteScrollOptions.from_config(config), output.show
            )
            asyncio.run(scroller.run())
        else:
            scroller = TextScroll(text, ScrollOptions.from_config(config), output.show)
            asyncio.run(scroller.scroll())
    except KeyboardInterrupt:
        pass
    finally:
        output.clear()


if __name__ == "__main__":
    run()
