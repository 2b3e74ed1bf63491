"""
Terminal output for rendered boxes.
Draws each frame as block characters and redraws it in place.
"""

import sys

C_RESET = "\033[0m"
CURSOR_UP = "\033[{}A"
CLEAR_LINE = "\033[2K"

LIT = "█"
UNLIT = " "


def box_to_lines(rows, lit: str = LIT, unlit: str = UNLIT) -> list:
    """Convert box rows into printable lines, one character per cell."""
    return ["".join(lit if value else unlit for value in row) for row in rows]


class TerminalOutput:
    """Shows box frames in a terminal."""

    def __init__(self, stream=None, color: tuple = None):
        """
        Initialize the TerminalOutput.

        Args:
            stream: Text stream to write to (default: sys.stdout).
            color: Optional (r, g, b) truecolor for lit cells.
        """
        self.stream = stream or sys.stdout
        self.color = color
        self._lines_drawn = 0

    def show(self, box):
        """Draw the box, replacing the previously drawn frame."""
        lines = box_to_lines(box.rows)
        if self.color is not None:
            r, g, b = self.color
            prefix = f"\033[38;2;{r};{g};{b}m"
            lines = [prefix + line + C_RESET for line in lines]

        if self._lines_drawn:
            self.stream.write(CURSOR_UP.format(self._lines_drawn))
        for line in lines:
            self.stream.write(CLEAR_LINE + line + "\n")
        self.stream.flush()
        self._lines_drawn = len(lines)

    def clear(self):
        """Erase the last drawn frame."""
        if not self._lines_drawn:
            return
        self.stream.write(CURSOR_UP.format(self._lines_drawn))
        for _ in range(self._lines_drawn):
            self.stream.write(CLEAR_LINE + "\n")
        self.stream.write(CURSOR_UP.format(self._lines_drawn))
        self.stream.flush()
        self._lines_drawn = 0
