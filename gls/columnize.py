"""Color tags and a tab-stop table writer for listing output.

``TableWriter`` buffers rows of cells and, on flush, pads every cell except
the last one in its row to the widest cell of its column. Widths ignore ANSI
escapes, so colored and plain cells line up. Writers are scoped: construct
one per output block and flush it (or use it as a context manager).
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import TextIO

from .ansi import display_width, sanitize_terminal_text


class Color(str, enum.Enum):
    """SGR sequences used to tag listing cells."""

    RESET = "\x1b[000000m"
    GREEN = "\x1b[000032m"
    YELLOW = "\x1b[000033m"
    RED = "\x1b[000031m"
    BLUE = "\x1b[000034m"
    LIGHT_BLUE = "\x1b[000036m"
    BLINKING_RED_BACKGROUND = "\x1b[0041;5m"


Cell = str | tuple[str, Color]


def colorize(color: Color, text: str) -> str:
    """Wrap ``text`` in ``color``; ``Color.RESET`` leaves the text untouched."""
    if color is Color.RESET:
        return text
    return f"{color.value}{text}{Color.RESET.value}"


def columnize_row(color: Color, idx: int, values: Sequence[str]) -> list[Cell]:
    """Return ``values`` as cells with only the cell at ``idx`` tagged ``color``."""
    return [(value, color) if i == idx else value for i, value in enumerate(values)]


class TableWriter:
    """Buffered column aligner with left or right alignment."""

    def __init__(
        self,
        stream: TextIO,
        *,
        min_width: int = 0,
        padding: int = 2,
        align_right: bool = False,
        discard_empty_columns: bool = False,
    ) -> None:
        self.stream = stream
        self.min_width = min_width
        self.padding = padding
        self.align_right = align_right
        self.discard_empty_columns = discard_empty_columns
        self._rows: list[list[str]] = []

    @classmethod
    def standard(cls, stream: TextIO) -> TableWriter:
        """Left-aligned columns separated by two spaces."""
        return cls(stream, min_width=0, padding=2)

    @classmethod
    def right_aligned(cls, stream: TextIO) -> TableWriter:
        """Compact right-aligned columns; all-empty columns take no space."""
        return cls(stream, min_width=1, padding=1, align_right=True, discard_empty_columns=True)

    def __enter__(self) -> TableWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()

    def emit_row(self, cells: Iterable[Cell]) -> None:
        """Queue one row; plain strings are untagged cells."""
        row: list[str] = []
        for cell in cells:
            if isinstance(cell, tuple):
                text, color = cell
                row.append(colorize(color, sanitize_terminal_text(text)))
            else:
                row.append(sanitize_terminal_text(cell))
        self._rows.append(row)

    def _column_widths(self) -> list[int]:
        widths: list[int] = []
        empty: list[bool] = []
        for row in self._rows:
            for idx, cell in enumerate(row[:-1]):
                width = display_width(cell)
                if idx >= len(widths):
                    widths.append(width)
                    empty.append(width == 0)
                    continue
                widths[idx] = max(widths[idx], width)
                empty[idx] = empty[idx] and width == 0

        out: list[int] = []
        for width, is_empty in zip(widths, empty):
            if is_empty and self.discard_empty_columns:
                out.append(0)
                continue
            out.append(max(self.min_width, width + self.padding))
        return out

    def _format_cell(self, cell: str, width: int) -> str:
        fill = " " * max(0, width - display_width(cell))
        if self.align_right:
            return fill + cell
        return cell + fill

    def flush(self) -> None:
        """Write all buffered rows aligned, then reset the buffer."""
        if not self._rows:
            return
        widths = self._column_widths()
        lines: list[str] = []
        for row in self._rows:
            parts = [self._format_cell(cell, widths[idx]) for idx, cell in enumerate(row[:-1])]
            if row:
                parts.append(row[-1])
            lines.append("".join(parts) + "\n")
        self._rows = []
        self.stream.write("".join(lines))
        self.stream.flush()


__all__ = [
    "Cell",
    "Color",
    "TableWriter",
    "colorize",
    "columnize_row",
]
