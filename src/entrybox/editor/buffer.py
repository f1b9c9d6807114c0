from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

ESCAPED_BACKSLASH = "\\\\"


class GlyphMetrics(Protocol):
    def measure_width(self, text: str) -> int:
        ...

    def line_height(self) -> int:
        ...


@dataclass
class MonospaceMetrics:
    """Every character is `char_width` pixels wide."""

    char_width: int = 10
    height: int = 20

    def measure_width(self, text: str) -> int:
        return len(text) * self.char_width

    def line_height(self) -> int:
        return self.height


@dataclass(frozen=True)
class Caret:
    row: int
    col: int


class LineBuffer:
    """Ordered lines of plain text plus a single caret.

    The buffer never holds fewer than one line or more than `max_lines`, and the caret is
    always a valid position. Edits that cannot be applied are no-ops.
    """

    def __init__(self, max_lines: int) -> None:
        self.max_lines = max_lines
        self.lines: List[str] = [""]
        self.cursor_row = 0
        self.cursor_col = 0

    @property
    def caret(self) -> Caret:
        return Caret(self.cursor_row, self.cursor_col)

    @property
    def current_line(self) -> str:
        return self.lines[self.cursor_row]

    def is_full(self) -> bool:
        return len(self.lines) >= self.max_lines

    def text(self) -> str:
        return "\n".join(self.lines)

    def clear(self) -> None:
        self.lines = [""]
        self.cursor_row = 0
        self.cursor_col = 0

    def set_caret(self, row: int, col: int) -> None:
        self.cursor_row = max(0, min(row, len(self.lines) - 1))
        self.cursor_col = max(0, min(col, len(self.lines[self.cursor_row])))

    def insert_text(self, text: str) -> None:
        line = self.lines[self.cursor_row]
        self.lines[self.cursor_row] = line[: self.cursor_col] + text + line[self.cursor_col :]
        self.cursor_col += len(text)

    def delete_left(self) -> bool:
        if self.cursor_col > 0:
            line = self.lines[self.cursor_row]
            self.lines[self.cursor_row] = line[: self.cursor_col - 1] + line[self.cursor_col :]
            self.cursor_col -= 1
            return True
        if self.cursor_row == 0:
            return False
        prev_line = self.lines[self.cursor_row - 1]
        self.lines[self.cursor_row - 1] = prev_line + self.lines[self.cursor_row]
        self.lines.pop(self.cursor_row)
        self.cursor_row -= 1
        self.cursor_col = len(prev_line)
        return True

    def split_line(self) -> bool:
        if self.is_full():
            return False
        line = self.lines[self.cursor_row]
        self.lines[self.cursor_row] = line[: self.cursor_col]
        self.lines.insert(self.cursor_row + 1, line[self.cursor_col :])
        self.cursor_row += 1
        self.cursor_col = 0
        return True

    def move_left(self) -> None:
        if self.cursor_col > 0:
            self.cursor_col -= 1
            return
        if self.cursor_row > 0:
            self.cursor_row -= 1
            self.cursor_col = len(self.lines[self.cursor_row])

    def move_right(self) -> None:
        line = self.lines[self.cursor_row]
        if self.cursor_col < len(line):
            self.cursor_col += 1
            return
        if self.cursor_row < len(self.lines) - 1:
            self.cursor_row += 1
            self.cursor_col = 0

    def move_up(self) -> None:
        if self.cursor_row == 0:
            return
        self.cursor_row -= 1
        self.cursor_col = min(self.cursor_col, len(self.lines[self.cursor_row]))

    def move_down(self) -> None:
        if self.cursor_row >= len(self.lines) - 1:
            return
        self.cursor_row += 1
        self.cursor_col = min(self.cursor_col, len(self.lines[self.cursor_row]))

    def move_home(self) -> None:
        self.cursor_col = 0

    def move_end(self) -> None:
        self.cursor_col = len(self.lines[self.cursor_row])

    def move_page_up(self, lines: int) -> None:
        if self.cursor_row == 0:
            return
        self.cursor_row = max(0, self.cursor_row - lines)
        self.cursor_col = min(self.cursor_col, len(self.lines[self.cursor_row]))

    def move_page_down(self, lines: int) -> None:
        if self.cursor_row >= len(self.lines) - 1:
            return
        self.cursor_row = min(len(self.lines) - 1, self.cursor_row + lines)
        self.cursor_col = min(self.cursor_col, len(self.lines[self.cursor_row]))


def _text_to_lines(text: str, max_lines: int) -> List[str]:
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if len(lines) > max_lines:
        head = lines[: max_lines - 1]
        lines = head + [" ".join(lines[max_lines - 1 :])]
    return lines if lines else [""]


class WidthConstrainedInserter:
    """Inserts characters into a LineBuffer, breaking the line at the caret on overflow.

    Wrapping is eager and may break mid-word: the character that would push the current
    line past `available_width` moves everything from the caret onwards to a new line and
    is inserted there. If that remainder still leaves no room, it is pushed down once more
    and the character starts the empty line left behind, so a character costs at most two
    breaks. With the line cap reached the character is dropped and `on_rejected` is called
    with it.
    """

    def __init__(
        self,
        buffer: LineBuffer,
        metrics: GlyphMetrics,
        available_width: int,
        *,
        escape_backslash: bool = False,
        max_chars: Optional[int] = None,
        on_rejected: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.buffer = buffer
        self.metrics = metrics
        self.available_width = available_width
        self.escape_backslash = escape_backslash
        self.max_chars = max_chars
        self.on_rejected = on_rejected

    def _escape(self, char: str) -> str:
        if self.escape_backslash and char == "\\":
            return ESCAPED_BACKSLASH
        return char

    def _fits(self, text: str) -> bool:
        buf = self.buffer
        line = buf.current_line
        candidate = line[: buf.cursor_col] + text + line[buf.cursor_col :]
        return self.metrics.measure_width(candidate) <= self.available_width

    def _reject(self, char: str) -> bool:
        logger.debug(f"Dropped {char!r} at row {self.buffer.cursor_row}: no room left")
        if self.on_rejected is not None:
            self.on_rejected(char)
        return False

    def insert_char(self, char: str) -> bool:
        if char == "\n":
            return self.split_line()
        buf = self.buffer
        text = self._escape(char)
        if self.max_chars is not None and len(buf.current_line) + len(text) > self.max_chars:
            return self._reject(char)
        if self.metrics.measure_width(text) > self.available_width:
            return self._reject(char)
        while not self._fits(text):
            at_line_start = buf.cursor_col == 0
            if not buf.split_line():
                return self._reject(char)
            if at_line_start:
                # The remainder moved down; the character takes the empty line above it.
                buf.cursor_row -= 1
        buf.insert_text(text)
        return True

    def insert_text(self, text: str) -> int:
        return sum(1 for char in text if self.insert_char(char))

    def split_line(self) -> bool:
        return self.buffer.split_line()

    def delete_left(self) -> bool:
        buf = self.buffer
        if (
            self.escape_backslash
            and buf.cursor_col >= 2
            and buf.current_line[buf.cursor_col - 2 : buf.cursor_col] == ESCAPED_BACKSLASH
        ):
            buf.delete_left()
        return buf.delete_left()

    def load_text(self, text: str) -> int:
        """Replace the buffer with `text`, leaving the caret at its end.

        Lines past the cap are joined onto the last one, then every character goes through
        `insert_char`, so wrapping, escaping and both caps apply as if it had been typed.
        """
        self.buffer.clear()
        return self.insert_text("\n".join(_text_to_lines(text, self.buffer.max_lines)))
