from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from entrybox.editor.buffer import GlyphMetrics


@dataclass(frozen=True)
class ViewportWindow:
    start_row: int
    visible_count: int

    @property
    def end_row(self) -> int:
        return self.start_row + self.visible_count

    def contains(self, row: int) -> bool:
        return self.start_row <= row < self.end_row


class ViewportWindower:
    """Chooses the slice of lines that fits the viewport and always holds the caret line.

    `centered` keeps the caret line in the middle when the buffer allows it; `tail` shows the
    last lines of the buffer and only scrolls back when the caret leaves that tail.
    """

    def __init__(self, viewport_height: int, line_height: int, policy: str = "centered") -> None:
        self.viewport_height = viewport_height
        self.line_height = line_height
        self.policy = policy

    def visible_line_count(self) -> int:
        if self.line_height <= 0:
            return 1
        return max(1, self.viewport_height // self.line_height)

    def window(self, line_count: int, caret_row: int) -> ViewportWindow:
        visible = self.visible_line_count()
        max_start = max(0, line_count - visible)
        if self.policy == "tail":
            start = max_start
            if caret_row < start:
                start = caret_row
        else:
            start = caret_row - visible // 2
        start = max(0, min(start, max_start))
        return ViewportWindow(start_row=start, visible_count=visible)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class PointerCaretMapper:
    """Maps taps to caret positions.

    A tap anywhere inside a glyph puts the caret before that glyph, not at the nearer edge.
    With 10 px glyphs on "ab", x=4 lands at 0, x=16 at 1 and x=25 at line end.
    """

    def __init__(self, metrics: GlyphMetrics) -> None:
        self.metrics = metrics

    def column_for_x(self, line: str, x: float) -> int:
        for idx in range(len(line)):
            char_start = self.metrics.measure_width(line[:idx])
            char_width = self.metrics.measure_width(line[idx])
            if x < char_start + char_width:
                return idx
        return len(line)

    def resolve(self, lines: List[str], x: float, y: float, *, first_row: int = 0) -> Tuple[int, int]:
        """Map a point relative to the text origin to the nearest `(row, col)`.

        `first_row` is the buffer row drawn at the top of the viewport.
        """
        line_height = max(1, self.metrics.line_height())
        row = _clamp(first_row + int(y // line_height), 0, len(lines) - 1)
        return row, self.column_for_x(lines[row], x)


class CaretBlinkTimer:
    def __init__(self, frames: int = 30) -> None:
        self.frames = frames
        self.counter = 0
        self.visible = True

    def tick(self) -> bool:
        self.counter += 1
        if self.counter < self.frames:
            return False
        self.counter = 0
        self.visible = not self.visible
        return True

    def reset(self) -> None:
        self.counter = 0
        self.visible = True
