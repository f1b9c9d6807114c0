from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple

from entrybox.config import EditorConfig
from entrybox.editor.buffer import GlyphMetrics, LineBuffer, WidthConstrainedInserter
from entrybox.editor.layout import CaretBlinkTimer, PointerCaretMapper, ViewportWindow, ViewportWindower
from entrybox.editor.reconcile import InputReconciler

logger = logging.getLogger(__name__)

CARET_WIDTH = 10
CARET_HEIGHT = 2


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


class Renderer(Protocol):
    def draw_text(self, text: str, x: int, y: int) -> None:
        ...

    def fill_rect(self, x: int, y: int, width: int, height: int) -> None:
        ...


class PlatformInputSurface(Protocol):
    def bind(self, session: "TextEntrySession") -> None:
        ...

    def unbind(self) -> None:
        ...

    def focus(self) -> None:
        ...

    def blur(self) -> None:
        ...

    def clear(self) -> None:
        ...


class TextEntrySession:
    """One live editing session: the buffer, its caret and the input binding feeding it.

    Hosts deliver input through the ``on_*`` handlers and read back the visible lines,
    caret position and final text. After `teardown` every handler is a no-op.
    """

    def __init__(
        self,
        config: EditorConfig,
        metrics: GlyphMetrics,
        surface: Optional[PlatformInputSurface] = None,
        *,
        on_refocus: Optional[Callable[[], None]] = None,
        on_rejected: Optional[Callable[[str], None]] = None,
        on_submit: Optional[Callable[[str], None]] = None,
        trim_result: bool = False,
    ) -> None:
        self.config = config
        self.metrics = metrics
        self.on_refocus = on_refocus
        self.on_submit = on_submit
        self.trim_result = trim_result

        self.buffer = LineBuffer(config.max_lines)
        self.inserter = WidthConstrainedInserter(
            self.buffer,
            metrics,
            config.viewport_width,
            escape_backslash=config.escape_backslash,
            max_chars=config.max_chars,
            on_rejected=on_rejected,
        )
        self.reconciler = InputReconciler(self.inserter)
        self.windower = ViewportWindower(config.viewport_height, metrics.line_height(), config.scroll_policy)
        self.pointer = PointerCaretMapper(metrics)
        self.blink = CaretBlinkTimer(config.blink_frames)

        self.closed = False
        self.surface: Optional[PlatformInputSurface] = None
        if surface is not None:
            self.attach(surface)

    def attach(self, surface: PlatformInputSurface) -> None:
        """Bind and focus `surface`; `teardown` releases it again."""
        if self.closed:
            return
        if self.surface is not None and self.surface is not surface:
            self.surface.unbind()
            self.surface.blur()
        self.surface = surface
        surface.bind(self)
        surface.focus()

    def __enter__(self) -> "TextEntrySession":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.teardown()

    def _after_direct_edit(self) -> None:
        self.reconciler.reset()
        if self.surface is not None:
            self.surface.clear()
        self.blink.reset()

    # --- input messages ---

    def on_raw_input_changed(self, current: str) -> None:
        if self.closed:
            return
        if self.reconciler.input_changed(current).changed:
            self.blink.reset()

    def on_composition_start(self) -> None:
        if self.closed:
            return
        self.reconciler.composition_start()

    def on_composition_end(self, current: str) -> None:
        if self.closed:
            return
        self.reconciler.composition_end(current)
        self.blink.reset()

    def on_navigation_key(self, direction: Direction) -> None:
        if self.closed:
            return
        buf = self.buffer
        if direction is Direction.LEFT:
            buf.move_left()
        elif direction is Direction.RIGHT:
            buf.move_right()
        elif direction is Direction.UP:
            buf.move_up()
        elif direction is Direction.DOWN:
            buf.move_down()
        elif direction is Direction.HOME:
            buf.move_home()
        elif direction is Direction.END:
            buf.move_end()
        elif direction is Direction.PAGE_UP:
            buf.move_page_up(self.windower.visible_line_count())
        elif direction is Direction.PAGE_DOWN:
            buf.move_page_down(self.windower.visible_line_count())
        self._after_direct_edit()

    def on_delete_key(self) -> None:
        if self.closed:
            return
        self.inserter.delete_left()
        self._after_direct_edit()

    def on_confirm_key(self) -> None:
        if self.closed:
            return
        self.inserter.split_line()
        self._after_direct_edit()

    def on_pointer_down(self, x: float, y: float) -> None:
        if self.closed:
            return
        row, col = self.pointer.resolve(self.buffer.lines, x, y, first_row=self.window().start_row)
        self.buffer.set_caret(row, col)
        self._after_direct_edit()
        if self.on_refocus is not None:
            self.on_refocus()

    def tick(self) -> bool:
        return self.blink.tick()

    # --- queries ---

    def window(self) -> ViewportWindow:
        return self.windower.window(len(self.buffer.lines), self.buffer.cursor_row)

    def get_visible_lines(self) -> List[Tuple[str, bool]]:
        window = self.window()
        lines = self.buffer.lines[window.start_row : window.end_row]
        return [(line, window.start_row + idx == self.buffer.cursor_row) for idx, line in enumerate(lines)]

    def get_caret_screen_position(self) -> Tuple[int, int]:
        buf = self.buffer
        x = self.metrics.measure_width(buf.current_line[: buf.cursor_col])
        y = (buf.cursor_row - self.window().start_row) * self.metrics.line_height()
        return x, y

    def get_full_text(self) -> str:
        return self.buffer.text()

    def load_text(self, text: str) -> None:
        self.inserter.load_text(text)
        self._after_direct_edit()

    def submit(self) -> str:
        value = self.get_full_text()
        if self.trim_result:
            value = value.strip()
        if self.on_submit is not None:
            self.on_submit(value)
        return value

    def render(self, renderer: Renderer) -> None:
        line_height = self.metrics.line_height()
        for idx, (line, _) in enumerate(self.get_visible_lines()):
            renderer.draw_text(line, 0, idx * line_height)
        if self.blink.visible:
            x, y = self.get_caret_screen_position()
            renderer.fill_rect(x, y + line_height - CARET_HEIGHT, CARET_WIDTH, CARET_HEIGHT)

    def teardown(self) -> None:
        if self.closed:
            return
        self.closed = True
        surface, self.surface = self.surface, None
        if surface is not None:
            try:
                surface.unbind()
            finally:
                surface.blur()
        logger.debug("Text entry session torn down")
