from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

import pygame

from entrybox.editor.session import Direction

if TYPE_CHECKING:
    from entrybox.editor.session import TextEntrySession


Color = Tuple[int, int, int]
Point = Tuple[int, int]


FINGERDOWN = getattr(pygame, "FINGERDOWN", None)

_NAVIGATION_KEYS = {
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_UP: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_HOME: Direction.HOME,
    pygame.K_END: Direction.END,
    pygame.K_PAGEUP: Direction.PAGE_UP,
    pygame.K_PAGEDOWN: Direction.PAGE_DOWN,
}

_COMMAND_MODS = pygame.KMOD_CTRL | pygame.KMOD_ALT | pygame.KMOD_META | pygame.KMOD_GUI


@dataclass
class Button:
    rect: pygame.Rect
    label: str = ""
    fill: Optional[Color] = None
    border_color: Optional[Color] = (30, 30, 30)
    border_width: int = 0

    def draw(self, surface: pygame.Surface, font: Optional[pygame.font.Font] = None) -> None:
        if self.fill is not None:
            pygame.draw.rect(surface, self.fill, self.rect, border_radius=12)
        if self.border_color is not None and self.border_width > 0:
            pygame.draw.rect(
                surface,
                self.border_color,
                self.rect,
                width=self.border_width,
                border_radius=12,
            )
        if self.label and font is not None:
            text = font.render(self.label, True, (20, 20, 20))
            text_rect = text.get_rect(center=self.rect.center)
            surface.blit(text, text_rect)

    def hit(self, pos: Tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


def create_window(size: Optional[Tuple[int, int]] = None) -> Tuple[pygame.Surface, pygame.Rect]:
    pygame.init()
    if size is None:
        screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
    else:
        screen = pygame.display.set_mode(size)
    pygame.mouse.set_visible(True)
    return screen, screen.get_rect()


def create_text_font(size: int) -> pygame.font.Font:
    if pygame.font.match_font("ubuntu"):
        return pygame.font.SysFont("ubuntu", size)
    return pygame.font.SysFont("sans", size)


class FontMetrics:
    def __init__(self, font: pygame.font.Font, *, line_gap: int = 0) -> None:
        self.font = font
        self.line_gap = line_gap

    def measure_width(self, text: str) -> int:
        return self.font.size(text)[0]

    def line_height(self) -> int:
        return self.font.get_height() + self.line_gap


class SurfaceRenderer:
    def __init__(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        origin: Point,
        color: Color = (20, 20, 20),
    ) -> None:
        self.surface = surface
        self.font = font
        self.origin = origin
        self.color = color

    def draw_text(self, text: str, x: int, y: int) -> None:
        if not text:
            return
        rendered = self.font.render(text, True, self.color)
        self.surface.blit(rendered, (self.origin[0] + x, self.origin[1] + y))

    def fill_rect(self, x: int, y: int, width: int, height: int) -> None:
        rect = pygame.Rect(self.origin[0] + x, self.origin[1] + y, width, height)
        pygame.draw.rect(self.surface, self.color, rect)


class PygameTextInput:
    """SDL text input feeding a session with an accumulated value.

    TEXTINPUT events append committed text; TEXTEDITING events with pending text mark an
    IME composition, which ends with the next commit or with an empty edit (cancel).
    """

    def __init__(self, rect: pygame.Rect) -> None:
        self.rect = rect
        self.value = ""
        self.composing = False
        self.active = False
        self.session: Optional["TextEntrySession"] = None

    def bind(self, session: "TextEntrySession") -> None:
        self.session = session

    def unbind(self) -> None:
        self.session = None
        self.composing = False

    def focus(self) -> None:
        pygame.key.set_text_input_rect(self.rect)
        pygame.key.start_text_input()
        self.active = True

    def blur(self) -> None:
        pygame.key.stop_text_input()
        self.active = False

    def clear(self) -> None:
        self.value = ""

    def handle_event(self, event: pygame.event.Event) -> bool:
        session = self.session
        if session is None:
            return False
        if event.type == pygame.TEXTEDITING:
            if event.text and not self.composing:
                self.composing = True
                session.on_composition_start()
            elif not event.text and self.composing:
                self.composing = False
                session.on_composition_end(self.value)
            return True
        if event.type == pygame.TEXTINPUT:
            self.value += event.text
            if self.composing:
                self.composing = False
                session.on_composition_end(self.value)
            else:
                session.on_raw_input_changed(self.value)
            return True
        return False


def navigation_direction(event: pygame.event.Event) -> Optional[Direction]:
    if event.type != pygame.KEYDOWN:
        return None
    if event.mod & _COMMAND_MODS:
        return None
    return _NAVIGATION_KEYS.get(event.key)


def is_submit_chord(event: pygame.event.Event) -> bool:
    if event.type != pygame.KEYDOWN:
        return False
    if event.key not in {pygame.K_RETURN, pygame.K_KP_ENTER}:
        return False
    return bool(event.mod & pygame.KMOD_SHIFT) and not event.mod & _COMMAND_MODS


def is_primary_pointer_down(event: pygame.event.Event) -> bool:
    if event.type == pygame.MOUSEBUTTONDOWN:
        # Some touch stacks emit emulated mouse events with button 0.
        button = getattr(event, "button", 1)
        if button in {0, 1}:
            return True
        return bool(getattr(event, "touch", False))
    return FINGERDOWN is not None and event.type == FINGERDOWN


def pointer_event_pos(event: pygame.event.Event, screen_rect: pygame.Rect) -> Optional[Point]:
    if hasattr(event, "pos"):
        return event.pos
    if FINGERDOWN is not None and event.type == FINGERDOWN:
        return (
            int(event.x * screen_rect.width),
            int(event.y * screen_rect.height),
        )
    return None
