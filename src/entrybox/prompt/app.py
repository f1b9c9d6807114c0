from __future__ import annotations

import dataclasses
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import pygame

from entrybox.config import EditorConfig, clamp_percent, load_config
from entrybox.editor.session import TextEntrySession
from entrybox.ui.common import (
    Button,
    FontMetrics,
    PygameTextInput,
    SurfaceRenderer,
    create_text_font,
    create_window,
    is_primary_pointer_down,
    is_submit_chord,
    navigation_direction,
    pointer_event_pos,
)

logger = logging.getLogger(__name__)

TEXT_PAD = 12
WINDOW_GAP = 10


@dataclass
class PromptLayout:
    label_rect: pygame.Rect
    input_rect: pygame.Rect
    button_rect: pygame.Rect

    @property
    def text_origin(self) -> Tuple[int, int]:
        return self.input_rect.left + TEXT_PAD, self.input_rect.top + TEXT_PAD

    @property
    def viewport_size(self) -> Tuple[int, int]:
        return (
            max(1, self.input_rect.width - TEXT_PAD * 2),
            max(1, self.input_rect.height - TEXT_PAD * 2),
        )


def _compute_layout(screen_rect: pygame.Rect, width_percent: int, height_percent: int) -> PromptLayout:
    label_h = int(screen_rect.height * 0.12)
    input_h = int(screen_rect.height * height_percent / 100)
    button_h = int(screen_rect.height * 0.13)
    total_h = label_h + input_h + button_h + WINDOW_GAP * 2
    top = screen_rect.top + (screen_rect.height - total_h) // 2

    input_w = int(screen_rect.width * width_percent / 100)
    left = screen_rect.left + (screen_rect.width - input_w) // 2
    button_w = int(screen_rect.width * 0.2)

    label_rect = pygame.Rect(left, top, input_w, label_h)
    input_rect = pygame.Rect(left, label_rect.bottom + WINDOW_GAP, input_w, input_h)
    button_rect = pygame.Rect(
        screen_rect.left + (screen_rect.width - button_w) // 2,
        input_rect.bottom + WINDOW_GAP,
        button_w,
        button_h,
    )
    return PromptLayout(label_rect=label_rect, input_rect=input_rect, button_rect=button_rect)


def _editor_config_for(config: Dict[str, Any], layout: PromptLayout) -> EditorConfig:
    base = EditorConfig.from_mapping(config.get("editor", {}))
    width, height = layout.viewport_size
    return dataclasses.replace(base, viewport_width=width, viewport_height=height)


class PromptApp:
    def __init__(
        self,
        *,
        label: Optional[str] = None,
        initial_text: str = "",
        screen: Optional[pygame.Surface] = None,
        screen_rect: Optional[pygame.Rect] = None,
        clock: Optional[pygame.time.Clock] = None,
    ) -> None:
        self.config = load_config()
        prompt = self.config.get("prompt", {})

        if screen is None:
            self.screen, self.screen_rect = create_window()
        else:
            self.screen = screen
            self.screen_rect = screen_rect or screen.get_rect()
        self.clock = clock or pygame.time.Clock()

        self.label = label if label is not None else str(prompt.get("label", ""))
        self.help_text = str(prompt.get("help_text", ""))
        self.ui_font = pygame.font.SysFont("sans", 20)
        self.text_font = create_text_font(int(prompt.get("font_size", 25)))

        self.layout = _compute_layout(
            self.screen_rect,
            clamp_percent(prompt.get("width_percent"), 70),
            clamp_percent(prompt.get("height_percent"), 50),
        )
        self.ok_button = Button(
            rect=self.layout.button_rect,
            label=str(prompt.get("ok_label", "OK")),
            fill=(245, 245, 245),
        )

        self.metrics = FontMetrics(self.text_font, line_gap=int(self.config.get("editor", {}).get("line_gap", 0)))
        self.text_input = PygameTextInput(self.layout.input_rect)
        self.result: Optional[str] = None
        self.session = TextEntrySession(
            _editor_config_for(self.config, self.layout),
            self.metrics,
            on_refocus=self.text_input.focus,
            on_submit=self._on_submit,
            trim_result=bool(prompt.get("trim_result", False)),
        )
        if initial_text:
            self.session.load_text(initial_text)
        self.renderer = SurfaceRenderer(self.screen, self.text_font, self.layout.text_origin)
        self.running = False

    def _on_submit(self, value: str) -> None:
        self.result = value
        self.running = False

    def _handle_pointer(self, pos: Tuple[int, int]) -> None:
        if self.ok_button.hit(pos):
            self.session.submit()
            return
        if self.layout.input_rect.collidepoint(pos):
            origin_x, origin_y = self.layout.text_origin
            self.session.on_pointer_down(pos[0] - origin_x, pos[1] - origin_y)

    def _handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
            return
        if self.text_input.handle_event(event):
            return
        if event.type == pygame.KEYDOWN:
            direction = navigation_direction(event)
            if is_submit_chord(event):
                self.session.submit()
            elif direction is not None:
                self.session.on_navigation_key(direction)
            elif event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_BACKSPACE:
                self.session.on_delete_key()
            elif event.key in {pygame.K_RETURN, pygame.K_KP_ENTER}:
                self.session.on_confirm_key()
            return
        if is_primary_pointer_down(event):
            pos = pointer_event_pos(event, self.screen_rect)
            if pos is not None:
                self._handle_pointer(pos)

    def _render(self) -> None:
        self.screen.fill((248, 244, 236))

        label_surface = self.ui_font.render(self.label, True, (30, 30, 30))
        self.screen.blit(label_surface, label_surface.get_rect(center=self.layout.label_rect.center))

        pygame.draw.rect(self.screen, (255, 255, 255), self.layout.input_rect)
        pygame.draw.rect(self.screen, (200, 200, 200), self.layout.input_rect, width=2)
        previous_clip = self.screen.get_clip()
        self.screen.set_clip(self.layout.input_rect)
        self.session.render(self.renderer)
        self.screen.set_clip(previous_clip)

        self.ok_button.draw(self.screen, self.ui_font)
        if self.help_text:
            help_surface = self.ui_font.render(self.help_text, True, (90, 90, 90))
            help_rect = help_surface.get_rect(midtop=(self.ok_button.rect.centerx, self.ok_button.rect.bottom + 6))
            self.screen.blit(help_surface, help_rect)

        pygame.display.flip()

    def run(self, *, quit_on_exit: bool = True) -> Optional[str]:
        self.running = True
        # SDL text input is only active while the prompt runs.
        self.session.attach(self.text_input)
        try:
            while self.running:
                for event in pygame.event.get():
                    self._handle_event(event)
                    if not self.running:
                        break
                self.session.tick()
                self._render()
                self.clock.tick(60)
        finally:
            self.session.teardown()
            if quit_on_exit:
                pygame.quit()
        return self.result


def main() -> None:
    logging.basicConfig(level=os.environ.get("ENTRYBOX_LOG_LEVEL", "WARNING").upper())
    label = " ".join(sys.argv[1:]) or None
    try:
        result = PromptApp(label=label).run(quit_on_exit=True)
    except Exception:
        logger.exception("Prompt crashed")
        pygame.quit()
        sys.exit(1)
    if result is None:
        sys.exit(1)
    print(result)


def run_embedded(screen: pygame.Surface, screen_rect: pygame.Rect, clock: pygame.time.Clock) -> Optional[str]:
    return PromptApp(screen=screen, screen_rect=screen_rect, clock=clock).run(quit_on_exit=False)


if __name__ == "__main__":
    main()
