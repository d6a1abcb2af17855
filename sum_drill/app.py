"""Pygame UI shell for the Sum Drill.

Deterministic generation/scoring/timer state lives in sum_drill.session and
sum_drill.addition_core; this module only renders snapshots and turns key
presses into controller calls.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Protocol

import pygame

from .clock import RealClock
from .session import (
    DIGITS_MAX,
    DIGITS_MIN,
    TERM_COUNT_MAX,
    TERM_COUNT_MIN,
    DrillSnapshot,
    Emphasis,
    QuizSessionController,
    build_quiz_session,
)

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

_RING_COLORS: dict[Emphasis, tuple[int, int, int] | None] = {
    Emphasis.NEUTRAL: None,
    Emphasis.CORRECT: (22, 163, 74),
    Emphasis.INCORRECT: (220, 38, 38),
}


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    """Window surface plus the single active screen; QUIT ends the loop."""

    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screen: Screen | None = None
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def show(self, screen: Screen) -> None:
        self._screen = screen

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if self._screen is not None:
            self._screen.handle_event(event)

    def render(self) -> None:
        if self._screen is not None:
            self._screen.render(self._surface)


class DrillScreen:
    """Problem card, answer box, score and transient feedback."""

    def __init__(self, app: App, *, controller: QuizSessionController) -> None:
        self._app = app
        self._controller = controller

        self._small_font = pygame.font.Font(None, 24)
        self._header_font = pygame.font.Font(None, 28)
        self._input_font = pygame.font.Font(None, 52)
        self._term_fonts: dict[int, pygame.font.Font] = {}

    @property
    def controller(self) -> QuizSessionController:
        return self._controller

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return

        key = event.key
        mod = getattr(event, "mod", 0)

        if key == pygame.K_ESCAPE:
            self._app.quit()
            return
        if key == pygame.K_F5 or (key == pygame.K_r and mod & pygame.KMOD_CTRL):
            self._controller.reset()
            return
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._controller.submit_answer()
            return
        if key == pygame.K_UP:
            self._step_digits(1)
            return
        if key == pygame.K_DOWN:
            self._step_digits(-1)
            return
        if key == pygame.K_RIGHT:
            self._step_terms(1)
            return
        if key == pygame.K_LEFT:
            self._step_terms(-1)
            return
        if key == pygame.K_BACKSPACE:
            self._controller.backspace()
            return

        ch = event.unicode
        if ch:
            self._controller.type_char(ch)

    def _step_digits(self, delta: int) -> None:
        current = self._controller.config.digits
        target = max(DIGITS_MIN, min(DIGITS_MAX, current + delta))
        if target != current:
            self._controller.set_digits(target)

    def _step_terms(self, delta: int) -> None:
        current = self._controller.config.term_count
        target = max(TERM_COUNT_MIN, min(TERM_COUNT_MAX, current + delta))
        if target != current:
            self._controller.set_term_count(target)

    def _term_font(self, size: int) -> pygame.font.Font:
        font = self._term_fonts.get(size)
        if font is None:
            font = pygame.font.SysFont("dejavusansmono,couriernew,monospace", size, bold=True)
            self._term_fonts[size] = font
        return font

    def render(self, surface: pygame.Surface) -> None:
        self._controller.update()
        snap = self._controller.snapshot()

        w, h = surface.get_size()
        bg = (0, 0, 116)
        card_bg = (8, 18, 104)
        border = (236, 243, 255)
        text_main = (244, 248, 255)
        text_muted = (214, 225, 244)
        accent = (164, 190, 235)

        surface.fill(bg)

        card_w = max(320, min(460, int(w * 0.48)))
        card = pygame.Rect((w - card_w) // 2, 12, card_w, h - 24)
        ring = _RING_COLORS[snap.emphasis]
        if ring is not None:
            pygame.draw.rect(surface, ring, card.inflate(10, 10), 5)
        pygame.draw.rect(surface, card_bg, card)
        pygame.draw.rect(surface, border, card, 1)

        title = self._header_font.render(snap.title, True, text_main)
        surface.blit(title, title.get_rect(midtop=(card.centerx, card.y + 10)))

        score = self._header_font.render(f"Score : {snap.score_text}", True, accent)
        surface.blit(score, score.get_rect(midtop=(card.centerx, card.y + 36)))

        settings_line = self._small_font.render(
            f"Digits {snap.digits} (Up/Down)    Terms {snap.term_count} (Left/Right)",
            True,
            text_muted,
        )
        surface.blit(settings_line, settings_line.get_rect(midtop=(card.centerx, card.y + 62)))

        y = self._render_terms(surface, snap, card, top=card.y + 88, text_color=text_main)
        self._render_answer_box(surface, snap, card, top=y)
        self._render_feedback(surface, snap, card)

        hint = self._small_font.render("Enter: check  |  F5: reset  |  Esc: quit", True, text_muted)
        surface.blit(hint, hint.get_rect(midbottom=(card.centerx, card.bottom - 8)))

    def _render_terms(
        self,
        surface: pygame.Surface,
        snap: DrillSnapshot,
        card: pygame.Rect,
        *,
        top: int,
        text_color: tuple[int, int, int],
    ) -> int:
        # Leave room below for the rule, answer box, feedback and hint.
        available = max(60, card.bottom - top - 150)
        line_h = max(14, min(44, available // max(1, len(snap.term_lines))))
        font = self._term_font(line_h)

        right = card.right - 40
        y = top
        for line in snap.term_lines:
            txt = font.render(line, True, text_color)
            surface.blit(txt, txt.get_rect(topright=(right, y)))
            y += line_h

        y += 4
        pygame.draw.line(surface, (156, 163, 175), (card.x + 40, y), (right, y), 2)
        return y + 10

    def _render_answer_box(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect, *, top: int) -> None:
        box = pygame.Rect(card.x + 40, top, card.w - 80, 52)
        pygame.draw.rect(surface, (246, 250, 255), box)
        pygame.draw.rect(surface, (142, 168, 210), box, 2)

        caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
        shown = snap.answer_input + caret
        if snap.answer_input == "":
            entry = self._small_font.render("Your answer" + caret, True, (120, 132, 160))
        else:
            entry = self._input_font.render(shown, True, (12, 26, 88))
        surface.blit(entry, entry.get_rect(midright=(box.right - 12, box.centery)))

    def _render_feedback(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect) -> None:
        if snap.feedback_text is None:
            return
        color = (134, 239, 172) if snap.emphasis is Emphasis.CORRECT else (252, 165, 165)
        txt = self._small_font.render(snap.feedback_text, True, color)
        surface.blit(txt, txt.get_rect(midbottom=(card.centerx, card.bottom - 36)))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    seed: int | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Sum Drill")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    clock = pygame.time.Clock()

    app = App(surface=surface)

    # Every launch starts from the default 2-digit, 2-term configuration.
    session = build_quiz_session(clock=RealClock(), seed=_new_seed() if seed is None else seed)
    logger.info(
        "starting drill: digits=%d term_count=%d",
        session.config.digits,
        session.config.term_count,
    )
    app.show(DrillScreen(app, controller=session))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
