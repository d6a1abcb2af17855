from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from sum_drill.app import App, DrillScreen  # noqa: E402
from sum_drill.session import DrillConfig, Emphasis, build_quiz_session  # noqa: E402


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@pytest.fixture
def pygame_session() -> Iterator[None]:
    pygame.init()
    try:
        yield
    finally:
        pygame.quit()


def _key(k: int, ch: str = "", mod: int = 0) -> pygame.event.Event:
    return pygame.event.Event(pygame.KEYDOWN, {"key": k, "unicode": ch, "mod": mod})


def _make_screen(clock: FakeClock, config: DrillConfig | None = None) -> tuple[App, DrillScreen]:
    surface = pygame.Surface((960, 540))
    app = App(surface=surface)
    session = build_quiz_session(clock=clock, seed=99, config=config)
    screen = DrillScreen(app, controller=session)
    app.show(screen)
    return app, screen


def test_typed_answer_is_scored_and_feedback_expires(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock)
    session = screen.controller

    answer = str(session.state.problem.correct_answer)
    for ch in answer:
        app.handle_event(_key(0, ch))
    assert session.state.answer_input == answer

    app.handle_event(_key(pygame.K_RETURN))
    snap = session.snapshot()
    assert snap.score_text == "1 / 1"
    assert snap.emphasis is Emphasis.CORRECT
    assert snap.answer_input == ""

    app.render()
    clock.advance(1.0)
    app.render()
    assert session.snapshot().emphasis is Emphasis.NEUTRAL


def test_empty_submission_is_scored_wrong(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock)

    app.handle_event(_key(pygame.K_KP_ENTER))

    snap = screen.controller.snapshot()
    assert snap.score_text == "0 / 1"
    assert snap.emphasis is Emphasis.INCORRECT


def test_arrow_keys_change_configuration_within_bounds(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock, DrillConfig(digits=7, term_count=2))
    session = screen.controller
    session.submit_answer("x")

    app.handle_event(_key(pygame.K_UP))
    app.handle_event(_key(pygame.K_LEFT))
    # Already at the bounds: nothing changes, score is kept.
    assert session.config == DrillConfig(digits=7, term_count=2)
    assert session.state.score.total_attempts == 1

    app.handle_event(_key(pygame.K_DOWN))
    app.handle_event(_key(pygame.K_RIGHT))
    assert session.config == DrillConfig(digits=6, term_count=3)
    assert session.state.score.total_attempts == 0


def test_reset_keys_and_escape(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock)
    session = screen.controller

    session.submit_answer("x")
    app.handle_event(_key(pygame.K_F5))
    assert session.state.score.total_attempts == 0

    session.submit_answer("x")
    app.handle_event(_key(pygame.K_r, "r", pygame.KMOD_LCTRL))
    assert session.state.score.total_attempts == 0

    app.handle_event(_key(pygame.K_ESCAPE))
    assert not app.running


def test_render_handles_largest_configuration(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock, DrillConfig(digits=7, term_count=11))

    screen.controller.submit_answer("1")
    app.render()
    screen.render(pygame.Surface((400, 300)))
    assert len(screen.controller.snapshot().term_lines) == 11


def test_non_ascii_digit_keys_are_ignored(pygame_session: None) -> None:
    clock = FakeClock()
    app, screen = _make_screen(clock)

    app.handle_event(_key(0, "٣"))
    app.handle_event(_key(0, "３"))
    app.handle_event(_key(pygame.K_4, "4"))

    assert screen.controller.state.answer_input == "4"
