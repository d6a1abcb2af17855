"""Session state and interaction loop for the addition drill.

The whole session is one immutable ``SessionState`` value. Module-level
functions (``submit``, ``change_config``, ``reset``, ``tick``, ...) are pure
transitions returning the next state. ``QuizSessionController`` is the thin
stateful shell the UI talks to: it holds the current state, the problem
generator and the cancellable feedback-clear timer.

    IDLE --submit--> SUBMITTED --(1 s, no further submit)--> IDLE

The next problem is already live while feedback for the previous one shows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from .addition_core import AdditionProblemGenerator, Problem, RandomSource, SeededRng, parse_answer
from .clock import Clock, ScheduledCall, Scheduler

logger = logging.getLogger(__name__)

DIGITS_MIN = 1
DIGITS_MAX = 7
TERM_COUNT_MIN = 2
TERM_COUNT_MAX = 11

FEEDBACK_DURATION_S = 1.0
MAX_INPUT_LEN = 16
_ASCII_DIGITS = frozenset("0123456789")


@dataclass(frozen=True, slots=True)
class DrillConfig:
    digits: int = 2
    term_count: int = 2

    def __post_init__(self) -> None:
        if not (DIGITS_MIN <= self.digits <= DIGITS_MAX):
            raise ValueError(f"digits must be in [{DIGITS_MIN}, {DIGITS_MAX}]")
        if not (TERM_COUNT_MIN <= self.term_count <= TERM_COUNT_MAX):
            raise ValueError(f"term_count must be in [{TERM_COUNT_MIN}, {TERM_COUNT_MAX}]")


@dataclass(frozen=True, slots=True)
class Score:
    correct_count: int = 0
    total_attempts: int = 0

    def text(self) -> str:
        return f"{self.correct_count} / {self.total_attempts}"


@dataclass(frozen=True, slots=True)
class Feedback:
    answer: int  # correct answer of the problem that was just answered
    correct: bool


class SessionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"


class Emphasis(str, Enum):
    NEUTRAL = "neutral"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True, slots=True)
class SessionState:
    config: DrillConfig
    problem: Problem
    score: Score = Score()
    feedback: Feedback | None = None
    answer_input: str = ""

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.IDLE if self.feedback is None else SessionStatus.SUBMITTED


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    title: str
    digits: int
    term_count: int
    term_lines: list[str]
    answer_input: str
    input_hint: str
    correct_count: int
    total_attempts: int
    score_text: str
    feedback_text: str | None
    emphasis: Emphasis


def _new_problem(config: DrillConfig, generator: AdditionProblemGenerator) -> Problem:
    return generator.generate(digits=config.digits, term_count=config.term_count)


def initial_state(config: DrillConfig, generator: AdditionProblemGenerator) -> SessionState:
    return SessionState(config=config, problem=_new_problem(config, generator))


def edit_answer(state: SessionState, text: str) -> SessionState:
    return replace(state, answer_input=text)


def score_answer(state: SessionState, raw: str | None = None) -> Feedback:
    """Judge ``raw`` (default: the in-progress input) against the current problem."""

    text = state.answer_input if raw is None else raw
    value = parse_answer(text)
    expected = state.problem.correct_answer
    return Feedback(answer=expected, correct=value is not None and value == expected)


def record(state: SessionState, generator: AdditionProblemGenerator, feedback: Feedback) -> SessionState:
    """Count ``feedback`` towards the score, clear the input and deal the next problem."""

    score = Score(
        correct_count=state.score.correct_count + (1 if feedback.correct else 0),
        total_attempts=state.score.total_attempts + 1,
    )
    return replace(
        state,
        problem=_new_problem(state.config, generator),
        score=score,
        feedback=feedback,
        answer_input="",
    )


def submit(state: SessionState, generator: AdditionProblemGenerator, raw: str | None = None) -> SessionState:
    return record(state, generator, score_answer(state, raw))


def change_config(
    state: SessionState,
    generator: AdditionProblemGenerator,
    *,
    digits: int | None = None,
    term_count: int | None = None,
) -> SessionState:
    """Apply a new configuration; zeroes the score and regenerates the problem.

    Feedback is deliberately left as-is.
    """

    config = DrillConfig(
        digits=state.config.digits if digits is None else int(digits),
        term_count=state.config.term_count if term_count is None else int(term_count),
    )
    return replace(state, config=config, problem=_new_problem(config, generator), score=Score())


def reset(state: SessionState, generator: AdditionProblemGenerator) -> SessionState:
    return replace(state, problem=_new_problem(state.config, generator), score=Score())


def tick(state: SessionState) -> SessionState:
    """Feedback-clear timer fired."""
    return replace(state, feedback=None)


def feedback_text(feedback: Feedback | None) -> str | None:
    if feedback is None:
        return None
    if feedback.correct:
        return "Correct!"
    return f"Incorrect! The correct answer is {feedback.answer}."


def emphasis_for(feedback: Feedback | None) -> Emphasis:
    if feedback is None:
        return Emphasis.NEUTRAL
    return Emphasis.CORRECT if feedback.correct else Emphasis.INCORRECT


class QuizSessionController:
    """Owns the session state, the generator and the feedback-clear timer.

    Time is entirely via the injected Clock; call :meth:`update` regularly
    (once per frame) so the timer can fire.
    """

    def __init__(self, *, clock: Clock, rng: RandomSource, config: DrillConfig | None = None) -> None:
        self._clock = clock
        self._scheduler = Scheduler(clock)
        self._generator = AdditionProblemGenerator(rng)
        self._feedback_timer: ScheduledCall | None = None
        self._state = initial_state(config or DrillConfig(), self._generator)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> DrillConfig:
        return self._state.config

    @property
    def feedback_pending(self) -> bool:
        return self._feedback_timer is not None and self._feedback_timer.pending

    def edit_answer(self, text: str) -> None:
        self._state = edit_answer(self._state, text[:MAX_INPUT_LEN])

    def type_char(self, ch: str) -> None:
        current = self._state.answer_input
        if len(current) >= MAX_INPUT_LEN:
            return
        if ch in _ASCII_DIGITS or (ch == "-" and current == ""):
            self._state = edit_answer(self._state, current + ch)

    def backspace(self) -> None:
        self._state = edit_answer(self._state, self._state.answer_input[:-1])

    def submit_answer(self, raw: str | None = None) -> bool:
        """Score an answer and move on. Returns True if it was correct."""

        feedback = score_answer(self._state, raw)
        self._state = record(self._state, self._generator, feedback)

        # Supersede any clear still pending from an earlier submission.
        if self._feedback_timer is not None:
            self._feedback_timer.cancel()
        self._feedback_timer = self._scheduler.call_later(FEEDBACK_DURATION_S, self._clear_feedback)

        logger.debug(
            "submitted answer: correct=%s expected=%d score=%s",
            feedback.correct,
            feedback.answer,
            self._state.score.text(),
        )
        return feedback.correct

    def change_config(self, *, digits: int | None = None, term_count: int | None = None) -> None:
        self._state = change_config(self._state, self._generator, digits=digits, term_count=term_count)
        logger.debug(
            "configuration changed: digits=%d term_count=%d",
            self._state.config.digits,
            self._state.config.term_count,
        )

    def set_digits(self, digits: int) -> None:
        self.change_config(digits=digits)

    def set_term_count(self, term_count: int) -> None:
        self.change_config(term_count=term_count)

    def reset(self) -> None:
        self._state = reset(self._state, self._generator)
        logger.debug("score reset")

    def update(self) -> None:
        self._scheduler.run_due()

    def snapshot(self) -> DrillSnapshot:
        s = self._state
        return DrillSnapshot(
            title="Addition Drill",
            digits=s.config.digits,
            term_count=s.config.term_count,
            term_lines=s.problem.term_lines(),
            answer_input=s.answer_input,
            input_hint="Type answer then Enter",
            correct_count=s.score.correct_count,
            total_attempts=s.score.total_attempts,
            score_text=s.score.text(),
            feedback_text=feedback_text(s.feedback),
            emphasis=emphasis_for(s.feedback),
        )

    def _clear_feedback(self) -> None:
        self._state = tick(self._state)
        self._feedback_timer = None
        logger.debug("feedback cleared")


def build_quiz_session(
    *,
    clock: Clock,
    seed: int,
    config: DrillConfig | None = None,
) -> QuizSessionController:
    """Factory for a drill session on a seeded random stream."""

    return QuizSessionController(clock=clock, rng=SeededRng(seed), config=config)
