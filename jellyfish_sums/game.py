"""Round lifecycle engine for the Jellyfish Sums quiz.

Each round presents an addition equation and a handful of candidate answers.
The player picks one before a 20 second countdown runs out:

* a correct pick scores +10, locks the round and waits for the UI to finish
  its celebration animation (:meth:`RoundController.animation_complete`)
  before the next round starts;
* a wrong pick costs 2 points (the score never drops below zero) and the
  player may keep guessing;
* if the countdown expires first the round locks, a "time's up" feedback is
  shown and the next round starts one second later.

The controller never touches pygame.  A ``QuizView`` receives round events
and the frame loop calls :meth:`RoundController.update` to deliver timer ticks
and deferred transitions.  All input arriving while a round is locked is
ignored rather than treated as an error, so late clicks and a timeout racing a
correct answer resolve to whichever event is processed first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .equations import Equation, EquationGenerator
from .options import OptionSet, OptionSetGenerator
from .random_source import RandomRangeSource
from .round_timer import Clock, RoundTimer, TimerHandle

logger = logging.getLogger(__name__)


class MissingViewError(RuntimeError):
    """Raised at startup when the presentation layer cannot receive game events."""


class QuizView(Protocol):
    def on_round_start(self, equation: Equation, options: OptionSet) -> None: ...
    def on_tick(self, time_left: int) -> None: ...
    def on_answer_result(self, is_correct: bool, new_score: int) -> None: ...
    def on_timeout(self) -> None: ...


VIEW_HOOKS = ("on_round_start", "on_tick", "on_answer_result", "on_timeout")


class RoundPhase(str, Enum):
    IDLE = "idle"
    ROUND_ACTIVE = "round_active"
    ROUND_RESOLVING = "round_resolving"


class Feedback(str, Enum):
    NONE = "none"
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def message(self) -> str:
        return _FEEDBACK_MESSAGES[self]


_FEEDBACK_MESSAGES = {
    Feedback.NONE: "",
    Feedback.SUCCESS: "Correct!",
    Feedback.ERROR: "Not quite, try again",
    Feedback.TIMEOUT: "Time's up! Next problem",
}


@dataclass(frozen=True, slots=True)
class QuizConfig:
    option_count: int = 4
    round_duration_s: int = 20
    correct_reward: int = 10
    incorrect_penalty: int = 2
    timeout_advance_delay_s: float = 1.0
    correct_animation_s: float = 0.6  # presentation only

    def __post_init__(self) -> None:
        if self.option_count < 1:
            raise ValueError("option_count must be >= 1")
        if self.round_duration_s <= 0:
            raise ValueError("round_duration_s must be > 0")
        if self.correct_reward < 0:
            raise ValueError("correct_reward must be >= 0")
        if self.incorrect_penalty < 0:
            raise ValueError("incorrect_penalty must be >= 0")
        if self.timeout_advance_delay_s < 0:
            raise ValueError("timeout_advance_delay_s must be >= 0")
        if self.correct_animation_s < 0:
            raise ValueError("correct_animation_s must be >= 0")


@dataclass(slots=True)
class GameState:
    score: int = 0
    round: int = 0
    time_left: int = 0
    is_locked: bool = False
    timer_handle: TimerHandle | None = None


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """View model for the UI (pure data)."""

    phase: RoundPhase
    round: int
    score: int
    time_left: int
    equation: Equation | None
    options: OptionSet
    feedback: Feedback
    input_enabled: bool


@dataclass(frozen=True, slots=True)
class SessionSummary:
    rounds_started: int
    correct: int
    wrong_attempts: int
    timeouts: int
    score: int


def _require_view(view: object) -> None:
    if view is None:
        raise MissingViewError("a view is required to run the quiz")
    missing = [name for name in VIEW_HOOKS if not callable(getattr(view, name, None))]
    if missing:
        raise MissingViewError(f"view is missing required hooks: {', '.join(missing)}")


class RoundController:
    """Owns one session's GameState and drives rounds through their lifecycle.

    Phases: IDLE -> ROUND_ACTIVE <-> ROUND_RESOLVING.  There is no terminal
    phase; rounds continue for as long as the session runs.
    """

    def __init__(
        self,
        *,
        view: QuizView,
        clock: Clock,
        rng: RandomRangeSource,
        config: QuizConfig | None = None,
        equations: EquationGenerator | None = None,
        option_sets: OptionSetGenerator | None = None,
    ) -> None:
        _require_view(view)

        self._view = view
        self._clock = clock
        self._config = config or QuizConfig()
        self._equations = equations or EquationGenerator(rng)
        self._option_sets = option_sets or OptionSetGenerator(rng)
        self._timer = RoundTimer(clock)

        self._state = GameState(time_left=self._config.round_duration_s)
        self._phase = RoundPhase.IDLE
        self._equation: Equation | None = None
        self._options: OptionSet = ()
        self._feedback = Feedback.NONE

        self._awaiting_animation = False
        self._advance_at_s: float | None = None

        self._correct = 0
        self._wrong_attempts = 0
        self._timeouts = 0

    @property
    def config(self) -> QuizConfig:
        return self._config

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def equation(self) -> Equation | None:
        return self._equation

    @property
    def options(self) -> OptionSet:
        return self._options

    @property
    def feedback(self) -> Feedback:
        return self._feedback

    @property
    def input_enabled(self) -> bool:
        return self._phase is RoundPhase.ROUND_ACTIVE and not self._state.is_locked

    def start_new_round(self) -> None:
        # Cancel first: nothing from the previous round may fire into this one.
        self._cancel_timer()
        self._advance_at_s = None
        self._awaiting_animation = False

        state = self._state
        state.round += 1
        state.time_left = self._config.round_duration_s
        state.is_locked = False

        self._equation = self._equations.next_equation()
        self._options = self._option_sets.generate(self._equation, self._config.option_count)
        self._feedback = Feedback.NONE
        self._phase = RoundPhase.ROUND_ACTIVE

        logger.debug("round %d: %s options=%s", state.round, self._equation.prompt, self._options)
        self._view.on_round_start(self._equation, self._options)

        state.timer_handle = self._timer.start(
            self._config.round_duration_s,
            self._on_tick,
            self._on_expire,
        )

    def submit_answer(self, value: int) -> bool:
        """Submit the player's pick. Returns True if the input was accepted."""

        state = self._state
        if state.is_locked or self._equation is None:
            logger.debug("ignored answer %r (locked=%s)", value, state.is_locked)
            return False

        if value == self._equation.answer:
            state.is_locked = True
            state.score += self._config.correct_reward
            self._cancel_timer()
            self._feedback = Feedback.SUCCESS
            self._phase = RoundPhase.ROUND_RESOLVING
            self._awaiting_animation = True
            self._correct += 1
            logger.info("round %d solved, score=%d", state.round, state.score)
            self._view.on_answer_result(True, state.score)
            return True

        state.score = max(0, state.score - self._config.incorrect_penalty)
        self._feedback = Feedback.ERROR
        self._wrong_attempts += 1
        self._view.on_answer_result(False, state.score)
        return True

    def animation_complete(self) -> None:
        """Continuation signal from the UI once the correct-answer animation ends."""

        if not self._awaiting_animation:
            logger.debug("ignored stale animation_complete")
            return
        self.start_new_round()

    def update(self) -> None:
        self._timer.update()
        if self._advance_at_s is not None and self._clock.now() >= self._advance_at_s:
            self.start_new_round()

    def snapshot(self) -> GameSnapshot:
        state = self._state
        return GameSnapshot(
            phase=self._phase,
            round=state.round,
            score=state.score,
            time_left=state.time_left,
            equation=self._equation,
            options=self._options,
            feedback=self._feedback,
            input_enabled=self.input_enabled,
        )

    def summary(self) -> SessionSummary:
        return SessionSummary(
            rounds_started=self._state.round,
            correct=self._correct,
            wrong_attempts=self._wrong_attempts,
            timeouts=self._timeouts,
            score=self._state.score,
        )

    def _on_tick(self, remaining: int) -> None:
        self._state.time_left = remaining
        self._view.on_tick(remaining)

    def _on_expire(self) -> None:
        state = self._state
        state.timer_handle = None
        if state.is_locked:
            logger.debug("ignored expiry for decided round %d", state.round)
            return

        state.is_locked = True
        self._feedback = Feedback.TIMEOUT
        self._phase = RoundPhase.ROUND_RESOLVING
        self._timeouts += 1
        self._advance_at_s = self._clock.now() + self._config.timeout_advance_delay_s
        logger.info("round %d timed out", state.round)
        self._view.on_timeout()

    def _cancel_timer(self) -> None:
        self._timer.cancel()
        self._state.timer_handle = None


def build_quiz_game(
    *,
    view: QuizView,
    clock: Clock,
    seed: int | None = None,
    config: QuizConfig | None = None,
) -> RoundController:
    """Factory for a quiz session; call ``start_new_round()`` to begin."""

    return RoundController(
        view=view,
        clock=clock,
        rng=RandomRangeSource(seed),
        config=config,
    )
