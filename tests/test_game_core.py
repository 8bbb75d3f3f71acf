from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from jellyfish_sums.equations import Equation
from jellyfish_sums.game import (
    Feedback,
    MissingViewError,
    QuizConfig,
    RoundController,
    RoundPhase,
    build_quiz_game,
)
from jellyfish_sums.random_source import RandomRangeSource


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


@dataclass
class RecordingView:
    rounds: list[tuple[Equation, tuple[int, ...]]] = field(default_factory=list)
    ticks: list[int] = field(default_factory=list)
    results: list[tuple[bool, int]] = field(default_factory=list)
    timeouts: int = 0

    def on_round_start(self, equation: Equation, options: tuple[int, ...]) -> None:
        self.rounds.append((equation, options))

    def on_tick(self, time_left: int) -> None:
        self.ticks.append(time_left)

    def on_answer_result(self, is_correct: bool, new_score: int) -> None:
        self.results.append((is_correct, new_score))

    def on_timeout(self) -> None:
        self.timeouts += 1


class FixedEquations:
    def __init__(self, *equations: Equation) -> None:
        self._queue = list(equations)

    def next_equation(self) -> Equation:
        return self._queue.pop(0)


def _wrong_option(game: RoundController) -> int:
    assert game.equation is not None
    return next(v for v in game.options if v != game.equation.answer)


def _run_out_the_clock(game: RoundController, clock: FakeClock, seconds: int) -> None:
    for _ in range(seconds):
        clock.advance(1.0)
        game.update()


def test_idle_before_first_round() -> None:
    view = RecordingView()
    game = build_quiz_game(view=view, clock=FakeClock(), seed=1)

    assert game.phase is RoundPhase.IDLE
    assert game.state.round == 0
    assert game.state.score == 0
    assert game.equation is None
    assert not game.input_enabled
    assert game.submit_answer(5) is False
    assert view.results == []


def test_start_new_round_sets_up_live_round() -> None:
    view = RecordingView()
    game = build_quiz_game(view=view, clock=FakeClock(), seed=1)
    game.start_new_round()

    state = game.state
    assert game.phase is RoundPhase.ROUND_ACTIVE
    assert state.round == 1
    assert state.time_left == 20
    assert state.is_locked is False
    assert state.timer_handle is not None
    assert game.feedback is Feedback.NONE
    assert game.input_enabled

    eq = game.equation
    assert eq is not None
    assert len(game.options) == 4
    assert game.options.count(eq.answer) == 1
    assert view.rounds == [(eq, game.options)]
    assert view.ticks == [20]


def test_correct_answer_scores_locks_and_waits_for_animation() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = RoundController(
        view=view,
        clock=clock,
        rng=RandomRangeSource(4),
        equations=FixedEquations(Equation(a=3, b=4, answer=7), Equation(a=5, b=6, answer=11)),
    )
    game.start_new_round()

    assert game.submit_answer(7) is True
    assert view.results == [(True, 10)]
    assert game.state.score == 10
    assert game.state.is_locked
    assert game.state.timer_handle is None
    assert game.phase is RoundPhase.ROUND_RESOLVING
    assert game.feedback is Feedback.SUCCESS
    assert not game.input_enabled

    # Nothing advances on its own; the UI's continuation signal does.
    _run_out_the_clock(game, clock, 30)
    assert game.state.round == 1
    assert view.timeouts == 0

    game.animation_complete()
    assert game.state.round == 2
    assert game.equation == Equation(a=5, b=6, answer=11)
    assert 11 in game.options
    assert game.state.time_left == 20
    assert not game.state.is_locked
    assert game.feedback is Feedback.NONE


def test_incorrect_answer_costs_points_and_keeps_round_live() -> None:
    view = RecordingView()
    game = RoundController(
        view=view,
        clock=FakeClock(),
        rng=RandomRangeSource(4),
        equations=FixedEquations(Equation(a=3, b=4, answer=7), Equation(a=1, b=1, answer=2)),
    )
    game.start_new_round()
    game.submit_answer(7)
    game.animation_complete()
    assert game.state.score == 10

    wrong = _wrong_option(game)
    assert game.submit_answer(wrong) is True
    assert view.results[-1] == (False, 8)
    assert game.state.score == 8
    assert not game.state.is_locked
    assert game.phase is RoundPhase.ROUND_ACTIVE
    assert game.feedback is Feedback.ERROR
    assert game.state.round == 2

    # The player may keep guessing until correct.
    assert game.submit_answer(2) is True
    assert game.state.score == 18


def test_score_never_drops_below_zero() -> None:
    view = RecordingView()
    game = build_quiz_game(view=view, clock=FakeClock(), seed=12)
    game.start_new_round()
    wrong = _wrong_option(game)

    for _ in range(10):
        game.submit_answer(wrong)
        assert game.state.score >= 0

    assert game.state.score == 0
    assert view.results == [(False, 0)] * 10


def test_input_while_locked_changes_nothing() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = build_quiz_game(view=view, clock=clock, seed=3)
    game.start_new_round()
    clock.advance(2.0)
    game.update()
    assert game.equation is not None
    answer = game.equation.answer

    game.submit_answer(answer)
    before = (game.state.score, game.state.round, game.state.time_left)
    results_before = list(view.results)

    assert game.submit_answer(answer) is False
    assert game.submit_answer(answer + 1) is False
    assert (game.state.score, game.state.round, game.state.time_left) == before
    assert view.results == results_before


def test_timeout_fires_once_then_next_round_after_delay() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = build_quiz_game(view=view, clock=clock, seed=8)
    game.start_new_round()

    _run_out_the_clock(game, clock, 20)

    assert view.ticks == list(range(20, -1, -1))
    assert view.timeouts == 1
    assert game.state.time_left == 0
    assert game.state.is_locked
    assert game.state.timer_handle is None
    assert game.phase is RoundPhase.ROUND_RESOLVING
    assert game.feedback is Feedback.TIMEOUT
    assert game.state.round == 1

    clock.advance(0.5)
    game.update()
    assert game.state.round == 1

    clock.advance(0.5)
    game.update()
    assert view.timeouts == 1
    assert game.state.round == 2
    assert game.state.time_left == 20
    assert not game.state.is_locked
    assert game.phase is RoundPhase.ROUND_ACTIVE


def test_answer_after_expiry_is_ignored() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = build_quiz_game(view=view, clock=clock, seed=8)
    game.start_new_round()
    assert game.equation is not None
    answer = game.equation.answer

    clock.advance(25.0)
    game.update()
    assert view.timeouts == 1

    assert game.submit_answer(answer) is False
    assert game.state.score == 0
    assert view.results == []


def test_correct_answer_cancels_pending_expiry() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = build_quiz_game(view=view, clock=clock, seed=8)
    game.start_new_round()
    assert game.equation is not None

    clock.advance(19.9)
    game.update()
    game.submit_answer(game.equation.answer)
    clock.advance(5.0)
    game.update()

    assert view.timeouts == 0
    assert game.feedback is Feedback.SUCCESS


def test_restarting_mid_round_discards_old_countdown() -> None:
    clock = FakeClock()
    view = RecordingView()
    game = build_quiz_game(view=view, clock=clock, seed=8)
    game.start_new_round()
    old_handle = game.state.timer_handle

    clock.advance(5.5)
    game.update()
    assert game.state.time_left == 15

    game.start_new_round()
    assert old_handle is not None and old_handle.cancelled
    assert game.state.round == 2
    assert game.state.time_left == 20

    clock.advance(1.0)
    game.update()
    assert game.state.time_left == 19
    assert view.ticks[-2:] == [20, 19]


def test_round_counter_increments_by_one() -> None:
    clock = FakeClock()
    game = build_quiz_game(view=RecordingView(), clock=clock, seed=2)
    rounds = []
    for _ in range(5):
        game.start_new_round()
        rounds.append(game.state.round)
        assert game.equation is not None
        game.submit_answer(game.equation.answer)
        game.animation_complete()
        rounds.append(game.state.round)
    assert rounds == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]


def test_stale_animation_complete_is_ignored() -> None:
    clock = FakeClock()
    game = build_quiz_game(view=RecordingView(), clock=clock, seed=2)
    game.start_new_round()

    game.animation_complete()
    assert game.state.round == 1

    clock.advance(20.0)
    game.update()
    game.animation_complete()
    assert game.state.round == 1

    assert game.equation is not None
    clock.advance(1.0)
    game.update()
    game.submit_answer(game.equation.answer)
    game.animation_complete()
    game.animation_complete()
    assert game.state.round == 3


def test_snapshot_and_summary() -> None:
    clock = FakeClock()
    game = build_quiz_game(view=RecordingView(), clock=clock, seed=6)
    game.start_new_round()
    assert game.equation is not None
    game.submit_answer(_wrong_option(game))
    game.submit_answer(game.equation.answer)

    snap = game.snapshot()
    assert snap.phase is RoundPhase.ROUND_RESOLVING
    assert snap.round == 1
    assert snap.score == 10
    assert snap.equation == game.equation
    assert snap.options == game.options
    assert snap.feedback is Feedback.SUCCESS
    assert snap.feedback.message == "Correct!"
    assert snap.input_enabled is False

    game.animation_complete()
    clock.advance(21.0)
    game.update()

    s = game.summary()
    assert s.rounds_started == 2
    assert s.correct == 1
    assert s.wrong_attempts == 1
    assert s.timeouts == 1
    assert s.score == 10


def test_same_seed_same_rounds() -> None:
    v1 = RecordingView()
    v2 = RecordingView()
    g1 = build_quiz_game(view=v1, clock=FakeClock(), seed=77)
    g2 = build_quiz_game(view=v2, clock=FakeClock(), seed=77)
    for game in (g1, g2):
        for _ in range(10):
            game.start_new_round()
    assert v1.rounds == v2.rounds


def test_sessions_do_not_share_state() -> None:
    g1 = build_quiz_game(view=RecordingView(), clock=FakeClock(), seed=1)
    g2 = build_quiz_game(view=RecordingView(), clock=FakeClock(), seed=1)
    g1.start_new_round()
    assert g1.equation is not None
    g1.submit_answer(g1.equation.answer)

    assert g1.state.score == 10
    assert g2.state.score == 0
    assert g2.state.round == 0


def test_custom_config_is_applied() -> None:
    clock = FakeClock()
    view = RecordingView()
    config = QuizConfig(option_count=6, round_duration_s=5, correct_reward=3, incorrect_penalty=1)
    game = build_quiz_game(view=view, clock=clock, seed=4, config=config)
    game.start_new_round()
    assert len(game.options) == 6
    assert game.state.time_left == 5

    assert game.equation is not None
    game.submit_answer(game.equation.answer)
    assert game.state.score == 3


def test_view_without_hooks_is_rejected() -> None:
    class HalfView:
        def on_round_start(self, equation: Equation, options: tuple[int, ...]) -> None:
            pass

    with pytest.raises(MissingViewError, match="on_tick"):
        build_quiz_game(view=HalfView(), clock=FakeClock(), seed=1)  # type: ignore[arg-type]

    with pytest.raises(MissingViewError):
        build_quiz_game(view=None, clock=FakeClock(), seed=1)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"option_count": 0},
        {"round_duration_s": 0},
        {"correct_reward": -1},
        {"incorrect_penalty": -2},
        {"timeout_advance_delay_s": -1.0},
        {"correct_animation_s": -0.1},
    ],
)
def test_invalid_config_raises(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        QuizConfig(**kwargs)  # type: ignore[arg-type]
