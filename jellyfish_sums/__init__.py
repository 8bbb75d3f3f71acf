"""Jellyfish Sums: a timed addition quiz."""

from .equations import Equation, EquationGenerator
from .game import (
    Feedback,
    GameSnapshot,
    GameState,
    MissingViewError,
    QuizConfig,
    QuizView,
    RoundController,
    RoundPhase,
    SessionSummary,
    build_quiz_game,
)
from .options import OptionSet, OptionSetGenerator
from .random_source import RandomRangeSource
from .round_timer import RoundTimer, TimerHandle

__all__ = [
    "Equation",
    "EquationGenerator",
    "Feedback",
    "GameSnapshot",
    "GameState",
    "MissingViewError",
    "OptionSet",
    "OptionSetGenerator",
    "QuizConfig",
    "QuizView",
    "RandomRangeSource",
    "RoundController",
    "RoundPhase",
    "RoundTimer",
    "SessionSummary",
    "TimerHandle",
    "build_quiz_game",
]
