"""Pygame UI shell for Jellyfish Sums.

Deterministic timing/scoring/RNG/state lives in jellyfish_sums.game and the
modules it builds on.  This module only renders snapshots, turns clicks and
number keys into ``submit_answer`` calls, and tells the engine when the
correct-answer animation has finished.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from typing import Protocol

import pygame

from .equations import Equation
from .game import Feedback, MissingViewError, QuizConfig, RoundController, build_quiz_game
from .options import OptionSet
from .round_timer import Clock, RealClock

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (8, 24, 44)
TEXT_MAIN = (235, 235, 245)
TEXT_DIM = (150, 170, 190)
JELLY_IDLE = (190, 120, 220)
JELLY_CORRECT = (110, 220, 150)
JELLY_WRONG = (230, 110, 120)
JELLY_DISABLED = (90, 90, 110)

WRONG_SHAKE_S = 0.35


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font | None) -> None:
        if font is None:
            raise MissingViewError("no font available for rendering")
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class QuizScreen:
    """Renders a quiz session and implements the engine's view hooks."""

    def __init__(
        self,
        app: App,
        *,
        clock: Clock,
        seed: int | None = None,
        config: QuizConfig | None = None,
    ) -> None:
        self._app = app
        self._clock = clock

        self._small_font = pygame.font.Font(None, 28)
        self._big_font = pygame.font.Font(None, 96)
        self._jelly_font = pygame.font.Font(None, 56)

        self._options: OptionSet = ()
        self._hitboxes: list[pygame.Rect] = []
        self._selected_index: int | None = None
        self._celebrate_started_at: float | None = None
        self._wrong_started_at: dict[int, float] = {}

        self._game: RoundController = build_quiz_game(view=self, clock=clock, seed=seed, config=config)
        self._game.start_new_round()

    @property
    def game(self) -> RoundController:
        return self._game

    # -- View hooks ---------------------------------------------------------
    def on_round_start(self, equation: Equation, options: OptionSet) -> None:
        self._options = options
        self._selected_index = None
        self._celebrate_started_at = None
        self._wrong_started_at.clear()

    def on_tick(self, time_left: int) -> None:
        # Time is read from the snapshot each frame.
        pass

    def on_answer_result(self, is_correct: bool, new_score: int) -> None:
        if self._selected_index is None:
            return
        if is_correct:
            self._celebrate_started_at = self._clock.now()
        else:
            self._wrong_started_at[self._selected_index] = self._clock.now()

    def on_timeout(self) -> None:
        self._selected_index = None

    # -- Input --------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self._app.quit()
                return
            choice = self._choice_from_key(event.key)
            if choice is not None:
                self._pick(choice - 1)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for index, rect in enumerate(self._hitboxes):
                if rect.collidepoint(event.pos):
                    self._pick(index)
                    return

    def _pick(self, index: int) -> None:
        if not self._game.input_enabled or not (0 <= index < len(self._options)):
            return
        self._selected_index = index
        self._game.submit_answer(self._options[index])

    @staticmethod
    def _choice_from_key(key: int) -> int | None:
        mapping = {
            pygame.K_1: 1,
            pygame.K_2: 2,
            pygame.K_3: 3,
            pygame.K_4: 4,
            pygame.K_KP1: 1,
            pygame.K_KP2: 2,
            pygame.K_KP3: 3,
            pygame.K_KP4: 4,
        }
        return mapping.get(key)

    # -- Rendering ----------------------------------------------------------
    def render(self, surface: pygame.Surface) -> None:
        self._game.update()
        if self._celebrate_started_at is not None:
            if self._clock.now() - self._celebrate_started_at >= self._game.config.correct_animation_s:
                self._celebrate_started_at = None
                self._game.animation_complete()

        snap = self._game.snapshot()
        surface.fill(BG)

        stats = self._small_font.render(f"Round {snap.round}    Score {snap.score}", True, TEXT_DIM)
        surface.blit(stats, (40, 30))
        timer_color = JELLY_WRONG if snap.time_left <= 5 else TEXT_MAIN
        timer = self._small_font.render(f"Time: {snap.time_left:02d}", True, timer_color)
        surface.blit(timer, (surface.get_width() - timer.get_width() - 40, 30))

        if snap.equation is not None:
            eq = self._big_font.render(snap.equation.prompt, True, TEXT_MAIN)
            surface.blit(eq, ((surface.get_width() - eq.get_width()) // 2, 90))

        if snap.feedback is not Feedback.NONE:
            color = JELLY_CORRECT if snap.feedback is Feedback.SUCCESS else JELLY_WRONG
            fb = self._small_font.render(snap.feedback.message, True, color)
            surface.blit(fb, ((surface.get_width() - fb.get_width()) // 2, 190))

        self._render_jellyfish(surface, snap.options, input_enabled=snap.input_enabled)

        hint = self._small_font.render("Click a jellyfish or press 1-4. Esc to quit.", True, TEXT_DIM)
        surface.blit(hint, (40, surface.get_height() - 50))

    def _render_jellyfish(self, surface: pygame.Surface, options: OptionSet, *, input_enabled: bool) -> None:
        self._hitboxes = []
        if not options:
            return

        now = self._clock.now()
        slot_w = surface.get_width() // len(options)
        base_y = 330

        for index, value in enumerate(options):
            cx = slot_w * index + slot_w // 2
            cy = base_y + int(8 * math.sin(now * 2.0 + index))
            radius = 62

            color = JELLY_IDLE if input_enabled else JELLY_DISABLED
            wrong_at = self._wrong_started_at.get(index)
            if wrong_at is not None and now - wrong_at < WRONG_SHAKE_S:
                color = JELLY_WRONG
                cx += int(10 * math.sin((now - wrong_at) * 60.0))
            if index == self._selected_index and self._celebrate_started_at is not None:
                color = JELLY_CORRECT
                t = (now - self._celebrate_started_at) / max(self._game.config.correct_animation_s, 1e-6)
                radius = int(radius * (1.0 + 0.25 * math.sin(min(1.0, t) * math.pi)))

            bell = pygame.Rect(0, 0, radius * 2, int(radius * 1.4))
            bell.center = (cx, cy)
            pygame.draw.ellipse(surface, color, bell)
            for k in range(5):
                x = bell.left + (k + 1) * bell.width // 6
                pygame.draw.line(surface, color, (x, bell.centery + bell.height // 3), (x, bell.bottom + 40), 3)

            label = self._jelly_font.render(str(value), True, BG)
            surface.blit(label, (cx - label.get_width() // 2, cy - label.get_height() // 2))
            self._hitboxes.append(bell)


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    seed: int | None = None,
) -> int:
    pygame.init()

    try:
        pygame.display.set_caption("Jellyfish Sums")
        surface = pygame.display.set_mode(WINDOW_SIZE)

        font = pygame.font.Font(None, 36)
        frame_clock = pygame.time.Clock()

        app = App(surface=surface, font=font)
        app.push(QuizScreen(app, clock=RealClock(), seed=_new_seed() if seed is None else seed))

        frame = 0
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

            frame_clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
