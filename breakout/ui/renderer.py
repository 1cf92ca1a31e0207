"""Render pass and frame scheduling for the breakout game.

Rendering only uses pygame's default font so the output stays deterministic
when exercised with the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional, Tuple

from ..game import GameSession, GameState
from .theme import GLOW_BLUR, SCORE_FONT_SIZE, SCORE_OFFSET, Theme

logger = logging.getLogger(__name__)

# Pygame is imported lazily in ``ensure_pygame`` so callers can choose the SDL
# drivers before the display module initialises.
_PYGAME = None

OUTLINE_COLOR = (0, 0, 0)
GAME_OVER_TEXT = "GAME OVER"
WIN_TEXT = "WIN"


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
    # ``pygame.quit`` shuts these modules down again.
    if not _PYGAME.display.get_init():
        _PYGAME.display.init()
    if not _PYGAME.font.get_init():
        _PYGAME.font.init()
    return _PYGAME


class FrameScheduler:
    """Holds at most one callback for the next display refresh."""

    def __init__(self) -> None:
        self.pending: Optional[Callable[[], None]] = None

    def request_next_frame(self, callback: Callable[[], None]) -> None:
        self.pending = callback

    @property
    def active(self) -> bool:
        return self.pending is not None

    def run_pending(self) -> bool:
        """Invoke the pending callback, returning *False* if there was none."""

        callback = self.pending
        if callback is None:
            return False
        self.pending = None
        callback()
        return True


class BreakoutRenderer:
    """Draws a :class:`GameSession` and drives it one frame per refresh."""

    def __init__(
        self,
        session: GameSession,
        theme: Theme,
        *,
        surface=None,
        scheduler: Optional[FrameScheduler] = None,
        glow: int = GLOW_BLUR,
    ) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.theme = theme
        size = (int(session.width), int(session.height))
        self.surface = surface if surface is not None else pygame.Surface(size)
        self.scheduler = scheduler or FrameScheduler()
        self.glow = glow
        default_font = pygame.font.get_default_font()
        self.score_font = pygame.font.Font(default_font, SCORE_FONT_SIZE)
        self.message_font = pygame.font.Font(default_font, theme.message_font_size)
        self.message: Optional[str] = None

    # ------------------------------------------------------------------
    # Frame driver
    def start(self) -> None:
        self.message = None
        self.scheduler.request_next_frame(self.render_frame)

    def render_frame(self) -> None:
        """Draw the current state, advance physics and schedule the next frame.

        A frame that ends the game draws the end message instead of asking for
        another frame. A lost ball is reported before the win check runs.
        """

        session = self.session
        if session.state.terminal:
            return
        self.draw_scene()
        session.advance()
        if session.state is GameState.LOST:
            self.draw_message(GAME_OVER_TEXT, self.theme.game_over_color)
            return
        if session.check_win():
            self.draw_message(WIN_TEXT, self.theme.win_color)
            return
        self.scheduler.request_next_frame(self.render_frame)

    # ------------------------------------------------------------------
    # Drawing
    def draw_scene(self) -> None:
        self.surface.fill(self.theme.background_color)
        self._draw_bricks()
        self._draw_ball()
        self._draw_paddle()
        self._draw_score()

    def _draw_bricks(self) -> None:
        pygame = ensure_pygame()
        grid = self.session.grid
        for brick in self.session.alive_bricks():
            rect = pygame.Rect(
                round(brick.x), round(brick.y), round(grid.brick_width), round(grid.brick_height)
            )
            self._glow_rect(rect)
            pygame.draw.rect(self.surface, self.theme.brick_color, rect)
            pygame.draw.rect(self.surface, OUTLINE_COLOR, rect, 1)

    def _draw_ball(self) -> None:
        pygame = ensure_pygame()
        ball = self.session.ball
        center = (round(ball.x), round(ball.y))
        radius = max(1, round(ball.radius))
        self._glow_circle(center, radius)
        pygame.draw.circle(self.surface, ball.color, center, radius)

    def _draw_paddle(self) -> None:
        pygame = ensure_pygame()
        paddle = self.session.paddle
        rect = pygame.Rect(
            round(paddle.x), round(paddle.y), round(paddle.width), round(paddle.height)
        )
        self._glow_rect(rect)
        pygame.draw.rect(self.surface, paddle.color, rect)

    def _draw_score(self) -> None:
        session = self.session
        text = f"Score: {session.score} Highscore: {session.highscore}"
        label = self.score_font.render(text, True, self.theme.score_color)
        rect = label.get_rect()
        rect.bottomleft = (round(session.width) - SCORE_OFFSET[0], SCORE_OFFSET[1])
        self.surface.blit(label, rect)

    def draw_message(self, text: str, color: Tuple[int, int, int]) -> None:
        self.message = text
        label = self.message_font.render(text, True, color)
        rect = label.get_rect()
        # Baseline sits on the vertical centre, as with canvas ``fillText``.
        rect.midbottom = (round(self.session.width / 2), round(self.session.height / 2))
        self.surface.blit(label, rect)
        logger.debug("Drew end message %r", text)

    # ------------------------------------------------------------------
    # Glow helpers
    def _alpha_surface(self, size: Tuple[int, int]):
        pygame = ensure_pygame()
        surface = pygame.Surface(size, pygame.SRCALPHA)
        surface.fill((0, 0, 0, 0))
        return surface

    def _glow_alpha(self, layer: int) -> int:
        return int(90 * (layer / self.glow) ** 2)

    def _glow_rect(self, rect) -> None:
        if self.glow <= 0:
            return
        pygame = ensure_pygame()
        outer = rect.inflate(self.glow * 2, self.glow * 2)
        overlay = self._alpha_surface(outer.size)
        color = self.theme.glow_color
        for layer in range(1, self.glow + 1):
            spread = self.glow - layer
            shape = overlay.get_rect().inflate(-layer * 2, -layer * 2)
            alpha = self._glow_alpha(layer)
            pygame.draw.rect(overlay, (*color, alpha), shape, border_radius=spread)
        self.surface.blit(overlay, outer.topleft)

    def _glow_circle(self, center: Tuple[int, int], radius: int) -> None:
        if self.glow <= 0:
            return
        pygame = ensure_pygame()
        outer_radius = radius + self.glow
        overlay = self._alpha_surface((outer_radius * 2, outer_radius * 2))
        color = self.theme.glow_color
        for layer in range(1, self.glow + 1):
            pygame.draw.circle(
                overlay,
                (*color, self._glow_alpha(layer)),
                (outer_radius, outer_radius),
                outer_radius - layer,
            )
        self.surface.blit(overlay, (center[0] - outer_radius, center[1] - outer_radius))


__all__ = ["BreakoutRenderer", "FrameScheduler", "ensure_pygame"]
