"""Core simulation for the breakout game.

The module owns every piece of mutable game state through :class:`GameSession`.
Physics, keyboard input and the render pass all operate on the same session
instance, one frame at a time.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


BRICK_ROWS = 3
BRICK_COLS = 10
BRICK_TOP_OFFSET = 30

BALL_SPEED = 4
BALL_START_OFFSET = 40
PADDLE_STEP = 8

HIGHSCORE_KEY = "highscore"

SOUND_BRICK_HIT = "brick_hit"
SOUND_BOUNCE = "bounce"
SOUND_GAME_OVER = "game_over"

KEY_LEFT = "left"
KEY_RIGHT = "right"

Color = Tuple[int, int, int]


class GameState(Enum):
    """Lifecycle of a single game."""

    PLAYING = "playing"
    WON = "won"
    LOST = "lost"

    @property
    def terminal(self) -> bool:
        return self is not GameState.PLAYING


@dataclass
class Ball:
    x: float
    y: float
    radius: float
    dx: float
    dy: float
    color: Color = (255, 255, 255)


@dataclass
class Paddle:
    x: float
    y: float
    width: float
    height: float
    color: Color = (255, 255, 255)
    step: float = PADDLE_STEP


@dataclass
class Brick:
    x: float
    y: float
    alive: bool = True


@dataclass(frozen=True)
class BrickGrid:
    """Layout constants shared by every brick."""

    rows: int
    cols: int
    padding: float
    brick_width: float
    brick_height: float
    top_offset: float = BRICK_TOP_OFFSET

    @classmethod
    def for_playfield(
        cls,
        playfield_width: float,
        *,
        padding: float,
        brick_height: float,
        rows: int = BRICK_ROWS,
        cols: int = BRICK_COLS,
    ) -> "BrickGrid":
        return cls(
            rows=rows,
            cols=cols,
            padding=padding,
            brick_width=playfield_width / cols - padding,
            brick_height=brick_height,
        )

    @property
    def total(self) -> int:
        return self.rows * self.cols

    def position(self, row: int, col: int) -> Tuple[float, float]:
        x = col * (self.brick_width + self.padding) + self.padding / 2
        y = row * (self.brick_height + self.padding) + self.top_offset
        return x, y


@dataclass(frozen=True)
class SessionConfig:
    """Resolved dimensions and colours needed to build the entities."""

    width: float
    height: float
    ball_radius: float = 10
    ball_color: Color = (255, 255, 255)
    paddle_width: float = 100
    paddle_height: float = 10
    paddle_color: Color = (255, 255, 255)
    brick_padding: float = 10
    brick_height: float = 20


class SilentAudio:
    """Audio capability that drops every trigger."""

    def play(self, sound_id: str) -> None:
        return None


class GameSession:
    """Single aggregate holding all state of one running game.

    Parameters
    ----------
    config:
        Playfield size and entity geometry.
    rng:
        Random generator used for the ball's initial horizontal velocity.
        Pass a seeded :class:`random.Random` for reproducible games.
    audio:
        Object with a ``play(sound_id)`` method.
    store:
        Key/value store with ``get(key)`` and ``set(key, value)`` used to
        persist the high score.
    """

    def __init__(
        self,
        config: SessionConfig,
        *,
        rng: Optional[random.Random] = None,
        audio=None,
        store=None,
    ) -> None:
        self.config = config
        self.width = config.width
        self.height = config.height
        self.rng = rng or random.Random()
        self.audio = audio or SilentAudio()
        self.store = store
        self.grid = BrickGrid.for_playfield(
            config.width,
            padding=config.brick_padding,
            brick_height=config.brick_height,
        )
        self.bricks: List[Brick] = []
        self.highscore = self._load_highscore()
        self.reset()

    # ------------------------------------------------------------------
    # Setup
    def reset(self) -> None:
        """Start a new game. The high score carries over."""

        self.ball = self._create_ball()
        self.paddle = self._create_paddle()
        self.setup_bricks()
        self.score = 0
        self.state = GameState.PLAYING
        self.frame = 0

    def _create_ball(self) -> Ball:
        return Ball(
            x=self.width / 2,
            y=self.height - BALL_START_OFFSET,
            radius=self.config.ball_radius,
            dx=(self.rng.random() * 2 - 1) * BALL_SPEED,
            dy=-BALL_SPEED,
            color=self.config.ball_color,
        )

    def _create_paddle(self) -> Paddle:
        return Paddle(
            x=self.width / 2 - self.config.paddle_width / 2,
            y=self.height - self.config.paddle_height,
            width=self.config.paddle_width,
            height=self.config.paddle_height,
            color=self.config.paddle_color,
        )

    def setup_bricks(self) -> None:
        """Populate the brick grid row by row with every brick alive."""

        self.bricks = []
        for row in range(self.grid.rows):
            for col in range(self.grid.cols):
                x, y = self.grid.position(row, col)
                self.bricks.append(Brick(x=x, y=y))

    def brick_at(self, row: int, col: int) -> Brick:
        return self.bricks[row * self.grid.cols + col]

    def alive_bricks(self) -> List[Brick]:
        return [brick for brick in self.bricks if brick.alive]

    def _load_highscore(self) -> int:
        if self.store is None:
            return 0
        raw = self.store.get(HIGHSCORE_KEY)
        if raw is None:
            return 0
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed stored high score %r", raw)
            return 0

    # ------------------------------------------------------------------
    # Physics
    def advance(self) -> None:
        """Move the ball one frame and resolve every collision in order.

        Each check runs independently of the others, so several reflections
        may apply in the same frame. Collisions only flip velocity signs; the
        ball position is never corrected.
        """

        if self.state.terminal:
            return
        ball = self.ball
        paddle = self.paddle
        self.frame += 1

        ball.x += ball.dx
        ball.y += ball.dy

        if ball.x + ball.radius > self.width or ball.x - ball.radius < 0:
            ball.dx *= -1
            self.audio.play(SOUND_BOUNCE)

        if ball.y - ball.radius < 0:
            ball.dy *= -1
            self.audio.play(SOUND_BOUNCE)

        # Only the paddle's top edge is checked, not its thickness.
        if (
            ball.y + ball.radius > paddle.y
            and paddle.x < ball.x < paddle.x + paddle.width
        ):
            ball.dy *= -1
            self.audio.play(SOUND_BOUNCE)

        for brick in self.bricks:
            if brick.alive and self._overlaps(brick):
                ball.dy *= -1
                brick.alive = False
                self.score += 1
                self.audio.play(SOUND_BRICK_HIT)
                if self.score > self.highscore:
                    self._record_highscore(self.score)

        if ball.y + ball.radius > self.height:
            self.state = GameState.LOST
            self.audio.play(SOUND_GAME_OVER)
            logger.info("Ball lost at frame %d with score %d", self.frame, self.score)

    def _overlaps(self, brick: Brick) -> bool:
        ball = self.ball
        return (
            brick.x < ball.x < brick.x + self.grid.brick_width
            and ball.y - ball.radius < brick.y + self.grid.brick_height
            and ball.y + ball.radius > brick.y
        )

    def _record_highscore(self, value: int) -> None:
        self.highscore = value
        if self.store is not None:
            self.store.set(HIGHSCORE_KEY, str(value))
        logger.debug("New high score %d", value)

    # ------------------------------------------------------------------
    # State machine
    def check_win(self) -> bool:
        """Switch to :attr:`GameState.WON` once every brick is destroyed."""

        if self.state is GameState.PLAYING and self.score == self.grid.total:
            self.state = GameState.WON
            logger.info("All %d bricks cleared at frame %d", self.grid.total, self.frame)
        return self.state is GameState.WON

    # ------------------------------------------------------------------
    # Input
    def on_key(self, key: str) -> bool:
        """Move the paddle for a ``"left"`` or ``"right"`` key press.

        The move is allowed when the paddle has not yet reached the wall it is
        heading for; the landing position is clamped to the playfield. Returns
        *True* when the paddle moved.
        """

        if self.state.terminal:
            return False
        paddle = self.paddle
        start = paddle.x
        # A key names one direction, so at most one branch applies.
        if key == KEY_LEFT:
            if paddle.x > 0:
                paddle.x = max(0, paddle.x - paddle.step)
        elif key == KEY_RIGHT:
            if paddle.x + paddle.width < self.width:
                paddle.x = min(self.width - paddle.width, paddle.x + paddle.step)
        return paddle.x != start


__all__ = [
    "Ball",
    "Brick",
    "BrickGrid",
    "GameSession",
    "GameState",
    "Paddle",
    "SessionConfig",
    "SilentAudio",
]
