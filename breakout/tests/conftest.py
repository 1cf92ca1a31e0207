"""Shared pytest fixtures.

pygame is forced into a headless configuration with the SDL ``dummy`` video
and audio drivers. The variables are set at import time so they are in place
before any test module initialises a pygame subsystem.
"""

from __future__ import annotations

import os
import random
from typing import List, Optional

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from breakout.game import GameSession, SessionConfig  # noqa: E402
from breakout.storage import MemoryStore  # noqa: E402


class RecordingAudio:
    """Audio capability that remembers every trigger."""

    def __init__(self) -> None:
        self.played: List[str] = []

    def play(self, sound_id: str) -> None:
        self.played.append(sound_id)


class CountingStore(MemoryStore):
    """Memory store that counts every write."""

    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.writes = 0

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self.writes += 1


def make_session(
    *,
    width: float = 800,
    height: float = 600,
    seed: int = 7,
    store: Optional[MemoryStore] = None,
    audio: Optional[RecordingAudio] = None,
) -> GameSession:
    config = SessionConfig(width=width, height=height)
    return GameSession(
        config,
        rng=random.Random(seed),
        audio=audio if audio is not None else RecordingAudio(),
        store=store if store is not None else MemoryStore(),
    )


def place_ball(session: GameSession, x: float, y: float, dx: float, dy: float) -> None:
    session.ball.x = x
    session.ball.y = y
    session.ball.dx = dx
    session.ball.dy = dy


@pytest.fixture
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture(name="make_session")
def make_session_fixture():
    return make_session


@pytest.fixture(name="place_ball")
def place_ball_fixture():
    return place_ball


@pytest.fixture(name="make_store")
def make_store_fixture():
    return CountingStore


@pytest.fixture
def store() -> CountingStore:
    return CountingStore()


@pytest.fixture
def session(audio: RecordingAudio, store: CountingStore) -> GameSession:
    return make_session(audio=audio, store=store)


@pytest.fixture(scope="session")
def pygame_module():
    from breakout.ui.renderer import ensure_pygame

    return ensure_pygame()
