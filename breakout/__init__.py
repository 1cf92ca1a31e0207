"""Breakout ball-and-paddle game."""

from .game import Ball, Brick, BrickGrid, GameSession, GameState, Paddle, SessionConfig
from .storage import JsonScoreStore, MemoryStore

__all__ = [
    "Ball",
    "Brick",
    "BrickGrid",
    "GameSession",
    "GameState",
    "JsonScoreStore",
    "MemoryStore",
    "Paddle",
    "SessionConfig",
]
