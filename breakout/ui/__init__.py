"""User interface package for the breakout game."""

from .main import BreakoutApp, ResourcePaths, main, resolve_paths, run
from .renderer import BreakoutRenderer, FrameScheduler
from .theme import Theme, load_theme

__all__ = [
    "BreakoutApp",
    "BreakoutRenderer",
    "FrameScheduler",
    "ResourcePaths",
    "Theme",
    "load_theme",
    "main",
    "resolve_paths",
    "run",
]
