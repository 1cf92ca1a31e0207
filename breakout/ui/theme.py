"""Style and dimension parameters for the breakout UI.

Themes are JSON objects keyed by the same names the browser version used for
its CSS custom properties (``ball-radius``, ``bat-color`` ...). Dimensions may
be plain numbers or CSS-like strings such as ``"12px"``; colours are any
string understood by :class:`pygame.Color`.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import pygame

from ..game import SessionConfig

THEME_ENV_VAR = "BREAKOUT_THEME"

Color = Tuple[int, int, int]

DEFAULT_VALUES: Mapping[str, object] = {
    "ball-radius": 10,
    "ball-color": "#ffffff",
    "bat-width": 120,
    "bat-height": 12,
    "bat-color": "#00bfff",
    "brick-padding": 10,
    "brick-height": 20,
    "brick-color": "#ff4500",
    "score-color": "#ffffff",
    "game-over-color": "#ff0000",
    "win-color": "#00ff00",
    "message-font-size": "48px",
    "background-color": "#000000",
    "glow-color": "#ffffff",
}

# Canvas defaults of the browser version.
GLOW_BLUR = 7
SCORE_FONT_SIZE = 20
SCORE_OFFSET = (200, 30)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def default_theme_path() -> Path:
    value = os.environ.get(THEME_ENV_VAR)
    if value:
        return Path(value).expanduser()
    return Path(__file__).resolve().parents[1] / "assets" / "theme.json"


def parse_dimension(name: str, value: object) -> int:
    """Read the leading integer of *value*, the way ``parseInt`` does."""

    if isinstance(value, bool):
        raise ValueError(f"Theme value '{name}' must be a dimension, got {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        raise ValueError(f"Theme value '{name}' is not a dimension: {value!r}")
    return int(match.group(1))


def parse_color(name: str, value: object) -> Color:
    try:
        color = pygame.Color(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Theme value '{name}' is not a colour: {value!r}") from exc
    return (color.r, color.g, color.b)


@dataclass(frozen=True)
class Theme:
    """Resolved theme values."""

    ball_radius: int
    ball_color: Color
    bat_width: int
    bat_height: int
    bat_color: Color
    brick_padding: int
    brick_height: int
    brick_color: Color
    score_color: Color
    game_over_color: Color
    win_color: Color
    message_font_size: int
    background_color: Color
    glow_color: Color

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Theme":
        values: Dict[str, object] = dict(DEFAULT_VALUES)
        values.update({key: value for key, value in data.items() if key in DEFAULT_VALUES})
        resolved: Dict[str, object] = {}
        for key, value in values.items():
            attribute = key.replace("-", "_")
            if key.endswith("-color"):
                resolved[attribute] = parse_color(key, value)
            else:
                resolved[attribute] = parse_dimension(key, value)
        return cls(**resolved)

    def session_config(self, width: float, height: float) -> SessionConfig:
        return SessionConfig(
            width=width,
            height=height,
            ball_radius=self.ball_radius,
            ball_color=self.ball_color,
            paddle_width=self.bat_width,
            paddle_height=self.bat_height,
            paddle_color=self.bat_color,
            brick_padding=self.brick_padding,
            brick_height=self.brick_height,
        )


def load_theme(path: Optional[Path] = None) -> Theme:
    """Load a theme file, or the packaged default theme."""

    theme_path = Path(path) if path is not None else default_theme_path()
    if not theme_path.exists():
        raise FileNotFoundError(theme_path)
    data = json.loads(theme_path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Theme file {theme_path} must contain a JSON object")
    return Theme.from_mapping(data)


__all__ = [
    "DEFAULT_VALUES",
    "THEME_ENV_VAR",
    "Theme",
    "default_theme_path",
    "load_theme",
    "parse_color",
    "parse_dimension",
]
