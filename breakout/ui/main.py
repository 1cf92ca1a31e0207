"""Pygame application and command line launcher for breakout."""

from __future__ import annotations

import argparse
import logging
import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pygame

from ..audio import SOUND_ENV_VAR, create_audio, default_sound_root
from ..game import KEY_LEFT, KEY_RIGHT, GameSession
from ..storage import STORE_ENV_VAR, JsonScoreStore, MemoryStore, default_store_path
from .renderer import BreakoutRenderer, FrameScheduler
from .theme import THEME_ENV_VAR, default_theme_path, load_theme

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (800, 600)
DEFAULT_FPS = 60
# Delay and interval in milliseconds before a held key sends KEYDOWN again.
KEY_REPEAT = (200, 16)

KEY_BINDINGS = {
    pygame.K_LEFT: KEY_LEFT,
    pygame.K_RIGHT: KEY_RIGHT,
    pygame.K_a: KEY_LEFT,
    pygame.K_d: KEY_RIGHT,
}


@dataclass(frozen=True)
class ResourcePaths:
    """Bundle with resolved files and directories used by the game."""

    theme_path: Path
    sound_root: Path
    store_path: Path


def resolve_paths(check_exists: bool = True) -> ResourcePaths:
    """Resolve resource locations using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the theme file or an
        explicitly configured sound directory does not exist. The store file is
        created on the first high score and is never checked.
    """

    theme_path = default_theme_path()
    sound_root = default_sound_root()
    store_path = default_store_path()

    if check_exists:
        required = [theme_path]
        if os.environ.get(SOUND_ENV_VAR):
            required.append(sound_root)
        missing = [path for path in required if not path.exists()]
        if missing:
            missing_str = ", ".join(str(path) for path in missing)
            raise FileNotFoundError(f"Required game resources do not exist: {missing_str}")

    return ResourcePaths(theme_path=theme_path, sound_root=sound_root, store_path=store_path)


class BreakoutApp:
    """Pygame driven window running one breakout session."""

    def __init__(
        self,
        screen_size: Tuple[int, int] = DEFAULT_SIZE,
        *,
        fullscreen: bool = False,
        fps: int = DEFAULT_FPS,
        seed: Optional[int] = None,
        mute: bool = False,
        save: bool = True,
        paths: Optional[ResourcePaths] = None,
    ) -> None:
        pygame.init()
        pygame.key.set_repeat(*KEY_REPEAT)
        pygame.display.set_caption("Breakout")
        if fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(screen_size)
        self.clock = pygame.time.Clock()
        self.fps = fps

        self.paths = paths or resolve_paths()
        self.theme = load_theme(self.paths.theme_path)
        store = JsonScoreStore(self.paths.store_path) if save else MemoryStore()
        audio = create_audio(enabled=not mute, sound_root=self.paths.sound_root)

        # The playfield keeps the window size it was created with.
        width, height = self.screen.get_size()
        self.session = GameSession(
            self.theme.session_config(width, height),
            rng=random.Random(seed),
            audio=audio,
            store=store,
        )
        self.scheduler = FrameScheduler()
        self.renderer = BreakoutRenderer(
            self.session, self.theme, surface=self.screen, scheduler=self.scheduler
        )
        logger.info(
            "Started %dx%d playfield, high score %d", width, height, self.session.highscore
        )

    def restart(self) -> None:
        self.session.reset()
        self.renderer.start()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            raise SystemExit
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_ESCAPE, pygame.K_q):
            raise SystemExit
        if event.key == pygame.K_r and self.session.state.terminal:
            self.restart()
            return
        key = KEY_BINDINGS.get(event.key)
        if key is not None:
            self.session.on_key(key)

    def tick(self) -> bool:
        """Run the pending frame, if any, and present the screen."""

        ran = self.scheduler.run_pending()
        pygame.display.flip()
        return ran

    def run(self) -> None:
        self.renderer.start()
        while True:
            for event in pygame.event.get():
                try:
                    self.handle_event(event)
                except SystemExit:
                    pygame.quit()
                    return
            self.tick()
            self.clock.tick(self.fps)


def parse_size(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}") from exc
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive, got {value!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Breakout launcher")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved resource paths and exit without opening a window.",
    )
    parser.add_argument("--size", type=parse_size, default=DEFAULT_SIZE, help="Window size as WIDTHxHEIGHT.")
    parser.add_argument("--fullscreen", action="store_true", help="Use the whole desktop as playfield.")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Frames per second.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the ball's starting direction.")
    parser.add_argument("--mute", action="store_true", help="Disable sound effects.")
    parser.add_argument("--no-save", action="store_true", help="Keep the high score in memory only.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def bootstrap_message(paths: ResourcePaths) -> str:
    return (
        "Breakout bootstrap\n"
        f"  theme:  {paths.theme_path}\n"
        f"  sounds: {paths.sound_root}\n"
        f"  scores: {paths.store_path}\n"
        f"Set {THEME_ENV_VAR}, {SOUND_ENV_VAR} or {STORE_ENV_VAR} to use custom locations."
    )


def run(args: argparse.Namespace, paths: ResourcePaths) -> None:
    """Instantiate and run the game window."""

    app = BreakoutApp(
        args.size,
        fullscreen=args.fullscreen,
        fps=args.fps,
        seed=args.seed,
        mute=args.mute,
        save=not args.no_save,
        paths=paths,
    )
    app.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    paths = resolve_paths()
    print(bootstrap_message(paths))
    if args.info:
        return 0
    run(args, paths)
    return 0


__all__ = [
    "BreakoutApp",
    "KEY_BINDINGS",
    "KEY_REPEAT",
    "ResourcePaths",
    "build_parser",
    "main",
    "parse_size",
    "resolve_paths",
    "run",
]


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
