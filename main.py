"""Interactive launcher for the breakout game."""

from __future__ import annotations

from breakout.ui.main import main


if __name__ == "__main__":
    raise SystemExit(main())
