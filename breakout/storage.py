"""Key/value stores used to persist the high score."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

STORE_ENV_VAR = "BREAKOUT_STORE"


def default_store_path() -> Path:
    value = os.environ.get(STORE_ENV_VAR)
    if value:
        return Path(value).expanduser()
    return Path.home() / ".breakout" / "scores.json"


class MemoryStore:
    """In-process store. Nothing survives the session."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)


class JsonScoreStore:
    """Store string values in a single JSON object on disk.

    The file is read once on construction and rewritten on every ``set``.
    A missing or unreadable file starts an empty store.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else default_store_path()
        self.values: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read score store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Score store %s does not hold an object", self.path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = str(value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.values, indent=2, sort_keys=True))
        logger.debug("Stored %s=%s in %s", key, value, self.path)


__all__ = ["JsonScoreStore", "MemoryStore", "STORE_ENV_VAR", "default_store_path"]
