from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Union

from .model import GoalConfig

log = logging.getLogger(__name__)


class GoalStore:
    """Goal configuration kept as one JSON file per user, outside the database."""

    def __init__(self, base_dir: Union[str, os.PathLike]):
        self._base_dir = Path(base_dir)

    def _path(self, user_id: int) -> Path:
        return self._base_dir / f"goals_{int(user_id)}.json"

    def load(self, user_id: int) -> GoalConfig:
        path = self._path(user_id)
        if not path.exists():
            return GoalConfig()
        try:
            with path.open("r", encoding="utf-8") as f:
                return GoalConfig.from_dict(json.load(f))
        except (json.JSONDecodeError, OSError, TypeError, ValueError):
            log.warning("Unreadable goal file %s, using defaults", path)
            return GoalConfig()

    def save(self, user_id: int, goal: GoalConfig) -> GoalConfig:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        with self._path(user_id).open("w", encoding="utf-8") as f:
            json.dump(goal.to_dict(), f, indent=2)
        return goal
