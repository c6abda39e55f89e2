from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_GOAL_PERCENTAGE


@dataclass(frozen=True)
class GoalConfig:
    target_percentage: int = DEFAULT_GOAL_PERCENTAGE
    notifications_enabled: bool = True
    last_notified: Optional[date] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["last_notified"] = self.last_notified.isoformat() if self.last_notified else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GoalConfig":
        last = data.get("last_notified")
        return cls(
            target_percentage=int(data.get("target_percentage", DEFAULT_GOAL_PERCENTAGE)),
            notifications_enabled=bool(data.get("notifications_enabled", True)),
            last_notified=date.fromisoformat(last) if last else None,
        )


@dataclass(frozen=True)
class GoalAlert:
    title: str
    message: str

    def to_dict(self) -> dict:
        return {"title": self.title, "message": self.message}
