from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Sequence

from ..core.constants import MAX_GOAL_PERCENTAGE, MIN_GOAL_PERCENTAGE, SUBJECT_ALERT_MIN_CLASSES
from ..core.exceptions import ValidationError
from ..stats.engine import percentage
from ..subjects.model import Subject
from .model import GoalAlert, GoalConfig
from .store import GoalStore

log = logging.getLogger(__name__)


class GoalService:
    def __init__(self, store: GoalStore):
        self._store = store

    def get(self, user_id: int) -> GoalConfig:
        return self._store.load(user_id)

    def update_target(self, user_id: int, target_percentage) -> GoalConfig:
        try:
            target = int(target_percentage)
        except (TypeError, ValueError):
            raise ValidationError("Target percentage must be a number")
        if not MIN_GOAL_PERCENTAGE <= target <= MAX_GOAL_PERCENTAGE:
            raise ValidationError(
                f"Target percentage must be between {MIN_GOAL_PERCENTAGE} and {MAX_GOAL_PERCENTAGE}"
            )

        goal = replace(self._store.load(user_id), target_percentage=target, last_notified=None)
        return self._store.save(user_id, goal)

    def toggle_notifications(self, user_id: int) -> GoalConfig:
        goal = self._store.load(user_id)
        return self._store.save(user_id, replace(goal, notifications_enabled=not goal.notifications_enabled))

    def check_alerts(self, user_id: int, today: date, subjects: Sequence[Subject], overall_pct: float) -> List[GoalAlert]:
        """Falling-behind alerts, handed out at most once per calendar day."""

        goal = self._store.load(user_id)
        target = goal.target_percentage
        if not goal.notifications_enabled or goal.last_notified == today:
            return []
        if not 0 < overall_pct < target:
            return []

        alerts = [
            GoalAlert(
                title="Attendance Alert",
                message=f"You're {target - overall_pct:.1f}% below your goal of {target}%",
            )
        ]
        for s in subjects:
            pct = percentage(s.attended, s.total_classes)
            if 0 < pct < target and s.total_classes >= SUBJECT_ALERT_MIN_CLASSES:
                alerts.append(
                    GoalAlert(title=s.name, message=f"Attendance at {pct:.1f}% - below your {target}% goal")
                )

        self._store.save(user_id, replace(goal, last_notified=today))
        log.info("Sent %s goal alerts to user %s", len(alerts), user_id)
        return alerts
