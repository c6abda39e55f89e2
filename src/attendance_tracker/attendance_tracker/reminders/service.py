from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import load_timezone, parse_hhmm
from ..core.constants import DEFAULT_REMINDER_TIME, DEFAULT_REMINDER_TIMEZONE


@dataclass(frozen=True)
class ReminderStatus:
    due: bool
    all_marked: bool
    classes_left: int
    message: str

    def to_dict(self) -> dict:
        return {
            "due": self.due,
            "all_marked": self.all_marked,
            "classes_left": self.classes_left,
            "message": self.message,
        }


class ReminderService:
    """Daily "fill your attendance" reminder, polled by clients once a minute."""

    def __init__(self, reminder_time: str = DEFAULT_REMINDER_TIME, timezone: str = DEFAULT_REMINDER_TIMEZONE):
        self._hhmm = parse_hhmm(reminder_time)
        self._tz = load_timezone(timezone)

    @property
    def reminder_time(self) -> str:
        return self._hhmm

    def local_now(self, now: Optional[datetime] = None) -> datetime:
        if now is None:
            return datetime.now(self._tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=self._tz)
        return now.astimezone(self._tz)

    def check(self, today_count: int, marked_count: int, now: Optional[datetime] = None) -> ReminderStatus:
        local = self.local_now(now)
        left = max(int(today_count) - int(marked_count), 0)
        all_marked = today_count > 0 and left == 0

        if all_marked:
            message = "Everyday do better than yesterday 💪"
        else:
            message = "Fill your attendance of today 📝"
        if left:
            message += f" ({left} class{'es' if left != 1 else ''} left)"

        due = local.strftime("%H:%M") == self._hhmm and today_count > 0 and not all_marked
        return ReminderStatus(due=due, all_marked=all_marked, classes_left=left, message=message)
