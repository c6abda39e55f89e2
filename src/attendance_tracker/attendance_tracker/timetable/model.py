from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Weekday


@dataclass(frozen=True)
class TimetableEntry:
    """One weekly recurring class slot."""

    entry_id: int
    day: Weekday
    subject_id: int
    time: str  # "HH:MM", 24-hour

    @property
    def slot(self) -> tuple[Weekday, int, str]:
        return self.day, self.subject_id, self.time

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "day": self.day.value,
            "subject_id": self.subject_id,
            "time": self.time,
        }
