from __future__ import annotations

from enum import Enum
from typing import Optional


class Weekday(str, Enum):
    """Day of a recurring timetable slot."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        return list(cls)[value.weekday()]

    @classmethod
    def parse(cls, value) -> "Weekday":
        if isinstance(value, cls):
            return value
        name = str(value or "").strip().capitalize()
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown day: {value!r}")


class AttendanceMark(str, Enum):
    """Tri-state attendance mark stored in the database.

    OFF means the class did not happen and is excluded from every count.
    """

    PRESENT = "present"
    ABSENT = "absent"
    OFF = "off"

    @property
    def present(self) -> Optional[bool]:
        if self is AttendanceMark.PRESENT:
            return True
        if self is AttendanceMark.ABSENT:
            return False
        return None

    @classmethod
    def from_present(cls, value: Optional[bool]) -> "AttendanceMark":
        if value is None:
            return cls.OFF
        return cls.PRESENT if value else cls.ABSENT

    @classmethod
    def parse(cls, value) -> "AttendanceMark":
        """Accept a mark name or the JSON ``true | false | null`` form."""
        if value is None or isinstance(value, bool):
            return cls.from_present(value)
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown attendance mark: {value!r}")
