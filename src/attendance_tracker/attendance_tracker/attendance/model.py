from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: int
    date: date
    subject_id: int
    timetable_entry_id: Optional[int]
    mark: AttendanceMark

    @property
    def present(self) -> Optional[bool]:
        return self.mark.present

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "date": self.date.isoformat(),
            "subject_id": self.subject_id,
            "timetable_entry_id": self.timetable_entry_id,
            "present": self.present,
            "mark": self.mark.value,
        }
