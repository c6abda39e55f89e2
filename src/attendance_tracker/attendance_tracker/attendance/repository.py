from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from ..core.enums import AttendanceMark
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance records plus the owning subject's counters.

    Both write methods store the record and the subject's new absolute
    ``(attended, total)`` in one transaction.
    """

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        subject_id: int,
        entry_id: int,
        on: date,
        mark: AttendanceMark,
        attended: int,
        total: int,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def update_mark(
        self,
        *,
        user_id: int,
        record_id: int,
        subject_id: int,
        mark: AttendanceMark,
        attended: int,
        total: int,
    ) -> bool:
        raise NotImplementedError
