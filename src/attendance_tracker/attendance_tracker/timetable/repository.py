from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import Weekday
from .model import TimetableEntry


class TimetableRepository(Protocol):
    def list_for_user(self, user_id: int) -> Sequence[TimetableEntry]:
        raise NotImplementedError

    def create_many(
        self, *, user_id: int, items: Sequence[tuple[Weekday, int, str]]
    ) -> Sequence[TimetableEntry]:
        """Insert (day, subject_id, "HH:MM") slots in one transaction, in order."""

        raise NotImplementedError

    def delete(self, *, user_id: int, entry_id: int) -> bool:
        """Delete one slot; its attendance records keep their history."""

        raise NotImplementedError

    def delete_last_for_subject(self, *, user_id: int, entry_id: int, subject_id: int) -> bool:
        """Delete a subject's final slot, purge its records and zero its counters atomically."""

        raise NotImplementedError
