from __future__ import annotations

from typing import Protocol, Sequence

from .model import Subject


class SubjectRepository(Protocol):
    def list_for_user(self, user_id: int) -> Sequence[Subject]:
        raise NotImplementedError

    def create(self, *, user_id: int, name: str, code: str) -> Subject:
        raise NotImplementedError

    def create_many(self, *, user_id: int, items: Sequence[tuple[str, str]]) -> Sequence[Subject]:
        """Insert (name, code) pairs in one transaction, in order."""

        raise NotImplementedError

    def delete(self, *, user_id: int, subject_id: int) -> bool:
        """Delete a subject; the store cascades its timetable entries and records."""

        raise NotImplementedError
