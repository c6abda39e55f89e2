from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.attendance_tracker.attendance_tracker.attendance.coordinator import AttendanceCoordinator
from src.attendance_tracker.attendance_tracker.attendance.model import AttendanceRecord
from src.attendance_tracker.attendance_tracker.core.exceptions import DuplicateRecordError, PersistenceError
from src.attendance_tracker.attendance_tracker.sharing.model import SharedCode
from src.attendance_tracker.attendance_tracker.subjects.model import Subject
from src.attendance_tracker.attendance_tracker.timetable.model import TimetableEntry
from src.attendance_tracker.attendance_tracker.users.model import User


class _Failing:
    """Lets a test make the next write blow up like a dropped database connection."""

    fail_writes = False

    def _maybe_fail(self):
        if self.fail_writes:
            raise PersistenceError("Database operation failed")


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email: str, password_hash: str) -> int:
        user_id = len(self.users) + 1
        self.users[user_id] = User(user_id=user_id, email=email, password_hash=password_hash)
        return user_id


class InMemorySubjects(_Failing):
    def __init__(self, db: "InMemoryDB"):
        self._db = db

    def list_for_user(self, user_id: int):
        return [s for uid, s in self._db.subjects.values() if uid == user_id]

    def create(self, *, user_id: int, name: str, code: str) -> Subject:
        return self.create_many(user_id=user_id, items=[(name, code)])[0]

    def create_many(self, *, user_id: int, items):
        self._maybe_fail()
        created = []
        for name, code in items:
            subject = Subject(subject_id=self._db.next_id(), name=name, code=code)
            self._db.subjects[subject.subject_id] = (user_id, subject)
            created.append(subject)
        return created

    def delete(self, *, user_id: int, subject_id: int) -> bool:
        self._maybe_fail()
        if self._db.subjects.get(subject_id, (None,))[0] != user_id:
            return False
        del self._db.subjects[subject_id]
        self._db.entries = {k: v for k, v in self._db.entries.items() if v[1].subject_id != subject_id}
        self._db.records = {k: v for k, v in self._db.records.items() if v[1].subject_id != subject_id}
        return True


class InMemoryTimetable(_Failing):
    def __init__(self, db: "InMemoryDB"):
        self._db = db

    def list_for_user(self, user_id: int):
        return [e for uid, e in self._db.entries.values() if uid == user_id]

    def create_many(self, *, user_id: int, items):
        self._maybe_fail()
        created = []
        for day, subject_id, time in items:
            entry = TimetableEntry(entry_id=self._db.next_id(), day=day, subject_id=subject_id, time=time)
            self._db.entries[entry.entry_id] = (user_id, entry)
            created.append(entry)
        return created

    def delete(self, *, user_id: int, entry_id: int) -> bool:
        self._maybe_fail()
        if entry_id not in self._db.entries:
            return False
        del self._db.entries[entry_id]
        for rid, (uid, r) in list(self._db.records.items()):
            if r.timetable_entry_id == entry_id:
                self._db.records[rid] = (uid, replace(r, timetable_entry_id=None))
        return True

    def delete_last_for_subject(self, *, user_id: int, entry_id: int, subject_id: int) -> bool:
        self._maybe_fail()
        if entry_id not in self._db.entries:
            return False
        del self._db.entries[entry_id]
        self._db.records = {k: v for k, v in self._db.records.items() if v[1].subject_id != subject_id}
        uid, subject = self._db.subjects[subject_id]
        self._db.subjects[subject_id] = (uid, subject.with_counts(0, 0))
        return True


class InMemoryAttendance(_Failing):
    def __init__(self, db: "InMemoryDB"):
        self._db = db

    def list_for_user(self, user_id: int):
        return [r for uid, r in self._db.records.values() if uid == user_id]

    def _set_counts(self, subject_id: int, attended: int, total: int) -> None:
        uid, subject = self._db.subjects[subject_id]
        self._db.subjects[subject_id] = (uid, subject.with_counts(attended, total))

    def create(self, *, user_id, subject_id, entry_id, on, mark, attended, total) -> AttendanceRecord:
        self._maybe_fail()
        if any(r.timetable_entry_id == entry_id and r.date == on for _, r in self._db.records.values()):
            raise DuplicateRecordError("Attendance already marked for this class. Use edit to change it.")
        record = AttendanceRecord(
            record_id=self._db.next_id(), date=on, subject_id=subject_id, timetable_entry_id=entry_id, mark=mark
        )
        self._db.records[record.record_id] = (user_id, record)
        self._set_counts(subject_id, attended, total)
        return record

    def update_mark(self, *, user_id, record_id, subject_id, mark, attended, total) -> bool:
        self._maybe_fail()
        if record_id not in self._db.records:
            return False
        uid, record = self._db.records[record_id]
        self._db.records[record_id] = (uid, replace(record, mark=mark))
        self._set_counts(subject_id, attended, total)
        return True


class InMemorySharedCodes:
    def __init__(self):
        self.codes: dict[str, SharedCode] = {}

    def get(self, code: str) -> Optional[SharedCode]:
        return self.codes.get(code)

    def try_create(self, shared: SharedCode) -> bool:
        if shared.code in self.codes:
            return False
        self.codes[shared.code] = shared
        return True


class InMemoryDB:
    """Rows keyed by id, each stored as (user_id, entity)."""

    def __init__(self):
        self._id = 0
        self.subjects: dict = {}
        self.entries: dict = {}
        self.records: dict = {}
        self.subjects_repo = InMemorySubjects(self)
        self.timetable_repo = InMemoryTimetable(self)
        self.attendance_repo = InMemoryAttendance(self)

    def next_id(self) -> int:
        self._id += 1
        return self._id

    def coordinator(self, user_id: int = 1) -> AttendanceCoordinator:
        return AttendanceCoordinator.load(user_id, self.subjects_repo, self.timetable_repo, self.attendance_repo)

    def stored_subject(self, subject_id: int) -> Subject:
        return self.subjects[subject_id][1]


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2026, 2, 4, 9, 0, 0)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def db() -> InMemoryDB:
    return InMemoryDB()


@pytest.fixture
def shared_codes() -> InMemorySharedCodes:
    return InMemorySharedCodes()


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()
