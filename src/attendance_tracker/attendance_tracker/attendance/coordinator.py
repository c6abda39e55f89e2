from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence

from ..assistant.schemas import ExtractionFailure, ExtractionOutcome
from ..common.datetime_utils import parse_hhmm, today_local
from ..common.validators import require_max_length, require_non_empty
from ..core.enums import AttendanceMark, Weekday
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from ..timetable.model import TimetableEntry
from ..timetable.repository import TimetableRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

log = logging.getLogger(__name__)


def _counted(mark: Optional[AttendanceMark]) -> int:
    return int(mark is not None and mark is not AttendanceMark.OFF)


def _attended(mark: Optional[AttendanceMark]) -> int:
    return int(mark is AttendanceMark.PRESENT)


def transition_delta(old: Optional[AttendanceMark], new: AttendanceMark) -> tuple[int, int]:
    """(delta attended, delta total) for moving a slot from ``old`` to ``new``.

    ``old=None`` is a slot that has never been marked; OFF never counts.
    """
    return _attended(new) - _attended(old), _counted(new) - _counted(old)


@dataclass
class AttendanceState:
    """In-memory mirror of one user's subjects, timetable and attendance records."""

    subjects: List[Subject] = field(default_factory=list)
    entries: List[TimetableEntry] = field(default_factory=list)
    records: List[AttendanceRecord] = field(default_factory=list)

    def subject(self, subject_id: int) -> Optional[Subject]:
        return next((s for s in self.subjects if s.subject_id == subject_id), None)

    def subject_by_code(self, code: str) -> Optional[Subject]:
        key = (code or "").strip().lower()
        return next((s for s in self.subjects if s.code.lower() == key), None)

    def entry(self, entry_id: int) -> Optional[TimetableEntry]:
        return next((e for e in self.entries if e.entry_id == entry_id), None)

    def record_for(self, entry_id: int, on: date) -> Optional[AttendanceRecord]:
        return next((r for r in self.records if r.timetable_entry_id == entry_id and r.date == on), None)

    def put_subject(self, subject: Subject) -> None:
        self.subjects = [subject if s.subject_id == subject.subject_id else s for s in self.subjects]


class AttendanceCoordinator:
    """Single owner of a user's AttendanceState.

    Every mutation is written to the repositories first; the state is only
    touched after the write returned, so a failing write leaves it unchanged.
    """

    def __init__(
        self,
        user_id: int,
        subjects: SubjectRepository,
        timetable: TimetableRepository,
        attendance: AttendanceRepository,
        state: Optional[AttendanceState] = None,
    ):
        self._user_id = int(user_id)
        self._subjects = subjects
        self._timetable = timetable
        self._attendance = attendance
        self.state = state or AttendanceState()

    @classmethod
    def load(
        cls,
        user_id: int,
        subjects: SubjectRepository,
        timetable: TimetableRepository,
        attendance: AttendanceRepository,
    ) -> "AttendanceCoordinator":
        state = AttendanceState(
            subjects=list(subjects.list_for_user(user_id)),
            entries=list(timetable.list_for_user(user_id)),
            records=list(attendance.list_for_user(user_id)),
        )
        return cls(user_id, subjects, timetable, attendance, state)

    @property
    def user_id(self) -> int:
        return self._user_id

    # ---- Subjects ----
    def add_subject(self, name: str, code: str) -> Subject:
        name = require_max_length(require_non_empty(name, "Subject name"), "Subject name", 200)
        code = require_max_length(require_non_empty(code, "Subject code"), "Subject code", 50)
        if self.state.subject_by_code(code):
            raise ValidationError(f"Subject code {code} already exists")

        subject = self._subjects.create(user_id=self._user_id, name=name, code=code)
        self.state.subjects.append(subject)
        return subject

    def delete_subject(self, subject_id: int) -> None:
        subject_id = int(subject_id)
        if not self.state.subject(subject_id):
            raise NotFoundError("Subject not found")
        if not self._subjects.delete(user_id=self._user_id, subject_id=subject_id):
            raise NotFoundError("Subject not found")

        self.state.subjects = [s for s in self.state.subjects if s.subject_id != subject_id]
        self.state.entries = [e for e in self.state.entries if e.subject_id != subject_id]
        self.state.records = [r for r in self.state.records if r.subject_id != subject_id]
        log.info("User %s deleted subject %s", self._user_id, subject_id)

    def import_subjects(self, items: Iterable[tuple[str, str]]) -> List[Subject]:
        """Create the (name, code) pairs whose code is not known yet."""
        seen = {s.code.lower() for s in self.state.subjects}
        pending: List[tuple[str, str]] = []
        for name, code in items:
            name = (name or "").strip()
            code = (code or "").strip()
            if not name or not code or code.lower() in seen:
                continue
            seen.add(code.lower())
            pending.append((name, code))

        if not pending:
            return []
        created = list(self._subjects.create_many(user_id=self._user_id, items=pending))
        self.state.subjects.extend(created)
        return created

    # ---- Timetable ----
    def _slot(self, day, subject_id, time) -> tuple[Weekday, int, str]:
        try:
            weekday = Weekday.parse(day)
        except ValueError as e:
            raise ValidationError(str(e))
        try:
            subject_id = int(subject_id)
        except (TypeError, ValueError):
            raise ValidationError("Subject is required")
        if not self.state.subject(subject_id):
            raise NotFoundError("Subject not found")
        return weekday, subject_id, parse_hhmm(time)

    def add_timetable_entry(self, day, subject_id, time: str) -> TimetableEntry:
        slot = self._slot(day, subject_id, time)
        if any(e.slot == slot for e in self.state.entries):
            raise ValidationError("This class is already in your timetable")

        entry = self._timetable.create_many(user_id=self._user_id, items=[slot])[0]
        self.state.entries.append(entry)
        return entry

    def remove_timetable_entry(self, entry_id: int) -> None:
        entry = self.state.entry(int(entry_id))
        if not entry:
            raise NotFoundError("Timetable entry not found")

        is_last = not any(
            e.subject_id == entry.subject_id and e.entry_id != entry.entry_id for e in self.state.entries
        )
        if is_last:
            removed = self._timetable.delete_last_for_subject(
                user_id=self._user_id, entry_id=entry.entry_id, subject_id=entry.subject_id
            )
        else:
            removed = self._timetable.delete(user_id=self._user_id, entry_id=entry.entry_id)
        if not removed:
            raise NotFoundError("Timetable entry not found")

        self.state.entries = [e for e in self.state.entries if e.entry_id != entry.entry_id]
        if is_last:
            self.state.records = [r for r in self.state.records if r.subject_id != entry.subject_id]
            subject = self.state.subject(entry.subject_id)
            if subject:
                self.state.put_subject(subject.with_counts(0, 0))
        else:
            self.state.records = [
                replace(r, timetable_entry_id=None) if r.timetable_entry_id == entry.entry_id else r
                for r in self.state.records
            ]

    def import_timetable(self, entries: Iterable[Mapping]) -> List[TimetableEntry]:
        """Add ``{day, subject_code, time}`` rows for subjects this user already has.

        Unknown subject codes, malformed rows and slots that already exist are skipped.
        """
        seen = {e.slot for e in self.state.entries}
        pending: List[tuple[Weekday, int, str]] = []
        skipped = 0
        for item in entries:
            subject = self.state.subject_by_code(str(item.get("subject_code") or ""))
            if not subject:
                skipped += 1
                continue
            try:
                slot = (Weekday.parse(item.get("day")), subject.subject_id, parse_hhmm(item.get("time")))
            except (ValueError, ValidationError):
                skipped += 1
                continue
            if slot in seen:
                continue
            seen.add(slot)
            pending.append(slot)

        if skipped:
            log.info("Skipped %s timetable rows without a matching subject", skipped)
        if not pending:
            return []
        created = list(self._timetable.create_many(user_id=self._user_id, items=pending))
        self.state.entries.extend(created)
        return created

    def apply_extraction(self, outcome: ExtractionOutcome) -> dict:
        """Apply an extraction result: missing subjects first, then their slots."""
        if isinstance(outcome, ExtractionFailure):
            raise ValidationError(outcome.message)

        outcome = outcome.reconciled()
        subjects = self.import_subjects((s.name, s.code) for s in outcome.subjects)
        entries = self.import_timetable(
            {"day": row.day, "subject_code": row.subjectCode, "time": row.time} for row in outcome.timetable
        )
        return {"subjects": subjects, "entries": entries}

    # ---- Attendance ----
    def mark_attendance(self, entry_id: int, mark, on: Optional[date] = None) -> AttendanceRecord:
        on = on or today_local()
        mark = self._mark(mark)
        entry = self.state.entry(int(entry_id))
        if not entry:
            raise NotFoundError("Timetable entry not found")
        if Weekday.from_date(on) is not entry.day:
            raise ValidationError("This class is not scheduled on that day")
        if self.state.record_for(entry.entry_id, on):
            raise DuplicateRecordError("Attendance already marked for this class. Use edit to change it.")
        subject = self.state.subject(entry.subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        updated = self._shifted(subject, None, mark)
        record = self._attendance.create(
            user_id=self._user_id,
            subject_id=subject.subject_id,
            entry_id=entry.entry_id,
            on=on,
            mark=mark,
            attended=updated.attended,
            total=updated.total_classes,
        )
        self.state.records.append(record)
        self.state.put_subject(updated)
        return record

    def edit_attendance(self, entry_id: int, on: date, mark) -> AttendanceRecord:
        record = self.state.record_for(int(entry_id), on)
        if not record:
            raise ValidationError("No attendance record for this class on that date")
        return self._edit(record, mark)

    def edit_record(self, record_id: int, mark) -> AttendanceRecord:
        """Edit by record id; also reaches records whose timetable slot was removed."""
        record = next((r for r in self.state.records if r.record_id == int(record_id)), None)
        if not record:
            raise NotFoundError("Attendance record not found")
        return self._edit(record, mark)

    def _edit(self, record: AttendanceRecord, mark) -> AttendanceRecord:
        mark = self._mark(mark)
        if record.mark is mark:
            return record
        subject = self.state.subject(record.subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        updated = self._shifted(subject, record.mark, mark)
        if not self._attendance.update_mark(
            user_id=self._user_id,
            record_id=record.record_id,
            subject_id=subject.subject_id,
            mark=mark,
            attended=updated.attended,
            total=updated.total_classes,
        ):
            raise NotFoundError("Attendance record not found")

        edited = replace(record, mark=mark)
        self.state.records = [edited if r.record_id == record.record_id else r for r in self.state.records]
        self.state.put_subject(updated)
        return edited

    @staticmethod
    def _mark(value) -> AttendanceMark:
        try:
            return AttendanceMark.parse(value)
        except ValueError as e:
            raise ValidationError(str(e))

    @staticmethod
    def _shifted(subject: Subject, old: Optional[AttendanceMark], new: AttendanceMark) -> Subject:
        d_attended, d_total = transition_delta(old, new)
        return subject.with_counts(subject.attended + d_attended, subject.total_classes + d_total)

    # ---- Queries ----
    def entries_for_day(self, day: Weekday) -> List[TimetableEntry]:
        return sorted((e for e in self.state.entries if e.day is day), key=lambda e: e.time)

    def entries_for_date(self, on: date) -> List[TimetableEntry]:
        return self.entries_for_day(Weekday.from_date(on))

    def today_schedule(self, today: Optional[date] = None) -> List[TimetableEntry]:
        return self.entries_for_date(today or today_local())

    def marked_entry_ids(self, on: Optional[date] = None) -> List[int]:
        on = on or today_local()
        return [r.timetable_entry_id for r in self.state.records if r.date == on and r.timetable_entry_id is not None]

    def marked_today(self, today: Optional[date] = None) -> int:
        today = today or today_local()
        scheduled = {e.entry_id for e in self.today_schedule(today)}
        return len(scheduled.intersection(self.marked_entry_ids(today)))

    def records_for_subject(self, subject_id: int) -> Sequence[AttendanceRecord]:
        return [r for r in self.state.records if r.subject_id == int(subject_id)]
