from __future__ import annotations

from typing import Sequence

import mysql.connector

from ..core.enums import Weekday
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, format_hhmm
from .model import TimetableEntry
from .repository import TimetableRepository


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, user_id: int) -> Sequence[TimetableEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, day_of_week, subject_id, class_time
                FROM timetable_entries
                WHERE user_id=%s
                ORDER BY FIELD(day_of_week,'Monday','Tuesday','Wednesday','Thursday','Friday','Saturday','Sunday'),
                         class_time, entry_id
                """,
                (int(user_id),),
            )
            rows = fetchall(cur)
            return [
                TimetableEntry(
                    entry_id=int(r["entry_id"]),
                    day=Weekday(r["day_of_week"]),
                    subject_id=int(r["subject_id"]),
                    time=format_hhmm(r["class_time"]),
                )
                for r in rows
            ]

    def create_many(
        self, *, user_id: int, items: Sequence[tuple[Weekday, int, str]]
    ) -> Sequence[TimetableEntry]:
        created: list[TimetableEntry] = []
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for day, subject_id, time in items:
                    cur.execute(
                        """
                        INSERT INTO timetable_entries(user_id, subject_id, day_of_week, class_time)
                        VALUES(%s,%s,%s,%s)
                        """,
                        (int(user_id), int(subject_id), day.value, time),
                    )
                    created.append(
                        TimetableEntry(entry_id=int(cur.lastrowid), day=day, subject_id=int(subject_id), time=time)
                    )
        except mysql.connector.IntegrityError:
            raise ValidationError("This class is already in your timetable")
        return created

    def delete(self, *, user_id: int, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM timetable_entries WHERE entry_id=%s AND user_id=%s",
                (int(entry_id), int(user_id)),
            )
            return cur.rowcount > 0

    def delete_last_for_subject(self, *, user_id: int, entry_id: int, subject_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM timetable_entries WHERE entry_id=%s AND user_id=%s",
                (int(entry_id), int(user_id)),
            )
            if cur.rowcount == 0:
                return False
            cur.execute(
                "DELETE FROM attendance_records WHERE subject_id=%s AND user_id=%s",
                (int(subject_id), int(user_id)),
            )
            cur.execute(
                """
                UPDATE subjects
                SET attended_classes=0, total_classes=0
                WHERE subject_id=%s AND user_id=%s
                """,
                (int(subject_id), int(user_id)),
            )
            return True
