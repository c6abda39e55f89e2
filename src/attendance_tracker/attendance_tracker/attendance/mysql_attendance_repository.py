from __future__ import annotations

from datetime import date
from typing import Sequence

import mysql.connector

from ..core.enums import AttendanceMark
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SET_COUNTERS = """
    UPDATE subjects
    SET attended_classes=%s, total_classes=%s
    WHERE subject_id=%s AND user_id=%s
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, attendance_date, subject_id, timetable_entry_id, status
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY attendance_date, record_id
                """,
                (int(user_id),),
            )
            rows = fetchall(cur)
            return [
                AttendanceRecord(
                    record_id=int(r["record_id"]),
                    date=r["attendance_date"],
                    subject_id=int(r["subject_id"]),
                    timetable_entry_id=int(r["timetable_entry_id"]) if r.get("timetable_entry_id") is not None else None,
                    mark=AttendanceMark(r["status"]),
                )
                for r in rows
            ]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, subject_id, timetable_entry_id, attendance_date, status)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), int(subject_id), int(entry_id), on, mark.value),
                )
                record_id = int(cur.lastrowid)
                cur.execute(_SET_COUNTERS, (int(attended), int(total), int(subject_id), int(user_id)))
        except mysql.connector.IntegrityError:
            raise DuplicateRecordError("Attendance already marked for this class. Use edit to change it.")

        return AttendanceRecord(
            record_id=record_id,
            date=on,
            subject_id=int(subject_id),
            timetable_entry_id=int(entry_id),
            mark=mark,
        )

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s WHERE record_id=%s AND user_id=%s",
                (mark.value, int(record_id), int(user_id)),
            )
            if cur.rowcount == 0:
                return False
            cur.execute(_SET_COUNTERS, (int(attended), int(total), int(subject_id), int(user_id)))
            return True
