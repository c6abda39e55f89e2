from __future__ import annotations

from typing import Sequence

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Subject
from .repository import SubjectRepository


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, user_id: int) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, name, code, attended_classes, total_classes
                FROM subjects
                WHERE user_id=%s
                ORDER BY subject_id
                """,
                (int(user_id),),
            )
            rows = fetchall(cur)
            return [
                Subject(
                    subject_id=int(r["subject_id"]),
                    name=r["name"],
                    code=r["code"],
                    attended=int(r.get("attended_classes") or 0),
                    total_classes=int(r.get("total_classes") or 0),
                )
                for r in rows
            ]

    def create(self, *, user_id: int, name: str, code: str) -> Subject:
        return self.create_many(user_id=user_id, items=[(name, code)])[0]

    def create_many(self, *, user_id: int, items: Sequence[tuple[str, str]]) -> Sequence[Subject]:
        created: list[Subject] = []
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for name, code in items:
                    cur.execute(
                        """
                        INSERT INTO subjects(user_id, name, code, attended_classes, total_classes)
                        VALUES(%s,%s,%s,0,0)
                        """,
                        (int(user_id), name, code),
                    )
                    created.append(Subject(subject_id=int(cur.lastrowid), name=name, code=code))
        except mysql.connector.IntegrityError:
            raise ValidationError("A subject with this code already exists")
        return created

    def delete(self, *, user_id: int, subject_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM subjects WHERE subject_id=%s AND user_id=%s",
                (int(subject_id), int(user_id)),
            )
            return cur.rowcount > 0
