from __future__ import annotations

import json
from typing import Optional

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SharedCode, SharedEntry
from .repository import SharedCodeRepository


class MySQLSharedCodeRepository(SharedCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, code: str) -> Optional[SharedCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT code, user_id, timetable_data FROM shared_codes WHERE code=%s",
                (code,),
            )
            r = fetchone(cur)
            if not r:
                return None
            data = r["timetable_data"]
            if isinstance(data, (bytes, bytearray)):
                data = data.decode("utf-8")
            if isinstance(data, str):
                data = json.loads(data)
            return SharedCode(
                code=r["code"],
                user_id=int(r["user_id"]),
                entries=[SharedEntry.from_dict(item) for item in (data or [])],
            )

    def try_create(self, shared: SharedCode) -> bool:
        payload = json.dumps([e.to_dict() for e in shared.entries])
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO shared_codes(code, user_id, timetable_data) VALUES(%s,%s,%s)",
                    (shared.code, int(shared.user_id), payload),
                )
        except mysql.connector.IntegrityError:
            return False
        return True
