from __future__ import annotations

from typing import Optional

import mysql.connector

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, email, password_hash, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, email, password_hash, is_active FROM users WHERE email=%s",
                (email,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, email: str, password_hash: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO users(email, password_hash, is_active) VALUES(%s,%s,1)",
                    (email, password_hash),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise ValidationError("This email is already registered. Please sign in instead.")
