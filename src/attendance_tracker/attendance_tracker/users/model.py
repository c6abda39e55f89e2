from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """Domain entity: a student account.

    Plain data object (no DB access code).
    """

    user_id: int
    email: str
    password_hash: str
    is_active: bool = True
