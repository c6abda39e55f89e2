from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_non_empty, require_strong_password
from ..core.exceptions import AuthenticationError, ValidationError
from .repository import UserRepository

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    email: str


class AuthService:
    """Use case: sign up and sign in."""

    def __init__(self, users: UserRepository):
        self._users = users

    def register(self, email: str, password: str, confirm_password: str) -> SessionUser:
        email = require_email(email)
        require_non_empty(password, "Password")
        if password != confirm_password:
            raise ValidationError("Passwords don't match")
        require_strong_password(password)

        if self._users.get_by_email(email):
            raise ValidationError("This email is already registered. Please sign in instead.")

        user_id = self._users.create_user(email=email, password_hash=generate_password_hash(password))
        log.info("Registered user %s", user_id)
        return SessionUser(user_id=user_id, email=email)

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not (email or "").strip() or not password:
            raise ValidationError("Please enter both email and password")
        email = require_email(email)

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Email or password is incorrect")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not ok:
            raise AuthenticationError("Email or password is incorrect")

        return SessionUser(user_id=user.user_id, email=user.email)
