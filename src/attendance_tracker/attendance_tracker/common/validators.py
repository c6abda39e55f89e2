from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} is too long")
    return value


def require_email(value: str) -> str:
    email = require_non_empty(value, "Email").lower()
    require_max_length(email, "Email", 255)
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    return email


def require_strong_password(value: str) -> str:
    require_min_length(value, "Password", 8)
    require_max_length(value, "Password", 100)
    if not re.search(r"[A-Z]", value):
        raise ValidationError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValidationError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", value):
        raise ValidationError("Password must contain at least one number")
    return value
