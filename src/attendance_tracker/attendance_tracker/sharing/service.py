from __future__ import annotations

import io
import logging
import secrets
import string
from typing import Callable, Optional

import qrcode

from ..attendance.coordinator import AttendanceState
from ..core.constants import SHARE_CODE_LENGTH, SHARE_CODE_MAX_ATTEMPTS
from ..core.exceptions import NotFoundError, PersistenceError, ValidationError
from .model import SharedCode, SharedEntry
from .repository import SharedCodeRepository

log = logging.getLogger(__name__)

_ALPHABET = string.ascii_uppercase + string.digits


def random_code(length: int = SHARE_CODE_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


class ShareCodeService:
    """Share a timetable with other students through a short code."""

    def __init__(self, codes: SharedCodeRepository, code_factory: Optional[Callable[[], str]] = None):
        self._codes = codes
        self._code_factory = code_factory or random_code

    def generate(self, user_id: int, state: AttendanceState) -> SharedCode:
        if not state.entries:
            raise ValidationError("Add classes to your timetable before sharing it")

        entries = []
        for e in state.entries:
            subject = state.subject(e.subject_id)
            if not subject:
                continue
            entries.append(
                SharedEntry(day=e.day.value, subject_code=subject.code, subject_name=subject.name, time=e.time)
            )

        for _ in range(SHARE_CODE_MAX_ATTEMPTS):
            shared = SharedCode(code=self._code_factory(), user_id=int(user_id), entries=entries)
            if self._codes.try_create(shared):
                log.info("User %s shared %s timetable entries as %s", user_id, len(entries), shared.code)
                return shared
        raise PersistenceError("Could not generate a unique share code, please try again")

    def resolve(self, code: str) -> SharedCode:
        code = (code or "").strip().upper()
        if len(code) != SHARE_CODE_LENGTH or not code.isalnum():
            raise ValidationError(f"Share code must be {SHARE_CODE_LENGTH} letters or digits")
        shared = self._codes.get(code)
        if not shared:
            raise NotFoundError("Invalid code")
        return shared

    @staticmethod
    def qr_png(code: str) -> bytes:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
