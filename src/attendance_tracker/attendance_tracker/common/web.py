from __future__ import annotations

import logging
from datetime import date
from functools import wraps

from flask import jsonify, request, session

from ..core.exceptions import (
    AIServiceError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateRecordError,
    InvalidInputError,
    NotFoundError,
    PaymentRequiredError,
    PersistenceError,
    RateLimitedError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, today_local

log = logging.getLogger(__name__)

# Most specific first: InvalidInputError is also an AIServiceError.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (InvalidInputError, 400),
    (AuthenticationError, 401),
    (PaymentRequiredError, 402),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateRecordError, 409),
    (RateLimitedError, 429),
    (PersistenceError, 500),
    (AIServiceError, 502),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please sign in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(status: int = 200, **payload):
    return jsonify({"success": True, **payload}), status


def error_response(exc: Exception):
    """Map an exception raised by a service to a JSON error response."""

    if isinstance(exc, DomainError):
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                if status >= 500:
                    log.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.path, exc)
                return jsonify({"success": False, "message": str(exc)}), status
        return jsonify({"success": False, "message": str(exc)}), 400

    log.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Internal server error"}), 500


def query_date(name: str = "date") -> date:
    raw = request.args.get(name)
    return parse_iso_date(raw) if raw else today_local()


def body_date(data: dict, name: str = "date") -> date:
    raw = data.get(name)
    return parse_iso_date(raw) if raw else today_local()
