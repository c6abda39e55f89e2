from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import body_date, current_user_id, error_response, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError


def _mark_value(data: dict):
    """``mark`` ("present" | "absent" | "off") wins over the JSON ``present`` flag."""
    if "mark" in data:
        return data["mark"]
    if "present" in data:
        return data["present"]
    raise ValidationError("Attendance mark is required")


def _int_field(data: dict, name: str, label: str) -> int:
    try:
        return int(data.get(name))
    except (TypeError, ValueError):
        raise ValidationError(f"{label} is required")


def _entry_id(data: dict) -> int:
    return _int_field(data, "timetable_entry_id", "Timetable entry")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        try:
            coordinator = container.coordinator_for(current_user_id())
            records = coordinator.state.records
            subject_id = request.args.get("subject_id", type=int)
            if subject_id is not None:
                records = coordinator.records_for_subject(subject_id)
            if request.args.get("date"):
                on = parse_iso_date(request.args["date"])
                records = [r for r in records if r.date == on]
            return ok(records=[r.to_dict() for r in records])
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @login_required
    def mark_attendance():
        try:
            data = json_body()
            coordinator = container.coordinator_for(current_user_id())
            record = coordinator.mark_attendance(_entry_id(data), _mark_value(data), on=body_date(data))
            subject = coordinator.state.subject(record.subject_id)
            return ok(201, record=record.to_dict(), subject=subject.to_dict() if subject else None)
        except Exception as e:
            return error_response(e)

    @app.route("/api/attendance", methods=["PUT"], endpoint="edit_attendance")
    @login_required
    def edit_attendance():
        try:
            data = json_body()
            coordinator = container.coordinator_for(current_user_id())
            if data.get("record_id") is not None:
                record = coordinator.edit_record(_int_field(data, "record_id", "Attendance record"), _mark_value(data))
            else:
                if not data.get("date"):
                    raise ValidationError("Date is required")
                record = coordinator.edit_attendance(_entry_id(data), parse_iso_date(data["date"]), _mark_value(data))
            subject = coordinator.state.subject(record.subject_id)
            return ok(record=record.to_dict(), subject=subject.to_dict() if subject else None)
        except Exception as e:
            return error_response(e)
