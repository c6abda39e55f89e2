from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, json_body, login_required, ok, query_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/timetable", methods=["GET"], endpoint="list_timetable")
    @login_required
    def list_timetable():
        try:
            coordinator = container.coordinator_for(current_user_id())
            return ok(entries=[e.to_dict() for e in coordinator.state.entries])
        except Exception as e:
            return error_response(e)

    @app.route("/api/timetable/today", methods=["GET"], endpoint="today_timetable")
    @login_required
    def today_timetable():
        try:
            day = query_date()
            coordinator = container.coordinator_for(current_user_id())
            return ok(
                date=day.isoformat(),
                entries=[e.to_dict() for e in coordinator.today_schedule(day)],
                marked_entry_ids=coordinator.marked_entry_ids(day),
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/timetable", methods=["POST"], endpoint="add_timetable_entry")
    @login_required
    def add_timetable_entry():
        try:
            data = json_body()
            coordinator = container.coordinator_for(current_user_id())
            entry = coordinator.add_timetable_entry(data.get("day"), data.get("subject_id"), data.get("time", ""))
            return ok(201, entry=entry.to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/timetable/<int:entry_id>", methods=["DELETE"], endpoint="remove_timetable_entry")
    @login_required
    def remove_timetable_entry(entry_id: int):
        try:
            container.coordinator_for(current_user_id()).remove_timetable_entry(entry_id)
            return ok(message="Class removed from timetable")
        except Exception as e:
            return error_response(e)

    @app.route("/api/timetable/extract", methods=["POST"], endpoint="extract_timetable")
    @login_required
    def extract_timetable():
        try:
            data = json_body()
            outcome = container.assistant.extract_timetable(data.get("image_data") or data.get("imageData") or "")
            coordinator = container.coordinator_for(current_user_id())
            applied = coordinator.apply_extraction(outcome)
            return ok(
                201,
                subjects=[s.to_dict() for s in applied["subjects"]],
                entries=[e.to_dict() for e in applied["entries"]],
                message=f"Added {len(applied['subjects'])} subjects and {len(applied['entries'])} classes",
            )
        except Exception as e:
            return error_response(e)
