from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, json_body, login_required, ok
from ..container import Container
from ..stats.engine import subject_stats


def register(app: Flask, container: Container) -> None:
    @app.route("/api/subjects", methods=["GET"], endpoint="list_subjects")
    @login_required
    def list_subjects():
        try:
            coordinator = container.coordinator_for(current_user_id())
            return ok(subjects=[subject_stats(s) for s in coordinator.state.subjects])
        except Exception as e:
            return error_response(e)

    @app.route("/api/subjects", methods=["POST"], endpoint="add_subject")
    @login_required
    def add_subject():
        try:
            data = json_body()
            coordinator = container.coordinator_for(current_user_id())
            subject = coordinator.add_subject(data.get("name", ""), data.get("code", ""))
            return ok(201, subject=subject_stats(subject))
        except Exception as e:
            return error_response(e)

    @app.route("/api/subjects/<int:subject_id>", methods=["DELETE"], endpoint="delete_subject")
    @login_required
    def delete_subject(subject_id: int):
        try:
            container.coordinator_for(current_user_id()).delete_subject(subject_id)
            return ok(message="Subject deleted")
        except Exception as e:
            return error_response(e)
