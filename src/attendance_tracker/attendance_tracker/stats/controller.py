from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, login_required, ok, query_date
from ..container import Container
from ..core.exceptions import NotFoundError
from .engine import calendar_marks, overall_stats, streak, subject_stats, subject_trend
from .weekly import weekly_report


def register(app: Flask, container: Container) -> None:
    @app.route("/api/stats/overall", methods=["GET"], endpoint="overall_stats")
    @login_required
    def overall():
        try:
            coordinator = container.coordinator_for(current_user_id())
            return ok(stats=overall_stats(coordinator.state.subjects).to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/stats/streak", methods=["GET"], endpoint="streak_stats")
    @login_required
    def streak_stats():
        try:
            coordinator = container.coordinator_for(current_user_id())
            return ok(streak=streak(coordinator.state.records, query_date()).to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/stats/weekly", methods=["GET"], endpoint="weekly_stats")
    @login_required
    def weekly_stats():
        try:
            coordinator = container.coordinator_for(current_user_id())
            report = weekly_report(coordinator.state.records, coordinator.state.subjects, query_date())
            return ok(report=report.to_dict())
        except Exception as e:
            return error_response(e)

    @app.route("/api/stats/subjects/<int:subject_id>", methods=["GET"], endpoint="subject_detail_stats")
    @login_required
    def subject_detail(subject_id: int):
        try:
            coordinator = container.coordinator_for(current_user_id())
            subject = coordinator.state.subject(subject_id)
            if not subject:
                raise NotFoundError("Subject not found")
            records = coordinator.records_for_subject(subject_id)
            return ok(
                subject=subject_stats(subject),
                trend=subject_trend(records, subject_id),
                calendar=calendar_marks(records, subject_id),
            )
        except Exception as e:
            return error_response(e)
