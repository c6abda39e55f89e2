from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, json_body, login_required, ok, query_date
from ..container import Container
from ..stats.engine import goal_progress, overall_stats


def register(app: Flask, container: Container) -> None:
    def _with_progress(user_id: int, goal) -> dict:
        subjects = container.coordinator_for(user_id).state.subjects
        overall = overall_stats(subjects)
        return {
            "goal": goal.to_dict(),
            "progress": goal_progress(goal.target_percentage, overall.percentage, subjects).to_dict(),
        }

    @app.route("/api/goals", methods=["GET"], endpoint="get_goal")
    @login_required
    def get_goal():
        try:
            user_id = current_user_id()
            return ok(**_with_progress(user_id, container.goal_service.get(user_id)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/goals", methods=["PUT"], endpoint="update_goal")
    @login_required
    def update_goal():
        try:
            data = json_body()
            user_id = current_user_id()
            goal = container.goal_service.update_target(user_id, data.get("target_percentage"))
            return ok(message=f"New target: {goal.target_percentage}% attendance", **_with_progress(user_id, goal))
        except Exception as e:
            return error_response(e)

    @app.route("/api/goals/notifications", methods=["POST"], endpoint="toggle_goal_notifications")
    @login_required
    def toggle_notifications():
        try:
            goal = container.goal_service.toggle_notifications(current_user_id())
            state = "enabled" if goal.notifications_enabled else "disabled"
            return ok(goal=goal.to_dict(), message=f"Notifications {state}")
        except Exception as e:
            return error_response(e)

    @app.route("/api/goals/check", methods=["POST"], endpoint="check_goal_alerts")
    @login_required
    def check_alerts():
        try:
            user_id = current_user_id()
            subjects = container.coordinator_for(user_id).state.subjects
            alerts = container.goal_service.check_alerts(
                user_id, query_date(), subjects, overall_stats(subjects).percentage
            )
            return ok(alerts=[a.to_dict() for a in alerts])
        except Exception as e:
            return error_response(e)
