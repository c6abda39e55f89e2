from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reminder", methods=["GET"], endpoint="attendance_reminder")
    @login_required
    def attendance_reminder():
        try:
            reminders = container.reminder_service
            local_now = reminders.local_now()
            coordinator = container.coordinator_for(current_user_id())
            today = local_now.date()
            status = reminders.check(
                len(coordinator.today_schedule(today)),
                coordinator.marked_today(today),
                now=local_now,
            )
            return ok(reminder=status.to_dict(), reminder_time=reminders.reminder_time)
        except Exception as e:
            return error_response(e)
