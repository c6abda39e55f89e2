from __future__ import annotations

from flask import Flask

from ..common.web import current_user_id, error_response, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError
from ..stats.engine import subject_stats


def register(app: Flask, container: Container) -> None:
    @app.route("/api/chat", methods=["POST"], endpoint="chat")
    @login_required
    def chat():
        try:
            data = json_body()
            messages = data.get("messages")
            if not isinstance(messages, list):
                raise ValidationError("Invalid messages format")
            state = container.coordinator_for(current_user_id()).state
            reply = container.assistant.chat(
                messages,
                timetable=[e.to_dict() for e in state.entries],
                subjects=[subject_stats(s) for s in state.subjects],
            )
            return ok(reply=reply)
        except Exception as e:
            return error_response(e)
