from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.web import error_response, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=7)

    def _start_session(s_user, remember: bool) -> None:
        session.clear()
        session.permanent = remember
        session["user_id"] = s_user.user_id
        session["email"] = s_user.email

    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        try:
            data = json_body()
            s_user = container.auth_service.register(
                data.get("email", ""),
                data.get("password", ""),
                data.get("confirm_password", ""),
            )
            _start_session(s_user, remember=True)
            return ok(201, user={"user_id": s_user.user_id, "email": s_user.email})
        except Exception as e:
            return error_response(e)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        try:
            data = json_body()
            s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
            _start_session(s_user, remember=bool(data.get("remember_me")))
            return ok(user={"user_id": s_user.user_id, "email": s_user.email})
        except Exception as e:
            return error_response(e)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        session.clear()
        return ok(message="Signed out")
