from __future__ import annotations

import io

from flask import Flask, send_file

from ..common.web import current_user_id, error_response, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/share-codes", methods=["POST"], endpoint="generate_share_code")
    @login_required
    def generate_share_code():
        try:
            user_id = current_user_id()
            coordinator = container.coordinator_for(user_id)
            shared = container.share_service.generate(user_id, coordinator.state)
            return ok(201, code=shared.code, entries=len(shared.entries))
        except Exception as e:
            return error_response(e)

    @app.route("/api/share-codes/import", methods=["POST"], endpoint="import_share_code")
    @login_required
    def import_share_code():
        try:
            data = json_body()
            shared = container.share_service.resolve(data.get("code", ""))
            coordinator = container.coordinator_for(current_user_id())
            created = coordinator.import_timetable(e.to_dict() for e in shared.entries)
            return ok(
                entries=[e.to_dict() for e in created],
                message=f"Imported {len(created)} of {len(shared.entries)} classes",
            )
        except Exception as e:
            return error_response(e)

    @app.route("/api/share-codes/<code>/qr", methods=["GET"], endpoint="share_code_qr")
    @login_required
    def share_code_qr(code: str):
        try:
            shared = container.share_service.resolve(code)
            buf = io.BytesIO(container.share_service.qr_png(shared.code))
            return send_file(buf, mimetype="image/png")
        except Exception as e:
            return error_response(e)
