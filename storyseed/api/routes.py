from __future__ import annotations

from flask import current_app, jsonify, request

from ..extensions import limiter
from . import bp


def _story_rate_limit() -> str:
    return current_app.config["STORY_RATE_LIMIT"]


@bp.route("/generate-story", methods=["POST"])
@limiter.limit(_story_rate_limit)
def generate_story():
    payload = request.get_json(silent=True) or {}
    service = current_app.extensions["story_service"]

    status, body = service.handle(request.method, payload)
    if status >= 500:
        current_app.logger.error("Story request failed with %s: %s", status, body.get("error"))
    return jsonify(body), status
