from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from .config import Config  # noqa: E402
from .extensions import cors, limiter  # noqa: E402
from .generators import build_story_generator, credential_name  # noqa: E402
from .services import InMemoryStoryCache, StoryCache, StoryService  # noqa: E402


def create_app(
    config_class: type[Config] = Config,
    *,
    story_service: Optional[StoryService] = None,
) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(str(app.config.get("LOG_LEVEL") or "INFO").upper())

    register_extensions(app)
    register_blueprints(app)
    register_error_handlers(app)

    if story_service is None:
        story_service = build_story_service(app.config)
    app.extensions["story_service"] = story_service

    return app


def build_story_service(settings: Mapping[str, Any], cache: Optional[StoryCache] = None) -> StoryService:
    """Wire the configured generator to a cache that lives as long as the process."""

    return StoryService(
        cache if cache is not None else InMemoryStoryCache(),
        build_story_generator(settings),
        credential_name=credential_name(settings),
    )


def register_extensions(app: Flask) -> None:
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        send_wildcard=app.config["CORS_ORIGINS"] == "*",
    )
    limiter.init_app(app)


def register_blueprints(app: Flask) -> None:
    from .api import bp as api_bp
    from .main import bp as main_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(main_bp)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({"error": "method_not_allowed"}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({"error": "rate_limited", "message": str(error.description)}), 429
