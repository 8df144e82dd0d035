"""AWS Lambda / API Gateway entry point for the story endpoint.

Deploy with ``storyseed.serverless.handler`` as the function handler. The
story service, and therefore its cache, is created on the first invocation
and reused while the container stays warm.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Optional

from . import build_story_service
from .config import Config
from .services import StoryService

LOGGER = logging.getLogger(__name__)

_SERVICE: Optional[StoryService] = None


def get_service() -> StoryService:
    global _SERVICE
    if _SERVICE is None:
        settings = {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
        _SERVICE = build_story_service(settings)
    return _SERVICE


def handler(event: Dict[str, Any], context: Any = None, *, service: Optional[StoryService] = None) -> Dict[str, Any]:
    service = service or get_service()
    method = _request_method(event)
    status, body = service.handle(method, _decode_body(event))
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _request_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
    return str(method or "")


def _decode_body(event: Dict[str, Any]) -> Any:
    raw = event.get("body")
    if raw is None:
        return {}
    if isinstance(raw, (dict, list)):
        return raw
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        return json.loads(raw)
    except ValueError:
        LOGGER.info("Ignoring request body that is not valid base64 or JSON")
        return {}
