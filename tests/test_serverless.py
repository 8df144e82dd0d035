import base64
import json

from storyseed import serverless


def _event(method, body, **extra):
    event = {"httpMethod": method, "body": body}
    event.update(extra)
    return event


def test_handler_generates_story(service, generator):
    response = serverless.handler(_event("POST", json.dumps({"seed": "a fox"})), None, service=service)

    assert response["statusCode"] == 200
    assert response["headers"]["Content-Type"] == "application/json"
    assert json.loads(response["body"]) == {"output": "Once upon a time.", "cached": False}
    assert len(generator.calls) == 1


def test_handler_reuses_cache_between_invocations(service, generator):
    event = _event("POST", json.dumps({"seed": "a fox", "tone": "dry"}))

    serverless.handler(event, None, service=service)
    response = serverless.handler(event, None, service=service)

    assert json.loads(response["body"])["cached"] is True
    assert len(generator.calls) == 1


def test_handler_rejects_other_methods(service):
    response = serverless.handler(_event("GET", None), None, service=service)

    assert response["statusCode"] == 405
    assert json.loads(response["body"]) == {"error": "method_not_allowed"}


def test_handler_reads_http_api_v2_events(service):
    body = base64.b64encode(json.dumps({"seed": "a fox"}).encode("utf-8")).decode("ascii")
    event = {
        "requestContext": {"http": {"method": "POST"}},
        "body": body,
        "isBase64Encoded": True,
    }

    response = serverless.handler(event, None, service=service)

    assert response["statusCode"] == 200


def test_handler_treats_invalid_json_as_missing_seed(service, generator):
    response = serverless.handler(_event("POST", "{not json"), None, service=service)

    assert response["statusCode"] == 400
    assert json.loads(response["body"]) == {"error": "seed_required"}
    assert generator.calls == []


def test_get_service_is_created_once(monkeypatch):
    monkeypatch.setattr(serverless, "_SERVICE", None)
    monkeypatch.setattr(serverless.Config, "REPLICATE_API_TOKEN", None)

    first = serverless.get_service()
    second = serverless.get_service()

    assert first is second
    assert first.generator is None


def test_handler_treats_undecodable_base64_body_as_missing_seed(service, generator):
    not_utf8 = base64.b64encode(b"\xff\xfe{").decode("ascii")
    events = [
        _event("POST", not_utf8, isBase64Encoded=True),
        _event("POST", "not-base64!!x", isBase64Encoded=True),
    ]

    for event in events:
        response = serverless.handler(event, None, service=service)
        assert response["statusCode"] == 400
        assert json.loads(response["body"]) == {"error": "seed_required"}

    assert generator.calls == []
