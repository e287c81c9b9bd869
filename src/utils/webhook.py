"""Request parsing and response helpers for serverless webhook handlers."""

import json
from typing import Any
from urllib.parse import parse_qs


def _header(headers: dict, name: str) -> str:
    for key, value in (headers or {}).items():
        if key.lower() == name.lower():
            return value or ""
    return ""


def parse_call_data(request: dict) -> dict[str, Any]:
    """
    Extract call fields from a webhook request.

    Twilio posts application/x-www-form-urlencoded bodies; JSON bodies and
    pre-parsed dicts are accepted too. Raises ValueError on a malformed body.
    """
    body = request.get("body")
    if body is None or body == "":
        return {}
    if isinstance(body, dict):
        return dict(body)
    if isinstance(body, bytes):
        body = body.decode("utf-8")

    content_type = _header(request.get("headers", {}), "content-type")
    if "application/json" in content_type or body.lstrip().startswith("{"):
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON body: {e}")
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data

    return {key: values[-1] for key, values in parse_qs(body, keep_blank_values=True).items()}


def query_param(request: dict, name: str, default: Any = None) -> Any:
    """Single query-string value from a webhook request."""
    query_params = request.get("query", {}) or {}
    value = query_params.get(name, default)
    if isinstance(value, list):
        return value[-1] if value else default
    return value


def json_response(status_code: int, payload: dict) -> dict:
    """Build a serverless JSON response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }
