"""Tests for health check endpoint."""

import pytest
import json
from io import BytesIO
from unittest.mock import Mock
from http.server import BaseHTTPRequestHandler
from api.health import handler, health_payload


class MockSocket:
    """Minimal socket that replays one request."""

    def __init__(self, request_line: bytes):
        self.request_line = request_line

    def makefile(self, *args, **kwargs):
        return BytesIO(self.request_line)

    def sendall(self, data):
        pass

    def close(self):
        pass


def _call(method: str) -> dict:
    h = handler(MockSocket(f"{method} /api/health HTTP/1.1\r\n\r\n".encode()), ("127.0.0.1", 8000), None)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()

    getattr(h, f"do_{method}")()

    assert h.send_response.call_args[0][0] == 200
    h.wfile.seek(0)
    return json.loads(h.wfile.read().decode('utf-8'))


@pytest.mark.unit
def test_health_handler_class():
    """Test that handler is a BaseHTTPRequestHandler subclass."""
    assert issubclass(handler, BaseHTTPRequestHandler)


@pytest.mark.unit
def test_health_get_request():
    """Test GET request to health endpoint."""
    response_data = _call("GET")

    assert response_data["status"] == "ok"
    assert response_data["service"] == "call-routing-backend"
    assert response_data["supabase_configured"] is True


@pytest.mark.unit
def test_health_post_request():
    """Test POST request to health endpoint."""
    assert _call("POST")["status"] == "ok"


@pytest.mark.unit
def test_health_payload_without_supabase(monkeypatch):
    """Test that missing credentials are reported."""
    monkeypatch.delenv("SUPABASE_URL", raising=False)

    payload = health_payload()

    assert payload["supabase_configured"] is False
    assert "voice_name" in payload["default_agent"]
