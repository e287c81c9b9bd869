"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json
import os

from src.utils.routing_config import RoutingConfig


def health_payload() -> dict:
    """Service status plus the configuration the router falls back on."""
    return {
        "status": "ok",
        "service": "call-routing-backend",
        "supabase_configured": bool(
            os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
        ),
        "default_agent": {
            "voice_name": RoutingConfig.VOICE_NAME,
            "language_code": RoutingConfig.LANGUAGE_CODE,
        },
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for the serverless deployment."""

    def do_GET(self):
        """Handle GET request."""
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(health_payload()).encode('utf-8'))

    def do_POST(self):
        """Handle POST request (same as GET for health check)."""
        self.do_GET()
