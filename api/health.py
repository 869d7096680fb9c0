"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json

from src.utils.config import get_supabase_credentials, get_webhook_url


def health_payload() -> dict:
    """Liveness plus which integrations are configured (no network calls)."""
    url, key = get_supabase_credentials()
    return {
        "status": "ok",
        "service": "todo-backend",
        "supabase_configured": bool(url and key),
        "webhook_configured": get_webhook_url() is not None,
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        """Handle GET request."""
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(health_payload()).encode('utf-8'))

    def do_POST(self):
        """Handle POST request (same as GET for health check)."""
        self.do_GET()
