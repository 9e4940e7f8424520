"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json
from realty_crm.utils.config import CRMConfig

SERVICE_NAME = "realty-crm"


def health_payload() -> dict:
    """Service status plus whether a Supabase store can be built from env."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "store_configured": bool(CRMConfig.SUPABASE_URL and CRMConfig.supabase_key()),
        "import_batch_size": CRMConfig.IMPORT_BATCH_SIZE,
    }


class handler(BaseHTTPRequestHandler):
    """Vercel health check for the buyer CRM API."""

    def _write_json(self, status: int, payload: dict) -> None:
        body = json.dumps(payload).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        self._write_json(200, health_payload())

    def do_POST(self):
        self.do_GET()
