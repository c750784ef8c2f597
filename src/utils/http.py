"""Shared pieces for the Vercel serverless handlers."""

import asyncio
import json
from http.server import BaseHTTPRequestHandler
from typing import Any, Coroutine, Optional
from urllib.parse import urlparse, parse_qs


def run_sync(coro: Coroutine) -> Any:
    """Drive a coroutine to completion from a synchronous handler."""
    return asyncio.run(coro)


class JSONHandler(BaseHTTPRequestHandler):
    """Base handler with JSON body and query string helpers."""

    def send_json(self, status: int, payload: Any, headers: Optional[dict] = None) -> None:
        """Write a JSON response."""
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(json.dumps(payload).encode('utf-8'))

    def query_params(self) -> dict[str, str]:
        """First value of each query string parameter."""
        query = urlparse(self.path or "").query
        return {key: values[0] for key, values in parse_qs(query).items() if values}

    def read_json_body(self) -> dict:
        """Read and decode the request body; invalid JSON decodes to an empty dict."""
        content_length = int(self.headers.get('Content-Length', 0) or 0)
        raw_body = self.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
        try:
            body = json.loads(raw_body) if raw_body else {}
        except json.JSONDecodeError:
            body = {}
        return body if isinstance(body, dict) else {}
