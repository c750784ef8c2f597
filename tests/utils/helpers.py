"""Test helper functions."""

import json
from io import BytesIO
from typing import Any, Optional
from unittest.mock import Mock


def build_handler(
    handler_class,
    method: str = "GET",
    path: str = "/",
    body: Optional[Any] = None,
    headers: Optional[dict] = None
):
    """
    Build a Vercel handler instance without a socket.

    send_response/send_header/end_headers are mocks; the body written by
    the handler is available through read_json/read_body.
    """
    raw = b""
    if body is not None:
        raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")

    h = handler_class.__new__(handler_class)
    h.command = method
    h.path = path
    h.request_version = "HTTP/1.1"
    h.headers = {"Content-Length": str(len(raw)), "Content-Type": "application/json", **(headers or {})}
    h.rfile = BytesIO(raw)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def response_status(h) -> int:
    return h.send_response.call_args[0][0]


def response_headers(h) -> dict:
    return {call.args[0]: call.args[1] for call in h.send_header.call_args_list}


def read_body(h) -> bytes:
    return h.wfile.getvalue()


def read_json(h) -> Any:
    return json.loads(read_body(h).decode("utf-8"))
