"""Test helper functions."""

import http.client
import json
from io import BytesIO
from typing import Any, Dict, Optional
from unittest.mock import Mock


class MockSocket:
    """Socket stub so BaseHTTPRequestHandler can be built around a raw request."""

    def __init__(self, raw_request: bytes):
        self.raw_request = raw_request

    def makefile(self, *args, **kwargs):
        return BytesIO(self.raw_request)

    def sendall(self, data):
        pass

    def close(self):
        pass


def _encode_body(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    return (body if isinstance(body, str) else json.dumps(body)).encode('utf-8')


def make_handler(
    handler_cls,
    method: str,
    path: str,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
):
    """
    Build a handler instance for one request without letting it run.

    Response plumbing (send_response/send_header/end_headers) is mocked and
    the body is written to an in-memory wfile.
    """
    payload = _encode_body(body)
    all_headers = {"Host": "localhost", "Content-Length": str(len(payload))}
    if payload:
        all_headers["Content-Type"] = "application/json"
    all_headers.update(headers or {})
    raw_headers = "".join(f"{name}: {value}\r\n" for name, value in all_headers.items()) + "\r\n"

    h = handler_cls.__new__(handler_cls)
    h.headers = http.client.parse_headers(BytesIO(raw_headers.encode('utf-8')))
    h.rfile = BytesIO(payload)
    h.wfile = BytesIO()
    h.path = path
    h.command = method
    h.request_version = "HTTP/1.1"
    h.requestline = f"{method} {path} HTTP/1.1"
    h.client_address = ("127.0.0.1", 8000)
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def invoke(h):
    """Run the handler's do_<METHOD>; returns (status, sent_headers, parsed_json_or_None)."""
    getattr(h, f"do_{h.command}")()

    status = h.send_response.call_args[0][0]
    sent_headers = {call[0][0]: call[0][1] for call in h.send_header.call_args_list}
    h.wfile.seek(0)
    raw = h.wfile.read().decode('utf-8')
    return status, sent_headers, (json.loads(raw) if raw else None)
