"""Shared fixtures: a recording local HTTP server and signers."""

import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlsplit

import pytest

from aoclient import AOClient, Identity


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict
    headers: dict
    body: bytes


@dataclass
class FakeUnit:
    """Canned response plus a log of every request received."""

    url: str = ""
    status: int = 200
    body: bytes = b""
    requests: list = field(default_factory=list)

    def respond(self, status: int, body: bytes = b"") -> None:
        self.status = status
        self.body = body


def _make_handler(unit: FakeUnit):
    class Handler(BaseHTTPRequestHandler):
        def _handle(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            parts = urlsplit(self.path)
            unit.requests.append(
                RecordedRequest(
                    method=self.command,
                    path=parts.path,
                    query=parse_qs(parts.query, keep_blank_values=True),
                    headers=dict(self.headers),
                    body=body,
                )
            )
            self.send_response(unit.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(unit.body)))
            self.end_headers()
            self.wfile.write(unit.body)

        do_GET = _handle
        do_POST = _handle

        def log_message(self, format, *args):
            pass

    return Handler


@pytest.fixture
def unit():
    fake = FakeUnit()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(fake))
    fake.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield fake
    server.shutdown()
    server.server_close()


@pytest.fixture
def identity():
    return Identity.generate()


@pytest.fixture
def client(unit, identity):
    """Client whose CU and MU both point at the local fake unit."""
    return AOClient(cu_url=unit.url, mu_url=unit.url, signer=identity, timeout=5)


class FailingSigner:
    """Signer that always refuses, counting attempts."""

    def __init__(self):
        self.calls = 0

    def sign(self, item):
        self.calls += 1
        raise RuntimeError("hardware wallet locked")


@pytest.fixture
def failing_signer():
    return FailingSigner()
