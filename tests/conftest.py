from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterator

import pytest
from prometheus_client import REGISTRY

BODY_SIZE = 10 * 1024
DRIP_BYTES = 10
DRIP_INTERVAL = 0.3


class _Server(ThreadingHTTPServer):
    daemon_threads = True
    request_queue_size = 64


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        if self.path == "/ok":
            self._reply(200, b"x" * BODY_SIZE)
        elif self.path == "/error":
            self._reply(500, b"boom")
        elif self.path == "/missing":
            self._reply(404, b"")
        elif self.path == "/truncated":
            # promise more than is sent, then hang up
            self.send_response(200)
            self.send_header("Content-Length", str(BODY_SIZE))
            self.end_headers()
            self.wfile.write(b"x" * 100)
            self.wfile.flush()
            self.close_connection = True
        elif self.path == "/drip":
            self._drip()
        else:
            self._reply(404, b"")

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length", "0"))
        body = self.rfile.read(length)
        self._reply(200, body)

    def _drip(self) -> None:
        self.send_response(200)
        self.send_header("Content-Length", str(DRIP_BYTES))
        self.end_headers()
        self.wfile.flush()
        try:
            for _ in range(DRIP_BYTES):
                time.sleep(DRIP_INTERVAL)
                self.wfile.write(b"x")
                self.wfile.flush()
        except (BrokenPipeError, ConnectionResetError):
            pass
        self.close_connection = True

    def _reply(self, status: int, body: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture(scope="session")
def http_base_url() -> Iterator[str]:
    server = _Server(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def count_outcome():
    def _count(protocol: str, outcome: str) -> float:
        v = REGISTRY.get_sample_value(
            "tester_requests_total", {"protocol": protocol, "outcome": outcome}
        )
        return v or 0.0

    return _count
