import os
import socket
import struct
import sys
import threading
import time

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.blocklist import BlocklistMatcher  # noqa: E402
from traffic import AuditLog, ProxyContext, ProxyServer  # noqa: E402


class FakeOrigin:
    """Accepts connections, records each request and replies with a fixed body."""

    def __init__(self, response: bytes = b"", reply=None):
        self.response = response
        self.reply = reply
        self.requests: list[bytes] = []
        self.connections = 0
        self._lock = threading.Lock()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(50)
        self._sock.settimeout(0.2)
        self.port = self._sock.getsockname()[1]
        self._running = True
        self._thread = threading.Thread(target=self._loop, daemon=True)
        self._thread.start()

    def _loop(self):
        while self._running:
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            threading.Thread(target=self._serve, args=(conn,), daemon=True).start()

    def _serve(self, conn):
        conn.settimeout(5)
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                data += chunk
            with self._lock:
                self.connections += 1
                self.requests.append(data)
            try:
                if self.reply is not None:
                    self.reply(conn)
                else:
                    conn.sendall(self.response)
            except OSError:
                pass

    def close(self):
        self._running = False
        self._thread.join(timeout=2)
        self._sock.close()


def reset(conn):
    """Abort *conn* with an RST instead of a FIN."""
    conn.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER,
                    struct.pack("ii", 1, 0))
    conn.close()


def make_response(total_size: int) -> bytes:
    head = b"HTTP/1.0 200 OK\r\nContent-Type: text/html\r\n\r\n"
    return head + b"x" * (total_size - len(head))


def proxy_request(port: int, payload: bytes, timeout: float = 5) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(payload)
        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def origin():
    server = FakeOrigin(make_response(120))
    yield server
    server.close()


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "proxy.log")


@pytest.fixture
def make_proxy(log_path):
    started = []

    def _make(entries=(), policy="hostname", concurrent=True):
        context = ProxyContext(
            audit_log=AuditLog(log_path),
            blocklist=BlocklistMatcher(entries, policy=policy),
        )
        server = ProxyServer(context, host="127.0.0.1", port=0,
                             concurrent=concurrent)
        server.start()
        started.append(server)
        return server

    yield _make
    for server in started:
        server.stop()
        server.context.close()


def read_log(path: str) -> list[str]:
    if not os.path.exists(path):
        return []
    with open(path, encoding="iso-8859-1") as f:
        return f.read().splitlines()
