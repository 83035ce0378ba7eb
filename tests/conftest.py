"""
Pytest configuration for couchkit_http tests.

This file contains shared fixtures and configuration
for all tests in the project, including a threaded test server whose
side of the HTTP exchange is driven by h11.
"""

import socket
import threading
from typing import Callable, Iterable, List, NamedTuple, Optional, Union

import h11
import pytest

from couchkit_http import CouchHTTPClient, TransportConfig
from couchkit_http.network import MockNetworkBackend


class ReceivedRequest(NamedTuple):
    """A request as seen by the test server."""
    event: Optional[h11.Request]
    body: bytes
    raw: bytes

    def header_values(self, name: bytes) -> List[bytes]:
        """Values of every header called ``name`` (case-insensitive)."""
        name = name.lower()
        return [value for key, value in self.event.headers if key.lower() == name]


# A handler receives the parsed request and returns what to send back:
# h11 events, or raw bytes for responses h11 refuses to produce.
Handler = Callable[[ReceivedRequest], Iterable[Union[h11.Event, bytes]]]


class H11Server:
    """Test server that answers each connection with the handler's output."""

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: List[ReceivedRequest] = []
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.1)
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def port(self) -> int:
        return self._sock.getsockname()[1]

    def start(self) -> "H11Server":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stopped.set()
        self._thread.join(timeout=5.0)
        self._sock.close()

    def _serve(self) -> None:
        while not self._stopped.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5.0)
                try:
                    self._handle(conn)
                except (OSError, h11.ProtocolError):
                    pass

    def _handle(self, conn: socket.socket) -> None:
        h11_conn = h11.Connection(h11.SERVER)
        request = None
        body = bytearray()
        raw = bytearray()

        while True:
            event = h11_conn.next_event()
            if event is h11.NEED_DATA:
                data = conn.recv(65536)
                raw += data
                h11_conn.receive_data(data)
                continue
            if isinstance(event, h11.Request):
                request = event
            elif isinstance(event, h11.Data):
                body += event.data
            elif isinstance(event, (h11.EndOfMessage, h11.ConnectionClosed)):
                break

        received = ReceivedRequest(request, bytes(body), bytes(raw))
        self.requests.append(received)

        for item in self.handler(received):
            if isinstance(item, bytes):
                conn.sendall(item)
            else:
                data = h11_conn.send(item)
                if data:
                    conn.sendall(data)


def json_response(status_code: int, body: bytes, reason: bytes = b"OK") -> List[h11.Event]:
    """Events for a fixed-length JSON response."""
    return [
        h11.Response(
            status_code=status_code,
            reason=reason,
            headers=[("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
        ),
        h11.Data(data=body),
        h11.EndOfMessage(),
    ]


def chunked_response(chunks: List[bytes], trailers: Optional[list] = None) -> List[h11.Event]:
    """Events for a 200 response sent with chunked transfer-encoding."""
    events: List[h11.Event] = [
        h11.Response(status_code=200, reason=b"OK", headers=[("Transfer-Encoding", "chunked")]),
    ]
    events.extend(h11.Data(data=chunk) for chunk in chunks)
    events.append(h11.EndOfMessage(headers=trailers or []))
    return events


@pytest.fixture
def h11_server():
    """Factory fixture starting an H11Server per handler; all are stopped at teardown."""
    servers: List[H11Server] = []

    def _start(handler: Handler) -> H11Server:
        server = H11Server(handler).start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()


@pytest.fixture
def test_config() -> TransportConfig:
    """Configuration with a read timeout so a broken test cannot hang."""
    return TransportConfig(read_timeout=5.0, connect_timeout=5.0)


@pytest.fixture
def mock_backend() -> MockNetworkBackend:
    """Create a mock network backend."""
    return MockNetworkBackend()


@pytest.fixture
def mock_client(mock_backend: MockNetworkBackend) -> CouchHTTPClient:
    """Create a client wired to the mock backend."""
    return CouchHTTPClient("db.example.com", 5984, backend=mock_backend)


@pytest.fixture
def sample_headers():
    """Sample headers for testing."""
    return [
        ("Content-Type", "application/json"),
        ("Authorization", "Basic YWRtaW46c2VjcmV0"),
        ("X-Couch-Full-Commit", "true"),
    ]


@pytest.fixture
def json_ok_response() -> bytes:
    """Minimal successful response with a JSON body."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Server: CouchDB/3.3.3 (Erlang OTP/24)\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: 2\r\n"
        b"\r\n"
        b"{}"
    )


@pytest.fixture
def chunked_test_response() -> bytes:
    """Chunked response whose body is ``test``."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Transfer-Encoding: chunked\r\n"
        b"\r\n"
        b"4\r\ntest\r\n0\r\n\r\n"
    )
