"""
Basic tests for HTTP11Connection over a mock stream.
"""

import pytest

from couchkit_http.body import DataAndState, End, StreamingBody
from couchkit_http.config import TransportConfig
from couchkit_http.exceptions import (
    BadChunkedEncodingError,
    ClosedByPeerError,
    ConnectionError,
    ProtocolError,
    UnknownTransferEncodingError,
)
from couchkit_http.http11 import ConnectionState, HTTP11Connection
from couchkit_http.http_primitives import Headers, Request
from couchkit_http.network import MockNetworkStream


def get_request(path: str = "/db") -> Request:
    return Request.create("GET", path, Headers([("Host", "localhost:5984")]))


class TestHTTP11Connection:
    """Test the single request/response cycle."""

    def test_initial_state(self) -> None:
        connection = HTTP11Connection(MockNetworkStream())
        assert connection.state is ConnectionState.NEW
        assert not connection.is_closed

    def test_get_request(self, json_ok_response) -> None:
        stream = MockNetworkStream(json_ok_response)
        connection = HTTP11Connection(stream)

        response, body = connection.handle_request(get_request("/db/doc"))

        assert stream.written_data == b"GET /db/doc HTTP/1.1\r\nHost: localhost:5984\r\n\r\n"
        assert response.status_code == 200
        assert body == b"{}"
        assert connection.is_closed
        assert stream.is_closed

    def test_single_use(self, json_ok_response) -> None:
        connection = HTTP11Connection(MockNetworkStream(json_ok_response))
        connection.handle_request(get_request())

        with pytest.raises(ConnectionError, match="single request"):
            connection.handle_request(get_request())

    def test_query_in_request_line(self, json_ok_response) -> None:
        stream = MockNetworkStream(json_ok_response)
        request = Request.create("GET", "/db/_all_docs", params=[("limit", 1)])
        HTTP11Connection(stream).handle_request(request)
        assert stream.written_data.startswith(b"GET /db/_all_docs?limit=1 HTTP/1.1\r\n")

    def test_chunked_response(self, chunked_test_response) -> None:
        response, body = HTTP11Connection(MockNetworkStream(chunked_test_response)).handle_request(get_request())
        assert response.get_header("Transfer-Encoding") == "chunked"
        assert body == b"test"

    def test_head_does_not_read_body(self) -> None:
        """Test a HEAD response's Content-Length is not used to read a body."""
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\n\r\n")
        request = Request.create("HEAD", "/db")
        response, body = HTTP11Connection(stream).handle_request(request)
        assert response.status_code == 200
        assert body is None

    def test_error_status_does_not_read_body(self) -> None:
        stream = MockNetworkStream(
            b"HTTP/1.1 404 Object Not Found\r\nContent-Length: 41\r\n\r\n"
            b'{"error":"not_found","reason":"missing"}\n'
        )
        response, body = HTTP11Connection(stream).handle_request(get_request())
        assert response.status_code == 404
        assert response.phrase == "Object Not Found"
        assert body is None

    def test_streaming_request_body(self, json_ok_response) -> None:
        stream = MockNetworkStream(json_ok_response)
        chunks = [b"he", b"llo"]

        def produce(index=0):
            if index == len(chunks):
                return End()
            return DataAndState(chunks[index], index + 1)

        request = Request.create(
            "PUT",
            "/db/doc/attachment",
            Headers([("Content-Length", "5")]),
            StreamingBody(produce),
        )
        HTTP11Connection(stream).handle_request(request)
        assert stream.written_data.endswith(b"Content-Length: 5\r\n\r\nhello")

    def test_closed_before_response(self) -> None:
        connection = HTTP11Connection(MockNetworkStream(b""))
        with pytest.raises(ClosedByPeerError):
            connection.handle_request(get_request())
        assert connection.is_closed

    def test_bad_chunked_response(self) -> None:
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\nnope\r\n")
        with pytest.raises(BadChunkedEncodingError):
            HTTP11Connection(stream).handle_request(get_request())

    def test_unknown_transfer_encoding(self) -> None:
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nTransfer-Encoding: gzip\r\n\r\n")
        with pytest.raises(UnknownTransferEncodingError):
            HTTP11Connection(stream).handle_request(get_request())

    def test_invalid_status_line(self) -> None:
        with pytest.raises(ProtocolError):
            HTTP11Connection(MockNetworkStream(b"SSH-2.0-OpenSSH\r\n")).handle_request(get_request())

    def test_configured_limits(self) -> None:
        config = TransportConfig(max_header_count=2, max_chunk_size=4)
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nA: 1\r\nB: 2\r\nC: 3\r\n\r\n")
        with pytest.raises(ProtocolError, match="more than 2 header lines"):
            HTTP11Connection(stream, config).handle_request(get_request())

    def test_body_read_in_bounded_increments(self) -> None:
        payload = b'"' + b"x" * 30 + b'"'
        stream = MockNetworkStream(b"HTTP/1.1 200 OK\r\nContent-Length: 32\r\n\r\n", max_read=None)
        stream.add_data(payload)
        config = TransportConfig(max_chunk_size=8)
        connection = HTTP11Connection(stream, config)

        _, body = connection.handle_request(get_request())
        assert body == payload

    def test_metrics(self, json_ok_response) -> None:
        connection = HTTP11Connection(MockNetworkStream(json_ok_response))
        connection.handle_request(get_request())
        metrics = connection.metrics
        assert metrics["bytes_sent"] == len(b"GET /db HTTP/1.1\r\nHost: localhost:5984\r\n\r\n")
        assert metrics["bytes_received"] == len(json_ok_response)
        assert metrics["request_time"] is not None
        assert metrics["state"] == "closed"
