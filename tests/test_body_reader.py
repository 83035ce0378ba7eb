"""
Tests for response body reception.
"""

import pytest

from couchkit_http.body_reader import (
    Framing,
    read_body,
    read_chunk_size,
    read_chunked_body,
    read_trailers,
    resolve_framing,
)
from couchkit_http.exceptions import (
    BadChunkedEncodingError,
    ClosedByPeerError,
    ProtocolError,
    UnknownTransferEncodingError,
)
from couchkit_http.http_primitives import RawResponse
from couchkit_http.network import MockNetworkStream
from couchkit_http.streams import LineReader


def response_with(*headers) -> RawResponse:
    return RawResponse(status_code=200, phrase="OK", headers=list(headers))


def reader_for(data: bytes, max_read=None) -> LineReader:
    return LineReader(MockNetworkStream(data, max_read=max_read))


class TestResolveFraming:
    """Test selection of the body framing."""

    def test_no_headers(self) -> None:
        assert resolve_framing(response_with()) == (Framing.EMPTY, 0)

    def test_content_length(self) -> None:
        assert resolve_framing(response_with(("Content-Length", "42"))) == (Framing.FIXED, 42)

    def test_zero_content_length(self) -> None:
        assert resolve_framing(response_with(("Content-Length", "0"))) == (Framing.EMPTY, 0)

    def test_chunked_wins(self) -> None:
        """Test chunked takes precedence over Content-Length."""
        response = response_with(("Content-Length", "10"), ("transfer-encoding", "Chunked"))
        assert resolve_framing(response) == (Framing.CHUNKED, 0)

    def test_unknown_transfer_encoding(self) -> None:
        with pytest.raises(UnknownTransferEncodingError) as exc_info:
            resolve_framing(response_with(("Transfer-Encoding", "gzip")))
        assert exc_info.value.detail == "gzip"

    @pytest.mark.parametrize("value", ["-1", "abc", "1.5", ""])
    def test_invalid_content_length(self, value) -> None:
        with pytest.raises(ProtocolError, match="invalid Content-Length"):
            resolve_framing(response_with(("Content-Length", value)))


class TestFixedBody:
    """Test bodies with a Content-Length."""

    @pytest.mark.parametrize("max_read", [1, 3, 1000, None])
    @pytest.mark.parametrize("max_chunk_size", [1, 4, 1024 * 1024])
    def test_independent_of_segmenting(self, max_read, max_chunk_size) -> None:
        """Test the body is the same however it is split and read."""
        payload = b'{"_id":"doc","_rev":"1-abc","n":' + b"7" * 200 + b"}"
        response = response_with(("Content-Length", str(len(payload))))
        reader = reader_for(payload, max_read=max_read)
        assert read_body(reader, response, max_chunk_size=max_chunk_size) == payload

    def test_reads_are_bounded(self) -> None:
        """Test no single read asks for more than the chunk size."""
        stream = MockNetworkStream(b"x" * 3000)
        body = read_body(LineReader(stream), response_with(("Content-Length", "3000")), max_chunk_size=1024)
        assert len(body) == 3000
        assert max(stream.read_sizes) <= 1024

    def test_closed_early(self) -> None:
        with pytest.raises(ClosedByPeerError):
            read_body(reader_for(b"short"), response_with(("Content-Length", "100")))

    def test_empty_body_reads_nothing(self) -> None:
        stream = MockNetworkStream(b"")
        assert read_body(LineReader(stream), response_with()) == b""
        assert stream.read_sizes == []


class TestChunkSize:
    """Test chunk-size lines."""

    @pytest.mark.parametrize(
        "line, size",
        [
            (b"4\r\n", 4),
            (b"1a\r\n", 26),
            (b"FF\r\n", 255),
            (b"10;name=value\r\n", 16),
            (b"8 \r\n", 8),
            (b"\r\n", 0),
            (b"0\n", 0),
        ],
    )
    def test_sizes(self, line, size) -> None:
        assert read_chunk_size(reader_for(line)) == size

    def test_bad_hex(self) -> None:
        with pytest.raises(BadChunkedEncodingError, match="Bad chunked transfer-encoding header"):
            read_chunk_size(reader_for(b"zz\r\n"))

    def test_closed(self) -> None:
        with pytest.raises(BadChunkedEncodingError):
            read_chunk_size(reader_for(b""))


class TestTrailers:
    def test_trailers_discarded(self) -> None:
        reader = reader_for(b"X-Checksum: abc\r\nX-Other: 1\r\n\r\nrest")
        assert read_trailers(reader) == 2
        assert reader.read_some(10) == b"rest"

    def test_too_many(self) -> None:
        with pytest.raises(BadChunkedEncodingError):
            read_trailers(reader_for(b"A: 1\r\n" * 5 + b"\r\n"), max_trailer_count=4)

    def test_closed(self) -> None:
        with pytest.raises(BadChunkedEncodingError):
            read_trailers(reader_for(b"A: 1\r\n"))


class TestChunkedBody:
    """Test chunked transfer-encoding reassembly."""

    def test_basic(self, chunked_test_response) -> None:
        body = chunked_test_response.split(b"\r\n\r\n", 1)[1]
        assert read_chunked_body(reader_for(body)) == b"test"

    def test_multiple_chunks_with_trailers(self) -> None:
        data = b"5\r\nhello\r\n1;ext=1\r\n \r\n5\r\nworld\r\n0\r\nX-Trailer: t\r\n\r\n"
        for max_read in (1, 2, None):
            assert read_chunked_body(reader_for(data, max_read=max_read), max_chunk_size=2) == b"hello world"

    def test_large_chunk_read_in_increments(self) -> None:
        payload = b"a" * 5000
        data = b"%x\r\n" % len(payload) + payload + b"\r\n0\r\n\r\n"
        stream = MockNetworkStream(data)
        assert read_chunked_body(LineReader(stream, read_size=16), max_chunk_size=1024) == payload
        assert max(stream.read_sizes) <= 1024

    def test_bad_terminator(self) -> None:
        with pytest.raises(BadChunkedEncodingError, match="chunk terminator"):
            read_chunked_body(reader_for(b"4\r\ntestXX0\r\n\r\n"))

    def test_missing_terminator(self) -> None:
        with pytest.raises(BadChunkedEncodingError, match="missing chunk terminator"):
            read_chunked_body(reader_for(b"4\r\ntest"))

    def test_closed_inside_chunk(self) -> None:
        with pytest.raises(ClosedByPeerError):
            read_chunked_body(reader_for(b"10\r\nshort"))

    def test_bad_size_line(self) -> None:
        with pytest.raises(BadChunkedEncodingError):
            read_chunked_body(reader_for(b"xyz\r\ndata\r\n0\r\n\r\n"))

    def test_read_body_dispatch(self) -> None:
        response = response_with(("Transfer-Encoding", "chunked"))
        assert read_body(reader_for(b"3\r\nabc\r\n0\r\n\r\n"), response) == b"abc"
