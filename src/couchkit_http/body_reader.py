"""
Response body reception.

The body framing is resolved from the response headers:
``Transfer-Encoding: chunked`` takes precedence over ``Content-Length``,
any other transfer-encoding is rejected, and a response with neither
header has an empty body. Body data is always read in increments of at
most ``max_chunk_size`` bytes.
"""

import logging
import re
from enum import Enum
from typing import Tuple

from .exceptions import (
    BadChunkedEncodingError,
    ClosedByPeerError,
    ProtocolError,
    UnknownTransferEncodingError,
)
from .http_primitives import RawResponse
from .streams import LineReader

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = 1024 * 1024  # 1 MiB
DEFAULT_MAX_TRAILER_COUNT = 1000

_DIGITS_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(rb"[0-9A-Fa-f]+")
_CHUNK_SIZE_END_RE = re.compile(rb"[\r\n ;]")


class Framing(Enum):
    """How the length of a response body is determined."""
    EMPTY = "empty"
    FIXED = "fixed"
    CHUNKED = "chunked"


def resolve_framing(response: RawResponse) -> Tuple[Framing, int]:
    """
    Determine the body framing of a response.

    Returns:
        Tuple of (framing, content_length); the length is 0 unless the
        framing is FIXED

    Raises:
        UnknownTransferEncodingError: If Transfer-Encoding is not ``chunked``
        ProtocolError: If Content-Length is not a non-negative integer
    """
    transfer_encoding = response.get_header("Transfer-Encoding")
    if transfer_encoding is not None:
        if transfer_encoding.strip().lower() == "chunked":
            return Framing.CHUNKED, 0
        raise UnknownTransferEncodingError(transfer_encoding)

    content_length = response.get_header("Content-Length")
    if content_length is None:
        return Framing.EMPTY, 0

    content_length = content_length.strip()
    if not _DIGITS_RE.fullmatch(content_length):
        raise ProtocolError(f"invalid Content-Length: {content_length!r}")

    length = int(content_length)
    if length == 0:
        return Framing.EMPTY, 0
    return Framing.FIXED, length


def read_fixed_body(reader: LineReader, length: int, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> bytes:
    """
    Read a body of exactly ``length`` bytes.

    Raises:
        ClosedByPeerError: If the connection closes early
    """
    return reader.read_exact(length, max_chunk_size)


def read_chunk_size(reader: LineReader) -> int:
    """
    Read a chunk-size line and return the size it declares.

    The hexadecimal field ends at the first CR, LF, space or ``;``
    (which starts a chunk extension). An empty field counts as zero.

    Raises:
        BadChunkedEncodingError: If the line is missing or not hexadecimal
    """
    line = reader.readline()
    if not line or not line.endswith(b"\n"):
        raise BadChunkedEncodingError("Bad chunked transfer-encoding header: connection closed")

    hex_field = _CHUNK_SIZE_END_RE.split(line, maxsplit=1)[0]
    if not hex_field:
        return 0

    if not _HEX_RE.fullmatch(hex_field):
        raise BadChunkedEncodingError(f"Bad chunked transfer-encoding header: {line!r}")
    return int(hex_field, 16)


def read_trailers(reader: LineReader, max_trailer_count: int = DEFAULT_MAX_TRAILER_COUNT) -> int:
    """
    Consume trailer lines up to the terminating blank line.

    Trailers are discarded.

    Returns:
        Number of trailer lines skipped

    Raises:
        BadChunkedEncodingError: If the connection closes first or there
                                 are too many trailer lines
    """
    count = 0
    while True:
        line = reader.readline()
        if not line or not line.endswith(b"\n"):
            raise BadChunkedEncodingError("connection closed while reading chunked trailers")
        if line in (b"\r\n", b"\n"):
            if count:
                logger.debug(f"Discarded {count} trailer line(s)")
            return count
        count += 1
        if count > max_trailer_count:
            raise BadChunkedEncodingError(f"more than {max_trailer_count} trailer lines")


def read_chunked_body(
    reader: LineReader,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    max_trailer_count: int = DEFAULT_MAX_TRAILER_COUNT,
) -> bytes:
    """
    Read and reassemble a body sent with chunked transfer-encoding.

    Raises:
        BadChunkedEncodingError: On a malformed size line or chunk terminator
        ClosedByPeerError: If the connection closes inside chunk data
    """
    body = bytearray()
    chunks = 0

    while True:
        size = read_chunk_size(reader)
        if size == 0:
            read_trailers(reader, max_trailer_count)
            logger.debug(f"Read chunked body: {chunks} chunk(s), {len(body)} bytes")
            return bytes(body)

        body += reader.read_exact(size, max_chunk_size)
        chunks += 1

        try:
            terminator = reader.read_exact(2, max_chunk_size)
        except ClosedByPeerError as e:
            raise BadChunkedEncodingError("missing chunk terminator", cause=e) from e
        if terminator != b"\r\n":
            raise BadChunkedEncodingError(f"expected chunk terminator, got {terminator!r}")


def read_body(
    reader: LineReader,
    response: RawResponse,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    max_trailer_count: int = DEFAULT_MAX_TRAILER_COUNT,
) -> bytes:
    """Read the response body according to its framing headers."""
    framing, length = resolve_framing(response)

    if framing is Framing.CHUNKED:
        return read_chunked_body(reader, max_chunk_size, max_trailer_count)
    if framing is Framing.FIXED:
        return read_fixed_body(reader, length, max_chunk_size)
    return b""
