"""
Response status line and header block parsing.

Parsing is line-oriented and tolerant of stray line endings: lines
made only of line-ending characters are skipped before the status line
and between header lines. The number of lines read for the
header block is bounded so a broken or hostile server cannot keep the
client reading forever.
"""

import logging
import re
from typing import List, Tuple

from .exceptions import ClosedByPeerError, ProtocolError
from .http_primitives import RawResponse
from .streams import LineReader

logger = logging.getLogger(__name__)

DEFAULT_MAX_HEADER_COUNT = 1000

_STATUS_LINE_RE = re.compile(rb"(HTTP/\d\.\d) ([0-9]{3})(?: (.*))?")
_BLANK_LINES = (b"\r\n", b"\n")


def _is_noise(line: bytes) -> bool:
    """True for a line made only of line-ending characters."""
    return not line.rstrip(b"\r\n").lstrip(b"\r")


def parse_status_line(line: bytes) -> Tuple[str, int, str]:
    """
    Parse a status line such as ``HTTP/1.1 200 OK``.

    Returns:
        Tuple of (http_version, status_code, phrase)

    Raises:
        ProtocolError: If the line is not a valid status line
    """
    match = _STATUS_LINE_RE.fullmatch(line.rstrip(b"\r\n"))
    if match is None:
        raise ProtocolError(f"Invalid response line: {line!r}")

    version, code, phrase = match.groups()
    return version.decode("ascii"), int(code), (phrase or b"").decode("latin-1").strip()


def read_status_line(reader: LineReader, max_noise_lines: int = DEFAULT_MAX_HEADER_COUNT) -> Tuple[str, int, str]:
    """
    Read lines until a status line arrives.

    Raises:
        ClosedByPeerError: If the peer closes the connection first
        ProtocolError: If the status line is malformed
    """
    skipped = 0
    while True:
        line = reader.readline()
        if not line or not line.endswith(b"\n"):
            raise ClosedByPeerError("Remote connection closed before the status line")

        if _is_noise(line):
            skipped += 1
            if skipped > max_noise_lines:
                raise ProtocolError("too many empty lines before the status line")
            logger.debug("Skipping empty line before status line")
            continue

        return parse_status_line(line)


def read_headers(reader: LineReader, max_header_count: int = DEFAULT_MAX_HEADER_COUNT) -> List[Tuple[str, str]]:
    """
    Read header lines up to and including the blank terminating line.

    Args:
        reader: Reader positioned just after the status line
        max_header_count: Maximum number of lines accepted before the terminator

    Returns:
        List of (name, value) pairs in the order received

    Raises:
        ClosedByPeerError: If the peer closes the connection inside the block
        ProtocolError: If a line is malformed or the bound is reached
    """
    headers: List[Tuple[str, str]] = []
    count = 0

    while True:
        line = reader.readline()
        if not line or not line.endswith(b"\n"):
            raise ClosedByPeerError("Remote connection closed while reading headers")

        if line in _BLANK_LINES:
            return headers

        count += 1
        if count > max_header_count:
            raise ProtocolError(f"more than {max_header_count} header lines")

        if _is_noise(line):
            logger.debug("Skipping stray line ending between headers")
            continue

        content = line.rstrip(b"\r\n").lstrip(b"\r")

        if content[:1] in (b" ", b"\t") and headers:
            # obsolete line folding: continuation of the previous value
            name, value = headers[-1]
            headers[-1] = (name, f"{value} {content.strip().decode('latin-1')}".strip())
            continue

        name, sep, value = content.partition(b":")
        if not sep or not name.strip():
            raise ProtocolError(f"Found invalid HTTP header line: {line!r}")

        headers.append((name.strip().decode("latin-1"), value.strip().decode("latin-1")))


def read_response_head(reader: LineReader, max_header_count: int = DEFAULT_MAX_HEADER_COUNT) -> RawResponse:
    """Read the status line and header block of a response."""
    version, status_code, phrase = read_status_line(reader, max_header_count)
    headers = read_headers(reader, max_header_count)
    return RawResponse(
        status_code=status_code,
        phrase=phrase,
        http_version=version,
        headers=headers,
    )
