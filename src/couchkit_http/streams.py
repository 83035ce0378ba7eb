"""
Buffered reading over a network stream.

The response parser needs line-oriented reads for the status line,
headers, chunk-size lines and trailers, and exact-size reads for body
data. ``LineReader`` provides both on top of a ``NetworkStream`` and
keeps whatever a line read over-fetched so that body reads see it first.
"""

import logging

from .exceptions import ClosedByPeerError, ProtocolError
from .network.stream import NetworkStream

logger = logging.getLogger(__name__)


class LineReader:
    """
    Reads lines and exact byte counts from a NetworkStream.

    Lines are returned with their terminating ``\\n`` (and ``\\r``, if
    any). Bytes read past the end of a line stay buffered.
    """

    DEFAULT_READ_SIZE = 8192

    def __init__(
        self,
        stream: NetworkStream,
        max_line_length: int = 16384,
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        self.stream = stream
        self.max_line_length = max_line_length
        self.read_size = read_size
        self._buffer = bytearray()
        self._eof = False
        self.bytes_received = 0

    def _fill(self, max_bytes: int) -> bool:
        """Read more data into the buffer; returns False at end of stream."""
        if self._eof:
            return False
        data = self.stream.read(max_bytes)
        if not data:
            self._eof = True
            return False
        self.bytes_received += len(data)
        self._buffer += data
        return True

    def readline(self) -> bytes:
        """
        Read one line.

        Returns:
            The line including its terminator; a partial line if the peer
            closed the connection in the middle of it; ``b""`` if the peer
            closed the connection before sending anything.

        Raises:
            ProtocolError: If the line exceeds ``max_line_length``.
        """
        find_start = 0
        while True:
            newline_idx = self._buffer.find(b"\n", find_start)
            if newline_idx >= 0:
                if newline_idx + 1 > self.max_line_length:
                    raise ProtocolError("line too long")
                line = bytes(self._buffer[: newline_idx + 1])
                del self._buffer[: newline_idx + 1]
                return line

            if len(self._buffer) > self.max_line_length:
                raise ProtocolError("line too long")

            # next time, start the search where this one left off
            find_start = len(self._buffer)
            if not self._fill(self.read_size):
                line = bytes(self._buffer)
                self._buffer.clear()
                return line

    def read_some(self, max_bytes: int) -> bytes:
        """
        Read at most ``max_bytes`` bytes, serving buffered data first.

        Returns:
            The data read, or ``b""`` at end of stream.
        """
        if not self._buffer:
            self._fill(max_bytes)
        result = bytes(self._buffer[:max_bytes])
        del self._buffer[:max_bytes]
        return result

    def read_exact(self, length: int, max_chunk_size: int) -> bytes:
        """
        Read exactly ``length`` bytes, in reads of at most ``max_chunk_size``.

        Raises:
            ClosedByPeerError: If the stream ends before ``length`` bytes arrive.
        """
        data = bytearray()
        while len(data) < length:
            chunk = self.read_some(min(length - len(data), max_chunk_size))
            if not chunk:
                raise ClosedByPeerError(
                    f"Remote connection closed after {len(data)} of {length} bytes"
                )
            data += chunk
        return bytes(data)

    @property
    def buffered(self) -> int:
        """Number of bytes read from the stream but not consumed yet."""
        return len(self._buffer)
