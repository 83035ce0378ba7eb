"""
Mock network implementations for testing.

This module provides mock implementations of NetworkStream and NetworkBackend
that can be used for unit testing without requiring actual network connections.
"""

from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..exceptions import ConnectionError, ProtocolError
from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    This implementation simulates a network stream in memory,
    allowing tests to verify network behavior without actual I/O.
    """

    def __init__(self, data: bytes = b"", max_read: Optional[int] = None):
        """
        Initialize the mock stream.

        Args:
            data: Initial data to be available for reading.
            max_read: Upper bound on the bytes returned by one read, to
                      simulate a peer delivering data in small segments.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._max_read = max_read
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []
        self.read_sizes: List[int] = []

    def read(self, max_bytes: int) -> bytes:
        """
        Read data from the mock stream.

        Returns ``b""`` once all data has been consumed, like a socket
        whose peer closed the connection.

        Raises:
            ProtocolError: If the stream is closed.
        """
        if self._closed:
            raise ProtocolError("Stream is closed")

        self.read_sizes.append(max_bytes)
        if self._max_read is not None:
            max_bytes = min(max_bytes, self._max_read)

        end = min(self._position + max_bytes, len(self._data))
        result = self._data[self._position:end]
        self._position = end
        return result

    def write(self, data: bytes) -> None:
        """
        Write data to the mock stream.

        Raises:
            ProtocolError: If the stream is closed.
        """
        if self._closed:
            raise ProtocolError("Stream is closed")

        self._write_buffer.append(bytes(data))

    def close(self) -> None:
        """Close the mock stream."""
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    @property
    def writes(self) -> List[bytes]:
        """Get the individual writes, in order."""
        return list(self._write_buffer)

    @property
    def remaining(self) -> bytes:
        """Get the data that has not been read yet."""
        return self._data[self._position:]

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """
        Add data to be available for reading.

        Args:
            data: The data to add.
        """
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Every ``connect_tcp`` call creates a new MockNetworkStream preloaded
    with the next queued response, mirroring the one-connection-per-request
    model of the client.
    """

    def __init__(self, max_read: Optional[int] = None):
        self._responses: Deque[bytes] = deque()
        self._max_read = max_read
        self.streams: List[MockNetworkStream] = []
        self.connect_calls: List[Tuple[str, int, Optional[float], Optional[float]]] = []
        self.connect_error: Optional[Exception] = None

    def queue_response(self, data: bytes) -> None:
        """Queue the bytes the server side will send on the next connection."""
        self._responses.append(data)

    def connect_tcp(
        self,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> MockNetworkStream:
        self.connect_calls.append((host, port, connect_timeout, read_timeout))

        if self.connect_error is not None:
            raise ConnectionError(f"Cannot connect to {host}:{port}", cause=self.connect_error)

        data = self._responses.popleft() if self._responses else b""
        stream = MockNetworkStream(data, max_read=self._max_read)
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self.streams.append(stream)
        return stream

    @property
    def last_stream(self) -> Optional[MockNetworkStream]:
        """Get the stream created by the most recent connection."""
        return self.streams[-1] if self.streams else None

    def reset(self) -> None:
        """Reset all mock connections."""
        self._responses.clear()
        self.streams.clear()
        self.connect_calls.clear()
        self.connect_error = None
