"""
HTTP/1.1 connection implementation for couchkit_http.

This module implements the HTTP11Connection class that runs exactly one
request/response cycle over a NetworkStream and closes it afterwards.
"""

import logging
import time
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .body import StreamingBody, declared_length, write_body
from .body_reader import read_body
from .config import TransportConfig
from .exceptions import ConnectionError, TransportError
from .framing import serialize_request_head
from .http_primitives import RawResponse, Request
from .network.stream import NetworkStream
from .response_parser import read_response_head
from .status import is_error_status
from .streams import LineReader

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of a single-use HTTP/1.1 connection."""
    NEW = "new"           # Connection opened, no request sent yet
    ACTIVE = "active"     # Connection handling its request
    CLOSED = "closed"     # Connection closed, cannot be used again


class HTTP11Connection:
    """
    Single-use HTTP/1.1 connection.

    The connection sends one fully prepared request (default headers
    already injected, body already normalized), reads the response head
    and, unless the status is an error or the request is a HEAD, the
    body. The underlying stream is closed when ``handle_request``
    returns or raises.
    """

    def __init__(self, stream: NetworkStream, config: Optional[TransportConfig] = None):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            config: Transport limits; defaults to TransportConfig()
        """
        self._stream = stream
        self._config = config or TransportConfig()
        self._state = ConnectionState.NEW
        self._reader = LineReader(stream, max_line_length=self._config.max_line_length)

        # Metrics
        self._bytes_sent = 0
        self._request_time: Optional[float] = None

    def handle_request(self, request: Request) -> Tuple[RawResponse, Optional[bytes]]:
        """
        Handle the request/response cycle of this connection.

        Args:
            request: The prepared request to send

        Returns:
            Tuple of (response head, body); the body is None when it was
            not read (error status or HEAD request)

        Raises:
            ConnectionError: If the connection was already used
            TransportError: If sending or receiving fails
        """
        if self._state is not ConnectionState.NEW:
            raise ConnectionError(f"Connection is {self._state.value}, it serves a single request")
        self._state = ConnectionState.ACTIVE

        start_time = time.time()
        try:
            self._send_request(request)
            response = read_response_head(self._reader, self._config.max_header_count)

            body = None
            if not is_error_status(response.status_code) and not request.is_head:
                body = read_body(
                    self._reader,
                    response,
                    max_chunk_size=self._config.max_chunk_size,
                    max_trailer_count=self._config.max_header_count,
                )

            self._request_time = time.time() - start_time
            logger.debug(
                f"{request.method} {request.target} -> {response.status_code} "
                f"({self._request_time:.3f}s, {self._bytes_sent} bytes sent, "
                f"{self._reader.bytes_received} bytes received)"
            )
            return response, body

        except TransportError as e:
            self._request_time = time.time() - start_time
            logger.error(f"{request.method} {request.target} failed: {e} ({self._request_time:.3f}s)")
            raise

        finally:
            self.close()

    def _send_request(self, request: Request) -> None:
        """Send the request head followed by the body."""
        head = serialize_request_head(request.method, request.target, request.headers)
        self._stream.write(head)
        self._bytes_sent += len(head)

        content_length = None
        if isinstance(request.body, StreamingBody):
            content_length = declared_length(request.headers)
        self._bytes_sent += write_body(self._stream, request.body, content_length)

    def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state is not ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            self._stream.close()

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._state is ConnectionState.CLOSED

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get connection metrics.

        Returns:
            Dictionary with connection metrics
        """
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._reader.bytes_received,
            "request_time": self._request_time,
            "state": self._state.value,
        }
