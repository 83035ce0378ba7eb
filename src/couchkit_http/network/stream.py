"""
Network stream interface for couchkit_http.

This module defines the NetworkStream interface that all network stream
implementations must follow for consistent behavior across the library.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for blocking network streams.

    A stream carries exactly one request/response cycle and is closed
    afterwards; implementations never need to support reuse.
    """

    @abstractmethod
    def read(self, max_bytes: int) -> bytes:
        """
        Read up to ``max_bytes`` bytes from the stream.

        Blocks until at least one byte is available or the peer closes
        the connection.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read, or ``b""`` once the peer has closed the connection.

        Raises:
            ProtocolError: If a network error occurs.
            TimeoutError: If a read timeout is configured and expires.
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all of ``data`` to the stream.

        Raises:
            ProtocolError: If a network error occurs or the stream is closed.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close the stream and cleanup resources.

        Closing an already closed stream is a no-op.
        """
        pass

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Args:
            name: The name of the information to retrieve. Common values include:
                 - "socket": The underlying socket object
                 - "peername": The remote endpoint address
                 - "sockname": The local endpoint address

        Returns:
            The requested information or None if not available.
        """
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Check if the stream is closed."""
        pass
