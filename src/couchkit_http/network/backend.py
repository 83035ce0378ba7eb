"""
Network backend interface for couchkit_http.

This module defines the NetworkBackend interface that opens the
connection used by a single request.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Interface for network backend implementations.

    A backend is stateless from the client's point of view: every call to
    ``connect_tcp`` returns a fresh stream that the caller owns and closes.
    """

    @abstractmethod
    def connect_tcp(
        self,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> NetworkStream:
        """
        Connect to a TCP endpoint.

        Args:
            host: The hostname or IP address to connect to.
            port: The port number to connect to.
            connect_timeout: Optional timeout in seconds for the connection
                             attempt; None waits as long as the OS does.
            read_timeout: Optional timeout in seconds for every read on the
                          returned stream; None blocks indefinitely.

        Returns:
            A NetworkStream representing the TCP connection.

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the connection attempt times out.
        """
        pass
