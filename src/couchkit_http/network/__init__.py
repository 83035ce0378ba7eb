"""
Network backend components for couchkit_http.

This module provides the low-level networking abstractions:
the stream and backend interfaces, a blocking socket implementation
and in-memory mocks for tests.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .sync import SocketNetworkBackend, SocketNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    configure_socket,
    set_socket_timeout,
    get_socket_info,
    validate_port,
)

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "SocketNetworkBackend",
    "SocketNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "configure_socket",
    "set_socket_timeout",
    "get_socket_info",
    "validate_port",
]
