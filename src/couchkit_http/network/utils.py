"""
Network utilities for couchkit_http.

This module provides helpers for socket setup and validation shared by
the socket backend and the client.
"""

import socket
from typing import Optional, Union


def configure_socket(sock: socket.socket) -> socket.socket:
    """
    Apply the options every client socket uses.

    Nagle's algorithm is disabled so that the request head and a small
    body are not held back waiting for more data.

    Args:
        sock: Connected TCP socket

    Returns:
        The same socket, for chaining
    """
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    return sock


def set_socket_timeout(sock: socket.socket, timeout: Optional[float]) -> None:
    """
    Apply the per-read timeout of a connected socket.

    ``None`` puts the socket back in blocking mode, so reads wait for as
    long as the peer keeps the connection open.
    """
    sock.settimeout(timeout)


def get_socket_info(sock: socket.socket) -> dict:
    """Return the peer address, local address and descriptor of a socket; None where unavailable."""
    info = {}
    for name, getter in (
        ("peername", sock.getpeername),
        ("sockname", sock.getsockname),
        ("fileno", sock.fileno),
    ):
        try:
            info[name] = getter()
        except OSError:
            info[name] = None
    return info


def validate_port(port: Union[int, str]) -> int:
    """
    Validate and convert port to integer.

    Args:
        port: Port number (int or string)

    Returns:
        Port as integer

    Raises:
        ValueError: If port is invalid
    """
    try:
        port_int = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port}")

    if not (1 <= port_int <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port_int}")

    return port_int
