"""
Blocking socket implementation of the network interfaces.
"""

import logging
import socket
from typing import Any, Optional

from ..exceptions import ConnectionError, ProtocolError, TimeoutError
from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import configure_socket, get_socket_info, set_socket_timeout

logger = logging.getLogger(__name__)


class SocketNetworkStream(NetworkStream):
    """Network stream over a blocking TCP socket."""

    def __init__(self, sock: socket.socket, read_timeout: Optional[float] = None) -> None:
        self.sock = sock
        self.read_timeout = read_timeout
        self.closed = False

    def read(self, max_bytes: int) -> bytes:
        if self.closed:
            raise ProtocolError("Stream is closed")
        try:
            return self.sock.recv(max_bytes)
        except socket.timeout as e:
            raise TimeoutError("Read timed out", timeout=self.read_timeout) from e
        except OSError as e:
            raise ProtocolError(f"Socket read failed: {e}", cause=e) from e

    def write(self, data: bytes) -> None:
        if self.closed:
            raise ProtocolError("Stream is closed")
        try:
            self.sock.sendall(data)
        except socket.timeout as e:
            raise TimeoutError("Write timed out", timeout=self.read_timeout) from e
        except OSError as e:
            raise ProtocolError(f"Socket write failed: {e}", cause=e) from e

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            try:
                self.sock.close()
            except OSError as e:
                logger.debug(f"Error while closing socket: {e}")

    def get_extra_info(self, name: str) -> Optional[Any]:
        if name == "socket":
            return self.sock
        if name in ("peername", "sockname", "fileno"):
            return get_socket_info(self.sock).get(name)
        return None

    @property
    def is_closed(self) -> bool:
        return self.closed


class SocketNetworkBackend(NetworkBackend):
    """Network backend opening one blocking TCP socket per call."""

    def connect_tcp(
        self,
        host: str,
        port: int,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
    ) -> SocketNetworkStream:
        try:
            sock = socket.create_connection((host, port), timeout=connect_timeout)
        except socket.timeout as e:
            raise TimeoutError(f"Connecting to {host}:{port} timed out", timeout=connect_timeout) from e
        except OSError as e:
            raise ConnectionError(f"Cannot connect to {host}:{port}: {e}", cause=e) from e

        try:
            configure_socket(sock)
            set_socket_timeout(sock, read_timeout)
        except OSError as e:
            sock.close()
            raise ConnectionError(f"Cannot configure socket for {host}:{port}: {e}", cause=e) from e

        logger.debug(f"Connected to {host}:{port}")
        return SocketNetworkStream(sock, read_timeout=read_timeout)
