"""
Request framing: the request line and the header block.
"""

from typing import List

from .exceptions import ProtocolError
from .http_primitives import Endpoint, Headers

HTTP_VERSION = "HTTP/1.1"
CRLF = b"\r\n"


def serialize_request_line(method: str, path: str) -> bytes:
    """Build ``<METHOD> <path> HTTP/1.1\\r\\n``."""
    if not path or any(c in path for c in " \r\n"):
        raise ProtocolError(f"invalid request target: {path!r}")
    return _encode(f"{method} {path} {HTTP_VERSION}") + CRLF


def insert_default_headers(headers: Headers, endpoint: Endpoint, user_agent: str) -> Headers:
    """
    Add the mandatory request headers unless the caller already set them.

    Args:
        headers: Headers to update in place
        endpoint: Target server, used for ``Host``
        user_agent: Client identifier for ``User-Agent``

    Returns:
        The same Headers object
    """
    headers.insert_default("Host", endpoint.host_header)
    headers.insert_default("Accept", "application/json")
    headers.insert_default("User-Agent", user_agent)
    return headers


def serialize_headers(headers: Headers) -> bytes:
    """Render the header block, including the terminating blank line."""
    lines: List[bytes] = []
    for name, value in headers:
        if not name or any(c in name for c in ":\r\n") or any(c in value for c in "\r\n"):
            raise ProtocolError(f"invalid header {name!r}: {value!r}")
        lines.append(_encode(f"{name}: {value}") + CRLF)
    lines.append(CRLF)
    return b"".join(lines)


def serialize_request_head(method: str, path: str, headers: Headers) -> bytes:
    """Build the request line followed by the header block."""
    return serialize_request_line(method, path) + serialize_headers(headers)


def _encode(text: str) -> bytes:
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ProtocolError(f"cannot encode {text!r} for the request head", cause=e) from e
