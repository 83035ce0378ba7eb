"""
Custom exceptions for couchkit_http.

This module defines the exception hierarchy used throughout
the transport. Every exception carries an ``ErrorKind`` so that
the client can turn it into an ``Err`` outcome without inspecting
the concrete class.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Kinds of failures a request can end with."""
    CONNECT_FAILURE = "connect_failure"
    BAD_REQUEST = "bad_request"
    CLOSED_BY_PEER = "closed_by_peer"
    TIMEOUT = "timeout"
    UNKNOWN_TRANSFER_ENCODING = "unknown_transfer_encoding"
    BAD_CHUNKED_ENCODING = "bad_chunked_encoding"
    MISSING_CONTENT_LENGTH = "missing_content_length"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PRECONDITION_FAILED = "precondition_failed"
    UNKNOWN_ERROR = "unknown_error"


class TransportError(Exception):
    """Base exception for all couchkit_http errors."""

    kind: ErrorKind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def detail(self) -> Any:
        """Value reported as the detail of the matching ``Err`` outcome."""
        return self.message


class ConnectionError(TransportError):
    """Raised when the connection to the endpoint cannot be opened."""

    kind = ErrorKind.CONNECT_FAILURE

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(TransportError):
    """Raised on malformed request or response framing, or on a socket failure."""

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class ClosedByPeerError(TransportError):
    """Raised when the server closes the connection before the response is complete."""

    kind = ErrorKind.CLOSED_BY_PEER

    def __init__(self, message: str = "Remote connection closed", cause: Optional[Exception] = None) -> None:
        super().__init__(message, cause)


class TimeoutError(TransportError):
    """Raised when a configured connect or read timeout expires."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")
        self.timeout = timeout


class UnknownTransferEncodingError(ProtocolError):
    """Raised when the response uses a transfer-encoding other than chunked."""

    kind = ErrorKind.UNKNOWN_TRANSFER_ENCODING

    def __init__(self, value: str) -> None:
        super().__init__(f"unknown transfer-encoding {value!r}")
        self.value = value

    @property
    def detail(self) -> Any:
        return self.value


class BadChunkedEncodingError(ProtocolError):
    """Raised when a chunked response body violates the chunk framing."""

    kind = ErrorKind.BAD_CHUNKED_ENCODING


class MissingContentLengthError(TransportError):
    """Raised when a streaming request body is sent without a Content-Length header."""

    kind = ErrorKind.MISSING_CONTENT_LENGTH

    def __init__(self, message: str = "Content-Length undefined") -> None:
        super().__init__(message)


class StatusError(TransportError):
    """Raised when the server answers with an error status code."""

    kind = ErrorKind.UNKNOWN_ERROR

    def __init__(self, status_code: int, phrase: str = "") -> None:
        super().__init__(f"Received HTTP response: {status_code} {phrase}".rstrip())
        self.status_code = status_code
        self.phrase = phrase


class NotFoundError(StatusError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(StatusError):
    kind = ErrorKind.CONFLICT


class PreconditionFailedError(StatusError):
    kind = ErrorKind.PRECONDITION_FAILED


class UnknownStatusError(StatusError):
    """Any other 4xx/5xx status; the detail is the status code."""

    kind = ErrorKind.UNKNOWN_ERROR

    @property
    def detail(self) -> Any:
        return self.status_code
