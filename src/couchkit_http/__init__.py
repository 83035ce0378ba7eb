"""
couchkit_http - HTTP/1.1 transport for a document-database client

A small synchronous transport that frames requests and parses responses
by hand over a plain socket: one connection per request, fixed-length
and chunked bodies, and status codes mapped to database outcomes.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .config import TransportConfig
from .http_primitives import Endpoint, Headers, HttpMethod, RawResponse, Request
from .body import (
    Data,
    DataAndState,
    End,
    FixedBody,
    ProducerError,
    StreamingBody,
)
from .http11 import HTTP11Connection, ConnectionState
from .client import CouchHTTPClient
from .outcome import Decoded, Err, Outcome, Raw, StatusOnly
from .query import encode_query
from .exceptions import (
    ErrorKind,
    TransportError,
    ConnectionError,
    ProtocolError,
    ClosedByPeerError,
    TimeoutError,
    UnknownTransferEncodingError,
    BadChunkedEncodingError,
    MissingContentLengthError,
    StatusError,
    NotFoundError,
    ConflictError,
    PreconditionFailedError,
    UnknownStatusError,
)

__all__ = [
    "TransportConfig",
    "Endpoint",
    "Headers",
    "HttpMethod",
    "RawResponse",
    "Request",
    "Data",
    "DataAndState",
    "End",
    "FixedBody",
    "ProducerError",
    "StreamingBody",
    "HTTP11Connection",
    "ConnectionState",
    "CouchHTTPClient",
    "Decoded",
    "Err",
    "Outcome",
    "Raw",
    "StatusOnly",
    "encode_query",
    "ErrorKind",
    "TransportError",
    "ConnectionError",
    "ProtocolError",
    "ClosedByPeerError",
    "TimeoutError",
    "UnknownTransferEncodingError",
    "BadChunkedEncodingError",
    "MissingContentLengthError",
    "StatusError",
    "NotFoundError",
    "ConflictError",
    "PreconditionFailedError",
    "UnknownStatusError",
]
