"""
HTTP primitives for couchkit_http.

This module defines the core data structures for requests and responses.
Requests, responses and endpoints are immutable; only the header map is
mutable while a request is being assembled.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from typing_extensions import TypeAlias

from .query import append_query

HeaderName: TypeAlias = Union[str, bytes]
HeaderValue: TypeAlias = Union[str, bytes, int]
HeaderPairs: TypeAlias = Iterable[Tuple[HeaderName, HeaderValue]]
QueryParams: TypeAlias = Sequence[Tuple[str, Any]]


class HttpMethod(str, Enum):
    """Request methods used by the database API."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    COPY = "COPY"
    OPTIONS = "OPTIONS"


def method_name(method: Union[HttpMethod, str, bytes]) -> str:
    """Convert a method given as enum member, string or bytes to its wire name."""
    if isinstance(method, HttpMethod):
        return method.value
    if isinstance(method, bytes):
        method = method.decode("ascii")
    if not method or not method.isalpha():
        raise ValueError(f"Invalid HTTP method: {method!r}")
    return method.upper()


class Endpoint(NamedTuple):
    """Immutable host/port pair identifying the remote server."""
    host: str
    port: int

    @property
    def host_header(self) -> str:
        """Value of the ``Host`` header: always ``host:port``."""
        return f"{self.host}:{self.port}"


class Headers:
    """
    Ordered header map with insert-if-absent semantics.

    Header names are compared exactly as supplied (case-sensitive) and
    the first value stored for a name wins; later writes of the same
    name are ignored.
    """

    def __init__(self, headers: Optional[HeaderPairs] = None) -> None:
        self._items: List[Tuple[str, str]] = []
        self._names = set()
        if isinstance(headers, dict):
            headers = headers.items()
        for name, value in headers or ():
            self.insert_default(name, value)

    def insert_default(self, name: HeaderName, value: HeaderValue) -> bool:
        """
        Add a header unless one with the same name is already present.

        Args:
            name: Header name (str or bytes)
            value: Header value (str, bytes or int)

        Returns:
            True if the header was added, False if it was already present
        """
        name = _to_text(name)
        if name in self._names:
            return False
        self._names.add(name)
        self._items.append((name, _to_text(value)))
        return True

    def get(self, name: HeaderName, default: Optional[str] = None) -> Optional[str]:
        name = _to_text(name)
        for header_name, header_value in self._items:
            if header_name == name:
                return header_value
        return default

    def copy(self) -> "Headers":
        return Headers(self._items)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        if isinstance(name, (str, bytes)):
            return _to_text(name) in self._names
        return False

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"


def _to_text(value: HeaderValue) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request representation.

    ``body`` is ``None`` when no body is sent, otherwise a ``FixedBody``
    or a ``StreamingBody`` (see ``couchkit_http.body``).
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    body: Any = None
    params: QueryParams = ()

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, str) or not self.method:
            raise ValueError("method must be a non-empty string")

        if not isinstance(self.path, str):
            raise ValueError("path must be a string")

        if not isinstance(self.headers, Headers):
            raise ValueError("headers must be a Headers instance")

    @classmethod
    def create(
        cls,
        method: Union[HttpMethod, str, bytes],
        path: str,
        headers: Optional[Union[Headers, HeaderPairs]] = None,
        body: Any = None,
        params: Optional[QueryParams] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        Args:
            method: HTTP method (GET, PUT, ...)
            path: Request target, without query string
            headers: Optional header pairs; duplicates keep the first value
            body: Optional FixedBody or StreamingBody
            params: Optional query parameters as (key, value) pairs

        Returns:
            New Request instance
        """
        if not isinstance(headers, Headers):
            headers = Headers(headers)

        return cls(
            method=method_name(method),
            path=path,
            headers=headers,
            body=body,
            params=tuple(params or ()),
        )

    @property
    def target(self) -> str:
        """Request target sent on the request line: the path plus the query string."""
        return append_query(self.path, self.params)

    @property
    def is_head(self) -> bool:
        return self.method == HttpMethod.HEAD.value


@dataclass(frozen=True)
class RawResponse:
    """
    Status line and header block of a response.

    Header names are kept as the server sent them; ``get_header``
    looks them up case-insensitively.
    """

    status_code: int
    phrase: str = ""
    http_version: str = "HTTP/1.1"
    headers: List[Tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

    def get_header(self, name: str) -> Optional[str]:
        """Get a header value by name (case-insensitive)."""
        name_lower = name.lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value
        return None

    def has_header(self, name: str) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None
