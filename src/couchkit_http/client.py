"""
Request executor: the public entry point of couchkit_http.

``CouchHTTPClient`` holds only the immutable endpoint, the frozen
configuration and a network backend. Every call opens its own
connection, runs one request over it and closes it, so a client can be
shared between threads.
"""

import logging
from typing import Any, Optional, Tuple, Union

from .body import make_body
from .config import TransportConfig
from .exceptions import TransportError
from .framing import insert_default_headers
from .http11 import HTTP11Connection
from .http_primitives import (
    Endpoint,
    HeaderPairs,
    Headers,
    HttpMethod,
    QueryParams,
    RawResponse,
    Request,
    method_name,
)
from .network import NetworkBackend, SocketNetworkBackend, validate_port
from .outcome import Err, Outcome
from .status import classify

logger = logging.getLogger(__name__)


class CouchHTTPClient:
    """
    Synchronous HTTP transport for a document-database server.

    Example:
        >>> client = CouchHTTPClient("127.0.0.1", 5984)
        >>> outcome = client.request("GET", "/_all_dbs")
        >>> outcome.unwrap()
        ['_replicator', '_users']
    """

    def __init__(
        self,
        host: str,
        port: Union[int, str],
        config: Optional[TransportConfig] = None,
        backend: Optional[NetworkBackend] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            host: Server hostname or IP address
            port: Server port
            config: Transport settings; defaults to TransportConfig()
            backend: Network backend; defaults to blocking sockets
        """
        if not host:
            raise ValueError("host must not be empty")

        self._endpoint = Endpoint(host, validate_port(port))
        self._config = config or TransportConfig()
        self._backend = backend or SocketNetworkBackend()

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def config(self) -> TransportConfig:
        return self._config

    def prepare_request(
        self,
        method: Union[HttpMethod, str],
        path: str,
        body: Any = None,
        headers: Optional[Union[Headers, HeaderPairs]] = None,
        params: Optional[QueryParams] = None,
    ) -> Request:
        """
        Build the request exactly as it will be sent.

        The caller's headers are copied, then the body headers and the
        mandatory headers are inserted where the caller did not set them.

        Raises:
            MissingContentLengthError: If a streaming body has no Content-Length
        """
        name = method_name(method)
        request_headers = Headers(headers)
        request_body = make_body(name, body, request_headers)
        insert_default_headers(request_headers, self._endpoint, self._config.user_agent)
        return Request.create(name, path, request_headers, request_body, params)

    def request(
        self,
        method: Union[HttpMethod, str],
        path: str,
        body: Any = None,
        headers: Optional[Union[Headers, HeaderPairs]] = None,
        params: Optional[QueryParams] = None,
    ) -> Outcome:
        """
        Send one request and return its outcome.

        Transport failures and error statuses are returned as ``Err``
        outcomes rather than raised.

        Args:
            method: HTTP method
            path: Request path, without query string
            body: None, bytes, str, a JSON-serializable value, a FixedBody,
                  a StreamingBody or a producer callable
            headers: Extra request headers; they take precedence over defaults
            params: Query parameters as (key, value) pairs

        Returns:
            Decoded, Raw or StatusOnly on success; Err otherwise
        """
        try:
            prepared = self.prepare_request(method, path, body, headers, params)
            response, response_body = self._send(prepared)
        except TransportError as e:
            logger.debug(f"Request {method} {path} ended with {e.kind.value}: {e}")
            return Err.from_exception(e)

        outcome = classify(prepared.method, response, response_body)
        if isinstance(outcome, Err):
            logger.debug(f"{prepared.method} {prepared.target} -> {outcome.kind.value}")
        return outcome

    def _send(self, request: Request) -> Tuple[RawResponse, Optional[bytes]]:
        stream = self._backend.connect_tcp(
            self._endpoint.host,
            self._endpoint.port,
            connect_timeout=self._config.connect_timeout,
            read_timeout=self._config.read_timeout,
        )
        connection = HTTP11Connection(stream, self._config)
        return connection.handle_request(request)

    def get(self, path: str, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.GET, path, **kwargs)

    def head(self, path: str, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.HEAD, path, **kwargs)

    def put(self, path: str, body: Any = None, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.PUT, path, body=body, **kwargs)

    def post(self, path: str, body: Any = None, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.POST, path, body=body, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.DELETE, path, **kwargs)

    def copy(self, path: str, **kwargs: Any) -> Outcome:
        return self.request(HttpMethod.COPY, path, **kwargs)

    def __repr__(self) -> str:
        return f"CouchHTTPClient({self._endpoint.host!r}, {self._endpoint.port})"
