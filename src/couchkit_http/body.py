"""
Request body serialization for couchkit_http.

A request body is either a ``FixedBody`` (bytes known up front) or a
``StreamingBody`` (a pull function called until it reports the end).
The pull function returns one of the producer outcomes defined here:

- ``Data(chunk)``: send ``chunk``; the next call takes no argument.
- ``DataAndState(chunk, state)``: send ``chunk``; the next call receives ``state``.
- ``End()``: the body is complete.
- ``ProducerError(reason)``: abort the request.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Union

from typing_extensions import TypeAlias

from . import codec
from .exceptions import MissingContentLengthError, ProtocolError
from .http_primitives import Headers, HttpMethod
from .network.stream import NetworkStream

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# Methods whose absent body is sent as an empty one.
EMPTY_BODY_METHODS = frozenset({HttpMethod.POST.value, HttpMethod.PUT.value})


class _NoState:
    def __repr__(self) -> str:
        return "NO_STATE"


NO_STATE: Any = _NoState()


@dataclass(frozen=True)
class Data:
    chunk: bytes


@dataclass(frozen=True)
class DataAndState:
    chunk: bytes
    state: Any


@dataclass(frozen=True)
class End:
    pass


@dataclass(frozen=True)
class ProducerError:
    reason: Any


ProducerOutcome: TypeAlias = Union[Data, DataAndState, End, ProducerError]
Producer: TypeAlias = Callable[..., ProducerOutcome]


@dataclass(frozen=True)
class FixedBody:
    """Body whose bytes are known before the request is sent."""

    data: bytes

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StreamingBody:
    """
    Body pulled from a producer while the request is being sent.

    The producer is called without arguments while ``state`` is
    ``NO_STATE`` and with the current state otherwise.
    """

    producer: Producer
    state: Any = NO_STATE


RequestBody: TypeAlias = Union[FixedBody, StreamingBody]


def make_body(method: str, body: Any, headers: Headers) -> Optional[RequestBody]:
    """
    Normalize a caller-supplied body and add its default headers.

    ``headers`` is updated in place: ``Content-Type: application/json``
    is inserted for every present body and ``Content-Length`` for fixed
    bodies, in both cases only when the caller did not set them.

    Args:
        method: Request method name
        body: None, bytes, str, a FixedBody, a StreamingBody, a producer
              callable, or any JSON-serializable value
        headers: Headers of the request being built

    Returns:
        The body to send, or None if no body is sent

    Raises:
        MissingContentLengthError: If a streaming body has no Content-Length header
    """
    if body is None:
        if method not in EMPTY_BODY_METHODS:
            return None
        body = b""

    headers.insert_default("Content-Type", JSON_CONTENT_TYPE)

    if callable(body) and not isinstance(body, StreamingBody):
        body = StreamingBody(body)

    if isinstance(body, StreamingBody):
        if "Content-Length" not in headers:
            raise MissingContentLengthError()
        return body

    if isinstance(body, FixedBody):
        data = body.data
    elif isinstance(body, (bytes, bytearray, memoryview)):
        data = bytes(body)
    elif isinstance(body, str):
        data = body.encode("utf-8")
    else:
        data = codec.encode(body)

    headers.insert_default("Content-Length", str(len(data)))
    return FixedBody(data)


def declared_length(headers: Headers) -> Optional[int]:
    """Return the caller's Content-Length as an int, or None if it is not a number."""
    value = headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


def iter_producer(body: StreamingBody) -> Iterator[bytes]:
    """
    Pull chunks from a streaming body until it ends.

    Raises:
        ProtocolError: If the producer reports an error or returns
                       something that is not a producer outcome
    """
    producer = body.producer
    state = body.state

    while True:
        outcome = producer() if state is NO_STATE else producer(state)

        if isinstance(outcome, Data):
            state = NO_STATE
            yield _to_bytes(outcome.chunk)
        elif isinstance(outcome, DataAndState):
            state = outcome.state
            yield _to_bytes(outcome.chunk)
        elif isinstance(outcome, End):
            return
        elif isinstance(outcome, ProducerError):
            raise ProtocolError(f"body producer failed: {outcome.reason!r}")
        else:
            raise ProtocolError(f"body producer returned {outcome!r}")


def write_body(
    stream: NetworkStream,
    body: Optional[RequestBody],
    content_length: Optional[int] = None,
) -> int:
    """
    Send a request body.

    Streaming chunks are forwarded verbatim. When ``content_length`` is
    given, a producer that overruns it or ends short fails the request
    instead of desynchronizing the connection.

    Args:
        stream: Connection to write to
        body: Body returned by ``make_body``
        content_length: Declared length of a streaming body, if known

    Returns:
        Number of body bytes written

    Raises:
        ProtocolError: On producer failure or length mismatch
    """
    if body is None:
        return 0

    if isinstance(body, FixedBody):
        if body.data:
            stream.write(body.data)
        return len(body.data)

    sent = 0
    for chunk in iter_producer(body):
        if content_length is not None and sent + len(chunk) > content_length:
            raise ProtocolError(
                f"body producer sent more than the declared Content-Length ({content_length})"
            )
        if chunk:
            stream.write(chunk)
            sent += len(chunk)

    if content_length is not None and sent != content_length:
        raise ProtocolError(
            f"body producer ended after {sent} of {content_length} declared bytes"
        )

    logger.debug(f"Streamed request body: {sent} bytes")
    return sent


def _to_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise ProtocolError(f"body producer yielded {type(chunk).__name__}, expected bytes")
