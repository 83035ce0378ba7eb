"""
Mapping of response status codes to request outcomes.
"""

import logging
from typing import Dict, Optional, Type

from . import codec
from .exceptions import (
    ConflictError,
    NotFoundError,
    PreconditionFailedError,
    StatusError,
    UnknownStatusError,
)
from .http_primitives import HttpMethod, RawResponse
from .outcome import Decoded, Err, Outcome, Raw, StatusOnly

logger = logging.getLogger(__name__)

STATUS_ERRORS: Dict[int, Type[StatusError]] = {
    404: NotFoundError,
    409: ConflictError,
    412: PreconditionFailedError,
}


def is_error_status(status_code: int) -> bool:
    return status_code >= 400


def status_error(status_code: int, phrase: str = "") -> StatusError:
    """Build the exception describing an error status."""
    error_class = STATUS_ERRORS.get(status_code, UnknownStatusError)
    return error_class(status_code, phrase)


def decode_body(body: bytes) -> Outcome:
    """Decode a successful body as JSON, falling back to the raw bytes."""
    try:
        return Decoded(codec.decode(body))
    except codec.DecodeError as e:
        if body:
            logger.debug(f"Response body is not JSON, returning raw bytes: {e}")
        return Raw(body)


def classify(method: str, response: RawResponse, body: Optional[bytes] = None) -> Outcome:
    """
    Turn a response into an outcome.

    404, 409 and 412 map to their dedicated errors and any other status
    of 400 or above to an unknown error carrying the code. A successful
    HEAD yields the status line only. Any other successful response is
    decoded as JSON, or returned raw when decoding fails.

    Args:
        method: Method of the request
        response: Parsed status line and headers
        body: Body bytes; ignored for errors and HEAD

    Returns:
        The request outcome
    """
    if is_error_status(response.status_code):
        return Err.from_exception(status_error(response.status_code, response.phrase))

    if method == HttpMethod.HEAD.value:
        return StatusOnly(response.status_code, response.phrase)

    return decode_body(body or b"")
