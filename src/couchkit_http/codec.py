"""
JSON codec used for request and response bodies.
"""

import json
from typing import Any, Union


class DecodeError(ValueError):
    """Raised when a body is not valid JSON."""


def encode(value: Any) -> bytes:
    """Encode a JSON-serializable value as compact UTF-8 bytes."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode(data: Union[bytes, bytearray, str]) -> Any:
    """
    Decode a JSON document.

    Raises:
        DecodeError: If the data is not valid UTF-8 JSON
    """
    try:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8")
        return json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Invalid JSON document: {e}") from e
