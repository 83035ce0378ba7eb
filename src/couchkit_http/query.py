"""
Query-string encoding for database requests.

View queries take JSON values for their range boundaries, so the values
of ``key``, ``startkey`` and ``endkey`` are JSON-encoded before they are
percent-encoded. Every other value is sent as text.
"""

from typing import Any, Iterable, Tuple
from urllib.parse import quote

from . import codec

JSON_ENCODED_KEYS = frozenset({"key", "startkey", "endkey"})


def encode_query(pairs: Iterable[Tuple[str, Any]]) -> str:
    """
    Encode ``(key, value)`` pairs as a query string, keeping their order.

    Examples:
        >>> encode_query([("startkey", "a"), ("limit", 10)])
        'startkey=%22a%22&limit=10'
    """
    parts = []
    for key, value in pairs:
        parts.append(f"{quote(str(key), safe='')}={quote(encode_query_value(key, value), safe='')}")
    return "&".join(parts)


def encode_query_value(key: str, value: Any) -> str:
    """Render a single query value as text, before percent-encoding."""
    if key in JSON_ENCODED_KEYS:
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return codec.encode(value).decode("utf-8")

    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return codec.encode(value).decode("utf-8")


def append_query(path: str, pairs: Iterable[Tuple[str, Any]]) -> str:
    """Append the encoded query to ``path``; no ``?`` is added for an empty query."""
    query = encode_query(pairs)
    if not query:
        return path
    return f"{path}?{query}"
