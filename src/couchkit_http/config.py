"""
Transport configuration for couchkit_http.

All limits the transport enforces live here so that they can be
tuned per client, or from the environment, without touching the
protocol code.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from . import __version__


@dataclass(frozen=True)
class TransportConfig:
    """
    Immutable transport settings.

    By default bodies are read in 1 MiB increments, at most 1000 header
    lines are accepted, and reads block for as long as the peer keeps
    the socket open. Set ``read_timeout`` to bound the wait on a
    stalled server.
    """

    DEFAULT_MAX_CHUNK_SIZE = 1024 * 1024  # 1 MiB
    DEFAULT_MAX_HEADER_COUNT = 1000
    DEFAULT_MAX_LINE_LENGTH = 16384

    user_agent: str = f"couchkit_http/{__version__}"
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    max_header_count: int = DEFAULT_MAX_HEADER_COUNT
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    read_timeout: Optional[float] = None
    connect_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        for name in ("max_chunk_size", "max_header_count", "max_line_length"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        for name in ("read_timeout", "connect_timeout"):
            value = getattr(self, name)
            # zero would put the socket in non-blocking mode
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive or None, got {value!r}")

        if not self.user_agent:
            raise ValueError("user_agent must not be empty")

    @classmethod
    def from_env(
        cls,
        prefix: str = "COUCHKIT_",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "TransportConfig":
        """
        Create a configuration from environment variables.

        Recognised variables (with the default prefix):
            COUCHKIT_USER_AGENT, COUCHKIT_MAX_CHUNK_SIZE,
            COUCHKIT_MAX_HEADER_COUNT, COUCHKIT_MAX_LINE_LENGTH,
            COUCHKIT_READ_TIMEOUT, COUCHKIT_CONNECT_TIMEOUT

        An empty timeout variable, or one set to ``none``, means no timeout.

        Args:
            prefix: Prefix shared by all variable names
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            New TransportConfig instance

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        user_agent = env.get(f"{prefix}USER_AGENT")
        if user_agent:
            kwargs["user_agent"] = user_agent

        for name in ("max_chunk_size", "max_header_count", "max_line_length"):
            raw = env.get(f"{prefix}{name.upper()}")
            if raw:
                kwargs[name] = int(raw)

        for name in ("read_timeout", "connect_timeout"):
            raw = env.get(f"{prefix}{name.upper()}")
            if raw is not None:
                kwargs[name] = _parse_timeout(raw)

        return cls(**kwargs)


def _parse_timeout(raw: str) -> Optional[float]:
    raw = raw.strip()
    if not raw or raw.lower() in ("none", "infinity"):
        return None
    return float(raw)
