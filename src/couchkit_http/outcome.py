"""
Request outcomes for couchkit_http.

A request never raises for transport or status failures; it returns
one of the immutable outcome objects defined here instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Union

from .exceptions import ErrorKind, TransportError


class Outcome(ABC):
    """Base class of every request outcome."""

    @property
    def is_ok(self) -> bool:
        return not isinstance(self, Err)

    @abstractmethod
    def unwrap(self) -> Any:
        """Return the payload of a successful outcome."""
        pass


@dataclass(frozen=True)
class Decoded(Outcome):
    """Successful response whose body was valid JSON."""

    value: Any

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Raw(Outcome):
    """Successful response whose body could not be decoded as JSON."""

    body: bytes

    def unwrap(self) -> bytes:
        return self.body


@dataclass(frozen=True)
class StatusOnly(Outcome):
    """Successful HEAD response; only the status line is reported."""

    status_code: int
    phrase: str

    def unwrap(self) -> "StatusOnly":
        return self


@dataclass(frozen=True)
class Err(Outcome):
    """Failed request."""

    kind: ErrorKind
    detail: Any
    error: Optional[TransportError] = None

    @classmethod
    def from_exception(cls, error: TransportError) -> "Err":
        return cls(kind=error.kind, detail=error.detail, error=error)

    def unwrap(self) -> Any:
        """Re-raise the exception the request failed with."""
        if self.error is not None:
            raise self.error
        raise TransportError(f"{self.kind.value}: {self.detail}")


Ok = Union[Decoded, Raw, StatusOnly]
