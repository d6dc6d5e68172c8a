"""Discriminated results returned by every gateway operation.

A call settles to exactly one of:
    - Ok: 2xx response, parsed into the operation's declared type
    - NotFound: the server answered 404
    - ServerError: any other non-success status
    - TransportError: the exchange never produced a usable response
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful response carrying the parsed payload."""

    value: T
    ok = True

    def value_or(self, default: Any = None) -> T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    """The requested resource does not exist on the server."""

    detail: str
    ok = False

    def value_or(self, default: Any = None) -> Any:
        return default


@dataclass(frozen=True)
class ServerError:
    """The server answered with a non-success status.

    Attributes:
        status_code: HTTP status of the response.
        detail: Server-reported error message, or a generic one.
    """

    status_code: int
    detail: str
    ok = False

    def value_or(self, default: Any = None) -> Any:
        return default


@dataclass(frozen=True)
class TransportError:
    """Network, timeout or malformed-body failure."""

    detail: str
    ok = False

    def value_or(self, default: Any = None) -> Any:
        return default


Failure = NotFound | ServerError | TransportError


def describe(failure: Failure) -> str:
    """Render a failure as a short user-facing message."""
    match failure:
        case NotFound(detail=detail):
            return f"Not found: {detail}"
        case ServerError(status_code=code, detail=detail):
            return f"Server error ({code}): {detail}"
        case TransportError(detail=detail):
            return f"Connection failed: {detail}"
    return str(failure)
