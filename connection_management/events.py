"""
Connection Failure Events

The network layer never acts on connection errors itself. It turns each
error into a typed ``ConnectionEvent`` and hands it to the supervisor,
which consumes events one at a time on a single task.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from connection_management.connection_exceptions import ConnectionClosedError
from connection_management.endpoints import Endpoint

# Message fragments the Redis client and the OS use for timeouts
_TIMEOUT_MARKERS = ("timed out", "timeout", "etimedout")
_REFUSED_MARKERS = ("connection refused", "econnrefused")
_CLOSED_MARKERS = ("closed",)


class ConnectionErrorKind(str, Enum):
    """
    Classification of a connection failure.

    Only TIMEOUT triggers endpoint rotation; the other kinds are logged.
    """
    TIMEOUT = "timeout"
    CLOSED = "closed"
    REFUSED = "refused"
    OTHER = "other"


def classify_error(error: BaseException) -> ConnectionErrorKind:
    """
    Map a client exception onto a ``ConnectionErrorKind``.

    Redis reports socket timeouts either as its own ``TimeoutError`` or as a
    ``ConnectionError`` carrying the OS message, so the message is checked
    as well as the type.
    """
    if isinstance(error, ConnectionClosedError):
        return ConnectionErrorKind.CLOSED
    if isinstance(error, (RedisTimeoutError, asyncio.TimeoutError, TimeoutError)):
        return ConnectionErrorKind.TIMEOUT

    message = str(error).lower()
    if isinstance(error, (RedisConnectionError, OSError)):
        if any(marker in message for marker in _TIMEOUT_MARKERS):
            return ConnectionErrorKind.TIMEOUT
        if any(marker in message for marker in _REFUSED_MARKERS):
            return ConnectionErrorKind.REFUSED
        if any(marker in message for marker in _CLOSED_MARKERS):
            return ConnectionErrorKind.CLOSED
    return ConnectionErrorKind.OTHER


@dataclass(frozen=True)
class ConnectionEvent:
    """A failure observed on the active connection."""
    kind: ConnectionErrorKind
    error: BaseException
    endpoint: Optional[Endpoint] = None
    timestamp: float = field(default_factory=time.monotonic)

    @classmethod
    def from_exception(cls, error: BaseException, endpoint: Optional[Endpoint] = None) -> "ConnectionEvent":
        return cls(kind=classify_error(error), error=error, endpoint=endpoint)

    @property
    def is_timeout(self) -> bool:
        return self.kind is ConnectionErrorKind.TIMEOUT

    def describe(self) -> str:
        where = self.endpoint.display if self.endpoint else "unknown endpoint"
        return f"{self.kind.value} error on {where}: {self.error!r}"
