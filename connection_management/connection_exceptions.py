"""
Connection Management Exceptions

This module defines specialized exceptions for Redis connection management,
providing detailed error reporting for connection-related issues.
"""

from word_store_exceptions import ConnectionError as BaseConnectionError


class ConnectionError(BaseConnectionError):
    """
    Base exception for all connection-related errors.

    Lets callers catch every connection failure raised by this package
    uniformly while still exposing the specific subtype.
    """
    pass


class ConnectionClosedError(ConnectionError):
    """
    Raised when an operation hits a connection that was closed for reconnection.

    This covers two situations: no connection is active because a reconnection
    is scheduled or running, or a command was cut off because the client it
    was issued on has been replaced. Store operations retry this error once.
    """
    pass
