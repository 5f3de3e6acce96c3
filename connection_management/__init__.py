"""
Connection Management Module

This module provides resilient connection management for the Redis store
behind the word service, keeping exactly one connection open to one of
several equivalent endpoints.

Key capabilities:
- Ordered endpoint list rotated cyclically on failure
- Single connection supervisor owning the active client and retry state
- Typed failure events consumed in order on one asyncio task
- Geometric backoff between reconnections with a fatal retry limit
- TLS hostname verification for rediss:// endpoints
"""

from .endpoints import Endpoint, EndpointList
from .backoff import BackoffPolicy, BackoffTracker
from .events import ConnectionEvent, ConnectionErrorKind, classify_error
from .redis_connector import create_redis_client, client_options
from .supervisor import ConnectionSupervisor, ConnectionState, EXIT_RETRIES_EXHAUSTED
from .connection_exceptions import (
    ConnectionError,
    ConnectionClosedError
)

__all__ = [
    'Endpoint',
    'EndpointList',
    'BackoffPolicy',
    'BackoffTracker',
    'ConnectionEvent',
    'ConnectionErrorKind',
    'classify_error',
    'create_redis_client',
    'client_options',
    'ConnectionSupervisor',
    'ConnectionState',
    'EXIT_RETRIES_EXHAUSTED',
    'ConnectionError',
    'ConnectionClosedError',
]
