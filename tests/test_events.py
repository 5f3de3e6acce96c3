"""
Tests for failure classification.
"""

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from connection_management import (
    ConnectionClosedError,
    ConnectionErrorKind,
    ConnectionEvent,
    Endpoint,
    classify_error,
)


@pytest.mark.parametrize("error, kind", [
    (RedisTimeoutError("Timeout reading from socket"), ConnectionErrorKind.TIMEOUT),
    (RedisConnectionError("Error 110 connecting to a:6379. Connection timed out."), ConnectionErrorKind.TIMEOUT),
    (RedisConnectionError("Timeout connecting to server"), ConnectionErrorKind.TIMEOUT),
    (asyncio.TimeoutError(), ConnectionErrorKind.TIMEOUT),
    (RedisConnectionError("Error 111 connecting to a:6379. Connection refused."), ConnectionErrorKind.REFUSED),
    (ConnectionRefusedError(111, "Connection refused"), ConnectionErrorKind.REFUSED),
    (RedisConnectionError("Connection closed by server."), ConnectionErrorKind.CLOSED),
    (ConnectionClosedError("No active Redis connection"), ConnectionErrorKind.CLOSED),
    (ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value"), ConnectionErrorKind.OTHER),
    (ValueError("timed out"), ConnectionErrorKind.OTHER),
])
def test_classify_error(error, kind):
    assert classify_error(error) is kind


def test_event_from_exception():
    endpoint = Endpoint.parse("redis://user:secret@a:6379")

    event = ConnectionEvent.from_exception(RedisTimeoutError("Timeout reading from socket"), endpoint)

    assert event.is_timeout
    assert event.endpoint is endpoint
    assert "timeout error on redis://user@a:6379" in event.describe()
    assert "secret" not in event.describe()
