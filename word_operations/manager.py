"""
Word Store Manager

Provides the two operations the HTTP layer exposes: storing a word with its
definition and listing every stored word. Both run a single Redis command on
the supervisor's active connection.

Typical usage:

    supervisor = ConnectionSupervisor(endpoints, create_redis_client)
    await supervisor.start()

    store = WordStore(supervisor)
    await store.store_word("cat", "feline")
    words = await store.list_words()
"""

import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from connection_management import ConnectionSupervisor
from connection_management.connection_exceptions import ConnectionClosedError
from word_operations.retry import retry_on_reconnect

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_HASH_KEY = "words"

# Errors raised by the Redis client when the network link misbehaves
CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)


class WordStore:
    """
    Word/definition store kept in a single Redis hash.

    A command that fails with a connection error is reported to the
    supervisor before the error propagates. A command cut off because the
    supervisor replaced the connection while it was in flight is re-issued
    once on the new connection.
    """

    def __init__(self, supervisor: ConnectionSupervisor, hash_key: str = DEFAULT_HASH_KEY):
        """
        Args:
            supervisor: Owner of the active Redis connection
            hash_key: Redis hash holding the entries
        """
        self._supervisor = supervisor
        self._hash_key = hash_key
        logger.debug(f"WordStore initialized with hash key '{hash_key}'")

    @property
    def hash_key(self) -> str:
        return self._hash_key

    async def store_word(self, word: str, definition: str) -> bool:
        """
        Store ``definition`` under ``word``, replacing any previous definition.

        Returns:
            True once the write is acknowledged

        Raises:
            ConnectionClosedError: If no connection is available, even after one retry
            redis.RedisError: Any other error from the store, unchanged
        """
        await self._execute(
            "store_word",
            lambda client: client.hset(self._hash_key, word, definition),
        )
        logger.debug(f"Stored definition for '{word}'")
        return True

    async def list_words(self) -> Dict[str, str]:
        """
        Return every stored word with its definition, in no particular order.

        Raises:
            ConnectionClosedError: If no connection is available, even after one retry
            redis.RedisError: Any other error from the store, unchanged
        """
        words = await self._execute(
            "list_words",
            lambda client: client.hgetall(self._hash_key),
        )
        return dict(words or {})

    async def _execute(self, operation_name: str, command: Callable[[Any], Awaitable[T]]) -> T:
        result = await retry_on_reconnect(
            lambda: self._run_once(operation_name, command),
            operation_name,
        )
        self._supervisor.mark_healthy()
        return result

    async def _run_once(self, operation_name: str, command: Callable[[Any], Awaitable[T]]) -> T:
        client = self._supervisor.client
        try:
            return await command(client)
        except CONNECTION_ERRORS as e:
            if not self._supervisor.is_active(client):
                raise ConnectionClosedError(
                    f"{operation_name} interrupted by reconnection: {e}"
                ) from e
            logger.warning(f"{operation_name} failed with connection error: {e!r}")
            self._supervisor.report(e, source=client)
            raise
