"""
Redis Connection Supervisor

This module owns the single active Redis connection. It builds connections
to the head of the endpoint list, consumes failure events reported by the
network layer, and rotates to the next endpoint with geometric backoff when
the active endpoint times out.

All state (active client, endpoint order, retry counter, backoff interval)
is mutated only from coroutines running on one event loop, and failure
events are handled one at a time by a single consumer task.
"""

import asyncio
import logging
import sys
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from connection_management.backoff import BackoffPolicy, BackoffTracker
from connection_management.connection_exceptions import ConnectionClosedError
from connection_management.endpoints import Endpoint, EndpointList
from connection_management.events import ConnectionEvent

logger = logging.getLogger(__name__)

EXIT_RETRIES_EXHAUSTED = 1

ClientFactory = Callable[[Endpoint], Any]


class ConnectionState(str, Enum):
    """
    Lifecycle states of the supervised connection.

    - DISCONNECTED: not started yet, or closed at shutdown
    - CONNECTED: a client is active and accepts operations
    - FAILED: a timeout was observed and a reconnection is scheduled
    - RECONNECTING: the old client is being replaced
    - TERMINATED: retries are exhausted and the process is exiting
    """
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    FAILED = "failed"
    RECONNECTING = "reconnecting"
    TERMINATED = "terminated"


class ConnectionSupervisor:
    """
    Single owner of the active Redis connection and its retry state.

    Other components never touch the client or the counters directly. They
    obtain the client through ``client``, report failures through
    ``report()`` and signal healthy operations through ``mark_healthy()``.

    Example:
        >>> endpoints = EndpointList.from_uris(["redis://a:6379", "redis://b:6379"])
        >>> supervisor = ConnectionSupervisor(endpoints, create_redis_client)
        >>> await supervisor.start()
        >>> await supervisor.client.hgetall("words")
    """

    def __init__(
        self,
        endpoints: EndpointList,
        client_factory: ClientFactory,
        policy: Optional[BackoffPolicy] = None,
        terminate: Callable[[int], None] = sys.exit,
        health_check_interval: float = 0.0,
    ):
        """
        Args:
            endpoints: Endpoints in priority order; the head is connected first
            client_factory: Builds an unconnected client for one endpoint
            policy: Backoff policy; production defaults when None
            terminate: Called with the exit code when retries are exhausted
            health_check_interval: Seconds between PINGs of the active
                connection, 0 to rely on probes and operation errors only
        """
        self._endpoints = endpoints
        self._client_factory = client_factory
        self._backoff = BackoffTracker(policy)
        self._terminate = terminate
        self._health_check_interval = health_check_interval

        self._state = ConnectionState.DISCONNECTED
        self._client: Any = None
        self._events: Optional[asyncio.Queue] = None
        self._consumer: Optional[asyncio.Task] = None
        self._watcher: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

        # Metrics for monitoring
        self._total_events = 0
        self._total_reconnections = 0
        self._last_error: Optional[str] = None

        logger.info(
            f"ConnectionSupervisor initialized: endpoints={len(endpoints)}, "
            f"base_interval={self._backoff.policy.base_interval}s, "
            f"max_retries={self._backoff.policy.max_retries}"
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def active_endpoint(self) -> Endpoint:
        return self._endpoints.current()

    @property
    def endpoints(self) -> List[Endpoint]:
        return self._endpoints.as_list()

    @property
    def retry_count(self) -> int:
        return self._backoff.retry_count

    @property
    def backoff_interval(self) -> float:
        return self._backoff.interval

    @property
    def client(self) -> Any:
        """
        The active client.

        Raises:
            ConnectionClosedError: If no connection is active, e.g. while a
                reconnection is scheduled or running. Operations are not
                queued until the new connection is up.
        """
        if self._state is not ConnectionState.CONNECTED or self._client is None:
            raise ConnectionClosedError(
                f"No active Redis connection (state: {self._state.value})"
            )
        return self._client

    def is_active(self, client: Any) -> bool:
        return client is not None and client is self._client

    async def start(self) -> None:
        """Start the event consumer and connect to the head endpoint."""
        if self._consumer is not None:
            return
        self._events = asyncio.Queue()
        self._consumer = asyncio.create_task(self._consume_events())
        await self.connect(self._endpoints.current())
        if self._health_check_interval > 0:
            self._watcher = asyncio.create_task(self._watch())

    async def connect(self, endpoint: Endpoint) -> None:
        """
        Make a new client for ``endpoint`` the active connection.

        The previous client, if any, is discarded. The connection is probed in
        the background; a failed probe is reported as a failure event instead
        of being raised here.
        """
        client = self._client_factory(endpoint)
        self._client = client
        self._state = ConnectionState.CONNECTED
        logger.info(f"Connected to Redis endpoint {endpoint.display}")
        self._spawn(self._probe(client, endpoint))

    def report(self, error: BaseException, source: Any = None) -> Optional[ConnectionEvent]:
        """
        Report a connection error observed by the network layer.

        Args:
            error: The exception raised by the client
            source: The client the error came from. Errors from a client that
                is no longer active are ignored.

        Returns:
            The queued event, or None when the error was ignored
        """
        if source is not None and not self.is_active(source):
            logger.debug(f"Ignoring error from replaced connection: {error!r}")
            return None
        event = ConnectionEvent.from_exception(error, self._endpoints.current())
        if self._events is None:
            raise RuntimeError("ConnectionSupervisor.start() has not been called")
        self._events.put_nowait(event)
        return event

    async def handle_event(self, event: ConnectionEvent) -> None:
        """
        Apply the failure policy to one event.

        1. If the next reconnection would exceed the retry limit, terminate.
        2. Otherwise log the error; only timeouts schedule a reconnection
           after the current backoff interval.
        """
        self._total_events += 1
        self._last_error = event.describe()

        if self._backoff.exhausted:
            self._state = ConnectionState.TERMINATED
            logger.critical(
                f"Giving up after {self._backoff.retry_count} reconnection attempts: {event.describe()}"
            )
            self._terminate(EXIT_RETRIES_EXHAUSTED)
            return

        logger.error(f"Redis connection error: {event.describe()}")
        if not event.is_timeout:
            return

        delay = self._backoff.interval
        self._state = ConnectionState.FAILED
        logger.warning(f"Reconnecting in {delay:.2f}s (attempt {self._backoff.retry_count + 1})")
        self._spawn(self._reconnect_after(delay))

    async def reconnect(self) -> Endpoint:
        """
        Replace the active connection with one to the next endpoint.

        Closes the current client, rotates the endpoint list, grows the
        backoff, counts the attempt and connects to the new head.

        Returns:
            The endpoint now in use
        """
        self._state = ConnectionState.RECONNECTING
        previous, self._client = self._client, None
        if previous is not None:
            await self._close_client(previous)

        endpoint = self._endpoints.rotate()
        self._backoff.record_attempt()
        self._total_reconnections += 1
        logger.info(
            f"Reconnection {self._backoff.retry_count}: switching to {endpoint.display}, "
            f"next backoff {self._backoff.interval:.2f}s"
        )
        await self.connect(endpoint)
        return endpoint

    def mark_healthy(self) -> None:
        """Reset the retry counter and backoff after a successful operation."""
        if not self._backoff.is_reset:
            logger.info(
                f"Redis connection healthy on {self._endpoints.current().display}, "
                f"resetting retry counter ({self._backoff.retry_count}) and backoff"
            )
        self._backoff.reset()

    async def check_server_status(self) -> bool:
        """PING the active connection; failures are reported, not raised."""
        try:
            client = self.client
        except ConnectionClosedError:
            return False
        return await self._probe(client, self._endpoints.current())

    async def drain(self) -> None:
        """Wait until queued events and scheduled reconnections have finished."""
        while True:
            if self._events is not None:
                await self._events.join()
            pending = [task for task in self._tasks if not task.done()]
            if not pending and (self._events is None or self._events.empty()):
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """Cancel background work and close the active client."""
        background = [t for t in (self._consumer, self._watcher) if t is not None] + list(self._tasks)
        for task in background:
            task.cancel()
        if background:
            await asyncio.gather(*background, return_exceptions=True)
        self._consumer = self._watcher = None
        self._tasks.clear()

        client, self._client = self._client, None
        if client is not None:
            await self._close_client(client)
        if self._state is not ConnectionState.TERMINATED:
            self._state = ConnectionState.DISCONNECTED
        logger.info("ConnectionSupervisor closed")

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of the connection state for health endpoints and logs."""
        metrics = {
            "state": self._state.value,
            "active_endpoint": self._endpoints.current().display,
            "endpoints": [e.display for e in self._endpoints],
            "total_events": self._total_events,
            "total_reconnections": self._total_reconnections,
            "last_error": self._last_error,
        }
        metrics.update(self._backoff.to_dict())
        return metrics

    async def _consume_events(self) -> None:
        while True:
            event = await self._events.get()
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception(f"Failed to handle connection event: {event.describe()}")
            finally:
                self._events.task_done()

    async def _reconnect_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.reconnect()

    async def _probe(self, client: Any, endpoint: Endpoint) -> bool:
        try:
            await client.ping()
        except Exception as e:
            logger.debug(f"Probe of {endpoint.display} failed: {e!r}")
            self.report(e, source=client)
            return False
        logger.debug(f"Probe of {endpoint.display} succeeded")
        return True

    async def _watch(self) -> None:
        while True:
            await asyncio.sleep(self._health_check_interval)
            await self.check_server_status()

    async def _close_client(self, client: Any) -> None:
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(f"Error closing Redis connection: {e!r}")

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
