"""
Shared fixtures for the word store tests.

Redis is replaced by an in-memory fake injected through the supervisor's
client factory. All fakes created by one factory share the same backing
data, like endpoints of one replicated deployment.
"""

from typing import Any, Callable, Dict, List

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from connection_management import BackoffPolicy, ConnectionSupervisor, Endpoint, EndpointList

ENDPOINT_URIS = ["redis://a:6379", "redis://b:6379", "redis://c:6379"]
BASE_INTERVAL = 0.0001


class FakeRedis:
    """Minimal async stand-in for ``redis.asyncio.Redis``."""

    def __init__(self, endpoint: Endpoint, data: Dict[str, Dict[str, str]], script: Dict[str, List[Any]]):
        self.endpoint = endpoint
        self.data = data
        self.calls: List[str] = []
        self.closed = False
        self._script = script

    async def _run(self, command: str) -> None:
        self.calls.append(command)
        if self.closed:
            raise RedisConnectionError("Connection closed by client")
        outcomes = self._script.get(command)
        if outcomes:
            outcome = outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            await outcome(self)

    async def ping(self) -> bool:
        await self._run("ping")
        return True

    async def hset(self, key: str, field: str, value: str) -> int:
        await self._run("hset")
        entries = self.data.setdefault(key, {})
        created = field not in entries
        entries[field] = value
        return int(created)

    async def hgetall(self, key: str) -> Dict[str, str]:
        await self._run("hgetall")
        return dict(self.data.get(key, {}))

    async def aclose(self) -> None:
        self.closed = True


class FakeRedisFactory:
    """Client factory recording every client it builds."""

    def __init__(self):
        self.data: Dict[str, Dict[str, str]] = {}
        self.clients: List[FakeRedis] = []
        self._scripts: Dict[str, Dict[str, List[Any]]] = {}

    def script(self, hostname: str, command: str, *outcomes: Any) -> None:
        """Queue exceptions or async hooks for ``command`` on clients of ``hostname``."""
        self._scripts.setdefault(hostname, {}).setdefault(command, []).extend(outcomes)

    def __call__(self, endpoint: Endpoint) -> FakeRedis:
        client = FakeRedis(endpoint, self.data, self._scripts.setdefault(endpoint.hostname, {}))
        self.clients.append(client)
        return client

    @property
    def hostnames(self) -> List[str]:
        return [client.endpoint.hostname for client in self.clients]


@pytest.fixture
def factory() -> FakeRedisFactory:
    return FakeRedisFactory()


@pytest.fixture
def terminations() -> List[int]:
    return []


@pytest.fixture
def make_supervisor(factory, terminations) -> Callable[..., ConnectionSupervisor]:
    def _make(uris: List[str] = None, base_interval: float = BASE_INTERVAL, **kwargs) -> ConnectionSupervisor:
        return ConnectionSupervisor(
            EndpointList.from_uris(uris or ENDPOINT_URIS),
            factory,
            policy=BackoffPolicy(base_interval=base_interval),
            terminate=terminations.append,
            **kwargs,
        )
    return _make
