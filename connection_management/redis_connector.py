"""
Redis Connector

Builds ``redis.asyncio`` clients for individual endpoints. Client creation
does no I/O; the first network round trip happens when the supervisor
probes the new connection, so connection failures always surface as
failure events rather than as exceptions from this module.
"""

import logging
from typing import Any, Dict

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from config import RedisSettings
from connection_management.endpoints import Endpoint

logger = logging.getLogger(__name__)


def client_options(endpoint: Endpoint, settings: RedisSettings) -> Dict[str, Any]:
    """
    Connection keyword arguments for ``endpoint``.

    Retries inside the Redis client are disabled: rotation and retry are
    decided by the supervisor. TLS endpoints verify the server certificate
    against the endpoint hostname.
    """
    options: Dict[str, Any] = {
        "decode_responses": True,
        "socket_timeout": settings.socket_timeout,
        "socket_connect_timeout": settings.socket_connect_timeout,
        "retry": Retry(NoBackoff(), 0),
    }
    if endpoint.is_secure:
        options["ssl_check_hostname"] = True
    return options


def create_redis_client(endpoint: Endpoint, settings: RedisSettings = None) -> Redis:
    """
    Create a client for ``endpoint``.

    Args:
        endpoint: Target endpoint; ``rediss://`` selects a TLS connection
        settings: Socket timeouts. Defaults are loaded from the environment.

    Returns:
        An unconnected ``redis.asyncio.Redis`` client
    """
    settings = settings if settings is not None else RedisSettings()
    client = Redis.from_url(endpoint.uri, **client_options(endpoint, settings))
    logger.debug(f"Created Redis client for {endpoint.display} (tls={endpoint.is_secure})")
    return client
