"""
Bound Service Credentials

Resolves the Redis endpoint URIs the service should use. An explicit
``WORDSTORE_REDIS_ENDPOINTS`` list wins; otherwise the credentials of the
bound Redis service are read from the ``VCAP_SERVICES`` environment
variable, taking the primary ``uri`` followed by any ``uri_direct*``
alternates that reach the same deployment.
"""

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from word_store_exceptions import ConfigurationError
from config.settings import RedisSettings

logger = logging.getLogger(__name__)

VCAP_SERVICES_ENV = "VCAP_SERVICES"
PRIMARY_URI_KEY = "uri"
DIRECT_URI_PREFIX = "uri_direct"


def uris_from_credentials(credentials: Mapping[str, Any]) -> List[str]:
    """
    Extract endpoint URIs from one service credentials object.

    The primary URI comes first, then the direct alternates in key order.
    Blank values and duplicates are dropped.
    """
    uris: List[str] = []
    primary = credentials.get(PRIMARY_URI_KEY)
    if primary:
        uris.append(primary)
    for key in sorted(k for k in credentials if k.startswith(DIRECT_URI_PREFIX)):
        value = credentials[key]
        if value and value not in uris:
            uris.append(value)
    return uris


def load_service_credentials(service_name: str, vcap_services: Optional[str]) -> Dict[str, Any]:
    """
    Return the credentials of the first bound instance of ``service_name``.

    Raises:
        ConfigurationError: If the JSON is malformed or the service is not bound
    """
    if not vcap_services:
        raise ConfigurationError(f"Must be bound to {service_name} services ({VCAP_SERVICES_ENV} is not set)")
    try:
        services = json.loads(vcap_services)
    except ValueError as e:
        raise ConfigurationError(f"{VCAP_SERVICES_ENV} is not valid JSON: {e}") from e

    instances = services.get(service_name) if isinstance(services, dict) else None
    if not instances:
        raise ConfigurationError(f"Must be bound to {service_name} services")
    credentials = instances[0].get("credentials") or {}
    if len(instances) > 1:
        logger.info(f"{len(instances)} {service_name} instances bound, using '{instances[0].get('name', 0)}'")
    return credentials


def resolve_endpoint_uris(settings: RedisSettings, environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Determine the ordered list of endpoint URIs.

    Args:
        settings: Redis settings; a non-empty ``endpoints`` value takes precedence
        environ: Environment mapping, ``os.environ`` by default

    Raises:
        ConfigurationError: If no endpoint URI can be found
    """
    if settings.endpoint_uris:
        logger.info(f"Using {len(settings.endpoint_uris)} configured Redis endpoints")
        return settings.endpoint_uris

    environ = environ if environ is not None else os.environ
    credentials = load_service_credentials(settings.service_name, environ.get(VCAP_SERVICES_ENV))
    uris = uris_from_credentials(credentials)
    if not uris:
        raise ConfigurationError(f"Credentials of {settings.service_name} contain no '{PRIMARY_URI_KEY}'")
    logger.info(f"Using {len(uris)} Redis endpoints from {settings.service_name} credentials")
    return uris
