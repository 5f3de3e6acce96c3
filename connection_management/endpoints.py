"""
Redis Endpoints

This module models the set of network addresses that reach the same
replicated Redis store. The endpoints are kept in priority order and
rotated cyclically when the active one stops responding.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional
from urllib.parse import urlsplit

from word_store_exceptions import ConfigurationError, InvalidEndpointError

logger = logging.getLogger(__name__)

SECURE_SCHEME = "rediss"
SUPPORTED_SCHEMES = ("redis", SECURE_SCHEME)
DEFAULT_PORT = 6379


@dataclass(frozen=True)
class Endpoint:
    """
    One parsed connection URI.

    Attributes:
        uri: The original connection string, credentials included
        scheme: ``redis`` or ``rediss``
        hostname: Host used for the TCP connection and TLS hostname verification
        port: TCP port
        username: Optional ACL user from the URI
    """
    uri: str
    scheme: str
    hostname: str
    port: int = DEFAULT_PORT
    username: Optional[str] = None

    @classmethod
    def parse(cls, uri: str) -> "Endpoint":
        """
        Parse a ``redis://`` or ``rediss://`` URI.

        Raises:
            InvalidEndpointError: If the scheme is unsupported or no host is given
        """
        uri = uri.strip()
        parts = urlsplit(uri)
        scheme = parts.scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            raise InvalidEndpointError(
                f"Unsupported endpoint scheme '{parts.scheme}', expected one of {SUPPORTED_SCHEMES}"
            )
        try:
            port = parts.port or DEFAULT_PORT
        except ValueError as e:
            raise InvalidEndpointError(f"Invalid port in endpoint URI: {e}") from e
        if not parts.hostname:
            raise InvalidEndpointError("Endpoint URI has no hostname")
        return cls(
            uri=uri,
            scheme=scheme,
            hostname=parts.hostname,
            port=port,
            username=parts.username or None,
        )

    @property
    def is_secure(self) -> bool:
        """True when the endpoint requires a TLS transport."""
        return self.scheme == SECURE_SCHEME

    @property
    def display(self) -> str:
        """Printable form without the password."""
        user = f"{self.username}@" if self.username else ""
        return f"{self.scheme}://{user}{self.hostname}:{self.port}"

    def __str__(self) -> str:
        return self.display


class EndpointList:
    """
    Ordered, never-empty sequence of endpoints.

    The head is the endpoint in use. The only reordering ever applied is a
    full left rotation, so rotating ``len(list)`` times restores the
    original order.
    """

    def __init__(self, endpoints: Iterable[Endpoint]):
        self._endpoints = deque(endpoints)
        if not self._endpoints:
            raise ConfigurationError("At least one Redis endpoint is required")
        logger.debug(f"EndpointList initialized with {len(self._endpoints)} endpoints")

    @classmethod
    def from_uris(cls, uris: Iterable[str]) -> "EndpointList":
        return cls(Endpoint.parse(uri) for uri in uris)

    def current(self) -> Endpoint:
        return self._endpoints[0]

    def rotate(self) -> Endpoint:
        """Move the head to the tail and return the new head."""
        self._endpoints.rotate(-1)
        return self._endpoints[0]

    def as_list(self) -> List[Endpoint]:
        return list(self._endpoints)

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(list(self._endpoints))

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self) -> str:
        return f"EndpointList({[e.display for e in self._endpoints]})"
