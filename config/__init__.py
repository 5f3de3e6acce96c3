"""
Configuration Module

This module provides centralized configuration management for the word store:
- Redis endpoint and socket settings
- Reconnection backoff policy
- HTTP server settings
- Logging level
- Endpoint resolution from bound service credentials

Implements an environment-aware configuration system with sensible
defaults and validation using Pydantic.
"""

from .settings import (
    WordStoreSettings,
    RedisSettings,
    RetrySettings,
    ServerSettings,
    MonitoringSettings,
    load_settings
)
from .credentials import resolve_endpoint_uris, uris_from_credentials

__all__ = [
    'WordStoreSettings',
    'RedisSettings',
    'RetrySettings',
    'ServerSettings',
    'MonitoringSettings',
    'load_settings',
    'resolve_endpoint_uris',
    'uris_from_credentials',
]
