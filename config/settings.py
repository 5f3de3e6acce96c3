"""
Pydantic Settings for the Word Store Service

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

from typing import List, Optional, Union
from pathlib import Path
import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """
    Settings for reaching the Redis store.

    These settings control where the word hash lives and how long the client
    waits on the network before an operation is treated as timed out:
    - Explicit endpoint list, or the bound service to read credentials from
    - Socket timeouts that turn a stalled endpoint into a timeout failure
    - Optional periodic health check of the active connection
    """
    model_config = SettingsConfigDict(env_prefix="WORDSTORE_REDIS_", case_sensitive=False)

    endpoints: str = Field("",
                           description="Comma-separated redis:// or rediss:// URIs; overrides bound service credentials")
    service_name: str = Field("compose-for-redis",
                              description="Name of the bound service whose credentials hold the endpoint URIs")
    hash_key: str = Field("words",
                          description="Redis hash holding word -> definition entries")
    socket_timeout: float = Field(5.0,
                                  description="Seconds to wait for a command reply before timing out")
    socket_connect_timeout: float = Field(5.0,
                                          description="Seconds to wait for a TCP/TLS connection before timing out")
    health_check_interval: float = Field(0.0,
                                         description="Seconds between PINGs of the active connection (0 = disabled)")

    @property
    def endpoint_uris(self) -> List[str]:
        return [uri.strip() for uri in self.endpoints.split(",") if uri.strip()]


class RetrySettings(BaseSettings):
    """
    Reconnection policy settings.

    The first reconnection waits ``base_interval`` seconds, each further one
    ``multiplier`` times longer. After ``max_retries`` reconnections without a
    successful operation in between, the next failure terminates the process.
    """
    model_config = SettingsConfigDict(env_prefix="WORDSTORE_RETRY_", case_sensitive=False)

    base_interval: float = Field(2.0, ge=0,
                                 description="Backoff before the first reconnection, in seconds")
    multiplier: float = Field(5.0, ge=1,
                              description="Factor applied to the backoff on every reconnection")
    max_retries: int = Field(5, ge=0,
                             description="Consecutive reconnections allowed before giving up")


class ServerSettings(BaseSettings):
    """HTTP server settings."""
    model_config = SettingsConfigDict(env_prefix="WORDSTORE_SERVER_", case_sensitive=False)

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, validation_alias=AliasChoices("port", "PORT", "WORDSTORE_SERVER_PORT"),
                      description="Port to listen on")
    static_dir: str = Field("public", description="Directory served as static files under /; relative paths missing from the "
                                      "working directory resolve inside the http_api package")


class MonitoringSettings(BaseSettings):
    """Logging settings."""
    model_config = SettingsConfigDict(env_prefix="WORDSTORE_", case_sensitive=False)

    log_level: str = Field("INFO",
                           description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")


class WordStoreSettings(BaseSettings):
    """
    Main settings class that consolidates all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = WordStoreSettings()

        # Load from YAML file
        settings = WordStoreSettings.from_yaml('config.yaml')

        # Access nested settings
        key = settings.redis.hash_key
        port = settings.server.port
    """
    model_config = SettingsConfigDict(env_prefix="WORDSTORE_", case_sensitive=False,
                                      env_nested_delimiter="__")

    redis: RedisSettings = Field(default_factory=RedisSettings,
                                 description="Redis endpoint and socket settings")
    retry: RetrySettings = Field(default_factory=RetrySettings,
                                 description="Reconnection backoff policy")
    server: ServerSettings = Field(default_factory=ServerSettings,
                                   description="HTTP server settings")
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings,
                                           description="Logging settings")

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "WordStoreSettings":
        """Load settings from YAML file"""
        import yaml
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)


def load_settings(config_path: Optional[str] = None) -> WordStoreSettings:
    """
    Load settings from file and/or environment variables.

    - If config_path is provided and exists, loads settings from the YAML file
    - Otherwise, creates a new settings instance with values from environment variables

    Example:
        settings = load_settings("/path/to/config.yaml")
        settings = load_settings()
    """
    if config_path and os.path.exists(config_path):
        return WordStoreSettings.from_yaml(config_path)
    return WordStoreSettings()
