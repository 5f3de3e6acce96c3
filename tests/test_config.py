"""
Tests for settings, credential resolution and Redis client construction.
"""

import json

import pytest
import yaml
from redis.asyncio import Redis
from redis.asyncio.connection import SSLConnection

from config import (
    RedisSettings,
    WordStoreSettings,
    load_settings,
    resolve_endpoint_uris,
    uris_from_credentials,
)
from connection_management import Endpoint, client_options, create_redis_client
from word_store_exceptions import ConfigurationError

ENV_VARS = ["PORT", "VCAP_SERVICES", "WORDSTORE_REDIS_ENDPOINTS", "WORDSTORE_RETRY_BASE_INTERVAL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:

    def test_defaults(self):
        settings = WordStoreSettings()

        assert settings.server.port == 8080
        assert settings.server.static_dir == "public"
        assert settings.redis.hash_key == "words"
        assert settings.redis.service_name == "compose-for-redis"
        assert settings.retry.base_interval == 2.0
        assert settings.retry.multiplier == 5.0
        assert settings.retry.max_retries == 5
        assert settings.monitoring.log_level == "INFO"

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")

        assert WordStoreSettings().server.port == 9090

    def test_endpoints_from_environment(self, monkeypatch):
        monkeypatch.setenv("WORDSTORE_REDIS_ENDPOINTS", "redis://a:6379, rediss://b:6380 ,")
        monkeypatch.setenv("WORDSTORE_RETRY_BASE_INTERVAL", "0.5")

        settings = WordStoreSettings()

        assert settings.redis.endpoint_uris == ["redis://a:6379", "rediss://b:6380"]
        assert settings.retry.base_interval == 0.5

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "redis": {"endpoints": "redis://a:6379", "hash_key": "glossary"},
            "retry": {"base_interval": 0.25, "max_retries": 3},
            "server": {"port": 9000},
        }))

        settings = load_settings(str(path))

        assert settings.redis.hash_key == "glossary"
        assert settings.retry.base_interval == 0.25
        assert settings.retry.max_retries == 3
        assert settings.server.port == 9000

    def test_missing_config_file_falls_back_to_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "missing.yaml"))

        assert settings.server.port == 8080


class TestCredentials:

    def test_primary_then_direct_uris(self):
        credentials = {
            "uri": "rediss://admin:pw@portal-0.example.com:15234",
            "uri_direct_2": "rediss://admin:pw@direct-2.example.com:15234",
            "uri_direct_1": "rediss://admin:pw@direct-1.example.com:15234",
            "uri_cli": "redis-cli -h portal-0.example.com",
        }

        assert uris_from_credentials(credentials) == [
            "rediss://admin:pw@portal-0.example.com:15234",
            "rediss://admin:pw@direct-1.example.com:15234",
            "rediss://admin:pw@direct-2.example.com:15234",
        ]

    def test_resolve_from_vcap_services(self):
        vcap = {"compose-for-redis": [{"name": "words-db", "credentials": {"uri": "redis://a:6379"}}]}

        uris = resolve_endpoint_uris(RedisSettings(), {"VCAP_SERVICES": json.dumps(vcap)})

        assert uris == ["redis://a:6379"]

    def test_explicit_endpoints_take_precedence(self):
        vcap = {"compose-for-redis": [{"credentials": {"uri": "redis://a:6379"}}]}
        settings = RedisSettings(endpoints="redis://x:6379,redis://y:6379")

        uris = resolve_endpoint_uris(settings, {"VCAP_SERVICES": json.dumps(vcap)})

        assert uris == ["redis://x:6379", "redis://y:6379"]

    @pytest.mark.parametrize("environ", [
        {},
        {"VCAP_SERVICES": "not json"},
        {"VCAP_SERVICES": json.dumps({"cloudantNoSQLDB": [{"credentials": {"url": "https://x"}}]})},
        {"VCAP_SERVICES": json.dumps({"compose-for-redis": [{"credentials": {}}]})},
    ])
    def test_unbound_service_is_configuration_error(self, environ):
        with pytest.raises(ConfigurationError):
            resolve_endpoint_uris(RedisSettings(), environ)


class TestRedisConnector:

    def test_plain_endpoint_options(self):
        options = client_options(Endpoint.parse("redis://a:6379"), RedisSettings(socket_timeout=1.5))

        assert options["decode_responses"] is True
        assert options["socket_timeout"] == 1.5
        assert "ssl_check_hostname" not in options

    def test_tls_endpoint_verifies_hostname(self):
        options = client_options(Endpoint.parse("rediss://portal.example.com:15234"), RedisSettings())

        assert options["ssl_check_hostname"] is True

    @pytest.mark.asyncio
    async def test_create_tls_client(self):
        client = create_redis_client(Endpoint.parse("rediss://admin:pw@portal.example.com:15234"), RedisSettings())

        assert isinstance(client, Redis)
        pool = client.connection_pool
        assert pool.connection_class is SSLConnection
        assert pool.connection_kwargs["host"] == "portal.example.com"
        assert pool.connection_kwargs["port"] == 15234
        assert pool.connection_kwargs["ssl_check_hostname"] is True

        await client.aclose()
