"""
Tests for environment configuration loading.
"""
import pytest

from vision_service.config import Config, get_env, load_config


class TestLoadConfig:
    """load_config() defaults and overrides."""

    def test_default_values(self, clean_env):
        cfg = load_config()

        assert cfg.port == 8080
        assert cfg.host == "0.0.0.0"
        assert cfg.otel_endpoint == "http://localhost:4318"
        assert cfg.log_level == "info"
        assert cfg.service_name == "vision-service"
        assert cfg.service_version == "1.0.0"
        assert cfg.service_namespace == "default"
        assert cfg.telemetry_exporter == "otlp"
        assert cfg.statsd_address == "127.0.0.1:8125"
        assert cfg.health_format == "json"
        assert cfg.read_timeout == 10.0
        assert cfg.shutdown_timeout == 10.0

    def test_custom_values(self, clean_env):
        clean_env.setenv("PORT", "9090")
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("SERVICE_NAME", "test-service")
        clean_env.setenv("SERVICE_VERSION", "2.0.0")
        clean_env.setenv("SERVICE_NAMESPACE", "test")
        clean_env.setenv("TELEMETRY_EXPORTER", "StatsD")
        clean_env.setenv("HEALTH_RESPONSE_FORMAT", "text")
        clean_env.setenv("SHUTDOWN_TIMEOUT", "0.5")

        cfg = load_config()

        assert cfg.port == 9090
        assert cfg.otel_endpoint == "http://localhost:4318"
        assert cfg.log_level == "debug"
        assert cfg.service_name == "test-service"
        assert cfg.service_version == "2.0.0"
        assert cfg.service_namespace == "test"
        assert cfg.telemetry_exporter == "statsd"
        assert cfg.health_format == "text"
        assert cfg.shutdown_timeout == 0.5

    def test_invalid_numbers_fall_back_to_defaults(self, clean_env):
        clean_env.setenv("PORT", "not-a-port")
        clean_env.setenv("READ_TIMEOUT", "soon")

        cfg = load_config()

        assert cfg.port == 8080
        assert cfg.read_timeout == 10.0

    def test_unsupported_health_format_falls_back(self, clean_env):
        clean_env.setenv("HEALTH_RESPONSE_FORMAT", "xml")
        assert load_config().health_format == "json"

    def test_empty_variable_uses_default(self, clean_env):
        clean_env.setenv("PORT", "")
        assert load_config().port == 8080


class TestGetEnv:
    """get_env() fallback behaviour."""

    def test_existing_environment_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert get_env("TEST_VAR", "default") == "test_value"

    def test_missing_environment_variable(self, monkeypatch):
        monkeypatch.delenv("NON_EXISTING_VAR", raising=False)
        assert get_env("NON_EXISTING_VAR", "default") == "default"


class TestStatsdAddress:

    @pytest.mark.parametrize("address,host,port", [
        ("127.0.0.1:8125", "127.0.0.1", 8125),
        ("agent.local:9125", "agent.local", 9125),
        ("agent.local:oops", "agent.local", 8125),
        ("agent.local", "agent.local", 8125),
        (":9125", "127.0.0.1", 9125),
    ])
    def test_host_and_port(self, address, host, port):
        cfg = Config(statsd_address=address)
        assert cfg.statsd_host == host
        assert cfg.statsd_port == port
