"""
Pytest fixtures for vision service tests.
"""
import socket

import pytest

from vision_service.config import Config

SERVICE_ENV_VARS = (
    "PORT",
    "HOST",
    "LOG_LEVEL",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "SERVICE_NAMESPACE",
    "TELEMETRY_EXPORTER",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "STATSD_ADDRESS",
    "HEALTH_RESPONSE_FORMAT",
    "READ_TIMEOUT",
    "SHUTDOWN_TIMEOUT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every service variable from the environment."""
    for key in SERVICE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def free_port() -> int:
    """A TCP port that nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def config(free_port) -> Config:
    """Config bound to localhost on a free port, telemetry disabled."""
    return Config(
        port=free_port,
        host="127.0.0.1",
        log_level="warning",
        telemetry_exporter="none",
        read_timeout=5.0,
        shutdown_timeout=5.0,
    )


@pytest.fixture
def base_url(config) -> str:
    return f"http://{config.host}:{config.port}"
