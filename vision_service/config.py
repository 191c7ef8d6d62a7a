"""
Service configuration loaded from environment variables.

Every setting has a documented default; a missing or empty variable is
never an error.
"""
import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_SHUTDOWN_TIMEOUT = 10.0

TELEMETRY_EXPORTERS = ("otlp", "statsd", "none")
HEALTH_FORMATS = ("text", "json")


@dataclass
class Config:
    """Runtime settings for the service."""
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    log_level: str = "info"
    service_name: str = "vision-service"
    service_version: str = "1.0.0"
    service_namespace: str = "default"
    telemetry_exporter: str = "otlp"
    otel_endpoint: str = "http://localhost:4318"
    statsd_address: str = "127.0.0.1:8125"
    health_format: str = "json"
    read_timeout: float = DEFAULT_READ_TIMEOUT
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT

    @property
    def statsd_host(self) -> str:
        host, sep, _ = self.statsd_address.rpartition(":")
        if not sep:
            host = self.statsd_address
        return host or "127.0.0.1"

    @property
    def statsd_port(self) -> int:
        _, sep, port = self.statsd_address.rpartition(":")
        try:
            return int(port) if sep else 8125
        except ValueError:
            return 8125


def get_env(key: str, default: str) -> str:
    """Return the environment variable, or default when unset or empty."""
    value = os.getenv(key)
    if not value:
        return default
    return value


def _get_int(key: str, default: int) -> int:
    raw = get_env(key, str(default))
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {key}: {raw!r}, using {default}")
        return default


def _get_float(key: str, default: float) -> float:
    raw = get_env(key, str(default))
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {key}: {raw!r}, using {default}")
        return default


def _get_choice(key: str, default: str, choices) -> str:
    value = get_env(key, default).lower()
    if value not in choices:
        logger.warning(f"Unsupported {key}={value!r}, expected one of {choices}; using {default}")
        return default
    return value


def load_config() -> Config:
    """Build a Config from the process environment."""
    return Config(
        port=_get_int("PORT", DEFAULT_PORT),
        host=get_env("HOST", "0.0.0.0"),
        log_level=get_env("LOG_LEVEL", "info"),
        service_name=get_env("SERVICE_NAME", "vision-service"),
        service_version=get_env("SERVICE_VERSION", "1.0.0"),
        service_namespace=get_env("SERVICE_NAMESPACE", "default"),
        telemetry_exporter=get_env("TELEMETRY_EXPORTER", "otlp").lower(),
        otel_endpoint=get_env("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318"),
        statsd_address=get_env("STATSD_ADDRESS", "127.0.0.1:8125"),
        health_format=_get_choice("HEALTH_RESPONSE_FORMAT", "json", HEALTH_FORMATS),
        read_timeout=_get_float("READ_TIMEOUT", DEFAULT_READ_TIMEOUT),
        shutdown_timeout=_get_float("SHUTDOWN_TIMEOUT", DEFAULT_SHUTDOWN_TIMEOUT),
    )
