"""
Telemetry facade used by request handlers.

The exporter is chosen once at startup: an OTLP collector, a statsd-style
agent, or nothing.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

from datadog.dogstatsd import DogStatsd

from vision_service.config import Config
from vision_service import tracing

logger = logging.getLogger(__name__)

HEALTH_CHECK_METRIC = "health_check_count"
HEALTH_CHECK_SPAN = "health-check"


class Telemetry:
    """No-op telemetry; base for the exporting implementations."""

    name = "none"

    def record_health_check(self, attributes: Optional[Dict[str, Any]] = None) -> None:
        pass

    @contextmanager
    def span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        yield None

    def instrument_app(self, app) -> None:
        pass

    def shutdown(self) -> None:
        pass


NullTelemetry = Telemetry


class OTLPTelemetry(Telemetry):
    """Spans and counters through OpenTelemetry providers."""

    name = "otlp"

    def __init__(self, tracer_provider, meter_provider):
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self._tracer = tracing.get_tracer(tracer_provider)
        meter = meter_provider.get_meter(tracing.TRACER_NAME)
        self._health_counter = meter.create_counter(
            HEALTH_CHECK_METRIC,
            description="Number of health check requests served",
        )

    def record_health_check(self, attributes: Optional[Dict[str, Any]] = None) -> None:
        self._health_counter.add(1, attributes or {})

    @contextmanager
    def span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        with tracing.trace_span(self._tracer, name, attributes) as span:
            yield span

    def instrument_app(self, app) -> None:
        tracing.instrument_fastapi(app, tracer_provider=self.tracer_provider)

    def shutdown(self) -> None:
        tracing.shutdown_tracing(self.tracer_provider, self.meter_provider)


class StatsdTelemetry(Telemetry):
    """Counters and timings sent to a statsd-style agent over UDP."""

    name = "statsd"

    def __init__(self, client: DogStatsd):
        self.client = client

    @classmethod
    def from_config(cls, config: Config) -> "StatsdTelemetry":
        client = DogStatsd(
            host=config.statsd_host,
            port=config.statsd_port,
            namespace=config.service_name.replace("-", "_"),
            constant_tags=[
                f"service:{config.service_name}",
                f"version:{config.service_version}",
                f"env:{config.service_namespace}",
            ],
        )
        return cls(client)

    def record_health_check(self, attributes: Optional[Dict[str, Any]] = None) -> None:
        tags = [f"{k}:{v}" for k, v in sorted((attributes or {}).items())]
        self.client.increment(HEALTH_CHECK_METRIC, tags=tags or None)

    @contextmanager
    def span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        with self.client.timed(f"{name.replace('-', '_')}.duration"):
            yield None

    def shutdown(self) -> None:
        try:
            self.client.flush()
            self.client.close_socket()
        except Exception:
            logger.warning("Failed to flush statsd client", exc_info=True)


def setup_telemetry(config: Config) -> Telemetry:
    """Build the telemetry backend selected by TELEMETRY_EXPORTER."""
    exporter = config.telemetry_exporter
    if exporter == "otlp":
        telemetry = OTLPTelemetry(tracing.setup_tracing(config), tracing.setup_metrics(config))
    elif exporter == "statsd":
        telemetry = StatsdTelemetry.from_config(config)
        logger.info(f"Statsd telemetry enabled (agent={config.statsd_address})")
    else:
        if exporter != "none":
            logger.warning(f"Unknown telemetry exporter {exporter!r}, telemetry disabled")
        telemetry = NullTelemetry()
    return telemetry
