"""
Distributed tracing and OTLP metrics for the service using OpenTelemetry.

Provides:
- Tracer and meter providers exporting to an OTLP collector over HTTP
- OpenTelemetry instrumentation for FastAPI
- Span helpers
"""
import logging
from typing import Optional, Dict, Any
from contextlib import contextmanager

from opentelemetry import trace, metrics
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from vision_service.config import Config

logger = logging.getLogger(__name__)

TRACER_NAME = "vision-service"


def build_resource(config: Config) -> Resource:
    """Create resource with service information."""
    return Resource.create({
        "service.name": config.service_name,
        "service.version": config.service_version,
        "service.namespace": config.service_namespace,
    })


def _signal_endpoint(base: str, signal_path: str) -> str:
    return f"{base.rstrip('/')}/{signal_path}"


def setup_tracing(config: Config) -> TracerProvider:
    """Initialize the tracer provider and register it globally."""
    logger.info(f"Initializing OpenTelemetry tracing (endpoint={config.otel_endpoint})")

    provider = TracerProvider(resource=build_resource(config))
    try:
        exporter = OTLPSpanExporter(endpoint=_signal_endpoint(config.otel_endpoint, "v1/traces"))
        provider.add_span_processor(BatchSpanProcessor(exporter))
    except Exception:
        logger.warning("Failed to configure OTLP span exporter, spans will not be exported", exc_info=True)

    trace.set_tracer_provider(provider)
    return provider


def setup_metrics(config: Config) -> MeterProvider:
    """Initialize the meter provider and register it globally."""
    readers = []
    try:
        exporter = OTLPMetricExporter(endpoint=_signal_endpoint(config.otel_endpoint, "v1/metrics"))
        readers.append(PeriodicExportingMetricReader(exporter))
    except Exception:
        logger.warning("Failed to configure OTLP metric exporter, metrics will not be exported", exc_info=True)

    provider = MeterProvider(resource=build_resource(config), metric_readers=readers)
    metrics.set_meter_provider(provider)
    return provider


def instrument_fastapi(app, tracer_provider: Optional[TracerProvider] = None) -> None:
    """Instrument FastAPI application with OpenTelemetry."""
    try:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
        logger.info("FastAPI instrumentation enabled")
    except Exception:
        logger.error("Failed to instrument FastAPI", exc_info=True)


def get_tracer(provider: Optional[TracerProvider] = None) -> trace.Tracer:
    """Get a tracer from the given provider, or the global one."""
    if provider is not None:
        return provider.get_tracer(TRACER_NAME)
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def trace_span(
    tracer: trace.Tracer,
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL
):
    """
    Context manager for creating a trace span.

    Example:
        with trace_span(tracer, "health-check", {"format": "json"}):
            ...
    """
    with tracer.start_as_current_span(name, kind=kind) as span:
        if attributes:
            for key, value in attributes.items():
                if value is None:
                    continue
                if isinstance(value, (str, int, float, bool)):
                    span.set_attribute(key, value)
                else:
                    span.set_attribute(key, str(value))

        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise


def shutdown_tracing(
    tracer_provider: Optional[TracerProvider],
    meter_provider: Optional[MeterProvider],
) -> None:
    """Flush and shut down the providers; export failures are logged only."""
    for name, provider in (("tracer", tracer_provider), ("meter", meter_provider)):
        if provider is None:
            continue
        try:
            provider.shutdown()
        except Exception:
            logger.warning(f"Failed to shut down OpenTelemetry {name} provider", exc_info=True)
