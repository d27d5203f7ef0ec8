"""
OpenTelemetry tracing for the order record store

Store operations open spans through the global tracer; this module decides where
those spans go.
"""
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor, SpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION, DEPLOYMENT_ENVIRONMENT
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from typing import Optional
import logging

from order_store import __version__

logger = logging.getLogger(__name__)


def build_tracer_provider(
    service_name: str,
    span_exporter: SpanExporter,
    environment: Optional[str] = None,
    batch: bool = True
) -> TracerProvider:
    """Tracer provider that tags spans with the service and sends them to the exporter"""
    attributes = {
        SERVICE_NAME: service_name,
        SERVICE_VERSION: __version__,
    }
    if environment:
        attributes[DEPLOYMENT_ENVIRONMENT] = environment

    provider = TracerProvider(resource=Resource(attributes=attributes))
    processor = BatchSpanProcessor(span_exporter) if batch else SimpleSpanProcessor(span_exporter)
    provider.add_span_processor(processor)
    return provider


def setup_opentelemetry(
    service_name: str,
    otlp_endpoint: str = "http://localhost:4317",
    enabled: bool = True,
    environment: Optional[str] = None,
    span_exporter: Optional[SpanExporter] = None
) -> Optional[TracerProvider]:
    """
    Install the global tracer provider

    Args:
        service_name: Name reported on every span
        otlp_endpoint: OTLP collector endpoint, used when no exporter is given
        enabled: Whether to enable tracing
        environment: Deployment environment reported on every span
        span_exporter: Exporter to use instead of OTLP; spans are then exported
            synchronously as each one ends

    Returns:
        The installed TracerProvider, or None when disabled
    """
    if not enabled:
        logger.info("OpenTelemetry disabled")
        return None

    if span_exporter is None:
        provider = build_tracer_provider(
            service_name,
            OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True),
            environment=environment
        )
        logger.info(f"Sending traces to {otlp_endpoint}")
    else:
        provider = build_tracer_provider(service_name, span_exporter, environment=environment, batch=False)
        logger.info(f"Sending traces to {span_exporter.__class__.__name__}")

    trace.set_tracer_provider(provider)
    logger.info(f"OpenTelemetry initialized for {service_name}")

    return provider


def instrument_fastapi(app):
    """Instrument FastAPI application"""
    FastAPIInstrumentor.instrument_app(app)
    logger.info("FastAPI instrumented with OpenTelemetry")


def instrument_sqlalchemy(engine):
    """Instrument SQLAlchemy engine"""
    SQLAlchemyInstrumentor().instrument(engine=engine)
    logger.info("SQLAlchemy instrumented with OpenTelemetry")
