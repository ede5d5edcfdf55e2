"""OpenTelemetry tracing to Phoenix: OTLP/HTTP export, OpenInference enrichment of Pydantic AI spans."""

from openinference.instrumentation.pydantic_ai import OpenInferenceSpanProcessor, is_openinference_span
from openinference.semconv.resource import ResourceAttributes
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pydantic_ai import Agent

from court_export import __version__
from court_export.config import (
    DEPLOYMENT_ENVIRONMENT,
    PHOENIX_API_KEY,
    PHOENIX_COLLECTOR_ENDPOINT,
    PHOENIX_ENABLED,
    PHOENIX_PROJECT_NAME,
)
from court_export.utils.logger import get_logger

logger = get_logger("court_export.tracing")

TRACER_NAME = "court-export"

_tracer_provider: TracerProvider | None = None


def _collector_endpoint() -> str:
    """Phoenix accepts OTLP/HTTP on /v1/traces; append it when only the host is configured."""
    endpoint = PHOENIX_COLLECTOR_ENDPOINT.rstrip("/")
    return endpoint if endpoint.endswith("/v1/traces") else f"{endpoint}/v1/traces"


def _build_provider() -> TracerProvider:
    resource = Resource.create({
        "service.name": PHOENIX_PROJECT_NAME,
        "service.version": __version__,
        "deployment.environment": DEPLOYMENT_ENVIRONMENT,
        ResourceAttributes.PROJECT_NAME: PHOENIX_PROJECT_NAME,
    })
    provider = TracerProvider(resource=resource)
    # Enrichment must run before the batch exporter sees the span
    provider.add_span_processor(OpenInferenceSpanProcessor(span_filter=is_openinference_span))
    headers = {"authorization": f"Bearer {PHOENIX_API_KEY}"} if PHOENIX_API_KEY else None
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=_collector_endpoint(), headers=headers))
    )
    return provider


def init_tracing() -> None:
    """Install the Phoenix tracer provider once; a no-op unless PHOENIX_ENABLED=true.

    Until then get_tracer() hands out the OpenTelemetry no-op tracer.
    """
    global _tracer_provider
    if _tracer_provider is not None or not PHOENIX_ENABLED:
        return
    _tracer_provider = _build_provider()
    trace.set_tracer_provider(_tracer_provider)
    Agent.instrument_all()
    logger.info(
        "tracing.initialized",
        endpoint=_collector_endpoint(),
        project=PHOENIX_PROJECT_NAME,
    )


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME, __version__)


def shutdown_tracing() -> None:
    """Flush pending spans before process exit."""
    global _tracer_provider
    if _tracer_provider is None:
        return
    _tracer_provider.force_flush(timeout_millis=5000)
    _tracer_provider.shutdown()
    _tracer_provider = None
