import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except Exception:  # pragma: no cover - optional dependency
    trace = None  # type: ignore
    FlaskInstrumentor = None  # type: ignore

TRACER_NAME = "melodix"


def init_tracing(app: Flask) -> bool:
    """Instrument the app with OpenTelemetry when the extra is installed and an endpoint is set."""
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return False

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint:
        return False

    headers = app.config.get("OTEL_EXPORTER_OTLP_HEADERS") or os.getenv(
        "OTEL_EXPORTER_OTLP_HEADERS"
    )

    resource = Resource.create(
        {
            "service.name": app.config.get("OTEL_SERVICE_NAME", "melodix-api"),
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=headers,
        insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app)
    app.logger.info("OpenTelemetry tracing enabled for %s", endpoint)
    return True


def span_attributes(provider: str, operation: str, **attributes: Any) -> dict:
    """Attribute map for an outbound provider call, under the ``melodix.`` namespace."""
    values = {"melodix.provider": provider, "melodix.operation": operation}
    for key, value in attributes.items():
        if value is not None:
            values[f"melodix.{key}"] = value
    return values


def annotate(span, **attributes: Any) -> None:
    """Set non-empty attributes on ``span``; a missing span is ignored."""
    if span is None:
        return
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(f"melodix.{key}", value)


def annotate_current(**attributes: Any) -> None:
    """Set attributes on the active span, usually the instrumented request span."""
    if trace is None:  # pragma: no cover - optional dependency
        return
    annotate(trace.get_current_span(), **attributes)


@contextmanager
def provider_span(provider: str, operation: str, **attributes: Any) -> Iterator[Optional[Any]]:
    """Wrap a recognition, catalog or events provider call in a span.

    Yields the active span, or ``None`` when OpenTelemetry is not installed.
    Without a configured tracer provider the API hands out non-recording spans.
    """
    if trace is None:  # pragma: no cover - optional dependency
        yield None
        return

    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(
        f"{provider}.{operation}",
        attributes=span_attributes(provider, operation, **attributes),
    ) as span:
        yield span


__all__ = ["init_tracing", "provider_span", "annotate", "annotate_current", "span_attributes"]
