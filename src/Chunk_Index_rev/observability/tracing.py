"""OpenTelemetry setup and instrumentation for vector store operations."""

from __future__ import annotations

import functools
from collections.abc import Awaitable, Callable
from time import perf_counter
from typing import ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace import Status, StatusCode

from Chunk_Index_rev.config.settings import TelemetrySettings
from Chunk_Index_rev.utils.logging import get_correlation_id

from .metrics import record_operation_failure, record_operation_success

P = ParamSpec("P")
R = TypeVar("R")

tracer = trace.get_tracer("Chunk_Index_rev.vector_store")


def configure_tracing(service_name: str, telemetry: TelemetrySettings) -> TracerProvider:
    """Install the global tracer provider.

    ``telemetry.exporter`` selects ``otlp`` (HTTP); anything else prints spans
    to the console. Sampling follows the parent span, else ``sample_ratio``.
    """
    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name}),
        sampler=ParentBased(TraceIdRatioBased(telemetry.sample_ratio)),
    )

    exporter: SpanExporter
    if telemetry.exporter.lower() == "otlp":
        exporter = (
            OTLPSpanExporter(endpoint=telemetry.endpoint)
            if telemetry.endpoint
            else OTLPSpanExporter()
        )
    else:
        exporter = ConsoleSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return provider


def instrumented(
    operation: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Wrap an async store operation in a ``qdrant.<operation>`` span.

    Latency and outcome are recorded in Prometheus. Arguments are not copied
    onto the span, so vectors never end up in trace exports.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            started = perf_counter()
            with tracer.start_as_current_span(f"qdrant.{operation}") as span:
                span.set_attribute("vector_store.operation", operation)
                correlation_id = get_correlation_id()
                if correlation_id:
                    span.set_attribute("correlation_id", correlation_id)
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, str(exc)))
                    record_operation_failure(
                        operation, type(exc).__name__, perf_counter() - started
                    )
                    raise
                record_operation_success(operation, perf_counter() - started)
                return result

        return wrapper

    return decorator


__all__ = ["configure_tracing", "instrumented", "tracer"]
