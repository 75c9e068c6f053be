from __future__ import annotations

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
from prometheus_client import REGISTRY

from Chunk_Index_rev.observability import tracing as tracing_module
from Chunk_Index_rev.config import TelemetrySettings
from Chunk_Index_rev.observability.tracing import configure_tracing, instrumented
from Chunk_Index_rev.utils.logging import bind_correlation_id, reset_correlation_id


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture()
def exporter(monkeypatch) -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setattr(tracing_module, "tracer", provider.get_tracer("test"))
    return exporter


@pytest.mark.asyncio
async def test_instrumented_records_span_and_success(exporter) -> None:
    @instrumented("unit_success")
    async def operation(value: int) -> int:
        return value * 2

    before = _sample(
        "chunk_index_qdrant_operations_total", {"operation": "unit_success", "outcome": "success"}
    )

    assert await operation(21) == 42

    spans = exporter.get_finished_spans()
    assert [span.name for span in spans] == ["qdrant.unit_success"]
    assert spans[0].attributes["vector_store.operation"] == "unit_success"
    assert (
        _sample(
            "chunk_index_qdrant_operations_total",
            {"operation": "unit_success", "outcome": "success"},
        )
        == before + 1
    )
    assert operation.__name__ == "operation"


@pytest.mark.asyncio
async def test_instrumented_records_failure_and_reraises(exporter) -> None:
    @instrumented("unit_failure")
    async def operation() -> None:
        raise LookupError("missing")

    with pytest.raises(LookupError):
        await operation()

    span = exporter.get_finished_spans()[0]
    assert span.status.status_code == StatusCode.ERROR
    assert _sample(
        "chunk_index_qdrant_operation_errors_total",
        {"operation": "unit_failure", "error_type": "LookupError"},
    ) >= 1


@pytest.mark.asyncio
async def test_instrumented_tags_span_with_correlation_id(exporter) -> None:
    @instrumented("unit_correlated")
    async def operation() -> None:
        return None

    tokens = bind_correlation_id("req-42")
    try:
        await operation()
    finally:
        reset_correlation_id(tokens)
    await operation()

    tagged, untagged = exporter.get_finished_spans()
    assert tagged.attributes["correlation_id"] == "req-42"
    assert "correlation_id" not in untagged.attributes


def test_configure_tracing_builds_sampled_provider() -> None:
    telemetry = TelemetrySettings(exporter="console", sample_ratio=0.5)

    provider = configure_tracing("chunk-index", telemetry)

    assert provider.resource.attributes["service.name"] == "chunk-index"
    assert "0.5" in provider.sampler.get_description()
    assert isinstance(trace.get_tracer_provider(), TracerProvider)
    provider.shutdown()
