"""
Unit tests for the tracer implementations.

Tests cover:
- NullTracer yields None and reports disabled
- MockTracer records span names and attributes
- create_tracer picks the implementation from enable_tracing
- OpenTelemetryTracer produces real spans against the API
"""

from __future__ import annotations

from ownership.observability import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)
from ownership.observability.attributes import ATTR_RECORD_KIND


class TestNullTracer:
    """Tests for NullTracer."""

    def test_span_yields_none(self) -> None:
        tracer = NullTracer()
        with tracer.span("ownership.test", {"key": "value"}) as span:
            assert span is None

    def test_disabled(self) -> None:
        assert NullTracer().enabled is False


class TestMockTracer:
    """Tests for MockTracer."""

    def test_records_spans(self) -> None:
        tracer = MockTracer()
        with tracer.span("ownership.first", {ATTR_RECORD_KIND: "Category"}):
            pass
        with tracer.span("ownership.second"):
            pass

        assert tracer.spans == [
            ("ownership.first", {ATTR_RECORD_KIND: "Category"}),
            ("ownership.second", None),
        ]
        assert tracer.span_names == ["ownership.first", "ownership.second"]

    def test_clear(self) -> None:
        tracer = MockTracer()
        with tracer.span("ownership.first"):
            pass
        tracer.clear()
        assert tracer.spans == []

    def test_enabled(self) -> None:
        assert MockTracer().enabled is True


class TestCreateTracer:
    """Tests for the create_tracer factory."""

    def test_enabled_returns_opentelemetry_tracer(self) -> None:
        tracer = create_tracer(__name__, enable_tracing=True)
        assert isinstance(tracer, OpenTelemetryTracer)
        assert tracer.enabled is True

    def test_disabled_returns_null_tracer(self) -> None:
        tracer = create_tracer(__name__, enable_tracing=False)
        assert isinstance(tracer, NullTracer)

    def test_implementations_satisfy_protocol(self) -> None:
        tracers: list[Tracer] = [NullTracer(), MockTracer(), create_tracer(__name__)]
        for tracer in tracers:
            with tracer.span("ownership.protocol"):
                pass


class TestOpenTelemetryTracer:
    """Tests for OpenTelemetryTracer without a configured provider."""

    def test_span_is_usable(self) -> None:
        tracer = OpenTelemetryTracer(__name__)
        with tracer.span("ownership.otel", {ATTR_RECORD_KIND: "Question"}) as span:
            assert span is not None
            span.set_attribute("ownership.extra", 1)
