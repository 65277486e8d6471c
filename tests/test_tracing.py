"""
Tests for OpenTelemetry tracing
"""

import httpx
import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON, TraceIdRatioBased
from opentelemetry.trace import StatusCode

from adsb2loki.collectors.dump1090 import Dump1090Collector
from adsb2loki.services.forwarder_service import ForwarderService
from adsb2loki.services.loki_client import LokiClient
from adsb2loki.utils import tracing

from .conftest import FLIGHT_DATA_URL, LOKI_URL

OTEL_ENV_VARS = [
    "OTEL_TRACING_ENABLED",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
    "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
    "OTEL_EXPORTER_OTLP_HEADERS",
    "OTEL_EXPORTER_OTLP_TRACES_HEADERS",
    "OTEL_TRACES_SAMPLER",
    "OTEL_TRACES_SAMPLER_ARG",
]


@pytest.fixture
def otel_env(monkeypatch):
    for name in OTEL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    yield provider.get_tracer("test")
    provider.shutdown()


def build_service(source_transport, loki_transport, tracer):
    collector = Dump1090Collector(FLIGHT_DATA_URL, transport=source_transport, tracer=tracer)
    loki_client = LokiClient(LOKI_URL, transport=loki_transport, tracer=tracer)
    return ForwarderService(collector, loki_client, tracer=tracer)


def spans_by_name(exporter):
    return {span.name: span for span in exporter.get_finished_spans()}


class TestCycleSpans:

    @pytest.mark.asyncio
    async def test_cycle_span_wraps_fetch_and_push(self, snapshot_payload, make_transport,
                                                   exporter, tracer):
        source = make_transport(lambda request: httpx.Response(200, json=snapshot_payload))
        loki = make_transport(lambda request: httpx.Response(204))
        service = build_service(source, loki, tracer)

        assert await service.run_once() is True

        spans = spans_by_name(exporter)
        assert set(spans) == {"adsb2loki.fetch_cycle", "adsb2loki.fetch", "adsb2loki.push"}
        cycle = spans["adsb2loki.fetch_cycle"]
        assert cycle.parent is None
        for child in ("adsb2loki.fetch", "adsb2loki.push"):
            assert spans[child].parent.span_id == cycle.context.span_id
            assert spans[child].context.trace_id == cycle.context.trace_id
        assert cycle.attributes["adsb.entries_pushed"] == 1
        assert cycle.status.status_code == StatusCode.UNSET
        assert spans["adsb2loki.fetch"].attributes["http.response.status_code"] == 200
        assert spans["adsb2loki.fetch"].attributes["adsb.aircraft_count"] == 1
        assert spans["adsb2loki.push"].attributes["loki.entries_count"] == 1
        assert spans["adsb2loki.push"].attributes["http.response.status_code"] == 204

    @pytest.mark.asyncio
    async def test_failed_cycle_records_error(self, snapshot_payload, make_transport,
                                              exporter, tracer):
        source = make_transport(lambda request: httpx.Response(200, json=snapshot_payload))
        loki = make_transport(lambda request: httpx.Response(500))
        service = build_service(source, loki, tracer)

        assert await service.run_once() is False

        cycle = spans_by_name(exporter)["adsb2loki.fetch_cycle"]
        assert cycle.status.status_code == StatusCode.ERROR
        exception_events = [event for event in cycle.events if event.name == "exception"]
        assert len(exception_events) == 1
        assert exception_events[0].attributes["exception.type"] == "HTTPStatusError"

    @pytest.mark.asyncio
    async def test_fetch_failure_marks_fetch_span(self, make_transport, exporter, tracer):
        source = make_transport(lambda request: httpx.Response(503))
        loki = make_transport(lambda request: httpx.Response(204))
        service = build_service(source, loki, tracer)

        assert await service.run_once() is False

        spans = spans_by_name(exporter)
        assert "adsb2loki.push" not in spans
        assert spans["adsb2loki.fetch"].status.status_code == StatusCode.ERROR
        assert spans["adsb2loki.fetch_cycle"].status.status_code == StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_default_tracer_is_no_op(self, snapshot_payload, make_transport):
        source = make_transport(lambda request: httpx.Response(200, json=snapshot_payload))
        loki = make_transport(lambda request: httpx.Response(204))
        service = build_service(source, loki, None)

        assert isinstance(service.tracer, trace.NoOpTracer)
        assert await service.run_once() is True


class TestTracingConfig:

    @pytest.mark.parametrize("value,enabled", [
        ("true", True), ("1", True), ("TRUE", True), ("false", False), ("", False), ("yes", False),
    ])
    def test_is_tracing_enabled(self, otel_env, value, enabled):
        otel_env.setenv("OTEL_TRACING_ENABLED", value)
        assert tracing.is_tracing_enabled() is enabled

    def test_disabled_returns_none(self, otel_env):
        assert tracing.init_tracing() is None
        assert isinstance(tracing.get_tracer(None), trace.NoOpTracer)
        tracing.shutdown_tracing(None)

    def test_enabled_returns_provider(self, otel_env):
        otel_env.setenv("OTEL_TRACING_ENABLED", "true")

        provider = tracing.init_tracing()
        try:
            assert isinstance(provider, TracerProvider)
            assert provider.resource.attributes["service.name"] == "adsb2loki"
        finally:
            tracing.shutdown_tracing(provider)

    @pytest.mark.parametrize("env,expected", [
        ({}, "http://localhost:4318/v1/traces"),
        ({"OTEL_EXPORTER_OTLP_ENDPOINT": "collector:4318"}, "http://collector:4318/v1/traces"),
        ({"OTEL_EXPORTER_OTLP_ENDPOINT": "https://otlp.example.net/v1/traces/"},
         "https://otlp.example.net/v1/traces"),
        ({"OTEL_EXPORTER_OTLP_ENDPOINT": "http://general:4318",
          "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT": "http://traces:4318"},
         "http://traces:4318/v1/traces"),
    ])
    def test_otlp_endpoint(self, otel_env, env, expected):
        for name, value in env.items():
            otel_env.setenv(name, value)
        assert tracing.get_otlp_endpoint() == expected

    def test_parse_headers(self):
        assert tracing.parse_headers("Authorization=Basic abc==, x-scope = tenant ,broken,=empty") == {
            "Authorization": "Basic abc==",
            "x-scope": "tenant",
        }

    def test_trace_headers_override_general(self, otel_env):
        otel_env.setenv("OTEL_EXPORTER_OTLP_HEADERS", "a=1,b=2")
        otel_env.setenv("OTEL_EXPORTER_OTLP_TRACES_HEADERS", "b=3")
        assert tracing.get_otlp_headers() == {"a": "1", "b": "3"}

    def test_sampler_selection(self, otel_env):
        assert tracing.get_sampler() is ALWAYS_ON

        otel_env.setenv("OTEL_TRACES_SAMPLER", "always_off")
        assert tracing.get_sampler() is ALWAYS_OFF

        otel_env.setenv("OTEL_TRACES_SAMPLER", "traceidratio")
        otel_env.setenv("OTEL_TRACES_SAMPLER_ARG", "0.25")
        sampler = tracing.get_sampler()
        assert isinstance(sampler, TraceIdRatioBased)
        assert sampler.rate == 0.25

        otel_env.setenv("OTEL_TRACES_SAMPLER_ARG", "7")
        assert tracing.get_sampler().rate == 1.0

        otel_env.setenv("OTEL_TRACES_SAMPLER_ARG", "often")
        assert tracing.get_sampler().rate == tracing.DEFAULT_SAMPLE_RATIO
