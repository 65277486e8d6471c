"""
Opt-in OpenTelemetry tracing.

Tracing is off unless OTEL_TRACING_ENABLED is "true" or "1". When enabled,
spans are exported over OTLP/HTTP to OTEL_EXPORTER_OTLP_TRACES_ENDPOINT (or
OTEL_EXPORTER_OTLP_ENDPOINT, default http://localhost:4318). The provider is
returned to the caller instead of being installed globally; components take
a tracer at construction.
"""

import os
import socket
import logging
from typing import Dict, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_INSTANCE_ID, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON, Sampler, TraceIdRatioBased
from opentelemetry.trace import Status, StatusCode

logger = logging.getLogger(__name__)

TRACER_NAME = "adsb2loki"
DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"
TRACES_PATH = "/v1/traces"
DEFAULT_SAMPLE_RATIO = 0.1


def is_tracing_enabled() -> bool:
    return os.getenv("OTEL_TRACING_ENABLED", "").strip().lower() in ("true", "1")


def get_otlp_endpoint() -> str:
    """Full OTLP/HTTP traces URL"""
    endpoint = (os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
                or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
                or DEFAULT_OTLP_ENDPOINT)
    endpoint = endpoint.rstrip("/")
    if endpoint.endswith(TRACES_PATH):
        endpoint = endpoint[:-len(TRACES_PATH)]
    if not endpoint.startswith(("http://", "https://")):
        endpoint = "http://" + endpoint
    return endpoint + TRACES_PATH


def parse_headers(header_str: str) -> Dict[str, str]:
    """Parse "key1=value1,key2=value2" into a dict"""
    headers = {}
    for pair in header_str.split(","):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        if key.strip():
            headers[key.strip()] = value.strip()
    return headers


def get_otlp_headers() -> Dict[str, str]:
    headers = parse_headers(os.getenv("OTEL_EXPORTER_OTLP_HEADERS", ""))
    # Trace-specific headers win
    headers.update(parse_headers(os.getenv("OTEL_EXPORTER_OTLP_TRACES_HEADERS", "")))
    return headers


def get_sampler() -> Sampler:
    sampler_type = os.getenv("OTEL_TRACES_SAMPLER", "always_on").strip().lower()
    if sampler_type == "always_off":
        return ALWAYS_OFF
    if sampler_type == "traceidratio":
        try:
            ratio = float(os.getenv("OTEL_TRACES_SAMPLER_ARG", DEFAULT_SAMPLE_RATIO))
        except ValueError:
            logger.warning("Invalid OTEL_TRACES_SAMPLER_ARG, using default ratio")
            ratio = DEFAULT_SAMPLE_RATIO
        return TraceIdRatioBased(min(max(ratio, 0.0), 1.0))
    return ALWAYS_ON


def get_service_instance_id() -> str:
    return os.getenv("OTEL_SERVICE_INSTANCE_ID") or socket.gethostname() or f"pid-{os.getpid()}"


def init_tracing() -> Optional[TracerProvider]:
    """Create a tracer provider with an OTLP exporter, or None when disabled"""
    if not is_tracing_enabled():
        logger.info("OpenTelemetry tracing is disabled")
        return None

    endpoint = get_otlp_endpoint()
    headers = get_otlp_headers()

    resource = Resource.create({
        SERVICE_NAME: TRACER_NAME,
        SERVICE_INSTANCE_ID: get_service_instance_id(),
    })
    provider = TracerProvider(resource=resource, sampler=get_sampler())
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, headers=headers)))

    logger.info(f"OpenTelemetry tracing initialized (endpoint {endpoint}, "
                f"sampler {os.getenv('OTEL_TRACES_SAMPLER', 'always_on')}, {len(headers)} headers)")
    return provider


def get_tracer(provider: Optional[TracerProvider] = None) -> trace.Tracer:
    """Tracer from the provider, or a no-op tracer when tracing is off"""
    if provider is None:
        return trace.NoOpTracer()
    return provider.get_tracer(TRACER_NAME)


def set_span_error(span: trace.Span, error: BaseException):
    """Mark a span as failed with the given error"""
    if span.is_recording():
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))


def shutdown_tracing(provider: Optional[TracerProvider]):
    """Flush pending spans and stop the exporter"""
    if provider is None:
        return
    provider.shutdown()
    logger.debug("OpenTelemetry tracing shutdown successfully")
