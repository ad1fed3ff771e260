from hubproxy.vars import SERVICE_NAME, OTLP_ENDPOINT, OTLP_HEADERS, METRICS_PATH
from fastapi import FastAPI
from .routes import router
from opentelemetry import trace
from typing import Sequence

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider, ReadableSpan
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from prometheus_fastapi_instrumentator import Instrumentator
from prometheus_client import Info

app = FastAPI(title=SERVICE_NAME, docs_url=None, redoc_url=None, openapi_url=None)
instrumentator = Instrumentator()

instrumentator.instrument(app)
# The proxy owns every path unless a metrics path is asked for
if METRICS_PATH:
    instrumentator.expose(app, endpoint=METRICS_PATH)


def _parse_otlp_headers(raw: str) -> dict:
    headers = {}
    for entry in raw.split(","):
        if "=" in entry:
            key, val = entry.split("=", 1)
            headers[key.strip()] = val.strip()
    return headers


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that filters out noisy ASGI body spans from streaming responses.
    A single layer blob download would otherwise produce thousands of tiny spans.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


trace.set_tracer_provider(
    TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
)
tracer_provider = trace.get_tracer_provider()
if OTLP_ENDPOINT:
    otlp_exporter = OTLPSpanExporter(
        endpoint=OTLP_ENDPOINT,
        headers=_parse_otlp_headers(OTLP_HEADERS) or None,
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
    )

FastAPIInstrumentor.instrument_app(app)

# Add app_name to the metrics
app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})

app.include_router(router)
