"""
OpenTelemetry tracing configuration.

Provides:
- Auto-instrumentation for FastAPI and Redis/Kvrocks
- OTLP export when an endpoint is configured, console export for debugging
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from src.platform.config.core_setting import settings


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name="ticket-exchange")
        tracing.setup()

        # Manual spans in use cases
        tracer = trace.get_tracer(__name__)
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT
        self.enable_console = enable_console or settings.OTEL_CONSOLE_EXPORT

        self._provider: TracerProvider | None = None

    def setup(self) -> None:
        """Install the global tracer provider; call once at application startup."""
        resource = Resource(attributes={SERVICE_NAME: self.service_name})
        # Sampling is left to the collector (tail-based), so keep every span here
        self._provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )

        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_redis(self) -> None:
        RedisInstrumentor().instrument()

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()
