"""Tracing helpers for tool execution and RPC dispatch.

Everything here goes through the OpenTelemetry API, which hands out no-op
tracers until a provider is installed, so spans cost nothing unless
:func:`configure_telemetry` has run.

Usage::

    from remodern.utils.telemetry import ATTR_TOOL_NAME, get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("remodern.tool.execute") as span:
        span.set_attribute(ATTR_TOOL_NAME, "ast-code-gen")

Exporting spans needs the ``otel`` extra (``pip install remodern[otel]``).
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from remodern.config import TelemetrySettings
    from remodern.core.outcome import ToolOutcome

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_TOOL_NAME = "remodern.tool.name"
ATTR_TOOL_CATEGORY = "remodern.tool.category"
ATTR_TOOL_SUCCESS = "remodern.tool.success"
ATTR_TOOL_ERROR_CODE = "remodern.tool.error_code"
ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_ID = "rpc.jsonrpc.request_id"

_INSTRUMENTATION_NAME = "remodern"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name*; a no-op tracer until a provider is configured."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_outcome(span: trace.Span, outcome: ToolOutcome) -> None:
    """Tag *span* with the success flag and, for failures, the error code."""
    span.set_attribute(ATTR_TOOL_SUCCESS, outcome.success)
    if not outcome.success:
        span.set_attribute(ATTR_TOOL_ERROR_CODE, outcome.error_code)


def configure_from_settings(settings: TelemetrySettings, *, service_name: str) -> bool:
    """Install a tracer provider when *settings* enable telemetry.

    Returns ``True`` if a provider was installed.

    Raises:
        ImportError: Telemetry is enabled but the ``otel`` extra is missing.
    """
    if not settings.enabled:
        return False
    configure_telemetry(
        service_name=service_name,
        export_to_console=settings.export_to_console,
        otlp_endpoint=settings.otlp_endpoint,
    )
    return True


def configure_telemetry(
    *,
    service_name: str = _INSTRUMENTATION_NAME,
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider with the requested exporters.

    Console spans go to stderr because stdout is the JSON-RPC stream.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for *otlp_endpoint*,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required to export spans. "
            "Install it with: pip install remodern[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]

    if export_to_console:
        _add_console_exporter(provider, SimpleSpanProcessor)
    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _add_console_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter(out=sys.stderr)))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install remodern[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
