"""``remodern serve`` — run the JSON-RPC server on stdin/stdout."""

from __future__ import annotations

import sys

import click

from remodern.cli_commands._common import settings_from_context
from remodern.cli_commands._output import err_console


@click.command()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the configured log level (logs go to stderr).",
)
@click.option("--telemetry", is_flag=True, help="Enable tracing spans exported to stderr.")
@click.pass_context
def serve(ctx: click.Context, log_level: str | None, telemetry: bool) -> None:
    """Serve the built-in tools over line-delimited JSON-RPC on stdin/stdout."""
    from remodern.bootstrap import build_default_registry
    from remodern.logs import configure_logging
    from remodern.protocol.server import ProtocolServer
    from remodern.utils.telemetry import configure_from_settings

    settings = settings_from_context(ctx)
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level.upper()})
    if telemetry:
        settings.telemetry.enabled = True
        settings.telemetry.export_to_console = True

    configure_logging(settings.log_level)

    try:
        configure_from_settings(settings.telemetry, service_name=settings.server_name)
    except ImportError as exc:
        err_console.print(f"[red]Telemetry error:[/red] {exc}")
        sys.exit(1)

    registry = build_default_registry(settings)
    server = ProtocolServer(registry, settings=settings)
    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
