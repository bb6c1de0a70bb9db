"""``remodern tools`` — list, inspect, and run tools locally."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from remodern.cli_commands._common import registry_from_context
from remodern.cli_commands._output import (
    console,
    err_console,
    print_outcome,
    print_tool_info,
    print_tools_json,
    print_tools_table,
)


@click.group()
def tools() -> None:
    """List, inspect, and run tools."""


@tools.command("list")
@click.option("--category", "-c", default=None, help="Filter by category.")
@click.option("--verbose", "-v", is_flag=True, help="Show full descriptions.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON, schemas included.")
@click.pass_context
def list_tools(ctx: click.Context, category: str | None, verbose: bool, as_json: bool) -> None:
    """List the available tools."""
    registry = registry_from_context(ctx)
    found = registry.get_by_category(category) if category else list(registry.get_all())

    if as_json:
        print_tools_json(found)
        return

    if not found:
        suffix = f" in category: {category}" if category else ""
        console.print(f"[yellow]No tools found{suffix}[/yellow]")
        return

    print_tools_table(found, verbose=verbose)


@tools.command("info")
@click.argument("name")
@click.pass_context
def info(ctx: click.Context, name: str) -> None:
    """Show schema and supported operations for tool NAME."""
    tool = registry_from_context(ctx).get(name)
    if tool is None:
        err_console.print(f"[red]Tool not found:[/red] {name}")
        err_console.print("Use 'remodern tools list' to see available tools")
        sys.exit(1)
    print_tool_info(tool)


def parse_param(raw: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is JSON-decoded when possible."""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        msg = f"Expected key=value, got {raw!r}"
        raise click.BadParameter(msg, param_hint="--param")
    try:
        return key, json.loads(value)
    except ValueError:
        return key, value


@tools.command("run")
@click.argument("name")
@click.option("--param", "-p", "params", multiple=True, help="Tool parameter as key=value.")
@click.option(
    "--file",
    "-f",
    "param_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file containing parameters.",
)
@click.option(
    "--output",
    "-o",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format.",
)
@click.option("--dry-run", is_flag=True, help="Show what would be executed without running.")
@click.pass_context
def run_tool(
    ctx: click.Context,
    name: str,
    params: tuple[str, ...],
    param_file: str | None,
    output_format: str,
    dry_run: bool,
) -> None:
    """Run tool NAME with the given parameters."""
    from remodern.core.tool import invoke_tool

    tool = registry_from_context(ctx).get(name)
    if tool is None:
        err_console.print(f"[red]Tool not found:[/red] {name}")
        err_console.print("Use 'remodern tools list' to see available tools")
        sys.exit(1)

    arguments: dict[str, Any] = {}
    if param_file:
        try:
            loaded: Any = json.loads(Path(param_file).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            err_console.print(f"[red]Cannot read parameter file:[/red] {exc}")
            sys.exit(1)
        if not isinstance(loaded, dict):
            err_console.print("[red]Parameter file must contain a JSON object[/red]")
            sys.exit(1)
        arguments.update(loaded)
    arguments.update(parse_param(raw) for raw in params)

    if dry_run:
        console.print(f"Would execute tool: {name}")
        console.print_json(json.dumps(arguments, default=str))
        return

    outcome = invoke_tool(tool, arguments)
    print_outcome(outcome, output_format=output_format)
    if not outcome.success:
        sys.exit(1)
