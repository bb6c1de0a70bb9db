"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

    from remodern.core.outcome import ToolOutcome
    from remodern.core.tool import Tool

console = Console()
err_console = Console(stderr=True)

# Operations shown by ``remodern tools info``.
COMMON_OPERATIONS = [
    "code-generation",
    "template-generation",
    "source-analysis",
    "ast-analysis",
    "bytecode-analysis",
    "disassemble",
    "refactor",
    "migrate",
]


def print_tools_table(tools: Iterable[Tool], *, verbose: bool = False) -> None:
    """Pretty-print tools as a table."""
    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Category", no_wrap=True)
    table.add_column("Description")

    for tool in tools:
        description = tool.description if verbose else _truncate(tool.description)
        table.add_row(tool.name, tool.category, description)

    console.print(table)


def print_tools_json(tools: Iterable[Tool]) -> None:
    data = [
        {
            "name": tool.name,
            "category": tool.category,
            "description": tool.description,
            "inputSchema": tool.input_schema(),
        }
        for tool in tools
    ]
    console.print_json(json.dumps(data))


def print_tool_info(tool: Tool) -> None:
    """Print a tool's identity, schema, and supported operations."""
    console.print("\n[bold]Tool Information[/bold]")
    console.print(f"  Name: {tool.name}")
    console.print(f"  Category: {tool.category}")
    console.print(f"  Description: {tool.description}")

    console.print("\n[bold]Input Schema:[/bold]")
    console.print_json(json.dumps(tool.input_schema()))

    supported = [op for op in COMMON_OPERATIONS if tool.supports_operation(op)]
    console.print("\n[bold]Supported Operations:[/bold]")
    for op in supported or ["(none of the common operations)"]:
        console.print(f"  • {op}")

    console.print("\n[bold]Example Usage:[/bold]")
    console.print(f"  remodern tools run {tool.name} -p param1=value1 -p param2=value2", markup=False)


def print_outcome(outcome: ToolOutcome, *, output_format: str = "json") -> None:
    """Print a tool outcome as JSON or as labelled text."""
    payload = outcome.to_payload()
    if output_format == "json":
        console.print_json(json.dumps(payload, default=str))
        return

    console.print("\n[bold]Tool Execution Result[/bold]")
    console.print(f"  Success: {outcome.success}")
    console.print(f"  Timestamp: {payload['timestamp']}")
    if outcome.success:
        console.print(f"  Content: {_truncate(str(payload['content']), 200)}", markup=False)
    else:
        console.print(f"  Error: {payload['error']} ({payload['errorCode']})", markup=False)

    metadata: dict[str, Any] = payload.get("metadata") or {}
    if metadata:
        console.print("\n[bold]Metadata:[/bold]")
        for key, val in metadata.items():
            console.print(f"  {key}: {_truncate(str(val))}", markup=False)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
