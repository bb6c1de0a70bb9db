"""Core contract layer — tool protocol, outcomes, errors, and the registry."""

from remodern.core.errors import DuplicateToolError, RegistryError, ToolError
from remodern.core.outcome import ToolFailure, ToolOutcome, ToolSuccess, failure, success
from remodern.core.registry import ToolRegistry
from remodern.core.tool import BaseTool, Tool, invoke_tool

__all__ = [
    "BaseTool",
    "DuplicateToolError",
    "RegistryError",
    "Tool",
    "ToolError",
    "ToolFailure",
    "ToolOutcome",
    "ToolRegistry",
    "ToolSuccess",
    "failure",
    "invoke_tool",
    "success",
]
