"""Shared error types for the tool contract and registry."""

from __future__ import annotations

from remodern.core.outcome import ToolFailure, failure

# Error codes raised by the contract layer itself. Tools may define their own.
MISSING_PARAMETER = "MISSING_PARAMETER"
INVALID_PARAMETER_TYPE = "INVALID_PARAMETER_TYPE"
EMPTY_PARAMETER = "EMPTY_PARAMETER"
EXECUTION_ERROR = "EXECUTION_ERROR"


class RegistryError(Exception):
    """Base error for tool registry failures."""


class DuplicateToolError(RegistryError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool with name '{name}' is already registered")


class ToolError(Exception):
    """A tool rejected its parameters or failed deliberately.

    ``tool_name`` is ``None`` until the contract layer injects the name of
    the tool that raised it.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        *,
        tool_name: str | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.tool_name = tool_name
        super().__init__(message)

    def __str__(self) -> str:
        text = "ToolError"
        if self.tool_name is not None:
            text += f" [tool={self.tool_name}]"
        if self.error_code:
            text += f" [code={self.error_code}]"
        return f"{text}: {self.message}"

    def to_outcome(self) -> ToolFailure:
        """Convert this error into a :class:`~remodern.core.outcome.ToolFailure`."""
        metadata: dict[str, object] = {}
        if self.tool_name is not None:
            metadata["tool"] = self.tool_name
        if self.__cause__ is not None:
            metadata["cause"] = type(self.__cause__).__name__
        return failure(self.error_code, self.message, metadata)
