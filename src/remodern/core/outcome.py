"""Tool outcomes — the two terminal shapes of a tool invocation.

A tool either succeeds with a payload (:class:`ToolSuccess`) or fails with
a machine-readable code (:class:`ToolFailure`). Both stamp the moment they
were constructed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(UTC)


class ToolSuccess(BaseModel):
    """A tool produced a result."""

    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    content: Any = None
    metadata: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())
    timestamp: datetime = Field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON-ready dict carried inside a ``tools/call`` result."""
        return {
            "success": True,
            "content": self.content,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp.isoformat(),
        }


class ToolFailure(BaseModel):
    """A tool rejected its input or failed while running."""

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    error_code: str
    error: str
    metadata: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())
    timestamp: datetime = Field(default_factory=_now)

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON-ready dict carried inside a ``tools/call`` result."""
        payload: dict[str, Any] = {
            "success": False,
            "error": self.error,
            "errorCode": self.error_code,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


ToolOutcome = ToolSuccess | ToolFailure


def success(content: Any = None, metadata: dict[str, Any] | None = None) -> ToolSuccess:
    """Build a :class:`ToolSuccess` stamped with the current time."""
    return ToolSuccess(content=content, metadata=dict(metadata or {}))


def failure(
    error_code: str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> ToolFailure:
    """Build a :class:`ToolFailure` stamped with the current time."""
    return ToolFailure(error_code=error_code, error=message, metadata=dict(metadata or {}))
