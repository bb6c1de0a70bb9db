"""Tool contract — the capability set every tool implements.

Every tool is invoked through one path, :meth:`Tool.execute`, which maps a
parameter dict to a :class:`~remodern.core.outcome.ToolOutcome`.
:class:`BaseTool` supplies the uniform envelope around each tool's own
logic: logging, tracing, parameter helpers, and conversion of unexpected
faults into ``EXECUTION_ERROR`` failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Protocol, TypeVar, cast, runtime_checkable

from remodern.core.errors import (
    EMPTY_PARAMETER,
    EXECUTION_ERROR,
    INVALID_PARAMETER_TYPE,
    MISSING_PARAMETER,
    ToolError,
)
from remodern.core.outcome import ToolOutcome, failure
from remodern.utils.telemetry import (
    ATTR_TOOL_CATEGORY,
    ATTR_TOOL_ERROR_CODE,
    ATTR_TOOL_NAME,
    get_tracer,
    record_outcome,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

T = TypeVar("T")

_MISSING: Any = object()

_JSON_TYPE_NAMES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


@runtime_checkable
class Tool(Protocol):
    """A named, schema-described unit of functionality."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def category(self) -> str: ...

    def input_schema(self) -> dict[str, Any]: ...

    def supports_operation(self, operation: str) -> bool: ...

    def execute(self, parameters: dict[str, Any]) -> ToolOutcome: ...


# ---------------------------------------------------------------------------
# Parameter primitives
# ---------------------------------------------------------------------------


def type_name(expected_type: type) -> str:
    """Return the JSON-Schema name for *expected_type* (falls back to the class name)."""
    return _JSON_TYPE_NAMES.get(expected_type, expected_type.__name__)


def _coerce(value: Any, expected_type: type[T]) -> tuple[bool, T]:
    # bool is an int subclass but never a valid integer or number argument.
    if expected_type is bool:
        return isinstance(value, bool), cast("T", value)
    if isinstance(value, bool):
        return False, cast("T", value)
    if expected_type is float and isinstance(value, int):
        return True, cast("T", float(value))
    return isinstance(value, expected_type), cast("T", value)


def require_param(
    parameters: dict[str, Any],
    key: str,
    expected_type: type[T],
    *,
    tool_name: str | None = None,
) -> T:
    """Return ``parameters[key]``, checked against *expected_type*.

    Raises:
        ToolError: ``MISSING_PARAMETER`` if the key is absent or ``None``,
            ``INVALID_PARAMETER_TYPE`` if the value has the wrong type.
    """
    value = parameters.get(key)
    if value is None:
        raise ToolError(
            MISSING_PARAMETER,
            f"Required parameter '{key}' is missing",
            tool_name=tool_name,
        )
    ok, coerced = _coerce(value, expected_type)
    if not ok:
        raise ToolError(
            INVALID_PARAMETER_TYPE,
            f"Parameter '{key}' must be of type {type_name(expected_type)}",
            tool_name=tool_name,
        )
    return coerced


def optional_param(
    parameters: dict[str, Any],
    key: str,
    default: T,
    expected_type: type[T],
    *,
    tool_name: str | None = None,
) -> T:
    """Like :func:`require_param`, but absence yields *default*."""
    if parameters.get(key) is None:
        return default
    return require_param(parameters, key, expected_type, tool_name=tool_name)


def require_non_empty(value: str | None, param_name: str, *, tool_name: str | None = None) -> str:
    """Reject ``None`` and whitespace-only strings with ``EMPTY_PARAMETER``."""
    if value is None or not value.strip():
        raise ToolError(
            EMPTY_PARAMETER,
            f"Parameter '{param_name}' cannot be empty",
            tool_name=tool_name,
        )
    return value


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------


def base_schema() -> dict[str, Any]:
    """Return an empty JSON-Schema object with ``properties`` and ``required``."""
    return {"type": "object", "properties": {}, "required": []}


def add_property(
    schema: dict[str, Any],
    name: str,
    json_type: str,
    description: str,
    *,
    required: bool = False,
    default: Any = _MISSING,
    enum: list[Any] | None = None,
    items: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Add a property to *schema* in place and return the schema."""
    prop: dict[str, Any] = {"type": json_type, "description": description}
    if default is not _MISSING:
        prop["default"] = default
    if enum is not None:
        prop["enum"] = list(enum)
    if items is not None:
        prop["items"] = items
    schema["properties"][name] = prop
    if required:
        schema["required"].append(name)
    return schema


# ---------------------------------------------------------------------------
# BaseTool
# ---------------------------------------------------------------------------


class BaseTool(ABC):
    """Base class for tools, providing the uniform invocation envelope.

    Subclasses declare ``operations`` and implement :meth:`input_schema`
    and :meth:`do_execute`. They raise :class:`ToolError` for input they
    reject; anything else that escapes ``do_execute`` is reported as an
    ``EXECUTION_ERROR`` failure.
    """

    operations: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, name: str, description: str, category: str = "general") -> None:
        self._name = name
        self._description = description
        self._category = category

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def category(self) -> str:
        return self._category

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, category={self._category!r})"

    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """Return the JSON-Schema object describing accepted parameters."""

    def supports_operation(self, operation: str) -> bool:
        return operation.lower() in self.operations

    def validate_parameters(self, parameters: dict[str, Any]) -> None:  # noqa: B027
        """Hook for whole-request validation before :meth:`do_execute`."""

    @abstractmethod
    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        """Tool-specific logic."""

    def execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        """Validate and run the tool.

        A deliberate :class:`ToolError` propagates with ``tool_name`` set.
        Any other exception becomes an ``EXECUTION_ERROR`` failure.
        """
        logger.info("Executing tool '%s' with parameters: %s", self._name, sorted(parameters))
        with _tracer.start_as_current_span("remodern.tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, self._name)
            span.set_attribute(ATTR_TOOL_CATEGORY, self._category)
            try:
                self.validate_parameters(parameters)
                outcome = self.do_execute(parameters)
            except ToolError as exc:
                if exc.tool_name is None:
                    exc.tool_name = self._name
                span.set_attribute(ATTR_TOOL_ERROR_CODE, exc.error_code)
                logger.warning("Tool '%s' execution failed: %s", self._name, exc)
                raise
            except Exception as exc:
                logger.exception("Unexpected error in tool '%s'", self._name)
                outcome = failure(
                    EXECUTION_ERROR,
                    f"Unexpected error during execution: {exc}",
                    {"tool": self._name, "cause": type(exc).__name__},
                )
            record_outcome(span, outcome)

        if outcome.success:
            logger.info("Tool '%s' executed successfully", self._name)
        return outcome

    # Parameter helpers bound to this tool's name.

    def require_param(self, parameters: dict[str, Any], key: str, expected_type: type[T]) -> T:
        return require_param(parameters, key, expected_type, tool_name=self._name)

    def optional_param(
        self,
        parameters: dict[str, Any],
        key: str,
        default: T,
        expected_type: type[T],
    ) -> T:
        return optional_param(parameters, key, default, expected_type, tool_name=self._name)

    def require_non_empty(self, value: str | None, param_name: str) -> str:
        return require_non_empty(value, param_name, tool_name=self._name)

    def error(self, error_code: str, message: str) -> ToolError:
        """Build a :class:`ToolError` attributed to this tool."""
        return ToolError(error_code, message, tool_name=self._name)


def invoke_tool(tool: Tool, parameters: dict[str, Any]) -> ToolOutcome:
    """Invoke *tool* as a total function from parameters to outcome.

    Folds a raised :class:`ToolError` into a failure outcome, and guards
    tools that satisfy :class:`Tool` without inheriting :class:`BaseTool`.
    """
    try:
        return tool.execute(parameters)
    except ToolError as exc:
        if exc.tool_name is None:
            exc.tool_name = tool.name
        return exc.to_outcome()
    except Exception as exc:
        logger.exception("Unexpected error in tool '%s'", tool.name)
        return failure(
            EXECUTION_ERROR,
            f"Unexpected error during execution: {exc}",
            {"tool": tool.name, "cause": type(exc).__name__},
        )
