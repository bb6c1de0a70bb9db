"""JSON-RPC 2.0 messages and tool payloads.

Implements the line-delimited message format served for tool discovery
(``tools/list``) and execution (``tools/call``).
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from remodern.protocol.errors import InvalidRequestError, ParseError, ProtocolError

if TYPE_CHECKING:
    from remodern.core.outcome import ToolOutcome
    from remodern.core.tool import Tool

JSONRPC_VERSION = "2.0"

# Strict so that `true` is not coerced to 1 and echoed as another request's id.
RequestId = StrictInt | StrictFloat | StrictStr | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    An ``id`` that was never supplied marks a notification; an explicit
    ``"id": null`` does not.
    """

    jsonrpc: str = JSONRPC_VERSION
    method: str
    id: RequestId = None
    params: dict[str, Any] | list[Any] = Field(default_factory=lambda: dict[str, Any]())

    @field_validator("params", mode="before")
    @classmethod
    def _null_params(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("id")
    @classmethod
    def _finite_id(cls, value: RequestId) -> RequestId:
        if isinstance(value, float) and not math.isfinite(value):
            msg = "id must be a finite number"
            raise ValueError(msg)
        return value

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    @classmethod
    def from_exception(cls, exc: ProtocolError) -> JsonRpcError:
        return cls(code=exc.code, message=exc.message, data=exc.detail or None)

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            wire["data"] = self.data
        return wire


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    ``id`` is always serialised, ``null`` included, and exactly one of
    ``result`` and ``error`` is emitted.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: RequestId, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls,
        request_id: RequestId,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    @classmethod
    def from_exception(cls, request_id: RequestId, exc: ProtocolError) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError.from_exception(exc))

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.to_wire()
        else:
            wire["result"] = self.result if self.result is not None else {}
        return wire

    def encode(self) -> str:
        """Serialise to a single line of compact JSON (no trailing newline)."""
        return json.dumps(self.to_wire(), separators=(",", ":"), default=str, allow_nan=False)


def decode_request(line: str) -> JsonRpcRequest:
    """Parse one input line into a :class:`JsonRpcRequest`.

    Raises:
        ParseError: The line is not valid JSON.
        InvalidRequestError: The JSON value is not a request object.
    """
    try:
        raw: Any = json.loads(line)
    except ValueError as exc:
        raise ParseError(str(exc)) from exc

    if not isinstance(raw, dict):
        raise InvalidRequestError("Request must be a JSON object")

    request_id = raw.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, int | float | str):
        request_id = None
    elif isinstance(request_id, float) and not math.isfinite(request_id):
        request_id = None

    try:
        return JsonRpcRequest.model_validate(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "request"
        raise InvalidRequestError(f"{location}: {first['msg']}", request_id=request_id) from exc


# ---------------------------------------------------------------------------
# Tool payloads
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @classmethod
    def from_tool(cls, tool: Tool) -> ToolDescriptor:
        return cls(name=tool.name, description=tool.description, input_schema=tool.input_schema())


class TextContent(BaseModel):
    """A text content block inside a ``tools/call`` result."""

    type: Literal["text"] = "text"
    text: str


class CallToolResult(BaseModel):
    """The ``result`` object of a ``tools/call`` response.

    The tool's outcome travels JSON-encoded in a single text block; a tool
    failure is still a successful RPC call, flagged by ``isError``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def from_outcome(cls, outcome: ToolOutcome) -> CallToolResult:
        text = json.dumps(outcome.to_payload(), default=str)
        return cls(content=[TextContent(text=text)], is_error=not outcome.success)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
