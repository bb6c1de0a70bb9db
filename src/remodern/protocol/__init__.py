"""JSON-RPC protocol layer — wire models and the line-oriented server loop."""

from remodern.protocol.errors import (
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from remodern.protocol.models import (
    CallToolResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDescriptor,
    decode_request,
)
from remodern.protocol.server import ProtocolServer, ServerState

__all__ = [
    "CallToolResult",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MethodNotFoundError",
    "ParseError",
    "ProtocolError",
    "ProtocolServer",
    "ServerState",
    "ToolDescriptor",
    "decode_request",
]
