"""Protocol-layer errors, each carrying its JSON-RPC error code."""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Base error for failures reported through the JSON-RPC error envelope.

    ``message`` is the fixed JSON-RPC message for the code; ``detail``
    travels in the envelope's ``data`` field.
    """

    code: int = INTERNAL_ERROR
    message: str = "Internal error"

    def __init__(self, detail: str = "", *, request_id: Any = None) -> None:
        self.detail = detail
        self.request_id = request_id
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class ParseError(ProtocolError):
    """The input line is not valid JSON."""

    code = PARSE_ERROR
    message = "Parse error"


class InvalidRequestError(ProtocolError):
    """The JSON value is not a valid request object."""

    code = INVALID_REQUEST
    message = "Invalid Request"


class MethodNotFoundError(ProtocolError):
    """The method is not in the server's dispatch table."""

    code = METHOD_NOT_FOUND
    message = "Method not found"

    def __init__(self, method: str, *, request_id: Any = None) -> None:
        self.method = method
        super().__init__(f"Unknown method: {method}", request_id=request_id)


class InvalidParamsError(ProtocolError):
    """The method's params are missing, ill-typed, or name an unknown tool."""

    code = INVALID_PARAMS
    message = "Invalid params"
