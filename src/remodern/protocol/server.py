"""ProtocolServer — line-delimited JSON-RPC over a pair of text streams.

One line of input is one request. Each request is decoded, dispatched,
executed and answered before the next line is read, so responses leave
in request order. A bad line or a failing tool produces an error
envelope; only an exhausted or unreadable input stream ends the session.
"""

from __future__ import annotations

import io
import logging
import sys
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Any, TextIO

from remodern.config import ServerSettings
from remodern.core.tool import invoke_tool
from remodern.protocol.errors import (
    INTERNAL_ERROR,
    InvalidParamsError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from remodern.protocol.models import (
    CallToolResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDescriptor,
    decode_request,
)
from remodern.utils.telemetry import (
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_NAME,
    get_tracer,
    record_outcome,
)

if TYPE_CHECKING:
    from remodern.core.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

Handler = Callable[[JsonRpcRequest], dict[str, Any]]

NOTIFICATION_METHODS = frozenset(
    {"notifications/initialized", "initialized", "notifications/cancelled"}
)


class ServerState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class ProtocolServer:
    """Serves a :class:`ToolRegistry` over line-delimited JSON-RPC.

    Usage::

        registry = build_default_registry()
        server = ProtocolServer(registry)   # stdin / stdout
        server.start()                      # returns at EOF or after stop()
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        settings: ServerSettings | None = None,
        reader: TextIO | None = None,
        writer: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._settings = settings or ServerSettings()
        self._reader = _lenient(reader if reader is not None else sys.stdin)
        self._writer = writer if writer is not None else sys.stdout
        self._state = ServerState.IDLE
        self._stop_requested = False
        self._client_initialized = False
        self._handlers: dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def client_initialized(self) -> bool:
        """Whether the client has sent ``notifications/initialized``."""
        return self._client_initialized

    # -- lifecycle ------------------------------------------------------

    def start(self) -> None:
        """Run the read loop until EOF, an unreadable stream, or :meth:`stop`.

        Raises:
            RuntimeError: If the server is not idle.
        """
        if self._state is not ServerState.IDLE:
            msg = f"Server cannot start from state '{self._state}'"
            raise RuntimeError(msg)

        self._state = ServerState.RUNNING
        logger.info(
            "Starting %s server with %d tools", self._settings.server_name, self._registry.count()
        )
        try:
            while not self._stop_requested:
                if not self.serve_once():
                    break
        finally:
            self._state = ServerState.STOPPED
            logger.info("Server stopped")

    def stop(self) -> None:
        """Ask the loop to stop before it reads the next line."""
        self._stop_requested = True
        logger.info("Stop requested")

    def serve_once(self) -> bool:
        """Read one line, handle it, and write any response.

        Returns ``False`` when the input is exhausted or the streams fail.
        """
        response: JsonRpcResponse | None
        try:
            line = self._reader.readline()
        except UnicodeDecodeError as exc:
            logger.warning("Undecodable input line: %s", exc)
            response = JsonRpcResponse.from_exception(None, ParseError(str(exc)))
        except (OSError, ValueError) as exc:
            logger.error("Input stream unreadable: %s", exc)
            return False
        else:
            if not line:
                logger.info("End of input")
                return False
            response = self.handle_line(line)

        if response is None:
            return True
        try:
            payload = response.encode()
        except ValueError as exc:
            logger.exception("Unencodable response for request %r", response.id)
            payload = JsonRpcResponse.failure(response.id, INTERNAL_ERROR, "Internal error", str(exc)).encode()
        try:
            self._writer.write(payload + "\n")
            self._writer.flush()
        except (OSError, ValueError) as exc:
            logger.error("Output stream unwritable: %s", exc)
            return False
        return True

    # -- request handling -----------------------------------------------

    def handle_line(self, line: str) -> JsonRpcResponse | None:
        """Turn one input line into a response, or ``None`` when none is due.

        Never raises: every fault becomes an error envelope.
        """
        if not line.strip():
            return None

        request: JsonRpcRequest | None = None
        try:
            request = decode_request(line)
            return self.dispatch(request)
        except ProtocolError as exc:
            if request is not None and request.is_notification:
                logger.warning("Dropping failed notification '%s': %s", request.method, exc)
                return None
            request_id = request.id if request is not None else exc.request_id
            logger.warning("Protocol error for request %r: %s", request_id, exc)
            return JsonRpcResponse.from_exception(request_id, exc)
        except Exception as exc:
            logger.exception("Error processing request: %s", line.strip())
            if request is not None and request.is_notification:
                return None
            request_id = request.id if request is not None else None
            return JsonRpcResponse.failure(request_id, INTERNAL_ERROR, "Internal error", str(exc))

    def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Route *request* through the dispatch table.

        Raises:
            MethodNotFoundError: For methods outside the table.
            InvalidParamsError: For malformed method params.
        """
        logger.debug("Handling request: method=%s, id=%r", request.method, request.id)

        if request.method in NOTIFICATION_METHODS:
            self._handle_notification(request)
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            if request.is_notification:
                logger.warning("Ignoring unknown notification '%s'", request.method)
                return None
            raise MethodNotFoundError(request.method, request_id=request.id)

        with _tracer.start_as_current_span("remodern.rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request.id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request.id))
            result = handler(request)

        if request.is_notification:
            return None
        return JsonRpcResponse.success(request.id, result)

    # -- handlers -------------------------------------------------------

    def _handle_notification(self, request: JsonRpcRequest) -> None:
        if request.method in ("notifications/initialized", "initialized"):
            self._client_initialized = True
            logger.info("Client initialized")
        else:
            logger.debug("Notification '%s' acknowledged", request.method)

    def _handle_initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.params if isinstance(request.params, dict) else {}
        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            logger.info(
                "Initialize from client %s %s",
                client_info.get("name", "?"),
                client_info.get("version", "?"),
            )
        return {
            "protocolVersion": self._settings.protocol_version,
            "serverInfo": {
                "name": self._settings.server_name,
                "version": self._settings.server_version,
            },
            "capabilities": {"tools": {"listChanged": False}},
        }

    def _handle_ping(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    def _handle_tools_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        tools = [
            ToolDescriptor.from_tool(tool).model_dump(by_alias=True)
            for tool in self._registry.get_all()
        ]
        logger.debug("Listed %d tools", len(tools))
        return {"tools": tools}

    def _handle_tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        if not isinstance(request.params, dict):
            raise InvalidParamsError("Params must be an object", request_id=request.id)

        name = request.params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("Missing required parameter: name", request_id=request.id)

        arguments = request.params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("Parameter 'arguments' must be an object", request_id=request.id)

        tool = self._registry.get(name)
        if tool is None:
            raise InvalidParamsError(f"Tool not found: {name}", request_id=request.id)

        with _tracer.start_as_current_span("remodern.rpc.tools_call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            outcome = invoke_tool(tool, arguments)
            record_outcome(span, outcome)

        logger.debug("Executed tool: %s with result: %s", name, outcome.success)
        return CallToolResult.from_outcome(outcome).to_wire()


def _lenient(reader: TextIO) -> TextIO:
    """Decode undecodable bytes as U+FFFD so one bad line cannot end the session."""
    if isinstance(reader, io.TextIOWrapper) and not reader.closed and reader.errors == "strict":
        reader.reconfigure(errors="replace")
    return reader
