"""ReModern — a JSON-RPC tool-dispatch server for code generation and analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from remodern.bootstrap import build_default_registry as build_default_registry
    from remodern.core.registry import ToolRegistry as ToolRegistry
    from remodern.protocol.server import ProtocolServer as ProtocolServer

_LAZY_EXPORTS = {
    "ToolRegistry": "remodern.core.registry",
    "ProtocolServer": "remodern.protocol.server",
    "build_default_registry": "remodern.bootstrap",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'remodern' has no attribute {name!r}")
