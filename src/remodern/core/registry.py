"""ToolRegistry — in-memory catalog of tools keyed by name.

Keeps a secondary index by category. Both indices are mutated under one
lock so they can never diverge, even when an embedding application
registers tools while the protocol server is dispatching.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from remodern.core.errors import DuplicateToolError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from remodern.core.tool import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Stores tools by name and indexes them by category.

    Usage::

        registry = ToolRegistry()
        registry.register(AstCodeGenTool())

        registry.get("ast-code-gen")            # -> tool or None
        registry.get_by_category("parsing")     # -> list, possibly empty
        registry.get_supporting_operation("parse")
    """

    def __init__(self, tools: Iterable[Tool] | None = None) -> None:
        self._lock = threading.RLock()
        self._tools: dict[str, Tool] = {}
        self._by_category: dict[str, set[str]] = {}
        if tools is not None:
            self.register_all(tools)

    # -- mutation -------------------------------------------------------

    def register(self, tool: Tool) -> None:
        """Add *tool* to the catalog.

        Raises:
            DuplicateToolError: If a tool with the same name is registered.
        """
        name = tool.name
        category = tool.category
        with self._lock:
            if name in self._tools:
                raise DuplicateToolError(name)
            self._tools[name] = tool
            self._by_category.setdefault(category, set()).add(name)
        logger.info("Registered tool '%s' in category '%s'", name, category)

    def register_all(self, tools: Iterable[Tool]) -> None:
        """Register each of *tools* in order, stopping at the first duplicate."""
        for tool in tools:
            self.register(tool)

    def unregister(self, name: str) -> bool:
        """Remove the tool called *name*. Returns ``False`` if it was absent."""
        with self._lock:
            removed = self._tools.pop(name, None)
            if removed is None:
                return False
            category = removed.category
            names = self._by_category.get(category)
            if names is not None:
                names.discard(name)
                if not names:
                    del self._by_category[category]
        logger.info("Unregistered tool '%s'", name)
        return True

    def clear(self) -> None:
        """Remove every tool and category."""
        with self._lock:
            self._tools.clear()
            self._by_category.clear()
        logger.info("Cleared all registered tools")

    # -- queries --------------------------------------------------------

    def get(self, name: str) -> Tool | None:
        with self._lock:
            return self._tools.get(name)

    def get_all(self) -> tuple[Tool, ...]:
        with self._lock:
            return tuple(self._tools.values())

    def get_names(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._tools)

    def get_by_category(self, category: str) -> list[Tool]:
        """Return tools in *category* sorted by name; empty for unknown categories."""
        with self._lock:
            names = self._by_category.get(category, set())
            return [self._tools[name] for name in sorted(names) if name in self._tools]

    def get_categories(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._by_category)

    def get_supporting_operation(self, operation: str) -> list[Tool]:
        """Return tools whose ``supports_operation(operation)`` is true, in registration order."""
        return [tool for tool in self.get_all() if tool.supports_operation(operation)]

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def count(self) -> int:
        with self._lock:
            return len(self._tools)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_registered(name)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.get_all())
