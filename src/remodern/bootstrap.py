"""Server bootstrap — builds the registry the server and CLI share."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from remodern.core.registry import ToolRegistry
from remodern.tools import DEFAULT_TOOL_FACTORIES

if TYPE_CHECKING:
    from remodern.config import ServerSettings

logger = logging.getLogger(__name__)


def build_default_registry(settings: ServerSettings | None = None) -> ToolRegistry:
    """Return a fresh registry holding the built-in tools, minus ``settings.disabled_tools``."""
    disabled = set(settings.disabled_tools) if settings is not None else set()
    registry = ToolRegistry()
    for factory in DEFAULT_TOOL_FACTORIES:
        tool = factory()
        if tool.name in disabled:
            logger.info("Skipping disabled tool '%s'", tool.name)
            continue
        registry.register(tool)
    logger.info("Registered %d tools", registry.count())
    return registry
