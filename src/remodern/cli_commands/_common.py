"""Helpers shared by CLI subcommands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from remodern.cli_commands._output import err_console
from remodern.config import ServerSettings, SettingsError, load_settings

if TYPE_CHECKING:
    from remodern.core.registry import ToolRegistry


def settings_from_context(ctx: click.Context) -> ServerSettings:
    """Load settings from the group's ``--config`` path, exiting with 1 on error."""
    obj = ctx.find_root().obj or {}
    config_path = obj.get("config_path")
    try:
        return load_settings(Path(config_path) if config_path else None)
    except SettingsError as exc:
        err_console.print(f"[red]Settings error:[/red] {exc}")
        sys.exit(1)


def registry_from_context(ctx: click.Context) -> ToolRegistry:
    from remodern.bootstrap import build_default_registry

    return build_default_registry(settings_from_context(ctx))
