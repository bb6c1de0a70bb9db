"""ReModern CLI entrypoint."""

from __future__ import annotations

import click

from remodern import __version__


@click.group()
@click.version_option(version=__version__, prog_name="remodern")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Settings YAML file (defaults to $REMODERN_CONFIG).",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None) -> None:
    """ReModern — code generation, parsing, and bytecode tools over JSON-RPC."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# Register subcommands
from remodern.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
