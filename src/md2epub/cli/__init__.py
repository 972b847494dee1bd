# ABOUTME: CLI package for md2epub, built on Click.
# ABOUTME: Defines the root command group, loads config defaults, and registers subcommands.

from pathlib import Path

import click

from md2epub.cli.commands import build_cmd, inspect_cmd
from md2epub.cli.options import CONTEXT_SETTINGS, config_option
from md2epub.config import load_config


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="md2epub")
@config_option
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """md2epub - build an EPUB from a directory of Markdown files."""
    config = load_config(extra=config_path)
    ctx.obj = config
    # Config values become the defaults shown and used by `build`.
    default_map = dict(ctx.default_map or {})
    default_map["build"] = {**config.default_map(), **default_map.get("build", {})}
    ctx.default_map = default_map


cli.add_command(build_cmd.build)
cli.add_command(inspect_cmd.inspect)
