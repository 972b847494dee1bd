# ABOUTME: Shared Click options for md2epub CLI commands.
# ABOUTME: Provides reusable decorators for common flags like --config.

from pathlib import Path

import click

from md2epub.config import SYSTEM_CONFIG_PATH

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=(
        "Extra JSON config file, read after "
        f"{SYSTEM_CONFIG_PATH}, ~/.md2epub.json and ~/.config/md2epub.json."
    ),
)
