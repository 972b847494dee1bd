# ABOUTME: The `md2epub build` command for turning a Markdown directory into an EPUB.
# ABOUTME: Resolves metadata from sidecar, flags, and config, then runs the build pipeline.

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from md2epub.config import BuildConfig
from md2epub.core.assembler import build_book
from md2epub.core.discovery import DiscoveryError
from md2epub.formats.archive import ArchiveError
from md2epub.metadata import MetadataError, MetadataOverrides, resolve_metadata

logger = logging.getLogger(__name__)

console = Console()


def _configure_logging(verbose: bool) -> None:
    """Route md2epub log records through Rich on stderr."""
    package_logger = logging.getLogger("md2epub")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True), show_time=False, show_path=False
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


@click.command("build")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
)
@click.option("-a", "--author", help="The author of the book.", show_default=True)
@click.option(
    "-c", "--cover",
    help="The filename of the cover image.",
    show_default=True,
)
@click.option(
    "-d", "--description", help="The description of the book.", show_default=True,
)
@click.option(
    "-l", "--language",
    help="The language tag for the language of the book (CN/zh join CJK lines).",
    show_default=True,
)
@click.option(
    "-t", "--title",
    help="The title of the book (default: directory name).",
    show_default=True,
)
@click.option(
    "-T", "--tags",
    multiple=True,
    help="One or more tags related to the book. Repeatable.",
    show_default=True,
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output.")
@click.option(
    "--breaks/--no-breaks",
    default=False,
    help="Render soft line breaks as <br />.",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: book-<title>.epub in DIRECTORY).",
)
@click.pass_obj
def build(
    config: BuildConfig | None,
    directory: Path,
    author: str | None,
    cover: str | None,
    description: str | None,
    language: str | None,
    title: str | None,
    tags: tuple[str, ...],
    verbose: bool,
    breaks: bool,
    output: Path | None,
) -> None:
    """Build an EPUB from the Markdown files in DIRECTORY.

    Chapters are the *.md files in name order. Book metadata comes from
    DIRECTORY/metadata.json, which is created from the options below on the
    first run and read back unchanged on later runs.
    """
    _configure_logging(verbose)

    overrides = MetadataOverrides(
        title=title,
        author=author,
        language=language,
        cover=cover,
        description=description,
        tags=list(tags),
    )
    logger.debug("Options: %s", json.dumps(overrides.__dict__, ensure_ascii=False))

    try:
        metadata = resolve_metadata(directory, overrides, config)
        logger.debug(
            "Metadata: %s", json.dumps(metadata.to_sidecar(), indent=2, ensure_ascii=False)
        )
        result = build_book(directory, metadata, output=output, breaks=breaks)
    except (MetadataError, DiscoveryError, ArchiveError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise SystemExit(1) from exc

    console.print(
        f"Built [bold]{len(result.chapters)}[/bold] chapter(s), "
        f"[bold]{len(result.images)}[/bold] image(s)"
    )
    console.print(f"epub: {result.path}", soft_wrap=True, markup=False)
