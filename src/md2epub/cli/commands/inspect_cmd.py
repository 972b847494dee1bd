# ABOUTME: The `md2epub inspect` command for viewing a built EPUB.
# ABOUTME: Shows metadata, spine, and table of contents read back with ebooklib.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from md2epub.formats.epub import EpubReadError, read_epub

console = Console()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(path: Path) -> None:
    """Show metadata and table of contents of an EPUB file."""
    try:
        summary = read_epub(path)
    except EpubReadError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise SystemExit(1) from exc

    meta = summary.metadata
    table = Table(title=escape(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Title", escape(meta.title))
    table.add_row("Author", escape(meta.author) if meta.author else "[dim]unknown[/dim]")
    table.add_row("Language", escape(meta.language) if meta.language else "[dim]unknown[/dim]")
    table.add_row("Identifier", escape(summary.identifier or "") or "[dim]none[/dim]")
    table.add_row(
        "Description", escape(meta.description) if meta.description else "[dim]none[/dim]"
    )
    table.add_row("Tags", escape(", ".join(meta.tags)) if meta.tags else "[dim]none[/dim]")
    table.add_row("Cover", escape(meta.cover_image))
    table.add_row("Spine", str(len(summary.spine)))

    console.print(table)

    if summary.toc:
        console.print("\n[bold]Table of Contents[/bold]")
        for index, entry in enumerate(summary.toc, start=1):
            console.print(f"  {index:>3}. {escape(entry or '')}", soft_wrap=True)
