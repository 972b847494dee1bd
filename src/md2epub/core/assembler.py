# ABOUTME: Build pipeline that turns a source directory into an EPUB file.
# ABOUTME: Discovers, renders, generates documents, finalizes the archive once, then writes it.

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from md2epub.core.discovery import discover
from md2epub.core.renderer import render_markdown
from md2epub.core.types import CONTENT_DIR, BuildContext, BuildIdentifiers, Chapter, Image
from md2epub.formats import documents
from md2epub.formats.archive import ArchiveError, write_atomically
from md2epub.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[/\\\x00]")


@dataclass
class BuildResult:
    """Outcome of a successful build."""

    path: Path
    chapters: list[Chapter]
    images: list[Image]
    identifiers: BuildIdentifiers
    entries: list[str]


def output_name(title: str) -> str:
    """File name of the EPUB for a book title: book-<title>.epub."""
    return f"book-{_UNSAFE_FILENAME_RE.sub('_', title)}.epub"


def _add_chapters(ctx: BuildContext, *, breaks: bool) -> None:
    for chapter in ctx.chapters:
        body = render_markdown(chapter.text, ctx.metadata.language, breaks=breaks)
        ctx.archive.add(
            chapter.rendered_path,
            documents.chapter_document(chapter, body, ctx.metadata),
        )


def _add_images(ctx: BuildContext) -> None:
    for image in ctx.images:
        try:
            data = image.source_path.read_bytes()
        except OSError as exc:
            raise ArchiveError(f"Failed to read image: {image.source_path}: {exc}") from exc
        ctx.archive.add(image.archive_path, data)


def _add_documents(ctx: BuildContext) -> None:
    meta = ctx.metadata
    ids = ctx.identifiers
    content = {
        documents.PACKAGE_HREF: documents.package_document(meta, ctx.chapters, ctx.images, ids),
        documents.NAV_HREF: documents.nav_document(meta, ctx.chapters),
        documents.COVER_HREF: documents.cover_document(meta),
        documents.TITLE_PAGE_HREF: documents.title_page_document(
            meta, ids, str(ctx.directory.resolve())
        ),
        documents.NCX_HREF: documents.ncx_document(meta, ctx.chapters, ctx.images, ids),
        documents.STYLESHEET_HREF: documents.stylesheet_document(),
    }
    ctx.archive.add(documents.CONTAINER_PATH, documents.container_document())
    for href, text in content.items():
        ctx.archive.add(f"{CONTENT_DIR}/{href}", text)


def check_manifest(ctx: BuildContext) -> None:
    """Ensure every manifest entry has a matching archive entry.

    Raises:
        ArchiveError: Listing the manifest hrefs missing from the archive.
    """
    items = documents.manifest_items(ctx.metadata, ctx.chapters, ctx.images)
    missing = [
        item.href for item in items
        if f"{CONTENT_DIR}/{unquote(item.href)}" not in ctx.archive
    ]
    if missing:
        raise ArchiveError(f"Manifest references missing entries: {', '.join(missing)}")


def assemble(ctx: BuildContext, *, breaks: bool = False) -> bytes:
    """Fill the context's archive and finalize it.

    Chapters and images are discovered from the context's directory,
    rendered and copied, then the structural documents are generated.

    Args:
        ctx: A fresh BuildContext.
        breaks: Render soft line breaks as `<br />`.

    Returns:
        The serialized EPUB.

    Raises:
        DiscoveryError: If a chapter cannot be read.
        ArchiveError: If an image cannot be read, two entries share a path,
            or serialization fails.
    """
    found = discover(ctx.directory)
    ctx.chapters.extend(found.chapters)
    ctx.images.extend(found.images)

    if ctx.cover is None:
        logger.warning(
            "Cover image %s not found in %s", ctx.metadata.cover_image, ctx.directory
        )

    _add_chapters(ctx, breaks=breaks)
    _add_images(ctx)
    _add_documents(ctx)
    check_manifest(ctx)

    logger.debug("Chapters: %s", [chapter.source_path.name for chapter in ctx.chapters])
    logger.debug("Images: %s", [image.name for image in ctx.images])
    logger.debug("Entries: %s", ctx.archive.paths)
    return ctx.archive.finalize()


def build_book(
    directory: Path,
    metadata: BookMetadata,
    *,
    output: Path | None = None,
    breaks: bool = False,
    identifiers: BuildIdentifiers | None = None,
) -> BuildResult:
    """Build an EPUB from a source directory.

    Everything is assembled in memory first. The file is written only after
    the archive has been finalized, and is written atomically; an existing
    file of the same name is replaced.

    Args:
        directory: Directory holding the Markdown chapters and images.
        metadata: Resolved book metadata.
        output: Destination file. Defaults to `book-<title>.epub` in directory.
        breaks: Render soft line breaks as `<br />`.
        identifiers: Identifiers to use; generated when omitted.

    Returns:
        BuildResult describing the written book.

    Raises:
        DiscoveryError: If a chapter cannot be read.
        ArchiveError: If assembly or writing fails.
    """
    ctx = BuildContext(
        directory=directory,
        metadata=metadata,
        identifiers=identifiers or BuildIdentifiers.generate(),
    )
    data = assemble(ctx, breaks=breaks)

    path = output or directory / output_name(metadata.title)
    write_atomically(path, data)
    logger.info("Wrote %s (%d chapters, %d images)", path, len(ctx.chapters), len(ctx.images))

    return BuildResult(
        path=path,
        chapters=ctx.chapters,
        images=ctx.images,
        identifiers=ctx.identifiers,
        entries=ctx.archive.paths,
    )
