# ABOUTME: EPUB metadata and table-of-contents extraction using ebooklib.
# ABOUTME: Defensive wrapper used by `md2epub inspect` to read built books back.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ebooklib import epub

from md2epub.config import DEFAULT_COVER
from md2epub.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


class EpubReadError(Exception):
    """Raised when an EPUB file cannot be read or parsed."""


@dataclass
class EpubSummary:
    """What `inspect` reports about an EPUB."""

    metadata: BookMetadata
    identifier: str | None = None
    toc: list[str] = field(default_factory=list)
    spine: list[str] = field(default_factory=list)


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str | None:
    """Extract a single metadata value from an EpubBook, or None if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _get_values(book: epub.EpubBook, name: str) -> list[str]:
    """All non-empty Dublin Core values for a field, in document order."""
    entries = book.get_metadata("DC", name)
    return [str(value).strip() for value, _attrs in entries if value]


def _get_cover_name(book: epub.EpubBook) -> str | None:
    """File name of the cover image referenced by the OPF cover meta."""
    meta_entries = book.get_metadata("OPF", "cover")
    if not meta_entries:
        return None
    cover_id = meta_entries[0][1].get("content")
    if not cover_id:
        return None
    item = book.get_item_with_id(cover_id)
    return item.get_name() if item is not None else None


def _flatten_toc(entries: list) -> list[str]:
    """Titles of TOC links, depth-first. Sections contribute their own title."""
    titles: list[str] = []
    for entry in entries:
        if isinstance(entry, tuple) and len(entry) == 2:
            section, children = entry
            titles.append(section.title)
            titles.extend(_flatten_toc(children))
        elif isinstance(entry, epub.Link):
            titles.append(entry.title)
    return titles


def read_epub(path: Path) -> EpubSummary:
    """Extract metadata and navigation from an EPUB file.

    Args:
        path: Path to the EPUB file.

    Returns:
        EpubSummary with metadata, identifier, TOC titles, and spine ids.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title")
    if not title:
        title = path.stem

    authors = _get_values(book, "creator")
    metadata = BookMetadata(
        title=title,
        author=", ".join(authors) if authors else None,
        language=_get_metadata_value(book, "DC", "language"),
        cover_image=_get_cover_name(book) or DEFAULT_COVER,
        description=_get_metadata_value(book, "DC", "description"),
        tags=_get_values(book, "subject"),
    )

    spine = [entry[0] if isinstance(entry, tuple) else entry for entry in book.spine]

    return EpubSummary(
        metadata=metadata,
        identifier=_get_metadata_value(book, "DC", "identifier"),
        toc=_flatten_toc(book.toc),
        spine=spine,
    )
