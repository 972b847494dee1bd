# ABOUTME: Core metadata data structures for the book being built.
# ABOUTME: BookMetadata mirrors the metadata.json sidecar and feeds every generated document.

from dataclasses import dataclass, field
from typing import Any

from md2epub.config import DEFAULT_COVER

DEFAULT_LANGUAGE = "en"


@dataclass
class BookMetadata:
    """Book-level descriptive record.

    Loaded once per run from the metadata.json sidecar, or synthesized from
    command-line and configuration defaults when the sidecar is absent.
    Everything except title and cover_image is optional.
    """

    title: str
    author: str | None = None
    language: str | None = None
    cover_image: str = DEFAULT_COVER
    description: str | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def language_tag(self) -> str:
        """Language for dc:language and xml:lang, falling back to English."""
        return self.language or DEFAULT_LANGUAGE

    def to_sidecar(self) -> dict[str, Any]:
        """Serialize to the sidecar layout. Unknown fields are written as null."""
        return {
            "title": self.title,
            "author": self.author,
            "language": self.language,
            "cover_image": self.cover_image,
            "description": self.description,
            "tags": list(self.tags),
        }
