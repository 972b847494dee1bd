# ABOUTME: Data structures shared by discovery, rendering, and document generation.
# ABOUTME: Chapter, Image, BuildIdentifiers, and the BuildContext threaded through a build.

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

from md2epub.formats.archive import ArchiveWriter
from md2epub.metadata.types import BookMetadata

CONTENT_DIR = "EPUB"

IMAGE_MEDIA_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
}

_UNSAFE_ID_CHARS_RE = re.compile(r"[^A-Za-z0-9]")


def manifest_id(name: str) -> str:
    """Derive a manifest id from an archive file name.

    Every non-alphanumeric character becomes "_". Names that do not start
    with a letter are prefixed so the result is a valid XML id.
    """
    candidate = _UNSAFE_ID_CHARS_RE.sub("_", name)
    if not candidate[:1].isalpha():
        candidate = f"x_{candidate}"
    return candidate


@dataclass
class Image:
    """A binary asset copied verbatim into the archive."""

    source_path: Path

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def href(self) -> str:
        """URL relative to the content directory, percent-encoded."""
        return quote(self.name)

    @property
    def archive_path(self) -> str:
        return f"{CONTENT_DIR}/{self.name}"

    @property
    def media_type(self) -> str:
        return IMAGE_MEDIA_TYPES[self.source_path.suffix[1:].lower()]


@dataclass
class Chapter:
    """One Markdown document rendered to one XHTML page.

    `text` is the Markdown source after companion-image injection.
    """

    source_path: Path
    text: str
    title: str | None = None
    image: Image | None = None

    @property
    def label(self) -> str:
        """File-derived label used in navigation."""
        return self.source_path.stem

    @property
    def file_name(self) -> str:
        return f"{self.label}.xhtml"

    @property
    def href(self) -> str:
        return quote(self.file_name)

    @property
    def rendered_path(self) -> str:
        return f"{CONTENT_DIR}/{self.file_name}"

    @property
    def nav_label(self) -> str:
        """Navigation label: the file label, plus the title when one was found."""
        if self.title:
            return f"{self.label} - {self.title}"
        return self.label


@dataclass(frozen=True)
class BuildIdentifiers:
    """The unique identifier and timestamp shared by every document of one build."""

    uid: str
    timestamp: datetime

    @classmethod
    def generate(cls) -> "BuildIdentifiers":
        """Create the identifiers for a new build. Call once per run."""
        return cls(
            uid=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc).replace(microsecond=0),
        )

    @property
    def urn(self) -> str:
        return f"uuid:{self.uid}"

    @property
    def date(self) -> str:
        """Timestamp in the CCYY-MM-DDThh:mm:ssZ form EPUB expects."""
        return self.timestamp.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class BuildContext:
    """Everything one build accumulates, passed explicitly between stages."""

    directory: Path
    metadata: BookMetadata
    identifiers: BuildIdentifiers
    chapters: list[Chapter] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)
    archive: ArchiveWriter = field(default_factory=ArchiveWriter)

    @property
    def cover(self) -> Image | None:
        """The image named as cover in the metadata, if it was discovered."""
        for image in self.images:
            if image.name == self.metadata.cover_image:
                return image
        return None
