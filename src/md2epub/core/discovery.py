# ABOUTME: Chapter discovery for a directory of Markdown files and images.
# ABOUTME: Orders chapters by file name, pairs companion images, and extracts titles.

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from md2epub.core.types import IMAGE_MEDIA_TYPES, Chapter, Image

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"

# Preference order when looking for a chapter's companion image
COMPANION_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif")

# First level-1 ATX heading anywhere in the document, closing hashes dropped
_TITLE_RE = re.compile(r"^#[ \t]+(.*?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE)


class DiscoveryError(Exception):
    """Raised when a chapter source cannot be read."""


@dataclass
class Discovery:
    """Chapters and images found in a source directory, in build order."""

    chapters: list[Chapter]
    images: list[Image]


def extract_title(text: str) -> str | None:
    """Return the text of the first level-1 heading, or None."""
    match = _TITLE_RE.search(text)
    if match is None:
        return None
    return match.group(1).strip() or None


def find_companion(stem: str, image_names: set[str]) -> str | None:
    """Find the image that shares a chapter's base name, by extension preference."""
    for ext in COMPANION_EXTENSIONS:
        candidate = f"{stem}.{ext}"
        if candidate in image_names:
            return candidate
    return None


def inject_companion(text: str, image_name: str) -> str:
    """Prepend image markup unless the text already mentions the image."""
    if image_name in text:
        return text
    return f"![]({quote(image_name)})\n{text}"


def _is_image(path: Path) -> bool:
    return path.suffix[1:].lower() in IMAGE_MEDIA_TYPES


def _read_chapter(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DiscoveryError(f"Failed to read chapter: {path}: {exc}") from exc


def discover(directory: Path) -> Discovery:
    """Scan a directory for chapters and images.

    Markdown files (".md") become chapters sorted by file name. Image files
    (jpg, jpeg, png, gif) are all registered as assets. Each chapter is
    paired with the first of `<stem>.jpg`, `.jpeg`, `.png`, `.gif` that
    exists; its markup is prepended to the chapter text unless the text
    already contains the image's file name. Other entries are ignored.

    Args:
        directory: The book's source directory.

    Returns:
        A Discovery with chapters and images in name order.

    Raises:
        DiscoveryError: If a chapter file cannot be read.
    """
    entries = sorted(
        (path for path in directory.iterdir() if path.is_file()),
        key=lambda path: path.name,
    )

    images = [Image(source_path=path) for path in entries if _is_image(path)]
    images_by_name = {image.name: image for image in images}

    chapters: list[Chapter] = []
    for path in entries:
        if path.suffix != MARKDOWN_SUFFIX:
            continue
        text = _read_chapter(path)
        title = extract_title(text)

        image = None
        companion = find_companion(path.stem, set(images_by_name))
        if companion is not None:
            image = images_by_name[companion]
            text = inject_companion(text, companion)

        logger.debug("Chapter %s (title=%r, image=%s)", path.name, title, companion)
        chapters.append(Chapter(source_path=path, text=text, title=title, image=image))

    return Discovery(chapters=chapters, images=images)
