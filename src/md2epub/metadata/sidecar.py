# ABOUTME: Loads, synthesizes, and persists the metadata.json sidecar.
# ABOUTME: Applies the sidecar > CLI > config > fallback precedence per field.

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from md2epub.config import DEFAULT_COVER, BuildConfig
from md2epub.metadata.types import BookMetadata

logger = logging.getLogger(__name__)

SIDECAR_NAME = "metadata.json"

_STRING_FIELDS = ("title", "author", "language", "cover_image", "description")


class MetadataError(Exception):
    """Raised when the metadata sidecar cannot be read or is malformed."""


@dataclass
class MetadataOverrides:
    """Values supplied on the command line. None means "not given"."""

    title: str | None = None
    author: str | None = None
    language: str | None = None
    cover: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)


def _first(*values: Any) -> Any:
    """Return the first value that is not None or empty."""
    for value in values:
        if value:
            return value
    return None


def _from_sidecar(sidecar: dict[str, Any], key: str, *fallbacks: Any) -> Any:
    """The sidecar value when the key is present, as written; else the first fallback."""
    if key in sidecar:
        return sidecar[key]
    return _first(*fallbacks)


def load_sidecar(path: Path) -> dict[str, Any]:
    """Read and validate a metadata sidecar.

    Args:
        path: Path to metadata.json.

    Returns:
        The raw sidecar mapping. Keys not used by md2epub are kept as-is.

    Raises:
        MetadataError: If the file is unreadable, is not valid JSON, is not a
            JSON object, or holds a value of the wrong type.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataError(f"Failed to read metadata: {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise MetadataError(f"Malformed JSON in metadata: {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise MetadataError(f"Metadata is not a JSON object: {path}")

    for name in _STRING_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            raise MetadataError(f"Metadata field '{name}' must be a string: {path}")

    tags = data.get("tags")
    if tags is not None and not (
        isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)
    ):
        raise MetadataError(f"Metadata field 'tags' must be a list of strings: {path}")

    return data


def write_sidecar(path: Path, metadata: BookMetadata) -> None:
    """Write metadata as 2-space indented JSON."""
    text = json.dumps(metadata.to_sidecar(), indent=2, ensure_ascii=False)
    path.write_text(text + "\n", encoding="utf-8")


def resolve_metadata(
    directory: Path,
    overrides: MetadataOverrides | None = None,
    config: BuildConfig | None = None,
    *,
    write: bool = True,
) -> BookMetadata:
    """Resolve the book metadata for a source directory.

    A key present in the sidecar wins as written, including null and empty
    values. Otherwise a field takes the first non-empty value from the
    command-line overrides, the configuration defaults, and finally the
    hard-coded fallback. Title and cover are required, so an empty or null
    sidecar value for them also falls through (title: directory name,
    cover: cover.jpg).

    If the sidecar does not exist it is synthesized from the resolved values
    and written before returning, so the next run reads back the same
    metadata. An existing sidecar is never rewritten.

    Args:
        directory: The book's source directory.
        overrides: Values given on the command line.
        config: Defaults from configuration files.
        write: Whether to persist a synthesized sidecar.

    Returns:
        The resolved BookMetadata.

    Raises:
        MetadataError: If an existing sidecar is malformed.
    """
    overrides = overrides or MetadataOverrides()
    config = config or BuildConfig()
    sidecar_path = directory / SIDECAR_NAME

    sidecar: dict[str, Any] = {}
    exists = sidecar_path.exists()
    if exists:
        sidecar = load_sidecar(sidecar_path)
        logger.debug("Read metadata from %s", sidecar_path)

    metadata = BookMetadata(
        title=_first(
            sidecar.get("title"), overrides.title, config.title,
            directory.resolve().name,
        ),
        author=_from_sidecar(sidecar, "author", overrides.author, config.author),
        language=_from_sidecar(sidecar, "language", overrides.language, config.language),
        cover_image=_first(
            sidecar.get("cover_image"), overrides.cover, config.cover
        ) or DEFAULT_COVER,
        description=_from_sidecar(
            sidecar, "description", overrides.description, config.description
        ),
        tags=list(_from_sidecar(sidecar, "tags", overrides.tags, config.tags) or []),
    )

    if not exists and write:
        logger.info("Generating default %s", SIDECAR_NAME)
        try:
            write_sidecar(sidecar_path, metadata)
        except OSError as exc:
            raise MetadataError(f"Failed to write metadata: {sidecar_path}: {exc}") from exc

    return metadata
