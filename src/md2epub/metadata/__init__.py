# ABOUTME: Metadata package for the book being built.
# ABOUTME: Exports BookMetadata and the sidecar resolver used by the build pipeline.

from md2epub.metadata.sidecar import (
    SIDECAR_NAME,
    MetadataError,
    MetadataOverrides,
    load_sidecar,
    resolve_metadata,
    write_sidecar,
)
from md2epub.metadata.types import BookMetadata

__all__ = [
    "SIDECAR_NAME",
    "BookMetadata",
    "MetadataError",
    "MetadataOverrides",
    "load_sidecar",
    "resolve_metadata",
    "write_sidecar",
]
