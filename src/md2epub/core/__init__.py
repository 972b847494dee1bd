# ABOUTME: Build pipeline for md2epub: discovery, rendering, and archive assembly.
# ABOUTME: Exports the data structures threaded through a build.

from md2epub.core.types import BuildContext, BuildIdentifiers, Chapter, Image

__all__ = [
    "BuildContext",
    "BuildIdentifiers",
    "Chapter",
    "Image",
]
