# ABOUTME: EPUB format layer: document generators, archive writer, and reader.
# ABOUTME: Generators are pure functions; the archive is finalized once per build.
