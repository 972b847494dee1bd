# ABOUTME: md2epub - build an EPUB 3 book from a directory of Markdown files.
# ABOUTME: The CLI entry point is md2epub.cli:cli.
