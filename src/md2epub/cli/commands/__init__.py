# ABOUTME: Subcommands of the md2epub CLI.
# ABOUTME: Each module defines one Click command registered on the root group.
