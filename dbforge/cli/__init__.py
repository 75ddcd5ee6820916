"""dbforge CLI — Typer-based command-line interface.

Provides the ``dbforge`` command with subcommands for fetching resources,
inspecting staging state, auditing committed artifacts, and listing the
resource directory and catalog.

All output uses Rich for formatted terminal display.
"""
