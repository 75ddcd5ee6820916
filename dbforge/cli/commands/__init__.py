"""Subcommand implementations registered by ``dbforge.cli.app``."""
