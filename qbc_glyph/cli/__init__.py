"""Command-line interface for qbc-glyph."""

from qbc_glyph.cli.main import cli, main

__all__ = ["cli", "main"]
