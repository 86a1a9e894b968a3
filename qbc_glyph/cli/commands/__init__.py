"""CLI commands for qbc-glyph."""

from qbc_glyph.cli.commands.batch import batch
from qbc_glyph.cli.commands.composite import composite, verify_composite
from qbc_glyph.cli.commands.decode import decode, hash_text, verify
from qbc_glyph.cli.commands.encode import encode
from qbc_glyph.cli.commands.lattice import lattice

__all__ = [
    "encode",
    "decode",
    "hash_text",
    "verify",
    "batch",
    "composite",
    "verify_composite",
    "lattice",
]
