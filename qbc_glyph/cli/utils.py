"""Helpers shared by CLI commands."""

from __future__ import annotations

import re
from pathlib import Path

import click
from rich.console import Console

from qbc_glyph.codec.binary import unpack_path
from qbc_glyph.codec.package import GlyphPackage
from qbc_glyph.config import Config
from qbc_glyph.exceptions import GlyphCodecError
from qbc_glyph.lattice.loader import load_lattice
from qbc_glyph.lattice.model import Lattice

console = Console()
err_console = Console(stderr=True)


def get_config(ctx: click.Context) -> Config:
    obj = ctx.find_root().obj or {}
    return obj.get("config") or Config.load()


def resolve_lattice(ctx: click.Context, name: str) -> Lattice:
    """Load a lattice given a file path or a name found in ``lattice_paths``."""
    config = get_config(ctx)
    path = config.find_lattice(name)
    if path is None:
        err_console.print(f"[red]Error:[/red] Lattice not found: {name}")
        raise SystemExit(1)
    try:
        return load_lattice(path)
    except GlyphCodecError as e:
        err_console.print(f"[red]Invalid lattice {path}:[/red] {e}")
        raise SystemExit(1) from e


def read_package(path: Path, lattice: Lattice) -> GlyphPackage:
    """Read a glyph package from ``.svg``, ``.bin`` (packed path) or JSON."""
    suffix = path.suffix.lower()
    if suffix == ".svg":
        return GlyphPackage.rendered(path.read_text(encoding="utf-8"), lattice)
    if suffix == ".bin":
        return GlyphPackage.structured(unpack_path(path.read_bytes(), lattice), lattice)
    return GlyphPackage.from_json(path.read_text(encoding="utf-8"))


def slugify(canonical_text: str) -> str:
    return re.sub(r"\s+", "-", canonical_text.lower()) or "empty"
