"""Decode, hash and verify commands."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.table import Table

from qbc_glyph.api import GlyphCodec
from qbc_glyph.canonical import canonicalize
from qbc_glyph.cli.utils import console, err_console, get_config, read_package, resolve_lattice
from qbc_glyph.codec.decoder import decode as decode_package
from qbc_glyph.codec.decoder import decode_text
from qbc_glyph.codec.encoder import encode
from qbc_glyph.codec.hasher import hash_glyph
from qbc_glyph.exceptions import GlyphCodecError


@click.command()
@click.argument("package_file", type=click.Path(exists=True, path_type=Path))
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.option("--json", "as_json", is_flag=True, help="Print the decoded path as JSON")
@click.pass_context
def decode(ctx: click.Context, package_file: Path, lattice_name: str, as_json: bool) -> None:
    """Decode a glyph package (.json, .svg or .bin) back to its path and text.

    PACKAGE_FILE: Structured/rendered package JSON, a glyph SVG, or a
    packed binary path.
    """
    lattice = resolve_lattice(ctx, lattice_name)
    try:
        package = read_package(package_file, lattice)
        path = decode_package(package, lattice)
        text = decode_text(package, lattice)
    except GlyphCodecError as e:
        err_console.print(f"[red]Decode failed:[/red] {type(e).__name__}: {e}")
        raise SystemExit(1) from e

    if as_json:
        click.echo(json.dumps({"canonicalText": text, "path": path.to_list()}, indent=2))
        return

    table = Table(title=f"{package_file.name}: {text!r}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Anchor", style="cyan")
    table.add_column("Connector", style="green")
    for index, step in enumerate(path):
        table.add_row(str(index), step.anchor, step.connector.value if step.connector else "-")
    console.print(table)


@click.command("hash")
@click.argument("text")
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.pass_context
def hash_text(ctx: click.Context, text: str, lattice_name: str) -> None:
    """Print the content hash TEXT would be issued with."""
    lattice = resolve_lattice(ctx, lattice_name)
    canonical_text = canonicalize(text)
    try:
        path = encode(canonical_text, lattice)
        digest = hash_glyph(canonical_text, lattice, path)
    except GlyphCodecError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e
    click.echo(digest)


@click.command()
@click.argument("package_file", type=click.Path(exists=True, path_type=Path))
@click.argument("expected_hash")
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.pass_context
def verify(ctx: click.Context, package_file: Path, expected_hash: str, lattice_name: str) -> None:
    """Verify a glyph package against a recorded content hash.

    Exits with status 1 when the hash does not match or the package
    cannot be decoded.
    """
    lattice = resolve_lattice(ctx, lattice_name)
    try:
        package = read_package(package_file, lattice)
    except GlyphCodecError as e:
        err_console.print(f"[red]Unreadable package:[/red] {e}")
        raise SystemExit(1) from e

    result = GlyphCodec(lattice, config=get_config(ctx)).verify(package, expected_hash)
    if result.matched:
        console.print(f"[green]VERIFIED[/green] {result.canonical_text!r} ({result.computed_hash})")
        return

    if result.errors:
        for error in result.errors:
            err_console.print(f"[red]FAILED:[/red] {error}")
    else:
        err_console.print(
            f"[red]MISMATCH:[/red] computed {result.computed_hash}, expected {result.expected_hash}"
        )
    raise SystemExit(1)
