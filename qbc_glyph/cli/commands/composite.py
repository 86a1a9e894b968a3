"""Composite commands - issue and verify long text as chunk glyphs."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.table import Table

from qbc_glyph.api import GlyphCodec
from qbc_glyph.cli.utils import console, err_console, get_config, resolve_lattice
from qbc_glyph.codec.package import GlyphPackage
from qbc_glyph.exceptions import GlyphCodecError

MANIFEST_NAME = "composite.json"


@click.command()
@click.argument("text")
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.option("--output-dir", "-o", type=click.Path(path_type=Path), required=True, help="Output directory")
@click.option("--chunk-size", type=click.IntRange(min=1), help="Maximum characters per chunk glyph")
@click.pass_context
def composite(
    ctx: click.Context,
    text: str,
    lattice_name: str,
    output_dir: Path,
    chunk_size: int | None,
) -> None:
    """Issue TEXT as a composite of word-aligned chunk glyphs.

    Writes one SVG per chunk and a composite.json manifest holding the
    chunk hashes and the composite hash.
    """
    lattice = resolve_lattice(ctx, lattice_name)
    codec = GlyphCodec(lattice, config=get_config(ctx))
    try:
        glyph = codec.issue_composite(text, chunk_size=chunk_size)
    except (GlyphCodecError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    output_dir.mkdir(parents=True, exist_ok=True)
    entries = []
    for index, chunk in enumerate(glyph.chunks):
        svg_path = output_dir / f"chunk-{index:03d}.svg"
        svg_path.write_text(chunk.svg, encoding="utf-8")
        entries.append(
            {
                "index": index,
                "canonicalText": chunk.canonical_text,
                "contentHash": chunk.content_hash,
                "file": svg_path.name,
            }
        )

    manifest = {
        "latticeId": lattice.lattice_id,
        "latticeVersion": lattice.version,
        "canonicalText": glyph.canonical_text,
        "chunkSize": glyph.chunk_size,
        "compositeHash": glyph.composite_hash,
        "chunks": entries,
    }
    (output_dir / MANIFEST_NAME).write_text(json.dumps(manifest, indent=2), encoding="utf-8")

    table = Table(title=f"Composite of {len(glyph.chunks)} glyphs")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Chunk", style="cyan")
    table.add_column("Content hash", overflow="fold")
    for entry in entries:
        table.add_row(str(entry["index"]), entry["canonicalText"], entry["contentHash"])
    console.print(table)
    console.print(f"[bold]Composite hash:[/bold] {glyph.composite_hash}")


@click.command("verify-composite")
@click.argument("manifest_file", type=click.Path(exists=True, path_type=Path))
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.option("--expected", "expected_hash", help="Composite hash to check instead of the manifest's")
@click.pass_context
def verify_composite(
    ctx: click.Context,
    manifest_file: Path,
    lattice_name: str,
    expected_hash: str | None,
) -> None:
    """Verify the chunk SVGs listed in MANIFEST_FILE against its composite hash."""
    lattice = resolve_lattice(ctx, lattice_name)
    try:
        manifest = json.loads(manifest_file.read_text(encoding="utf-8"))
        entries = manifest["chunks"]
        recorded = expected_hash or manifest["compositeHash"]
        chunk_hashes = [entry["contentHash"] for entry in entries]
        packages = [
            GlyphPackage.rendered(
                (manifest_file.parent / entry["file"]).read_text(encoding="utf-8"), lattice
            )
            for entry in entries
        ]
    except (OSError, KeyError, TypeError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Unreadable manifest:[/red] {e}")
        raise SystemExit(1) from e

    result = GlyphCodec(lattice, config=get_config(ctx)).verify_composite(
        packages, recorded, chunk_hashes=chunk_hashes
    )
    if result.matched:
        console.print(
            f"[green]VERIFIED[/green] {len(result.chunks)} chunks, "
            f"{result.canonical_text!r} ({result.computed_hash})"
        )
        return

    if result.errors:
        for error in result.errors:
            err_console.print(f"[red]FAILED:[/red] {error}")
    else:
        err_console.print(
            f"[red]MISMATCH:[/red] computed {result.computed_hash}, expected {result.expected_hash}"
        )
    raise SystemExit(1)
