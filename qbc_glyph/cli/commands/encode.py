"""Encode command - issue a glyph for a text."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from qbc_glyph.api import GlyphCodec
from qbc_glyph.cli.utils import console, err_console, get_config, resolve_lattice
from qbc_glyph.codec.binary import pack_path
from qbc_glyph.exceptions import GlyphCodecError
from qbc_glyph.svg.projection import Orientation


@click.command()
@click.argument("text")
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.option("--svg", "svg_out", type=click.Path(path_type=Path), help="Write rendered SVG")
@click.option("--png", "png_out", type=click.Path(path_type=Path), help="Write rasterized PNG")
@click.option("--package", "package_out", type=click.Path(path_type=Path), help="Write glyph package JSON")
@click.option("--rendered", is_flag=True, help="Write a rendered (SVG) package instead of a structured one")
@click.option("--binary", "binary_out", type=click.Path(path_type=Path), help="Write packed binary path")
@click.option("--data-url", is_flag=True, help="Print the SVG data URL")
@click.option("--size", type=int, help="Canvas size in pixels")
@click.option("--rotate", type=click.Choice(["0", "90", "180", "270"]), default="0", help="Clockwise rotation in degrees")
@click.option("--mirror", is_flag=True, help="Mirror the glyph horizontally")
@click.option("--flip-vertical", is_flag=True, help="Flip the glyph vertically")
@click.pass_context
def encode(
    ctx: click.Context,
    text: str,
    lattice_name: str,
    svg_out: Optional[Path],
    png_out: Optional[Path],
    package_out: Optional[Path],
    rendered: bool,
    binary_out: Optional[Path],
    data_url: bool,
    size: Optional[int],
    rotate: str,
    mirror: bool,
    flip_vertical: bool,
) -> None:
    """Encode TEXT into a glyph and print its content hash."""
    config = get_config(ctx)
    if size is not None:
        config = replace(config, size=size)
        try:
            config.validate()
        except GlyphCodecError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1) from e
    lattice = resolve_lattice(ctx, lattice_name)
    orientation = Orientation(int(rotate), mirror, flip_vertical)
    codec = GlyphCodec(lattice, config=config, orientation=orientation)

    try:
        glyph = codec.issue(text)
    except (GlyphCodecError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    if svg_out:
        svg_out.write_text(glyph.svg, encoding="utf-8")
    if png_out:
        png_out.write_bytes(glyph.to_png(scale=config.raster_scale))
    if package_out:
        package = glyph.rendered_package if rendered else glyph.structured_package
        package_out.write_text(package.to_json(), encoding="utf-8")
    if binary_out:
        binary_out.write_bytes(pack_path(glyph.path, lattice))

    table = Table(title="Issued glyph", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", overflow="fold")
    table.add_row("Canonical text", glyph.canonical_text)
    table.add_row("Lattice", f"{lattice.lattice_id} v{lattice.version}")
    table.add_row("Steps", str(len(glyph.path)))
    if not orientation.is_identity:
        table.add_row("Orientation", orientation.to_attribute())
    table.add_row("Content hash", glyph.content_hash)
    for out in (svg_out, png_out, package_out, binary_out):
        if out:
            table.add_row("Written", str(out))
    console.print(table)

    if data_url:
        console.print(glyph.data_url(), soft_wrap=True)
