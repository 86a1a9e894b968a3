"""Lattice command - inspect and validate lattice files."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from qbc_glyph.cli.utils import console, err_console
from qbc_glyph.exceptions import GlyphCodecError
from qbc_glyph.lattice.loader import build_lattice, read_lattice_record
from qbc_glyph.lattice.model import Lattice
from qbc_glyph.lattice.validation import (
    ERROR,
    check_unique_decodability,
    validate_lattice,
)


def _load_unchecked(path: Path) -> Lattice:
    try:
        return build_lattice(read_lattice_record(path))
    except GlyphCodecError as e:
        err_console.print(f"[red]Invalid lattice:[/red] {e}")
        raise SystemExit(1) from e


@click.group()
def lattice() -> None:
    """Lattice inspection commands."""
    pass


@lattice.command("check")
@click.argument("lattice_file", type=click.Path(exists=True, path_type=Path))
def check(lattice_file: Path) -> None:
    """Validate LATTICE_FILE and report every finding."""
    loaded = _load_unchecked(lattice_file)

    issues = validate_lattice(loaded)
    error_count = 0
    for issue in issues:
        if issue.level == ERROR:
            error_count += 1
            console.print(f"[red]ERROR[/red] {issue.field}: {issue.message}")
        else:
            console.print(f"[yellow]WARNING[/yellow] {issue.field}: {issue.message}")

    try:
        check_unique_decodability(loaded.rules.symbols)
    except GlyphCodecError as e:
        error_count += 1
        console.print(f"[red]ERROR[/red] rules.symbols: {e}")
    else:
        console.print("[green]Symbol map is uniquely decodable[/green]")

    console.print(
        f"\n[bold]{loaded.lattice_id} v{loaded.version}:[/bold] "
        f"{error_count} error(s), {len(issues) - sum(i.level == ERROR for i in issues)} warning(s)"
    )
    if error_count:
        raise SystemExit(1)


@lattice.command("show")
@click.argument("lattice_file", type=click.Path(exists=True, path_type=Path))
def show(lattice_file: Path) -> None:
    """Print anchors, symbol map and rules of LATTICE_FILE."""
    loaded = _load_unchecked(lattice_file)
    rules = loaded.rules

    anchors = Table(title=f"Anchors of {loaded.lattice_id} v{loaded.version}")
    anchors.add_column("Anchor", style="cyan")
    anchors.add_column("x", justify="right")
    anchors.add_column("y", justify="right")
    for name in loaded.anchor_names:
        x, y = loaded.anchors_2d[name]
        anchors.add_row(name, f"{x:g}", f"{y:g}")
    console.print(anchors)

    symbols = Table(title="Symbols")
    symbols.add_column("Symbol", style="cyan")
    symbols.add_column("Anchors", style="green")
    for symbol, sequence in rules.symbols.items():
        symbols.add_row(repr(symbol), " ".join(sequence))
    console.print(symbols)

    settings = Table(title="Rules", show_header=False)
    settings.add_column("Rule", style="cyan")
    settings.add_column("Value")
    for key, value in rules.to_dict().items():
        if key != "symbols":
            settings.add_row(key, str(value))
    console.print(settings)
