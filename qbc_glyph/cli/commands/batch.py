"""Batch command - issue glyphs for many texts."""

from __future__ import annotations

import concurrent.futures
import json
from pathlib import Path

import click
from rich.progress import Progress

from qbc_glyph.api import GlyphCodec, IssuedGlyph
from qbc_glyph.cli.utils import console, get_config, resolve_lattice, slugify


@click.command()
@click.argument("texts", nargs=-1)
@click.option("--lattice", "-l", "lattice_name", required=True, help="Lattice file or name")
@click.option("--output-dir", "-o", type=click.Path(path_type=Path), required=True, help="Output directory")
@click.option("--batch-file", type=click.Path(exists=True, path_type=Path), help="File with one text per line")
@click.option("--png", is_flag=True, help="Also write a PNG next to each SVG")
@click.option("-j", "--jobs", type=int, default=4, help="Parallel jobs")
@click.option("--continue-on-error", is_flag=True, help="Continue processing on errors")
@click.pass_context
def batch(
    ctx: click.Context,
    texts: tuple[str, ...],
    lattice_name: str,
    output_dir: Path,
    batch_file: Path | None,
    png: bool,
    jobs: int,
    continue_on_error: bool,
) -> None:
    """Issue glyphs for multiple texts and write a manifest of their hashes.

    TEXTS: Texts to encode. Lines of --batch-file are appended; blank lines
    and lines starting with '#' are skipped.
    """
    config = get_config(ctx)
    lattice = resolve_lattice(ctx, lattice_name)

    all_texts: list[str] = list(texts)
    if batch_file:
        with open(batch_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    all_texts.append(line)

    if not all_texts:
        console.print("[red]Error:[/red] No input texts specified")
        raise SystemExit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    codec = GlyphCodec(lattice, config=config)

    issued: list[IssuedGlyph] = []
    failures: dict[str, str] = {}

    with Progress(console=console) as progress:
        task = progress.add_task("[green]Encoding...", total=len(all_texts))

        with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
            future_to_text = {executor.submit(codec.issue, t): t for t in all_texts}

            for future in concurrent.futures.as_completed(future_to_text):
                text = future_to_text[future]
                try:
                    issued.append(future.result())
                except Exception as e:
                    failures[text] = f"{type(e).__name__}: {e}"
                    if not continue_on_error:
                        console.print(f"[red]Error encoding {text!r}:[/red] {e}")
                        raise SystemExit(1) from e
                finally:
                    progress.advance(task)

    # Write in input order so the manifest is stable across runs.
    order = {text: i for i, text in enumerate(all_texts)}
    issued.sort(key=lambda g: order[g.text])
    manifest = []
    for glyph in issued:
        stem = f"qbc-{slugify(glyph.canonical_text)}"
        svg_path = output_dir / f"{stem}.svg"
        svg_path.write_text(glyph.svg, encoding="utf-8")
        if png:
            (output_dir / f"{stem}.png").write_bytes(glyph.to_png(scale=config.raster_scale))
        manifest.append(
            {
                "text": glyph.text,
                "canonicalText": glyph.canonical_text,
                "contentHash": glyph.content_hash,
                "file": svg_path.name,
                **glyph.summary(),
            }
        )

    (output_dir / "manifest.json").write_text(
        json.dumps(
            {
                "latticeId": lattice.lattice_id,
                "latticeVersion": lattice.version,
                "glyphs": manifest,
                "failures": failures,
            },
            indent=2,
        ),
        encoding="utf-8",
    )

    console.print()
    console.print("[bold]Batch complete:[/bold]")
    console.print(f"  [green]Success:[/green] {len(issued)}")
    console.print(f"  [red]Failed:[/red] {len(failures)}")
    console.print(f"  [blue]Output:[/blue] {output_dir}")
