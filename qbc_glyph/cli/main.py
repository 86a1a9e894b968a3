"""qbc-glyph command-line entry point."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.logging import RichHandler

from qbc_glyph import __version__
from qbc_glyph.cli.commands import (
    batch,
    composite,
    decode,
    encode,
    hash_text,
    lattice,
    verify,
    verify_composite,
)
from qbc_glyph.cli.utils import err_console
from qbc_glyph.config import Config
from qbc_glyph.exceptions import ConfigError


@click.group()
@click.version_option(__version__, prog_name="qbc-glyph")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Config file (default: ~/.config/qbc-glyph/config.yaml)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None) -> None:
    """Encode text into lattice glyphs, and decode and verify them."""
    ctx.ensure_object(dict)
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ConfigError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    level = (log_level or config.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    ctx.obj["config"] = config
    ctx.obj["log_level"] = level


cli.add_command(encode)
cli.add_command(decode)
cli.add_command(hash_text)
cli.add_command(verify)
cli.add_command(batch)
cli.add_command(composite)
cli.add_command(verify_composite)
cli.add_command(lattice)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
