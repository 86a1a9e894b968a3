"""Canonical text -> Path encoding."""

from __future__ import annotations

import logging

from qbc_glyph.exceptions import EmptyInput, UnsupportedSymbol
from qbc_glyph.lattice.model import SPACE_SYMBOL, Lattice, Rules
from qbc_glyph.path import Connector, Path, Step

logger = logging.getLogger(__name__)


def tokenize(canonical_text: str, rules: Rules, lattice_id: str | None = None) -> list[str]:
    """Split canonical text into rule symbols by greedy longest match.

    Raises:
        UnsupportedSymbol: If no symbol matches at some position.
    """
    symbols: list[str] = []
    longest = rules.max_symbol_length
    pos = 0
    while pos < len(canonical_text):
        for size in range(min(longest, len(canonical_text) - pos), 0, -1):
            candidate = canonical_text[pos : pos + size]
            if candidate in rules.symbols:
                symbols.append(candidate)
                pos += size
                break
        else:
            raise UnsupportedSymbol(canonical_text[pos], pos, lattice_id)
    return symbols


def path_from_symbols(symbols: list[str], rules: Rules) -> Path:
    """Expand a symbol sequence into steps using the rules' connector policy."""
    policy = rules.connectors
    steps: list[Step] = []
    visited: set[str] = set()
    previous_symbol: str | None = None

    for symbol in symbols:
        for offset, anchor in enumerate(rules.symbols[symbol]):
            if not steps:
                connector = None
            elif offset > 0:
                connector = policy.within_symbol
            elif SPACE_SYMBOL in (symbol, previous_symbol):
                connector = policy.word_boundary
            elif rules.enable_tick and anchor in visited:
                # Restart notch: returning to an anchor the pen already crossed.
                connector = Connector.TICK
            else:
                connector = policy.symbol_boundary
            steps.append(Step(anchor, connector))
            visited.add(anchor)
        previous_symbol = symbol

    return Path(tuple(steps))


def encode(canonical_text: str, lattice: Lattice, allow_empty: bool = True) -> Path:
    """Encode canonical text into a Path over ``lattice``.

    Args:
        canonical_text: Output of :func:`qbc_glyph.canonical.canonicalize`.
        lattice: Lattice whose rules drive the mapping.
        allow_empty: If False, empty text raises EmptyInput instead of
            producing an empty Path.

    Returns:
        Deterministic Path; identical arguments always yield an equal Path.

    Raises:
        UnsupportedSymbol: If a text unit has no mapping in the rules.
        EmptyInput: If text is empty and ``allow_empty`` is False.
    """
    if not canonical_text:
        if not allow_empty:
            raise EmptyInput()
        return Path(())

    symbols = tokenize(canonical_text, lattice.rules, lattice.lattice_id)
    path = path_from_symbols(symbols, lattice.rules)
    logger.debug(
        "Encoded %d symbols into %d steps on %s v%d",
        len(symbols),
        len(path),
        lattice.lattice_id,
        lattice.version,
    )
    return path
