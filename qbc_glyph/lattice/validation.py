"""Load-time lattice validation.

Integrity problems in a lattice are configuration defects. They are
reported here, once, when the lattice is loaded, instead of surfacing as
odd failures in the middle of an encode or decode.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from itertools import combinations

from qbc_glyph.canonical import ALPHABET
from qbc_glyph.exceptions import AmbiguousSymbolMapping
from qbc_glyph.lattice.model import SPACE_SYMBOL, Lattice

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class LatticeIssue:
    """A single validation finding."""

    level: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message} ({self.level})"


def _check_anchors(lattice: Lattice) -> list[LatticeIssue]:
    issues: list[LatticeIssue] = []
    if not lattice.anchors_2d:
        issues.append(LatticeIssue(ERROR, "anchors_2d", "lattice has no anchors"))
        return issues

    for name, (x, y) in lattice.anchors_2d.items():
        if not (math.isfinite(x) and math.isfinite(y)):
            issues.append(LatticeIssue(ERROR, f"anchors_2d[{name!r}]", "coordinate is not finite"))

    if lattice.min_anchor_spacing == 0.0:
        for a, b in combinations(lattice.anchor_names, 2):
            if lattice.anchors_2d[a] == lattice.anchors_2d[b]:
                issues.append(
                    LatticeIssue(
                        ERROR,
                        "anchors_2d",
                        f"anchors {a!r} and {b!r} share a coordinate; snapping would be ambiguous",
                    )
                )

    if lattice.anchors_3d is not None:
        for name in sorted(set(lattice.anchors_3d) - set(lattice.anchors_2d)):
            issues.append(
                LatticeIssue(ERROR, f"anchors_3d[{name!r}]", "3D anchor has no 2D counterpart")
            )
    return issues


def _check_symbols(lattice: Lattice) -> list[LatticeIssue]:
    issues: list[LatticeIssue] = []
    symbols = lattice.rules.symbols
    if not symbols:
        issues.append(LatticeIssue(ERROR, "rules.symbols", "rule set maps no symbols"))
        return issues

    for symbol, anchors in symbols.items():
        field = f"rules.symbols[{symbol!r}]"
        if not symbol or any(ch not in ALPHABET for ch in symbol):
            issues.append(LatticeIssue(ERROR, field, "symbol is not canonical text"))
        elif SPACE_SYMBOL in symbol and symbol != SPACE_SYMBOL:
            issues.append(LatticeIssue(ERROR, field, "multi-character symbols cannot contain a space"))
        if not anchors:
            issues.append(LatticeIssue(ERROR, field, "symbol maps to no anchors"))
        for anchor in anchors:
            if not lattice.has_anchor(anchor):
                issues.append(LatticeIssue(ERROR, field, f"anchor {anchor!r} does not exist"))

    for letter in sorted(ALPHABET):
        if letter not in symbols:
            label = "space" if letter == SPACE_SYMBOL else repr(letter)
            issues.append(
                LatticeIssue(
                    WARNING,
                    "rules.symbols",
                    f"{label} is not mapped; text containing it cannot be encoded",
                )
            )
    return issues


def _check_factors(lattice: Lattice) -> list[LatticeIssue]:
    rules = lattice.rules
    issues: list[LatticeIssue] = []
    if not 0.0 < rules.snap_tolerance_factor < 0.5:
        issues.append(
            LatticeIssue(
                ERROR,
                "rules.snap_tolerance_factor",
                "must be greater than 0 and below 0.5 of the minimum anchor spacing",
            )
        )
    if rules.tick_length_factor <= 0.0:
        issues.append(LatticeIssue(ERROR, "rules.tick_length_factor", "must be positive"))
    if rules.notch_depth_factor <= 0.0:
        issues.append(LatticeIssue(ERROR, "rules.notch_depth_factor", "must be positive"))
    return issues


def validate_lattice(lattice: Lattice) -> list[LatticeIssue]:
    """Return every integrity issue found in ``lattice`` (errors and warnings)."""
    issues: list[LatticeIssue] = []
    if not lattice.lattice_id:
        issues.append(LatticeIssue(ERROR, "lattice_id", "must be a non-empty string"))
    if lattice.version < 0:
        issues.append(LatticeIssue(ERROR, "version", "must be a non-negative integer"))
    issues.extend(_check_anchors(lattice))
    issues.extend(_check_symbols(lattice))
    issues.extend(_check_factors(lattice))
    return issues


def errors_only(issues: list[LatticeIssue]) -> list[LatticeIssue]:
    return [issue for issue in issues if issue.level == ERROR]


def check_unique_decodability(symbols: Mapping[str, tuple[str, ...]]) -> None:
    """Raise AmbiguousSymbolMapping unless the anchor code is uniquely decodable.

    Runs the Sardinas-Patterson test over the symbols' anchor sequences.
    Prefix-free codes pass trivially; codes that are uniquely decodable but
    not prefix-free pass too (decoding then needs lookahead, which the
    decoder's dynamic-programming parse provides).
    """
    owners: dict[tuple[str, ...], str] = {}
    for symbol, anchors in sorted(symbols.items()):
        if not anchors:
            raise AmbiguousSymbolMapping(f"Symbol {symbol!r} maps to an empty anchor sequence", (symbol,))
        if anchors in owners:
            raise AmbiguousSymbolMapping(
                f"Symbols {owners[anchors]!r} and {symbol!r} share the anchor sequence {list(anchors)}",
                (owners[anchors], symbol),
            )
        owners[anchors] = symbol

    codewords = set(owners)

    def dangling(left: set[tuple[str, ...]], right: set[tuple[str, ...]]) -> set[tuple[str, ...]]:
        suffixes = set()
        for u in left:
            for v in right:
                if u != v and len(u) < len(v) and v[: len(u)] == u:
                    suffixes.add(v[len(u):])
        return suffixes

    current = dangling(codewords, codewords)
    seen: set[frozenset[tuple[str, ...]]] = set()
    while current:
        clash = current & codewords
        if clash:
            word = min(clash)
            raise AmbiguousSymbolMapping(
                f"Anchor code is not uniquely decodable: symbol {owners[word]!r} "
                f"({list(word)}) is a dangling suffix of other symbols",
                (owners[word],),
            )
        key = frozenset(current)
        if key in seen:
            break
        seen.add(key)
        current = dangling(codewords, current) | dangling(current, codewords)
