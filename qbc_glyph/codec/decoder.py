"""Glyph package -> Path (and canonical text) decoding.

Structured packages are validated against the lattice and returned as-is.
Rendered packages are parsed back from their SVG path commands: each
endpoint is snapped to the nearest projected anchor (under the orientation
stamped on the SVG) and each command is classified into the connector the
renderer emitted it for.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np
from svg.path import Close, CubicBezier, Line, Move, QuadraticBezier, parse_path

from qbc_glyph.canonical import is_canonical
from qbc_glyph.codec.encoder import path_from_symbols
from qbc_glyph.codec.package import GlyphPackage, PackageKind
from qbc_glyph.exceptions import (
    AmbiguousSymbolMapping,
    LatticeVersionMismatch,
    SerializationError,
    UnrecognizedGeometry,
    UnsupportedPath,
)
from qbc_glyph.lattice.model import Lattice
from qbc_glyph.lattice.validation import check_unique_decodability
from qbc_glyph.path import Connector, Path, Step
from qbc_glyph.svg.parser import find_glyph_path, parse_svg_string, read_metadata
from qbc_glyph.svg.projection import DEFAULT_MARGIN, Projection

logger = logging.getLogger(__name__)


def _check_identity(lattice: Lattice, lattice_id: str | None, version: int | None) -> None:
    actual = (
        lattice_id if lattice_id is not None else lattice.lattice_id,
        version if version is not None else lattice.version,
    )
    if actual != lattice.identity:
        raise LatticeVersionMismatch(lattice.identity, actual)


def validate_path(path: Path, lattice: Lattice) -> Path:
    """Check every anchor and connector of ``path`` against ``lattice``.

    Raises:
        AnchorNotFound: For an anchor absent from the lattice.
        UnsupportedPath: For a connector the rule set does not define, or
            connectors placed on/omitted from the wrong steps.
    """
    allowed = lattice.allowed_connectors
    for index, step in enumerate(path):
        lattice.coordinate(step.anchor, index)
        if index == 0:
            if step.connector is not None:
                raise UnsupportedPath("The first step cannot carry a connector", index)
        elif step.connector is None:
            raise UnsupportedPath(f"Step {index} has no connector", index)
        elif step.connector not in allowed:
            raise UnsupportedPath(
                f"Connector {step.connector.value!r} at step {index} is not defined "
                f"by lattice {lattice.lattice_id!r} v{lattice.version}",
                index,
            )
    return path


def _classify(segment: Any, first: bool) -> Connector | None:
    if isinstance(segment, Move):
        return None if first else Connector.SKIP
    if first:
        raise UnrecognizedGeometry("Glyph path does not start with a move command")
    if isinstance(segment, Close):
        raise UnrecognizedGeometry("Glyph path contains a close-path command")
    if isinstance(segment, Line):
        return Connector.STRAIGHT
    if isinstance(segment, QuadraticBezier):
        return Connector.NOTCH
    if isinstance(segment, CubicBezier):
        return Connector.TICK
    raise UnrecognizedGeometry(f"Unsupported path segment {type(segment).__name__}")


def decode_svg_path(svg: str, lattice: Lattice) -> Path:
    """Recover a Path from a rendered glyph SVG.

    Raises:
        SVGParseError: If the document is malformed or has no glyph path.
        LatticeVersionMismatch: If the SVG was rendered for another lattice.
        UnrecognizedGeometry: If a coordinate does not snap to any anchor
            or a drawing command has no connector meaning.
    """
    root = parse_svg_string(svg)
    meta = read_metadata(root)
    _check_identity(lattice, meta.lattice_id, meta.lattice_version)

    d = find_glyph_path(root).get("d") or ""
    if not d.strip():
        return Path(())

    margin = meta.margin if meta.margin is not None else DEFAULT_MARGIN
    try:
        projection = Projection.for_lattice(lattice, meta.size, margin, meta.orientation)
    except ValueError as e:
        raise UnrecognizedGeometry(str(e)) from e
    names, points = projection.project_anchors(lattice)
    tolerance = projection.snap_tolerance(lattice)

    try:
        segments = list(parse_path(d))
    except (ValueError, IndexError) as e:
        raise UnrecognizedGeometry(f"Malformed path data: {e}") from e

    steps: list[Step] = []
    for segment in segments:
        connector = _classify(segment, first=not steps)
        x, y = segment.end.real, segment.end.imag
        distances = np.hypot(points[:, 0] - x, points[:, 1] - y)
        nearest = int(np.argmin(distances))
        if distances[nearest] > tolerance:
            raise UnrecognizedGeometry(
                f"Coordinate ({x:.3f}, {y:.3f}) is {distances[nearest]:.3f} from the nearest "
                f"anchor {names[nearest]!r}; snap tolerance is {tolerance:.3f}",
                coordinate=(x, y),
            )
        steps.append(Step(names[nearest], connector))

    return validate_path(Path(tuple(steps)), lattice)


def decode(package: GlyphPackage | Mapping[str, Any], lattice: Lattice) -> Path:
    """Recover the Path carried by ``package``.

    Args:
        package: Structured or rendered glyph package (object or mapping).
        lattice: Lattice the glyph claims to be issued against.

    Returns:
        The validated Path.
    """
    if not isinstance(package, GlyphPackage):
        package = GlyphPackage.from_dict(package)
    _check_identity(lattice, package.lattice_id, package.lattice_version)

    if package.kind is PackageKind.STRUCTURED:
        if package.path is None:
            raise SerializationError("Structured glyph package carries no path")
        return validate_path(package.path, lattice)

    path = decode_svg_path(package.svg or "", lattice)
    logger.debug("Decoded %d steps from rendered glyph", len(path))
    return path


def parse_symbols(anchors: tuple[str, ...], lattice: Lattice) -> list[str]:
    """Split an anchor sequence into symbols.

    Dynamic programming over prefixes; parse counts are capped at two so an
    ambiguous parse is detected without enumerating every alternative.
    """
    inverse = {sequence: symbol for symbol, sequence in lattice.rules.symbols.items()}
    longest = max((len(seq) for seq in inverse), default=0)
    n = len(anchors)
    ways = [0] * (n + 1)
    back: list[tuple[int, str] | None] = [None] * (n + 1)
    ways[0] = 1

    for end in range(1, n + 1):
        for size in range(1, min(longest, end) + 1):
            start = end - size
            symbol = inverse.get(anchors[start:end])
            if symbol is None or not ways[start]:
                continue
            if back[end] is None:
                back[end] = (start, symbol)
            ways[end] = min(2, ways[end] + ways[start])

    if ways[n] == 0:
        reached = max(i for i in range(n + 1) if ways[i])
        raise UnsupportedPath(
            f"No symbol mapping matches the anchor run starting at step {reached} "
            f"({list(anchors[reached:reached + longest])})",
            reached,
        )
    if ways[n] > 1:
        raise AmbiguousSymbolMapping("Anchor sequence has more than one symbol parse")

    symbols: list[str] = []
    end = n
    while end:
        start, symbol = back[end]  # type: ignore[misc]
        symbols.append(symbol)
        end = start
    symbols.reverse()
    return symbols


def text_from_path(path: Path, lattice: Lattice) -> str:
    """Invert the symbol mapping over an already decoded ``path``.

    Raises:
        AmbiguousSymbolMapping: If the lattice's symbol map is not uniquely
            decodable.
        UnsupportedPath: If no symbol parse exists, or the path's connectors
            differ from what the rules produce for the recovered text.
    """
    check_unique_decodability(lattice.rules.symbols)
    if not path:
        return ""

    symbols = parse_symbols(path.anchors, lattice)
    expected = path_from_symbols(symbols, lattice.rules)
    for index, (got, want) in enumerate(zip(path, expected)):
        if got != want:
            raise UnsupportedPath(
                f"Step {index} joins {got.anchor!r} with {got.connector and got.connector.value!r}; "
                f"the rules produce {want.connector and want.connector.value!r}",
                index,
            )

    text = "".join(symbols)
    if not is_canonical(text):
        raise UnsupportedPath(f"Decoded text {text!r} is not canonical")
    return text


def decode_text(package: GlyphPackage | Mapping[str, Any], lattice: Lattice) -> str:
    """Decode ``package`` and invert the symbol mapping to canonical text."""
    return text_from_path(decode(package, lattice), lattice)
