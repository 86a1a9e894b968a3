"""Exception hierarchy for qbc-glyph.

Every error raised by the codec derives from :class:`GlyphCodecError` and
carries the offending value (symbol, anchor, coordinate, ...) as an
attribute so callers can diagnose without re-deriving it.
"""

from __future__ import annotations

from typing import Any


class GlyphCodecError(Exception):
    """Base exception for all qbc-glyph errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedSymbol(GlyphCodecError):
    """A canonical-text unit has no mapping in the lattice rules."""

    def __init__(self, symbol: str, position: int, lattice_id: str | None = None) -> None:
        super().__init__(
            f"No symbol mapping for {symbol!r} at position {position}"
            + (f" in lattice {lattice_id!r}" if lattice_id else ""),
            {"symbol": symbol, "position": position, "lattice_id": lattice_id},
        )
        self.symbol = symbol
        self.position = position


class EmptyInput(GlyphCodecError):
    """Empty text was given where the caller forbids it."""

    def __init__(self, message: str = "Canonical text is empty") -> None:
        super().__init__(message)


class SerializationError(GlyphCodecError):
    """Input could not be serialized or deserialized deterministically."""


class AnchorNotFound(GlyphCodecError):
    """A path references an anchor absent from the lattice."""

    def __init__(self, anchor: str, index: int | None = None, lattice_id: str | None = None) -> None:
        where = f" (step {index})" if index is not None else ""
        super().__init__(
            f"Anchor {anchor!r}{where} not found in lattice {lattice_id!r}",
            {"anchor": anchor, "index": index, "lattice_id": lattice_id},
        )
        self.anchor = anchor
        self.index = index


class UnrecognizedGeometry(GlyphCodecError):
    """Rendered geometry cannot be mapped back onto the lattice."""

    def __init__(
        self,
        message: str,
        coordinate: tuple[float, float] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.coordinate = coordinate


class SVGParseError(UnrecognizedGeometry):
    """The glyph SVG document is malformed or lacks a glyph path."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class AmbiguousSymbolMapping(GlyphCodecError):
    """The symbol-to-anchor mapping is not uniquely decodable."""

    def __init__(self, message: str, symbols: tuple[str, ...] = ()) -> None:
        super().__init__(message, {"symbols": list(symbols)})
        self.symbols = symbols


class UnsupportedPath(GlyphCodecError):
    """A path (or part of it) matches no rule of the lattice."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message, {"index": index})
        self.index = index


class LatticeVersionMismatch(GlyphCodecError):
    """A package was issued against a different lattice identity."""

    def __init__(
        self,
        expected: tuple[str, int],
        actual: tuple[str, int],
    ) -> None:
        super().__init__(
            f"Package references lattice {actual[0]!r} v{actual[1]}, "
            f"but lattice {expected[0]!r} v{expected[1]} was supplied",
            {"expected": list(expected), "actual": list(actual)},
        )
        self.expected = expected
        self.actual = actual


class LatticeValidationError(GlyphCodecError):
    """A lattice record is inconsistent or malformed."""

    def __init__(self, message: str, issues: list[Any] | None = None) -> None:
        super().__init__(message, {"issues": [str(i) for i in issues or []]})
        self.issues = list(issues or [])


class ConfigError(GlyphCodecError):
    """Invalid qbc-glyph configuration."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message, {"key": key})
        self.key = key
