"""Lattice model for qbc-glyph.

This subpackage provides:
- Immutable Lattice, Rules, ConnectorPolicy and Style value types
- Record loading from YAML/JSON (current and legacy field spellings)
- Load-time validation, including a unique-decodability check
"""

from qbc_glyph.lattice.model import (
    CONNECTOR_PRESETS,
    SPACE_SYMBOL,
    ConnectorPolicy,
    Lattice,
    Rules,
    Style,
)
from qbc_glyph.lattice.rules import normalize_rules, normalize_style
from qbc_glyph.lattice.loader import (
    build_lattice,
    lattice_from_record,
    lattice_to_record,
    load_lattice,
    read_lattice_record,
)
from qbc_glyph.lattice.validation import (
    LatticeIssue,
    check_unique_decodability,
    validate_lattice,
)

__all__ = [
    "CONNECTOR_PRESETS",
    "SPACE_SYMBOL",
    "ConnectorPolicy",
    "Lattice",
    "Rules",
    "Style",
    "normalize_rules",
    "normalize_style",
    "build_lattice",
    "lattice_from_record",
    "lattice_to_record",
    "load_lattice",
    "read_lattice_record",
    "LatticeIssue",
    "check_unique_decodability",
    "validate_lattice",
]
