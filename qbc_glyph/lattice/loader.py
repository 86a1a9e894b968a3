"""Lattice record loading.

Records arrive from an external configuration store (or a YAML/JSON file)
in either the current shape::

    {latticeId, version, anchors2D: {name: {x, y}}, anchors3D, rules, style}

or the legacy table shape (``lattice_key``, ``anchors_json`` with
``[x, y]`` pairs, ``rules_json``, ``style_json``). Both are normalized
here into an immutable :class:`Lattice`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from qbc_glyph.exceptions import LatticeValidationError
from qbc_glyph.lattice.model import Lattice
from qbc_glyph.lattice.rules import normalize_rules, normalize_style
from qbc_glyph.lattice.validation import (
    check_unique_decodability,
    errors_only,
    validate_lattice,
)

logger = logging.getLogger(__name__)

_ID_KEYS = ("latticeId", "lattice_id", "lattice_key")
_VERSION_KEYS = ("version", "latticeVersion", "lattice_version")
_ANCHORS_2D_KEYS = ("anchors2D", "anchors_2d", "anchors_json", "anchors")
_ANCHORS_3D_KEYS = ("anchors3D", "anchors_3d", "anchors3d_json")
_RULES_KEYS = ("rules", "rules_json")
_STYLE_KEYS = ("style", "style_json")


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def _coordinate(value: Any, name: str, dims: int) -> tuple[float, ...]:
    axes = ("x", "y", "z")[:dims]
    if isinstance(value, Mapping):
        try:
            raw = [value[axis] for axis in axes]
        except KeyError as e:
            raise LatticeValidationError(f"anchor {name!r}: missing coordinate {e.args[0]!r}") from None
    elif isinstance(value, (list, tuple)) and len(value) == dims:
        raw = list(value)
    else:
        raise LatticeValidationError(f"anchor {name!r}: expected {dims}D coordinate, got {value!r}")

    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in raw):
        raise LatticeValidationError(f"anchor {name!r}: coordinates must be numbers")
    return tuple(float(v) for v in raw)


def _anchors(raw: Any, dims: int, field: str) -> dict[str, tuple[float, ...]]:
    if not isinstance(raw, Mapping):
        raise LatticeValidationError(f"{field}: expected mapping of anchor name to coordinate")
    return {str(name): _coordinate(value, str(name), dims) for name, value in raw.items()}


def build_lattice(record: Mapping[str, Any]) -> Lattice:
    """Normalize a lattice record without running integrity checks.

    Raises:
        LatticeValidationError: If the record is structurally malformed.
    """
    if not isinstance(record, Mapping):
        raise LatticeValidationError(f"lattice record must be a mapping, got {type(record).__name__}")

    lattice_id = _first(record, _ID_KEYS)
    if not isinstance(lattice_id, str) or not lattice_id:
        raise LatticeValidationError("latticeId: required non-empty string")

    version = _first(record, _VERSION_KEYS)
    if isinstance(version, bool) or not isinstance(version, int):
        raise LatticeValidationError(f"version: expected integer, got {version!r}")

    raw_anchors = _first(record, _ANCHORS_2D_KEYS)
    if raw_anchors is None:
        raise LatticeValidationError("anchors2D: required field is missing")
    anchors_2d = _anchors(raw_anchors, 2, "anchors2D")

    raw_3d = _first(record, _ANCHORS_3D_KEYS)
    anchors_3d = _anchors(raw_3d, 3, "anchors3D") if raw_3d is not None else None

    return Lattice(
        lattice_id=lattice_id,
        version=version,
        anchors_2d=anchors_2d,
        rules=normalize_rules(_first(record, _RULES_KEYS), anchors_2d),
        style=normalize_style(_first(record, _STYLE_KEYS)),
        anchors_3d=anchors_3d,
    )


def lattice_from_record(record: Mapping[str, Any], require_invertible: bool = True) -> Lattice:
    """Normalize and validate a lattice record.

    Args:
        record: Raw lattice record (current or legacy field spellings).
        require_invertible: Also reject symbol maps that are not uniquely
            decodable (raises AmbiguousSymbolMapping).

    Returns:
        Immutable Lattice.

    Raises:
        LatticeValidationError: If the record is malformed or inconsistent.
    """
    lattice = build_lattice(record)
    lattice_id, version = lattice.identity

    issues = validate_lattice(lattice)
    for issue in issues:
        logger.debug("Lattice %s v%d: %s", lattice_id, version, issue)
    errors = errors_only(issues)
    if errors:
        raise LatticeValidationError(
            f"Lattice {lattice_id!r} v{version} failed validation: {errors[0]}",
            errors,
        )

    if require_invertible:
        check_unique_decodability(lattice.rules.symbols)

    logger.info(
        "Loaded lattice %s v%d (%d anchors, %d symbols)",
        lattice_id,
        version,
        len(lattice.anchors_2d),
        len(lattice.rules.symbols),
    )
    return lattice


def lattice_to_record(lattice: Lattice) -> dict[str, Any]:
    """Serialize a lattice back to the current record shape."""
    return {
        "latticeId": lattice.lattice_id,
        "version": lattice.version,
        "anchors2D": {name: {"x": x, "y": y} for name, (x, y) in lattice.anchors_2d.items()},
        "anchors3D": (
            {name: {"x": x, "y": y, "z": z} for name, (x, y, z) in lattice.anchors_3d.items()}
            if lattice.anchors_3d is not None
            else None
        ),
        "rules": lattice.rules.to_dict(),
        "style": lattice.style.to_dict(),
    }


def read_lattice_record(path: Path) -> dict[str, Any]:
    """Read a raw lattice record from a ``.json`` or YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Lattice file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LatticeValidationError(f"Invalid lattice file {path}: {e}") from e
    if not isinstance(data, dict):
        raise LatticeValidationError(f"Lattice file {path} does not contain a mapping")
    return data


def load_lattice(path: Path | str, require_invertible: bool = True) -> Lattice:
    """Load a lattice from a YAML or JSON file."""
    return lattice_from_record(read_lattice_record(Path(path)), require_invertible=require_invertible)
