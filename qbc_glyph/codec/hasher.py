"""Content hashing: a reproducible SHA-256 claim over an issued glyph.

The digest covers the canonical text, the lattice identity, the full
normalized rules object and the path. Hashing the rules themselves (not
only a version number) means a rule edit made without a version bump
cannot silently re-verify old glyphs.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from qbc_glyph.exceptions import SerializationError
from qbc_glyph.lattice.model import Lattice, Rules
from qbc_glyph.path import Path

HASH_SCHEME = "qbc-glyph-hash/1"
COMPOSITE_SCHEME = "qbc-glyph-composite/1"


def _normalize(obj: Any, where: str = "$") -> Any:
    """Convert ``obj`` to plain JSON types with fixed number forms."""
    if obj is None or isinstance(obj, bool):
        return obj
    if isinstance(obj, Enum):
        return _normalize(obj.value, where)
    if isinstance(obj, str):
        return obj
    if isinstance(obj, int):
        return int(obj)
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise SerializationError(f"{where}: non-finite number {obj!r} cannot be hashed")
        # 1.0 and 1 must hash identically
        return int(obj) if obj.is_integer() else obj
    if isinstance(obj, Path):
        return _normalize(obj.to_list(), where)
    if hasattr(obj, "to_dict"):
        return _normalize(obj.to_dict(), where)
    if isinstance(obj, Mapping):
        result = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise SerializationError(f"{where}: mapping key {key!r} is not a string")
            result[key] = _normalize(value, f"{where}.{key}")
        return result
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return [_normalize(value, f"{where}[{i}]") for i, value in enumerate(obj)]
    raise SerializationError(f"{where}: value of type {type(obj).__name__} is not serializable")


def dump_canonical(obj: Any) -> bytes:
    """Deterministic UTF-8 JSON: sorted keys, no insignificant whitespace."""
    try:
        text = json.dumps(
            _normalize(obj),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot serialize hash input: {e}") from e
    return text.encode("utf-8")


def content_hash(
    canonical_text: str,
    lattice_id: str,
    lattice_version: int,
    rules: Rules | Mapping[str, Any],
    path: Path | Sequence[Mapping[str, Any]],
) -> str:
    """Return the 64-character lowercase hex content hash.

    Raises:
        SerializationError: If any input cannot be serialized.
    """
    if not isinstance(canonical_text, str):
        raise SerializationError("canonical_text must be a string")
    if not isinstance(lattice_id, str):
        raise SerializationError("lattice_id must be a string")
    if isinstance(lattice_version, bool) or not isinstance(lattice_version, int):
        raise SerializationError("lattice_version must be an integer")

    payload = {
        "scheme": HASH_SCHEME,
        "canonical_text": canonical_text,
        "lattice_id": lattice_id,
        "lattice_version": lattice_version,
        "rules": rules,
        "path": path,
    }
    return hashlib.sha256(dump_canonical(payload)).hexdigest()


def hash_glyph(canonical_text: str, lattice: Lattice, path: Path) -> str:
    """Content hash of ``path`` issued for ``canonical_text`` on ``lattice``."""
    return content_hash(canonical_text, lattice.lattice_id, lattice.version, lattice.rules, path)


def composite_hash(
    canonical_text: str,
    lattice_id: str,
    lattice_version: int,
    chunk_hashes: Sequence[str],
) -> str:
    """Hash binding the ordered chunk hashes of a composite glyph to its full text."""
    if not isinstance(canonical_text, str):
        raise SerializationError("canonical_text must be a string")
    payload = {
        "scheme": COMPOSITE_SCHEME,
        "canonical_text": canonical_text,
        "lattice_id": lattice_id,
        "lattice_version": lattice_version,
        "chunks": list(chunk_hashes),
    }
    return hashlib.sha256(dump_canonical(payload)).hexdigest()
