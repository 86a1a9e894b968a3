"""Glyph packages: the persisted/transmitted form of an issued glyph."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from qbc_glyph.exceptions import SerializationError
from qbc_glyph.lattice.model import Lattice
from qbc_glyph.path import Path


class PackageKind(str, Enum):
    STRUCTURED = "structured"
    RENDERED = "rendered"


@dataclass(frozen=True)
class GlyphPackage:
    """Either a structured package embedding the Path, or a rendered SVG."""

    kind: PackageKind
    lattice_id: str
    lattice_version: int
    path: Path | None = None
    svg: str | None = None

    @classmethod
    def structured(cls, path: Path, lattice: Lattice) -> GlyphPackage:
        return cls(PackageKind.STRUCTURED, lattice.lattice_id, lattice.version, path=path)

    @classmethod
    def rendered(cls, svg: str, lattice: Lattice) -> GlyphPackage:
        return cls(PackageKind.RENDERED, lattice.lattice_id, lattice.version, svg=svg)

    @property
    def lattice_identity(self) -> tuple[str, int]:
        return (self.lattice_id, self.lattice_version)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "latticeId": self.lattice_id,
            "latticeVersion": self.lattice_version,
        }
        if self.kind is PackageKind.STRUCTURED:
            data["path"] = self.path.to_list() if self.path is not None else []
        else:
            data["svg"] = self.svg
        return data

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GlyphPackage:
        """Parse a package mapping (snake_case or camelCase keys).

        Raises:
            SerializationError: If the mapping is not a valid package.
        """
        if not isinstance(data, Mapping):
            raise SerializationError("Glyph package must be a mapping")
        try:
            kind = PackageKind(data.get("kind"))
        except ValueError:
            raise SerializationError(f"Unknown glyph package kind: {data.get('kind')!r}") from None

        lattice_id = data.get("latticeId", data.get("lattice_id"))
        lattice_version = data.get("latticeVersion", data.get("lattice_version"))
        if not isinstance(lattice_id, str) or not lattice_id:
            raise SerializationError("Glyph package is missing latticeId")
        if isinstance(lattice_version, bool) or not isinstance(lattice_version, int):
            raise SerializationError("Glyph package latticeVersion must be an integer")

        if kind is PackageKind.STRUCTURED:
            raw_path = data.get("path")
            if not isinstance(raw_path, list):
                raise SerializationError("Structured glyph package must embed a path list")
            return cls(kind, lattice_id, lattice_version, path=Path.from_list(raw_path))

        svg = data.get("svg")
        if not isinstance(svg, str) or not svg.strip():
            raise SerializationError("Rendered glyph package must embed an SVG document")
        return cls(kind, lattice_id, lattice_version, svg=svg)

    @classmethod
    def from_json(cls, text: str) -> GlyphPackage:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid glyph package JSON: {e}") from e
        return cls.from_dict(data)
