"""Immutable lattice value types.

A :class:`Lattice` is identified by ``(lattice_id, version)`` and bundles
anchor geometry, normalized encoding :class:`Rules` and a presentation
:class:`Style`. Anchor and symbol mappings are read-only views, so instances
are hashable and can be shared freely between threads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any

import numpy as np

from qbc_glyph.exceptions import AnchorNotFound
from qbc_glyph.path import Connector

SPACE_SYMBOL = " "


@dataclass(frozen=True)
class ConnectorPolicy:
    """Connector chosen for each kind of join between consecutive anchors."""

    within_symbol: Connector = Connector.STRAIGHT
    symbol_boundary: Connector = Connector.STRAIGHT
    word_boundary: Connector = Connector.NOTCH

    def to_dict(self) -> dict[str, str]:
        return {
            "within_symbol": self.within_symbol.value,
            "symbol_boundary": self.symbol_boundary.value,
            "word_boundary": self.word_boundary.value,
        }


CONNECTOR_PRESETS: dict[str, ConnectorPolicy] = {
    "word": ConnectorPolicy(),
    "symbol": ConnectorPolicy(symbol_boundary=Connector.NOTCH),
    "pen": ConnectorPolicy(word_boundary=Connector.SKIP),
}


@dataclass(frozen=True)
class Rules:
    """Normalized encoding rules (the hashed RulesObject)."""

    symbols: Mapping[str, tuple[str, ...]]
    connectors: ConnectorPolicy = field(default_factory=ConnectorPolicy)
    enable_tick: bool = True
    tick_length_factor: float = 0.08
    notch_depth_factor: float = 0.15
    inside_boundary_preference: bool = True
    snap_tolerance_factor: float = 0.25

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbols", MappingProxyType(dict(self.symbols)))

    def __hash__(self) -> int:
        return hash(
            (
                frozenset(self.symbols.items()),
                self.connectors,
                self.enable_tick,
                self.tick_length_factor,
                self.notch_depth_factor,
                self.inside_boundary_preference,
                self.snap_tolerance_factor,
            )
        )

    @property
    def max_symbol_length(self) -> int:
        return max((len(s) for s in self.symbols), default=0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbols": {name: list(anchors) for name, anchors in self.symbols.items()},
            "connectors": self.connectors.to_dict(),
            "enable_tick": self.enable_tick,
            "tick_length_factor": self.tick_length_factor,
            "notch_depth_factor": self.notch_depth_factor,
            "inside_boundary_preference": self.inside_boundary_preference,
            "snap_tolerance_factor": self.snap_tolerance_factor,
        }


@dataclass(frozen=True)
class Style:
    """Presentation-only settings. Never hashed, never decoded."""

    stroke_width: float = 2.0
    stroke_color: str = "#000000"
    node_size: float = 6.0
    node_color: str = "#000000"
    node_fill_color: str = "#ffffff"
    show_nodes: bool = True
    background_color: str = "#ffffff"

    def to_dict(self) -> dict[str, Any]:
        return {
            "stroke_width": self.stroke_width,
            "stroke_color": self.stroke_color,
            "node_size": self.node_size,
            "node_color": self.node_color,
            "node_fill_color": self.node_fill_color,
            "show_nodes": self.show_nodes,
            "background_color": self.background_color,
        }


@dataclass(frozen=True)
class Lattice:
    """Anchor geometry plus rules for one ``(lattice_id, version)``."""

    lattice_id: str
    version: int
    anchors_2d: Mapping[str, tuple[float, float]]
    rules: Rules
    style: Style = field(default_factory=Style)
    anchors_3d: Mapping[str, tuple[float, float, float]] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchors_2d", MappingProxyType(dict(self.anchors_2d)))
        if self.anchors_3d is not None:
            object.__setattr__(self, "anchors_3d", MappingProxyType(dict(self.anchors_3d)))

    def __hash__(self) -> int:
        return hash((self.lattice_id, self.version, frozenset(self.anchors_2d.items()), self.rules))

    @property
    def identity(self) -> tuple[str, int]:
        return (self.lattice_id, self.version)

    def has_anchor(self, name: str) -> bool:
        return name in self.anchors_2d

    def coordinate(self, name: str, index: int | None = None) -> tuple[float, float]:
        """2D coordinate of an anchor; AnchorNotFound if absent."""
        try:
            return self.anchors_2d[name]
        except KeyError:
            raise AnchorNotFound(name, index, self.lattice_id) from None

    @cached_property
    def anchor_names(self) -> tuple[str, ...]:
        """Anchor names in sorted order (stable index for binary packing)."""
        return tuple(sorted(self.anchors_2d))

    @cached_property
    def min_anchor_spacing(self) -> float:
        """Smallest distance between two distinct anchors (inf if < 2)."""
        if len(self.anchors_2d) < 2:
            return float("inf")
        points = np.array([self.anchors_2d[n] for n in self.anchor_names], dtype=float)
        deltas = points[:, None, :] - points[None, :, :]
        distances = np.hypot(deltas[..., 0], deltas[..., 1])
        np.fill_diagonal(distances, np.inf)
        return float(distances.min())

    @cached_property
    def allowed_connectors(self) -> frozenset[Connector]:
        """Connectors this rule set can produce."""
        policy = self.rules.connectors
        allowed = {policy.within_symbol, policy.symbol_boundary, policy.word_boundary}
        if self.rules.enable_tick:
            allowed.add(Connector.TICK)
        return frozenset(allowed)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], require_invertible: bool = True) -> Lattice:
        """Build and validate a lattice from an external record."""
        from qbc_glyph.lattice.loader import lattice_from_record

        return lattice_from_record(record, require_invertible=require_invertible)

    def to_record(self) -> dict[str, Any]:
        from qbc_glyph.lattice.loader import lattice_to_record

        return lattice_to_record(self)
