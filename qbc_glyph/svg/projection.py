"""Lattice -> canvas projection shared by the renderer and the decoder."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import numpy as np

from qbc_glyph.lattice.model import Lattice

DEFAULT_SIZE = 200
DEFAULT_MARGIN = 20

ROTATIONS = (0, 90, 180, 270)

_ROTATE = re.compile(r"^rotate\((\d+)\)$")


@dataclass(frozen=True)
class Orientation:
    """Presentation transform of the glyph on its canvas.

    Applied after projection, in this order: horizontal mirror, vertical
    flip, then clockwise rotation about the canvas center. Every
    orientation maps the inner square onto itself, so anchor spacing and
    snap tolerance are unchanged.
    """

    rotation: int = 0
    mirror: bool = False
    flip_vertical: bool = False

    def __post_init__(self) -> None:
        if self.rotation not in ROTATIONS:
            raise ValueError(f"Rotation must be one of {ROTATIONS}, got {self.rotation!r}")

    @property
    def is_identity(self) -> bool:
        return self.rotation == 0 and not self.mirror and not self.flip_vertical

    def apply(self, point: tuple[float, float], size: float) -> tuple[float, float]:
        if self.is_identity:
            return point
        x, y = point
        if self.mirror:
            x = size - x
        if self.flip_vertical:
            y = size - y
        if self.rotation:
            center = size / 2
            u, v = x - center, y - center
            for _ in range(self.rotation // 90):
                u, v = -v, u
            x, y = center + u, center + v
        return (x, y)

    def to_attribute(self) -> str:
        """Compact form stamped on the root ``<svg>`` as ``data-orientation``."""
        parts = [f"rotate({self.rotation})"]
        if self.mirror:
            parts.append("mirror")
        if self.flip_vertical:
            parts.append("flip-vertical")
        return " ".join(parts)

    @classmethod
    def parse(cls, value: str | None) -> Orientation:
        """Inverse of :meth:`to_attribute`; ``None`` means no transform.

        Raises:
            ValueError: For unknown tokens or an unsupported rotation.
        """
        if value is None:
            return cls()
        rotation, mirror, flip_vertical = 0, False, False
        for token in value.split():
            match = _ROTATE.match(token)
            if match:
                rotation = int(match.group(1))
            elif token == "mirror":
                mirror = True
            elif token == "flip-vertical":
                flip_vertical = True
            else:
                raise ValueError(f"Unknown orientation token {token!r}")
        return cls(rotation, mirror, flip_vertical)


@dataclass(frozen=True)
class Projection:
    """Uniform scale + offset mapping lattice units onto a square canvas."""

    size: float
    margin: float
    min_x: float
    min_y: float
    scale: float
    orientation: Orientation = field(default_factory=Orientation)

    @classmethod
    def for_lattice(
        cls,
        lattice: Lattice,
        size: float = DEFAULT_SIZE,
        margin: float = DEFAULT_MARGIN,
        orientation: Orientation | None = None,
    ) -> Projection:
        if size <= 2 * margin:
            raise ValueError(f"Canvas size {size} leaves no room inside margin {margin}")
        xs = [x for x, _ in lattice.anchors_2d.values()] or [0.0]
        ys = [y for _, y in lattice.anchors_2d.values()] or [0.0]
        span = max(max(xs) - min(xs), max(ys) - min(ys))
        inner = size - 2 * margin
        return cls(
            size=float(size),
            margin=float(margin),
            min_x=min(xs),
            min_y=min(ys),
            scale=inner / span if span > 0 else 1.0,
            orientation=orientation or Orientation(),
        )

    @property
    def inner_size(self) -> float:
        return self.size - 2 * self.margin

    def project(self, point: tuple[float, float]) -> tuple[float, float]:
        x, y = point
        canvas = (
            self.margin + (x - self.min_x) * self.scale,
            self.margin + (y - self.min_y) * self.scale,
        )
        return self.orientation.apply(canvas, self.size)

    def project_anchors(self, lattice: Lattice) -> tuple[tuple[str, ...], np.ndarray]:
        """Anchor names (sorted) and an ``N x 2`` array of canvas positions."""
        names = lattice.anchor_names
        points = np.array([self.project(lattice.anchors_2d[n]) for n in names], dtype=float)
        return names, points.reshape(len(names), 2)

    def snap_tolerance(self, lattice: Lattice) -> float:
        """Maximum canvas distance at which a coordinate snaps to an anchor.

        Always strictly below half the minimum projected anchor spacing, so
        no coordinate can be within tolerance of two anchors.
        """
        factor = lattice.rules.snap_tolerance_factor
        spacing = lattice.min_anchor_spacing
        if np.isfinite(spacing):
            return factor * spacing * self.scale
        return factor * self.inner_size
