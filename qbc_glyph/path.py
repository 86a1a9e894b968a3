"""Path model: the ordered anchor/connector sequence a glyph draws."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from qbc_glyph.exceptions import SerializationError, UnsupportedPath


class Connector(str, Enum):
    """How a step is joined to the previous anchor."""

    STRAIGHT = "straight"
    NOTCH = "notch"
    SKIP = "skip"
    TICK = "tick"

    @classmethod
    def parse(cls, value: Any) -> Connector:
        """Parse a connector name, raising UnsupportedPath if unknown."""
        if isinstance(value, Connector):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedPath(f"Unknown connector directive: {value!r}") from None


@dataclass(frozen=True)
class Step:
    """One anchor visit; ``connector`` is None only for the first step."""

    anchor: str
    connector: Connector | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "anchor": self.anchor,
            "connector": self.connector.value if self.connector else None,
        }


@dataclass(frozen=True)
class Path:
    """Immutable ordered sequence of steps."""

    steps: tuple[Step, ...] = ()

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __getitem__(self, index: int) -> Step:
        return self.steps[index]

    def __bool__(self) -> bool:
        return bool(self.steps)

    @property
    def anchors(self) -> tuple[str, ...]:
        """Anchor names in visiting order."""
        return tuple(step.anchor for step in self.steps)

    @property
    def connectors(self) -> tuple[Connector | None, ...]:
        return tuple(step.connector for step in self.steps)

    def visit_counts(self) -> dict[str, int]:
        """Number of visits per anchor."""
        return dict(Counter(self.anchors))

    def to_list(self) -> list[dict[str, Any]]:
        """Machine-readable form used in packages and as hash input."""
        return [step.to_dict() for step in self.steps]

    @classmethod
    def from_steps(cls, steps: Iterable[Step]) -> Path:
        return cls(tuple(steps))

    @classmethod
    def from_list(cls, items: Iterable[Mapping[str, Any]]) -> Path:
        """Build a path from its list-of-dicts serialization.

        Only the shape is checked here; connector placement is validated
        against a lattice by the decoder.
        """
        steps: list[Step] = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise SerializationError(f"Path step {index} is not a mapping: {item!r}")
            anchor = item.get("anchor")
            if not isinstance(anchor, str) or not anchor:
                raise SerializationError(f"Path step {index} has no anchor name")
            raw = item.get("connector")
            connector = None if raw is None else Connector.parse(raw)
            steps.append(Step(anchor, connector))
        return cls(tuple(steps))
