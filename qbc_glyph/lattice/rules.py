"""Normalization of raw rule and style records.

Lattice records have been written with several spellings of the same
parameter over time (``enableTick`` / ``enableRestartNotch``,
``tickLengthFactor`` / ``notchLengthFactor``, ...). This module maps every
known variant onto the single :class:`~qbc_glyph.lattice.model.Rules`
representation. It runs once when a lattice is loaded; encode and decode
only ever see normalized rules.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from qbc_glyph.canonical import ALPHABET
from qbc_glyph.exceptions import LatticeValidationError, UnsupportedPath
from qbc_glyph.lattice.model import (
    CONNECTOR_PRESETS,
    SPACE_SYMBOL,
    ConnectorPolicy,
    Rules,
    Style,
)
from qbc_glyph.path import Connector

logger = logging.getLogger(__name__)

# Normalized field -> accepted spellings, newest first.
RULE_ALIASES: dict[str, tuple[str, ...]] = {
    "symbols": ("symbols", "symbol_map", "symbolMap"),
    "space_anchor": ("space_anchor", "spaceAnchor"),
    "connector_policy": ("connector_policy", "connectorPolicy"),
    "connectors": ("connectors",),
    "enable_tick": ("enable_tick", "enableTick", "enableRestartNotch", "enable_restart_notch"),
    "tick_length_factor": ("tick_length_factor", "tickLengthFactor", "notchLengthFactor"),
    "notch_depth_factor": ("notch_depth_factor", "notchDepthFactor"),
    "inside_boundary_preference": (
        "inside_boundary_preference",
        "insideBoundaryPreference",
        "insideSquarePreference",
    ),
    "snap_tolerance_factor": ("snap_tolerance_factor", "snapToleranceFactor"),
}

CONNECTOR_ALIASES: dict[str, tuple[str, ...]] = {
    "within_symbol": ("within_symbol", "withinSymbol"),
    "symbol_boundary": ("symbol_boundary", "symbolBoundary"),
    "word_boundary": ("word_boundary", "wordBoundary"),
}

STYLE_ALIASES: dict[str, tuple[str, ...]] = {
    "stroke_width": ("stroke_width", "strokeWidth"),
    "stroke_color": ("stroke_color", "strokeColor"),
    "node_size": ("node_size", "nodeSize"),
    "node_color": ("node_color", "nodeColor"),
    "node_fill_color": ("node_fill_color", "nodeFillColor"),
    "show_nodes": ("show_nodes", "showNodes"),
    "background_color": ("background_color", "backgroundColor"),
}

_MISSING = object()


def _pick(raw: Mapping[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return _MISSING


def _log_unknown(raw: Mapping[str, Any], aliases: Mapping[str, tuple[str, ...]], what: str) -> None:
    known = {name for names in aliases.values() for name in names}
    for key in raw:
        if key not in known:
            logger.debug("Ignoring unknown %s field %r", what, key)


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    raise LatticeValidationError(f"{field}: expected boolean, got {type(value).__name__}")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LatticeValidationError(f"{field}: expected number, got {type(value).__name__}")
    result = float(value)
    if not math.isfinite(result):
        raise LatticeValidationError(f"{field}: must be finite")
    return result


def _as_connector(value: Any, field: str) -> Connector:
    try:
        return Connector.parse(value)
    except UnsupportedPath:
        raise LatticeValidationError(f"connectors.{field}: unknown connector {value!r}") from None


def _anchor_sequence(value: Any, symbol: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise LatticeValidationError(
        f"rules.symbols[{symbol!r}]: expected anchor name or list of anchor names"
    )


def default_symbols(anchor_names: Iterable[str]) -> dict[str, tuple[str, ...]]:
    """One-anchor-per-character mapping for single-character anchor names."""
    return {
        name: (name,)
        for name in sorted(anchor_names)
        if len(name) == 1 and name in ALPHABET
    }


def normalize_connectors(raw: Mapping[str, Any]) -> ConnectorPolicy:
    """Resolve the connector preset plus explicit overrides."""
    preset_name = _pick(raw, RULE_ALIASES["connector_policy"])
    if preset_name is _MISSING:
        preset_name = "word"
    if preset_name not in CONNECTOR_PRESETS:
        raise LatticeValidationError(
            f"rules.connector_policy: unknown preset {preset_name!r} "
            f"(expected one of {', '.join(sorted(CONNECTOR_PRESETS))})"
        )
    policy = CONNECTOR_PRESETS[preset_name]

    overrides = _pick(raw, RULE_ALIASES["connectors"])
    if overrides is _MISSING:
        return policy
    if not isinstance(overrides, Mapping):
        raise LatticeValidationError("rules.connectors: expected mapping")
    _log_unknown(overrides, CONNECTOR_ALIASES, "connector")

    values = {}
    for field, names in CONNECTOR_ALIASES.items():
        value = _pick(overrides, names)
        values[field] = getattr(policy, field) if value is _MISSING else _as_connector(value, field)
    return ConnectorPolicy(**values)


def normalize_rules(raw: Mapping[str, Any] | None, anchor_names: Iterable[str]) -> Rules:
    """Map a raw rules record (any historical spelling) onto :class:`Rules`."""
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise LatticeValidationError(f"rules: expected mapping, got {type(raw).__name__}")
    _log_unknown(raw, RULE_ALIASES, "rules")

    raw_symbols = _pick(raw, RULE_ALIASES["symbols"])
    if raw_symbols is _MISSING:
        symbols = default_symbols(anchor_names)
    elif isinstance(raw_symbols, Mapping):
        symbols = {str(key): _anchor_sequence(value, str(key)) for key, value in raw_symbols.items()}
    else:
        raise LatticeValidationError("rules.symbols: expected mapping of symbol to anchors")

    space_anchor = _pick(raw, RULE_ALIASES["space_anchor"])
    if space_anchor is not _MISSING:
        if not isinstance(space_anchor, str):
            raise LatticeValidationError("rules.space_anchor: expected anchor name")
        existing = symbols.get(SPACE_SYMBOL)
        if existing is not None and existing != (space_anchor,):
            raise LatticeValidationError(
                "rules.space_anchor conflicts with an explicit mapping for the space symbol"
            )
        symbols[SPACE_SYMBOL] = (space_anchor,)

    kwargs: dict[str, Any] = {}
    for field in ("enable_tick", "inside_boundary_preference"):
        value = _pick(raw, RULE_ALIASES[field])
        if value is not _MISSING:
            kwargs[field] = _as_bool(value, f"rules.{field}")
    for field in ("tick_length_factor", "notch_depth_factor", "snap_tolerance_factor"):
        value = _pick(raw, RULE_ALIASES[field])
        if value is not _MISSING:
            kwargs[field] = _as_float(value, f"rules.{field}")

    return Rules(
        symbols=dict(sorted(symbols.items())),
        connectors=normalize_connectors(raw),
        **kwargs,
    )


def normalize_style(raw: Mapping[str, Any] | None) -> Style:
    """Map a raw style record onto :class:`Style`; unknown keys are ignored."""
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise LatticeValidationError(f"style: expected mapping, got {type(raw).__name__}")
    _log_unknown(raw, STYLE_ALIASES, "style")

    kwargs: dict[str, Any] = {}
    for field, names in STYLE_ALIASES.items():
        value = _pick(raw, names)
        if value is _MISSING:
            continue
        if field == "show_nodes":
            kwargs[field] = _as_bool(value, f"style.{field}")
        elif field in ("stroke_width", "node_size"):
            kwargs[field] = _as_float(value, f"style.{field}")
        else:
            kwargs[field] = str(value)
    return Style(**kwargs)
