"""Pytest configuration and shared fixtures for qbc-glyph tests."""

import copy
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from qbc_glyph.lattice import Lattice, lattice_from_record, read_lattice_record

# Paths
FIXTURES_DIR = Path(__file__).parent / "fixtures"
REFERENCE_LATTICE = FIXTURES_DIR / "test_v1.yaml"
LEGACY_LATTICE = FIXTURES_DIR / "legacy_v3.json"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def reference_lattice_file() -> Path:
    """Return the YAML file of the reference lattice."""
    return REFERENCE_LATTICE


@pytest.fixture
def legacy_lattice_file() -> Path:
    """Return the JSON file of a lattice written in the legacy table shape."""
    return LEGACY_LATTICE


@pytest.fixture
def reference_record() -> dict[str, Any]:
    """Return a fresh copy of the reference lattice record."""
    return copy.deepcopy(read_lattice_record(REFERENCE_LATTICE))


@pytest.fixture
def lattice(reference_record: dict[str, Any]) -> Lattice:
    """Reference lattice: A-Z grid, SPACE anchor, ticks disabled."""
    return lattice_from_record(reference_record)


@pytest.fixture
def make_lattice(reference_record: dict[str, Any]) -> Callable[..., Lattice]:
    """Factory building a variant of the reference lattice.

    Keyword arguments override entries of the ``rules`` record; ``version``
    and ``latticeId`` override the identity.
    """

    def factory(**overrides: Any) -> Lattice:
        record = copy.deepcopy(reference_record)
        for key in ("version", "latticeId"):
            if key in overrides:
                record[key] = overrides.pop(key)
        record["rules"].update(overrides)
        return lattice_from_record(record)

    return factory


@pytest.fixture
def tick_lattice(make_lattice: Callable[..., Lattice]) -> Lattice:
    """Reference lattice with restart ticks enabled."""
    return make_lattice(enable_tick=True)


@pytest.fixture
def digraph_record() -> dict[str, Any]:
    """Small lattice with a two-anchor digraph symbol."""
    return {
        "latticeId": "digraph",
        "version": 1,
        "anchors2D": {
            "P1": {"x": 0, "y": 0},
            "P2": {"x": 1, "y": 0},
            "P3": {"x": 0, "y": 1},
            "P4": {"x": 1, "y": 1},
            "SP": {"x": 0.5, "y": 2},
        },
        "rules": {
            "symbols": {"A": "P1", "B": "P2", "AB": ["P3", "P4"]},
            "space_anchor": "SP",
            "enable_tick": False,
        },
    }


@pytest.fixture
def digraph_lattice(digraph_record: dict[str, Any]) -> Lattice:
    return lattice_from_record(digraph_record)


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "cli: marks tests that invoke the command-line interface"
    )
