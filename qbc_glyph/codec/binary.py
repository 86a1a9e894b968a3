"""Compact binary form of a Path for transport.

Layout (big-endian)::

    [format version: u8][step count: u16]
    repeated: [connector code: u8][anchor index: u16]

Anchor indices refer to ``lattice.anchor_names`` (sorted), so a packed
path is only meaningful together with the exact lattice version.
"""

from __future__ import annotations

import struct

from qbc_glyph.exceptions import SerializationError
from qbc_glyph.lattice.model import Lattice
from qbc_glyph.path import Connector, Path, Step

FORMAT_VERSION = 1

_HEADER = struct.Struct(">BH")
_STEP = struct.Struct(">BH")

CONNECTOR_CODES: dict[Connector | None, int] = {
    None: 0,
    Connector.STRAIGHT: 1,
    Connector.NOTCH: 2,
    Connector.SKIP: 3,
    Connector.TICK: 4,
}
_CODE_CONNECTORS = {code: connector for connector, code in CONNECTOR_CODES.items()}
_MAX_COUNT = 0xFFFF


def pack_path(path: Path, lattice: Lattice) -> bytes:
    """Pack ``path`` into bytes.

    Raises:
        AnchorNotFound: If a step references an unknown anchor.
        SerializationError: If the path or lattice exceeds the format limits.
    """
    if len(path) > _MAX_COUNT:
        raise SerializationError(f"Path has {len(path)} steps; binary format holds {_MAX_COUNT}")
    if len(lattice.anchor_names) > _MAX_COUNT:
        raise SerializationError("Lattice has too many anchors for the binary format")

    index_of = {name: i for i, name in enumerate(lattice.anchor_names)}
    chunks = [_HEADER.pack(FORMAT_VERSION, len(path))]
    for index, step in enumerate(path):
        lattice.coordinate(step.anchor, index)
        chunks.append(_STEP.pack(CONNECTOR_CODES[step.connector], index_of[step.anchor]))
    return b"".join(chunks)


def unpack_path(data: bytes, lattice: Lattice) -> Path:
    """Inverse of :func:`pack_path`.

    Raises:
        SerializationError: On truncated data, an unknown format version,
            connector code or anchor index.
    """
    if len(data) < _HEADER.size:
        raise SerializationError("Binary path is truncated (no header)")
    version, count = _HEADER.unpack_from(data, 0)
    if version != FORMAT_VERSION:
        raise SerializationError(f"Unsupported binary path format version {version}")
    expected = _HEADER.size + count * _STEP.size
    if len(data) != expected:
        raise SerializationError(f"Binary path length {len(data)} does not match {count} steps")

    names = lattice.anchor_names
    steps: list[Step] = []
    for i in range(count):
        code, anchor_index = _STEP.unpack_from(data, _HEADER.size + i * _STEP.size)
        if code not in _CODE_CONNECTORS:
            raise SerializationError(f"Unknown connector code {code} at step {i}")
        if anchor_index >= len(names):
            raise SerializationError(f"Anchor index {anchor_index} at step {i} is out of range")
        steps.append(Step(names[anchor_index], _CODE_CONNECTORS[code]))
    return Path(tuple(steps))
