"""Safe parsing of glyph SVG documents (XXE-protected via defusedxml)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from qbc_glyph.exceptions import SVGParseError
from qbc_glyph.svg.projection import Orientation

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

SVG_NS = "http://www.w3.org/2000/svg"
GLYPH_MARKER = "glyph"

_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(px)?\s*$")


@dataclass(frozen=True)
class GlyphMetadata:
    """Attributes the renderer stamps onto the root ``<svg>``."""

    lattice_id: str | None
    lattice_version: int | None
    size: float
    margin: float | None
    orientation: Orientation = field(default_factory=Orientation)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_dimension(value: str | None) -> float | None:
    """Parse ``"200"`` or ``"200px"``; other units yield None."""
    if value is None:
        return None
    match = _NUMBER.match(value)
    return float(match.group(1)) if match else None


def parse_svg_string(svg: str) -> Element:
    """Parse an SVG document string and return its root element.

    Raises:
        SVGParseError: If the document is malformed, not SVG, or uses
            forbidden XML constructs (entities, external references).
    """
    try:
        root = ET.fromstring(svg)
    except ET.ParseError as e:
        raise SVGParseError(f"Failed to parse glyph SVG: {e}") from e
    except DefusedXmlException as e:
        raise SVGParseError(f"Unsafe XML in glyph SVG: {e}") from e
    if _local(root.tag) != "svg":
        raise SVGParseError(f"Root element is <{_local(root.tag)}>, expected <svg>")
    return root


def find_paths(root: Element) -> list[Element]:
    return [el for el in root.iter() if _local(el.tag) == "path"]


def find_glyph_path(root: Element) -> Element:
    """Return the glyph ``<path>``: the one marked ``data-qbc="glyph"``,
    otherwise the document's only path."""
    paths = find_paths(root)
    marked = [p for p in paths if p.get("data-qbc") == GLYPH_MARKER]
    if len(marked) == 1:
        return marked[0]
    if len(marked) > 1:
        raise SVGParseError("SVG contains more than one glyph path")
    if len(paths) == 1:
        return paths[0]
    raise SVGParseError(f"Cannot identify the glyph path among {len(paths)} <path> elements")


def read_metadata(root: Element) -> GlyphMetadata:
    """Read lattice identity and canvas geometry from the root element."""
    size = parse_dimension(root.get("width"))
    if size is None:
        view_box = (root.get("viewBox") or "").replace(",", " ").split()
        if len(view_box) == 4:
            size = parse_dimension(view_box[2])
    if size is None:
        raise SVGParseError("SVG has neither a numeric width nor a viewBox")

    version = root.get("data-lattice-version")
    if version is not None:
        try:
            version_number: int | None = int(version)
        except ValueError:
            raise SVGParseError(f"Invalid data-lattice-version {version!r}") from None
    else:
        version_number = None

    try:
        orientation = Orientation.parse(root.get("data-orientation"))
    except ValueError as e:
        raise SVGParseError(f"Invalid data-orientation: {e}") from None

    return GlyphMetadata(
        lattice_id=root.get("data-lattice-id"),
        lattice_version=version_number,
        size=size,
        margin=parse_dimension(root.get("data-margin")),
        orientation=orientation,
    )
