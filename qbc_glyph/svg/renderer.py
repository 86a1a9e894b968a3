"""Path -> SVG / PNG / data URL rendering.

Geometry is fixed first and styling is applied last. Each connector maps
to a distinct SVG path command so that the decoder can recover it from the
vector data alone:

==========  =======  ==================================================
connector   command  geometry
==========  =======  ==================================================
(first)     ``M``    pen down at the first anchor
straight    ``L``    direct line
notch       ``Q``    curved joint, control point offset perpendicular
skip        ``M``    pen up, move without drawing
tick        ``C``    line ending in a perpendicular hook (restart tick)
==========  =======  ==================================================
"""

from __future__ import annotations

import base64
import logging
import math
from functools import partial
from io import BytesIO
from xml.etree.ElementTree import Element, SubElement, tostring

from PIL import Image, ImageColor, ImageDraw
from svg.path import Close, Line, Move, parse_path

from qbc_glyph.exceptions import UnsupportedPath
from qbc_glyph.lattice.model import Lattice, Style
from qbc_glyph.path import Connector, Path
from qbc_glyph.svg.parser import (
    GLYPH_MARKER,
    SVG_NS,
    find_glyph_path,
    find_paths,
    parse_dimension,
    parse_svg_string,
)
from qbc_glyph.svg.projection import DEFAULT_MARGIN, DEFAULT_SIZE, Orientation, Projection

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 3
CURVE_SAMPLES = 24

Point = tuple[float, float]


def format_number(value: float, precision: int = DEFAULT_PRECISION) -> str:
    """Fixed-precision number without trailing zeros (``-0`` becomes ``0``)."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _perpendicular(start: Point, end: Point, inside: bool) -> tuple[Point, float]:
    """Unit normal of ``start -> end`` and the segment length.

    Zero-length segments fall back to the canvas "up" direction.
    """
    dx, dy = end[0] - start[0], end[1] - start[1]
    length = math.hypot(dx, dy)
    direction = 1.0 if inside else -1.0
    if length == 0.0:
        return (0.0, -direction), 0.0
    return (-dy / length * direction, dx / length * direction), length


def path_commands(
    path: Path,
    lattice: Lattice,
    projection: Projection,
    precision: int = DEFAULT_PRECISION,
) -> list[str]:
    """Build SVG path commands (one per step) for ``path``.

    Raises:
        AnchorNotFound: If a step references an anchor absent from the lattice.
        UnsupportedPath: If a step after the first has no connector.
    """
    rules = lattice.rules
    tick_length = rules.tick_length_factor * projection.inner_size
    fmt = partial(format_number, precision=precision)

    commands: list[str] = []
    previous: Point | None = None
    for index, step in enumerate(path):
        point = projection.project(lattice.coordinate(step.anchor, index))
        x, y = point
        if previous is None:
            commands.append(f"M {fmt(x)} {fmt(y)}")
        elif step.connector is None:
            raise UnsupportedPath(f"Step {index} ({step.anchor!r}) has no connector", index)
        elif step.connector is Connector.STRAIGHT:
            commands.append(f"L {fmt(x)} {fmt(y)}")
        elif step.connector is Connector.SKIP:
            commands.append(f"M {fmt(x)} {fmt(y)}")
        elif step.connector is Connector.NOTCH:
            (nx, ny), length = _perpendicular(previous, point, rules.inside_boundary_preference)
            depth = rules.notch_depth_factor * length if length else tick_length
            cx = (previous[0] + x) / 2 + nx * depth
            cy = (previous[1] + y) / 2 + ny * depth
            commands.append(f"Q {fmt(cx)} {fmt(cy)} {fmt(x)} {fmt(y)}")
        elif step.connector is Connector.TICK:
            (nx, ny), _ = _perpendicular(previous, point, rules.inside_boundary_preference)
            c1x = previous[0] + (x - previous[0]) / 3
            c1y = previous[1] + (y - previous[1]) / 3
            c2x, c2y = x + nx * tick_length, y + ny * tick_length
            commands.append(f"C {fmt(c1x)} {fmt(c1y)} {fmt(c2x)} {fmt(c2y)} {fmt(x)} {fmt(y)}")
        else:
            raise UnsupportedPath(f"Step {index} has unsupported connector {step.connector!r}", index)
        previous = point
    return commands


def render_svg(
    path: Path,
    lattice: Lattice,
    style: Style | None = None,
    size: int = DEFAULT_SIZE,
    margin: int = DEFAULT_MARGIN,
    precision: int = DEFAULT_PRECISION,
    orientation: Orientation | None = None,
) -> str:
    """Render ``path`` on ``lattice`` as a standalone SVG document.

    Args:
        path: Encoded path.
        lattice: Lattice the path was encoded against.
        style: Presentation override; defaults to ``lattice.style``.
        size: Canvas width and height in pixels.
        margin: Blank border inside the canvas.
        precision: Decimal places for coordinates.
        orientation: Rotation and mirroring of the glyph on the canvas;
            stamped on the root element so decoding can undo it.

    Returns:
        SVG document string.

    Raises:
        ValueError: If the canvas is smaller than its margins, or rounding to
            ``precision`` could move a coordinate out of snap tolerance.
    """
    style = style or lattice.style
    projection = Projection.for_lattice(lattice, size, margin, orientation)
    rounding = 0.5 * 10 ** -precision * math.sqrt(2)
    tolerance = projection.snap_tolerance(lattice)
    if rounding >= tolerance:
        raise ValueError(
            f"Precision {precision} rounds coordinates by up to {rounding:.4g}, "
            f"not below the snap tolerance {tolerance:.4g} of lattice {lattice.lattice_id!r}"
        )
    commands = path_commands(path, lattice, projection, precision)
    fmt = partial(format_number, precision=precision)

    root = Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": fmt(size),
            "height": fmt(size),
            "viewBox": f"0 0 {fmt(size)} {fmt(size)}",
            "data-lattice-id": lattice.lattice_id,
            "data-lattice-version": str(lattice.version),
            "data-margin": fmt(margin),
        },
    )
    if not projection.orientation.is_identity:
        root.set("data-orientation", projection.orientation.to_attribute())
    SubElement(root, "rect", {"width": "100%", "height": "100%", "fill": style.background_color})
    SubElement(
        root,
        "path",
        {
            "data-qbc": GLYPH_MARKER,
            "d": " ".join(commands),
            "fill": "none",
            "stroke": style.stroke_color,
            "stroke-width": fmt(style.stroke_width),
            "stroke-linecap": "round",
            "stroke-linejoin": "round",
        },
    )

    if style.show_nodes:
        for anchor in dict.fromkeys(path.anchors):
            cx, cy = projection.project(lattice.coordinate(anchor))
            SubElement(
                root,
                "circle",
                {
                    "cx": fmt(cx),
                    "cy": fmt(cy),
                    "r": fmt(style.node_size / 2),
                    "fill": style.node_fill_color,
                    "stroke": style.node_color,
                    "stroke-width": "1",
                },
            )

    logger.debug("Rendered %d steps on %s v%d", len(path), lattice.lattice_id, lattice.version)
    return tostring(root, encoding="unicode")


def to_data_url(image: str | bytes) -> str:
    """Embed an SVG document (``str``) or PNG buffer (``bytes``) as a data URL."""
    if isinstance(image, str):
        payload = base64.b64encode(image.encode("utf-8")).decode("ascii")
        return f"data:image/svg+xml;base64,{payload}"
    payload = base64.b64encode(bytes(image)).decode("ascii")
    return f"data:image/png;base64,{payload}"


def _color(value: str | None) -> tuple[int, ...] | None:
    if not value or value == "none":
        return None
    try:
        return ImageColor.getrgb(value)
    except ValueError:
        logger.warning("Unsupported color %r, using black", value)
        return (0, 0, 0)


def _polylines(d: str, scale: float) -> list[list[Point]]:
    """Flatten a path ``d`` into pen-down polylines (curves are sampled)."""
    lines: list[list[Point]] = []
    current: list[Point] = []
    for segment in parse_path(d):
        if isinstance(segment, Move):
            if len(current) > 1:
                lines.append(current)
            current = [(segment.end.real * scale, segment.end.imag * scale)]
            continue
        if not current:
            current = [(segment.start.real * scale, segment.start.imag * scale)]
        samples = 1 if isinstance(segment, (Line, Close)) else CURVE_SAMPLES
        for i in range(1, samples + 1):
            p = segment.point(i / samples)
            current.append((p.real * scale, p.imag * scale))
    if len(current) > 1:
        lines.append(current)
    return lines


def to_raster(svg: str, scale: float = 1.0) -> bytes:
    """Rasterize a glyph SVG (as produced by :func:`render_svg`) to PNG bytes."""
    root = parse_svg_string(svg)
    width = parse_dimension(root.get("width")) or DEFAULT_SIZE
    height = parse_dimension(root.get("height")) or width
    image = Image.new("RGB", (max(1, round(width * scale)), max(1, round(height * scale))), "white")
    draw = ImageDraw.Draw(image)

    for element in root:
        tag = element.tag.rsplit("}", 1)[-1]
        if tag == "rect":
            fill = _color(element.get("fill"))
            if fill is not None:
                draw.rectangle([(0, 0), image.size], fill=fill)

    glyph = find_glyph_path(root) if find_paths(root) else None
    if glyph is not None:
        stroke = _color(glyph.get("stroke")) or (0, 0, 0)
        stroke_width = max(1, round((parse_dimension(glyph.get("stroke-width")) or 1.0) * scale))
        for line in _polylines(glyph.get("d") or "", scale):
            draw.line(line, fill=stroke, width=stroke_width, joint="curve")

    for element in root:
        if element.tag.rsplit("}", 1)[-1] != "circle":
            continue
        cx = float(element.get("cx", 0)) * scale
        cy = float(element.get("cy", 0)) * scale
        r = float(element.get("r", 0)) * scale
        draw.ellipse(
            [(cx - r, cy - r), (cx + r, cy + r)],
            fill=_color(element.get("fill")),
            outline=_color(element.get("stroke")),
        )

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
