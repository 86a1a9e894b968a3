"""Tests for SVG / PNG / data-URL rendering.

On the reference lattice the projection is 160 px per lattice unit with a
20 px margin, so anchor H (0.2, 0.2) lands on (52, 52).
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from qbc_glyph.codec.encoder import encode
from qbc_glyph.exceptions import AnchorNotFound, UnsupportedPath
from qbc_glyph.lattice import Lattice, Style, lattice_from_record
from qbc_glyph.path import Connector, Path, Step
from qbc_glyph.svg.parser import find_glyph_path, parse_svg_string, read_metadata
from qbc_glyph.svg.projection import Orientation, Projection
from qbc_glyph.svg.renderer import format_number, path_commands, render_svg, to_data_url, to_raster


@pytest.fixture
def projection(lattice: Lattice) -> Projection:
    return Projection.for_lattice(lattice)


class TestFormatNumber:
    @pytest.mark.parametrize(
        ("value", "precision", "expected"),
        [
            (52.0, 3, "52"),
            (74.4, 3, "74.4"),
            (1 / 3, 3, "0.333"),
            (-0.0001, 3, "0"),
            (2.5, 0, "2"),
            (20.0, 0, "20"),
            (116.00000000000001, 3, "116"),
        ],
    )
    def test_format(self, value: float, precision: int, expected: str) -> None:
        assert format_number(value, precision) == expected


class TestProjection:
    def test_reference_geometry(self, projection: Projection, lattice: Lattice) -> None:
        assert projection.scale == pytest.approx(160.0)
        assert projection.project(lattice.coordinate("H")) == pytest.approx((52.0, 52.0))
        assert projection.project(lattice.coordinate("SPACE")) == pytest.approx((84.0, 148.0))

    def test_snap_tolerance_below_half_spacing(self, projection: Projection, lattice: Lattice) -> None:
        tolerance = projection.snap_tolerance(lattice)
        assert tolerance == pytest.approx(8.0)
        assert tolerance < lattice.min_anchor_spacing * projection.scale / 2

    def test_margin_too_large(self, lattice: Lattice) -> None:
        with pytest.raises(ValueError, match="no room"):
            Projection.for_lattice(lattice, size=40, margin=20)


class TestOrientation:
    def test_identity(self) -> None:
        assert Orientation().is_identity
        assert Orientation().apply((74.4, 116.0), 200) == (74.4, 116.0)

    @pytest.mark.parametrize(
        ("orientation", "point", "expected"),
        [
            (Orientation(rotation=90), (52, 52), (148, 52)),
            (Orientation(rotation=90), (148, 20), (180, 148)),
            (Orientation(rotation=180), (148, 20), (52, 180)),
            (Orientation(rotation=270), (148, 20), (20, 52)),
            (Orientation(mirror=True), (52, 52), (148, 52)),
            (Orientation(flip_vertical=True), (52, 52), (52, 148)),
            (Orientation(90, mirror=True), (148, 20), (180, 52)),
        ],
    )
    def test_apply(self, orientation: Orientation, point, expected) -> None:
        assert orientation.apply(point, 200) == pytest.approx(expected)

    def test_half_turn_equals_both_reflections(self, lattice: Lattice) -> None:
        turned = Projection.for_lattice(lattice, orientation=Orientation(rotation=180))
        reflected = Projection.for_lattice(lattice, orientation=Orientation(mirror=True, flip_vertical=True))
        for name in lattice.anchor_names:
            point = lattice.coordinate(name)
            assert turned.project(point) == pytest.approx(reflected.project(point))

    def test_invalid_rotation(self) -> None:
        with pytest.raises(ValueError, match="Rotation"):
            Orientation(rotation=45)

    @pytest.mark.parametrize(
        ("orientation", "attribute"),
        [
            (Orientation(), "rotate(0)"),
            (Orientation(rotation=270), "rotate(270)"),
            (Orientation(90, True, True), "rotate(90) mirror flip-vertical"),
        ],
    )
    def test_attribute(self, orientation: Orientation, attribute: str) -> None:
        assert orientation.to_attribute() == attribute
        assert Orientation.parse(attribute) == orientation

    def test_parse(self) -> None:
        assert Orientation.parse(None) == Orientation()
        with pytest.raises(ValueError, match="skew"):
            Orientation.parse("rotate(90) skew")
        with pytest.raises(ValueError, match="Rotation"):
            Orientation.parse("rotate(45)")

    def test_snap_tolerance_unchanged(self, lattice: Lattice) -> None:
        rotated = Projection.for_lattice(lattice, orientation=Orientation(rotation=90, mirror=True))
        assert rotated.snap_tolerance(lattice) == pytest.approx(8.0)


class TestPathCommands:
    def test_hello_world(self, lattice: Lattice, projection: Projection) -> None:
        commands = path_commands(encode("HELLO WORLD", lattice), lattice, projection)

        assert commands[:6] == [
            "M 52 52",
            "L 148 20",
            "L 180 52",
            "L 180 52",
            "L 84 84",
            "Q 74.4 116 84 148",
        ]
        assert commands[6] == "Q 120.8 141.6 148 116"
        assert [c.split()[0] for c in commands] == list("MLLLLQQLLLL")

    def test_outside_preference_flips_notch(self, make_lattice) -> None:
        lattice = make_lattice(inside_boundary_preference=False)
        commands = path_commands(encode("O W", lattice), lattice, Projection.for_lattice(lattice))
        assert commands[:2] == ["M 84 84", "Q 93.6 116 84 148"]

    def test_tick(self, tick_lattice: Lattice) -> None:
        commands = path_commands(
            encode("LL", tick_lattice), tick_lattice, Projection.for_lattice(tick_lattice)
        )
        # Zero-length hop: the hook points straight up by the tick length (0.08 * 160).
        assert commands == ["M 180 52", "C 180 52 180 39.2 180 52"]

    def test_skip(self, make_lattice) -> None:
        lattice = make_lattice(connector_policy="pen")
        commands = path_commands(encode("H E", lattice), lattice, Projection.for_lattice(lattice))
        assert commands == ["M 52 52", "M 84 148", "M 148 20"]

    def test_unknown_anchor(self, lattice: Lattice, projection: Projection) -> None:
        path = Path((Step("H"), Step("GHOST", Connector.STRAIGHT)))
        with pytest.raises(AnchorNotFound) as exc_info:
            path_commands(path, lattice, projection)
        assert exc_info.value.index == 1

    def test_missing_connector(self, lattice: Lattice, projection: Projection) -> None:
        with pytest.raises(UnsupportedPath):
            path_commands(Path((Step("H"), Step("E"))), lattice, projection)


class TestRenderSvg:
    def test_document_metadata(self, lattice: Lattice) -> None:
        svg = render_svg(encode("HELLO WORLD", lattice), lattice)
        root = parse_svg_string(svg)
        meta = read_metadata(root)

        assert meta.lattice_id == "test"
        assert meta.lattice_version == 1
        assert meta.size == 200
        assert meta.margin == 20
        glyph = find_glyph_path(root)
        assert glyph.get("d").startswith("M 52 52 L 148 20")
        assert glyph.get("stroke") == "#1a1a1a"
        assert glyph.get("stroke-width") == "3"

    def test_nodes_once_per_anchor(self, lattice: Lattice) -> None:
        svg = render_svg(encode("HELLO WORLD", lattice), lattice)
        root = parse_svg_string(svg)
        circles = [el for el in root if el.tag.endswith("circle")]
        # H E L O SPACE W R D
        assert len(circles) == 8

    def test_style_override(self, lattice: Lattice) -> None:
        style = Style(stroke_color="#ff0000", show_nodes=False)
        svg = render_svg(encode("HI", lattice), lattice, style=style)
        root = parse_svg_string(svg)
        assert find_glyph_path(root).get("stroke") == "#ff0000"
        assert not [el for el in root if el.tag.endswith("circle")]

    def test_deterministic(self, lattice: Lattice) -> None:
        path = encode("THE QUICK BROWN FOX", lattice)
        assert render_svg(path, lattice) == render_svg(path, lattice)

    def test_custom_canvas(self, lattice: Lattice) -> None:
        svg = render_svg(encode("A", lattice), lattice, size=400, margin=0)
        root = parse_svg_string(svg)
        assert root.get("viewBox") == "0 0 400 400"
        assert find_glyph_path(root).get("d") == "M 0 0"

    def test_empty_path(self, lattice: Lattice) -> None:
        svg = render_svg(Path(()), lattice)
        assert find_glyph_path(parse_svg_string(svg)).get("d") == ""

    def test_orientation(self, lattice: Lattice) -> None:
        svg = render_svg(encode("HE", lattice), lattice, orientation=Orientation(rotation=90))
        root = parse_svg_string(svg)
        assert root.get("data-orientation") == "rotate(90)"
        assert read_metadata(root).orientation == Orientation(rotation=90)
        assert find_glyph_path(root).get("d") == "M 148 52 L 180 148"

    def test_identity_orientation_not_stamped(self, lattice: Lattice) -> None:
        root = parse_svg_string(render_svg(encode("HE", lattice), lattice, orientation=Orientation()))
        assert root.get("data-orientation") is None
        assert read_metadata(root).orientation.is_identity


@pytest.fixture
def dense_lattice() -> Lattice:
    """Two anchors 0.001 apart on a unit-wide lattice."""
    return lattice_from_record(
        {
            "latticeId": "dense",
            "version": 1,
            "anchors2D": {
                "A": {"x": 0, "y": 0},
                "B": {"x": 1, "y": 0},
                "C": {"x": 0.001, "y": 0},
            },
            "rules": {"enable_tick": False},
        }
    )


class TestPrecisionGuard:
    """Rounding must stay below the snap tolerance or rendering is refused."""

    @pytest.mark.parametrize("precision", [0, 1])
    def test_too_coarse(self, dense_lattice: Lattice, precision: int) -> None:
        with pytest.raises(ValueError, match="snap tolerance"):
            render_svg(encode("CAB", dense_lattice), dense_lattice, precision=precision)

    def test_fine_enough(self, dense_lattice: Lattice) -> None:
        svg = render_svg(encode("CAB", dense_lattice), dense_lattice, precision=2)
        assert find_glyph_path(parse_svg_string(svg)).get("d") == "M 20.16 20 L 20 20 L 180 20"

    def test_reference_lattice_accepts_integers(self, lattice: Lattice) -> None:
        svg = render_svg(encode("HELLO WORLD", lattice), lattice, precision=0)
        assert find_glyph_path(parse_svg_string(svg)).get("d").startswith("M 52 52 L 148 20")


class TestDataUrlAndRaster:
    def test_svg_data_url(self, lattice: Lattice) -> None:
        svg = render_svg(encode("HI", lattice), lattice)
        url = to_data_url(svg)
        prefix = "data:image/svg+xml;base64,"
        assert url.startswith(prefix)
        assert base64.b64decode(url[len(prefix):]).decode("utf-8") == svg

    def test_png_data_url(self) -> None:
        assert to_data_url(b"\x89PNG").startswith("data:image/png;base64,")

    def test_raster(self, lattice: Lattice) -> None:
        png = to_raster(render_svg(encode("HELLO WORLD", lattice), lattice), scale=2.0)
        image = Image.open(BytesIO(png))

        assert image.format == "PNG"
        assert image.size == (400, 400)
        # Background fill, and stroke pixels on the H -> E segment midpoint.
        assert image.convert("RGB").getpixel((2, 2)) == (255, 255, 255)
        assert image.convert("RGB").getpixel((200, 72)) != (255, 255, 255)
