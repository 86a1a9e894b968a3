"""SVG rendering and parsing for qbc-glyph.

This subpackage provides:
- Lattice-to-canvas projection and glyph orientation shared by renderer and decoder
- Path rendering to SVG, PNG (Pillow) and data URLs
- Safe glyph SVG parsing with XXE protection (defusedxml)
"""

from qbc_glyph.svg.projection import Orientation, Projection
from qbc_glyph.svg.parser import (
    GlyphMetadata,
    find_glyph_path,
    parse_svg_string,
    read_metadata,
)
from qbc_glyph.svg.renderer import (
    format_number,
    path_commands,
    render_svg,
    to_data_url,
    to_raster,
)

__all__ = [
    "Orientation",
    "Projection",
    "GlyphMetadata",
    "find_glyph_path",
    "parse_svg_string",
    "read_metadata",
    "format_number",
    "path_commands",
    "render_svg",
    "to_data_url",
    "to_raster",
]
