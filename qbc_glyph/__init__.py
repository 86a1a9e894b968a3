"""qbc-glyph: deterministic text-to-glyph codec over anchor lattices.

This library provides:
- Text canonicalization and lattice-driven path encoding
- Reproducible SHA-256 content hashes usable as claims of origin
- Composite glyphs for long text (chunk glyphs bound by one hash)
- SVG / PNG / data-URL rendering
- Decoding of structured and rendered glyph packages back to text

Example:
    >>> from qbc_glyph import GlyphCodec, load_lattice
    >>> codec = GlyphCodec(load_lattice("lattices/g1.yaml"))
    >>> glyph = codec.issue("hello world")
    >>> glyph.content_hash
    '...'
"""

from qbc_glyph.api import (
    CompositeGlyph,
    CompositeVerificationResult,
    GlyphCodec,
    IssuedGlyph,
    VerificationResult,
)
from qbc_glyph.canonical import canonicalize, chunk_text
from qbc_glyph.codec import (
    GlyphPackage,
    composite_hash,
    content_hash,
    decode,
    decode_text,
    encode,
    hash_glyph,
    pack_path,
    unpack_path,
)
from qbc_glyph.config import Config
from qbc_glyph.exceptions import (
    AmbiguousSymbolMapping,
    AnchorNotFound,
    ConfigError,
    EmptyInput,
    GlyphCodecError,
    LatticeValidationError,
    LatticeVersionMismatch,
    SerializationError,
    SVGParseError,
    UnrecognizedGeometry,
    UnsupportedPath,
    UnsupportedSymbol,
)
from qbc_glyph.lattice import Lattice, Rules, Style, lattice_from_record, load_lattice
from qbc_glyph.path import Connector, Path, Step
from qbc_glyph.svg import Orientation, render_svg, to_data_url, to_raster

__version__ = "0.1.0"

__all__ = [
    # Main API
    "GlyphCodec",
    "IssuedGlyph",
    "VerificationResult",
    "CompositeGlyph",
    "CompositeVerificationResult",
    "Config",
    # Codec operations
    "canonicalize",
    "chunk_text",
    "encode",
    "content_hash",
    "hash_glyph",
    "composite_hash",
    "render_svg",
    "to_data_url",
    "to_raster",
    "decode",
    "decode_text",
    "pack_path",
    "unpack_path",
    "GlyphPackage",
    # Model
    "Lattice",
    "Rules",
    "Style",
    "lattice_from_record",
    "load_lattice",
    "Connector",
    "Path",
    "Step",
    "Orientation",
    # Exceptions
    "GlyphCodecError",
    "UnsupportedSymbol",
    "EmptyInput",
    "SerializationError",
    "AnchorNotFound",
    "UnrecognizedGeometry",
    "SVGParseError",
    "AmbiguousSymbolMapping",
    "UnsupportedPath",
    "LatticeVersionMismatch",
    "LatticeValidationError",
    "ConfigError",
    # Metadata
    "__version__",
]
