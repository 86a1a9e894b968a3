"""Glyph codec: encoding, hashing, packaging and decoding.

This subpackage provides:
- Canonical text -> Path encoding
- Reproducible SHA-256 content hashing
- Structured/rendered glyph packages and a compact binary path format
- Package -> Path / canonical text decoding
"""

from qbc_glyph.codec.encoder import encode, path_from_symbols, tokenize
from qbc_glyph.codec.hasher import (
    COMPOSITE_SCHEME,
    HASH_SCHEME,
    composite_hash,
    content_hash,
    dump_canonical,
    hash_glyph,
)
from qbc_glyph.codec.package import GlyphPackage, PackageKind
from qbc_glyph.codec.binary import pack_path, unpack_path
from qbc_glyph.codec.decoder import (
    decode,
    decode_svg_path,
    decode_text,
    parse_symbols,
    text_from_path,
    validate_path,
)

__all__ = [
    "encode",
    "path_from_symbols",
    "tokenize",
    "HASH_SCHEME",
    "COMPOSITE_SCHEME",
    "content_hash",
    "composite_hash",
    "dump_canonical",
    "hash_glyph",
    "GlyphPackage",
    "PackageKind",
    "pack_path",
    "unpack_path",
    "decode",
    "decode_svg_path",
    "decode_text",
    "parse_symbols",
    "text_from_path",
    "validate_path",
]
