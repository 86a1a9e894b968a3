"""High-level issuance and verification API.

Example:
    >>> from qbc_glyph import GlyphCodec, load_lattice
    >>> codec = GlyphCodec(load_lattice("lattices/g1.yaml"))
    >>> glyph = codec.issue("Hello, world!")
    >>> codec.verify(glyph.rendered_package, glyph.content_hash).matched
    True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from qbc_glyph.canonical import canonicalize, chunk_text
from qbc_glyph.codec.decoder import decode, text_from_path
from qbc_glyph.codec.encoder import encode
from qbc_glyph.codec.hasher import composite_hash, hash_glyph
from qbc_glyph.codec.package import GlyphPackage
from qbc_glyph.config import Config
from qbc_glyph.exceptions import EmptyInput, GlyphCodecError
from qbc_glyph.lattice.model import Lattice, Style
from qbc_glyph.path import Path
from qbc_glyph.svg.projection import Orientation
from qbc_glyph.svg.renderer import render_svg, to_data_url, to_raster

logger = logging.getLogger(__name__)


@dataclass
class IssuedGlyph:
    """Everything produced when a glyph is issued."""

    text: str
    canonical_text: str
    path: Path
    svg: str
    content_hash: str
    lattice: Lattice

    @property
    def structured_package(self) -> GlyphPackage:
        return GlyphPackage.structured(self.path, self.lattice)

    @property
    def rendered_package(self) -> GlyphPackage:
        return GlyphPackage.rendered(self.svg, self.lattice)

    def data_url(self) -> str:
        return to_data_url(self.svg)

    def to_png(self, scale: float = 1.0) -> bytes:
        return to_raster(self.svg, scale=scale)

    def summary(self) -> dict[str, Any]:
        """Counts reported alongside an issued glyph."""
        return {
            "wordCount": len(self.canonical_text.split()),
            "charCount": len(self.canonical_text),
            "stepCount": len(self.path),
            "uniqueAnchors": len(self.path.visit_counts()),
        }


@dataclass
class CompositeGlyph:
    """Long text issued as several chunk glyphs bound by one composite hash."""

    text: str
    canonical_text: str
    chunk_size: int
    chunks: list[IssuedGlyph]
    composite_hash: str

    @property
    def chunk_hashes(self) -> list[str]:
        return [chunk.content_hash for chunk in self.chunks]


@dataclass
class VerificationResult:
    """Outcome of re-verifying a glyph package against a recorded hash."""

    matched: bool
    expected_hash: str
    computed_hash: str | None = None
    path: Path | None = None
    canonical_text: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class CompositeVerificationResult:
    """Outcome of re-verifying the chunk packages of a composite glyph."""

    matched: bool
    expected_hash: str
    computed_hash: str | None = None
    canonical_text: str | None = None
    chunks: list[VerificationResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class GlyphCodec:
    """Issue and verify glyphs against one lattice.

    Args:
        lattice: Lattice used for every operation of this codec.
        config: Render defaults; ``Config()`` when omitted.
        style: Presentation override for rendering.
        orientation: Rotation and mirroring applied when rendering.
    """

    def __init__(
        self,
        lattice: Lattice,
        config: Config | None = None,
        style: Style | None = None,
        orientation: Orientation | None = None,
    ) -> None:
        self.lattice = lattice
        self.config = config or Config()
        self.style = style
        self.orientation = orientation

    def encode(self, text: str) -> Path:
        return encode(canonicalize(text), self.lattice)

    def render(self, path: Path) -> str:
        return render_svg(
            path,
            self.lattice,
            style=self.style,
            size=self.config.size,
            margin=self.config.margin,
            precision=self.config.precision,
            orientation=self.orientation,
        )

    def issue(self, text: str, allow_empty: bool = False) -> IssuedGlyph:
        """Canonicalize, encode, render and hash ``text``.

        Raises:
            EmptyInput: If ``text`` canonicalizes to "" and ``allow_empty``
                is False.
            UnsupportedSymbol: If the lattice cannot encode the text.
        """
        canonical_text = canonicalize(text)
        path = encode(canonical_text, self.lattice, allow_empty=allow_empty)
        svg = self.render(path)
        digest = hash_glyph(canonical_text, self.lattice, path)
        logger.info(
            "Issued glyph %s... for %r on %s v%d",
            digest[:12],
            canonical_text[:50],
            self.lattice.lattice_id,
            self.lattice.version,
        )
        return IssuedGlyph(text, canonical_text, path, svg, digest, self.lattice)

    def issue_composite(self, text: str, chunk_size: int | None = None) -> CompositeGlyph:
        """Issue ``text`` as word-aligned chunk glyphs plus a composite hash.

        Raises:
            EmptyInput: If ``text`` canonicalizes to "".
            UnsupportedSymbol: If the lattice cannot encode a chunk.
        """
        size = chunk_size or self.config.chunk_size
        canonical_text = canonicalize(text)
        if not canonical_text:
            raise EmptyInput()
        chunks = [self.issue(chunk) for chunk in chunk_text(canonical_text, size)]
        digest = composite_hash(
            canonical_text,
            self.lattice.lattice_id,
            self.lattice.version,
            [chunk.content_hash for chunk in chunks],
        )
        logger.info("Issued composite %s... with %d chunks", digest[:12], len(chunks))
        return CompositeGlyph(text, canonical_text, size, chunks, digest)

    def _recover(self, package: GlyphPackage | Mapping[str, Any]) -> tuple[Path, str, str]:
        path = decode(package, self.lattice)
        text = text_from_path(path, self.lattice)
        return path, text, hash_glyph(text, self.lattice, path)

    def verify(
        self,
        package: GlyphPackage | Mapping[str, Any],
        expected_hash: str,
    ) -> VerificationResult:
        """Decode ``package``, recompute its content hash and compare.

        Codec errors are reported in ``errors`` instead of being raised.
        """
        result = VerificationResult(matched=False, expected_hash=expected_hash.lower())
        try:
            result.path, result.canonical_text, result.computed_hash = self._recover(package)
        except GlyphCodecError as e:
            logger.info("Verification failed: %s", e)
            result.errors.append(f"{type(e).__name__}: {e}")
            return result

        result.matched = result.computed_hash == result.expected_hash
        return result

    def verify_composite(
        self,
        packages: Sequence[GlyphPackage | Mapping[str, Any]],
        expected_hash: str,
        chunk_hashes: Sequence[str] | None = None,
    ) -> CompositeVerificationResult:
        """Decode every chunk package in order and recompute the composite hash.

        Args:
            packages: Chunk packages, in issue order.
            expected_hash: Recorded composite hash.
            chunk_hashes: Recorded per-chunk hashes; each chunk is checked
                against its own entry when given.
        """
        result = CompositeVerificationResult(matched=False, expected_hash=expected_hash.lower())
        if not packages:
            result.errors.append("Composite glyph has no chunks")
            return result
        if chunk_hashes is not None and len(chunk_hashes) != len(packages):
            result.errors.append(
                f"{len(packages)} chunk packages given for {len(chunk_hashes)} recorded hashes"
            )
            return result

        texts: list[str] = []
        digests: list[str] = []
        for index, package in enumerate(packages):
            expected = chunk_hashes[index] if chunk_hashes is not None else ""
            chunk = self.verify(package, expected)
            result.chunks.append(chunk)
            if chunk.errors:
                result.errors.extend(f"chunk {index}: {error}" for error in chunk.errors)
                continue
            if chunk_hashes is not None and not chunk.matched:
                result.errors.append(f"chunk {index}: content hash mismatch")
            texts.append(chunk.canonical_text or "")
            digests.append(chunk.computed_hash or "")
        if result.errors:
            return result

        result.canonical_text = " ".join(texts)
        result.computed_hash = composite_hash(
            result.canonical_text,
            self.lattice.lattice_id,
            self.lattice.version,
            digests,
        )
        result.matched = result.computed_hash == result.expected_hash
        return result
