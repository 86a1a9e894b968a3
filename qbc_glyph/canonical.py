"""Text canonicalization.

All downstream steps (encoding, hashing, decoding) operate on canonical
text: uppercase letters ``A-Z`` separated by single spaces.
"""

from __future__ import annotations

import re

ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ ")

_OUTSIDE_ALPHABET = re.compile(r"[^A-Z ]")
_WHITESPACE_RUN = re.compile(r"\s+")


def canonicalize(text: str) -> str:
    """Return the canonical form of ``text``.

    Total over all strings: ``""`` and whitespace-only input canonicalize
    to ``""``. Idempotent.

    >>> canonicalize("  hello,   world!  ")
    'HELLO WORLD'
    """
    upper = text.strip().upper()
    letters = _OUTSIDE_ALPHABET.sub(" ", upper)
    return _WHITESPACE_RUN.sub(" ", letters).strip()


def is_canonical(text: str) -> bool:
    """True if ``text`` is already in canonical form."""
    return canonicalize(text) == text


def chunk_text(canonical_text: str, chunk_size: int) -> list[str]:
    """Split canonical text into word-aligned chunks for composite glyphs.

    Words are packed greedily into chunks of at most ``chunk_size``
    characters. A word longer than ``chunk_size`` becomes a chunk of its
    own, so joining the chunks with single spaces restores the input.

    >>> chunk_text("THE QUICK BROWN FOX", 10)
    ['THE QUICK', 'BROWN FOX']
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    chunks: list[str] = []
    current = ""
    for word in canonical_text.split(" "):
        if not word:
            continue
        if current and len(current) + 1 + len(word) <= chunk_size:
            current = f"{current} {word}"
        else:
            if current:
                chunks.append(current)
            current = word
    if current:
        chunks.append(current)
    return chunks
