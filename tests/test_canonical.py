"""Tests for text canonicalization."""

import pytest

from qbc_glyph.canonical import canonicalize, chunk_text, is_canonical


class TestCanonicalize:
    """canonicalize() is total, idempotent and restricted to A-Z plus space."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("hello world", "HELLO WORLD"),
            ("  Hello,   World!  ", "HELLO WORLD"),
            ("a-b_c", "A B C"),
            ("tab\tand\nnewline", "TAB AND NEWLINE"),
            ("R2D2", "R D"),
            ("café", "CAF"),
            ("", ""),
            ("   ", ""),
            ("!!!", ""),
        ],
    )
    def test_examples(self, raw: str, expected: str) -> None:
        assert canonicalize(raw) == expected

    @pytest.mark.parametrize("raw", ["Hello, World!", "  x  y  ", "ÄÖÜ abc", "1 2 3"])
    def test_idempotent(self, raw: str) -> None:
        once = canonicalize(raw)
        assert canonicalize(once) == once

    def test_output_alphabet(self) -> None:
        result = canonicalize("The quick (brown) fox; 42 jumps!")
        assert set(result) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ ")
        assert "  " not in result
        assert result == result.strip()


class TestIsCanonical:
    def test_canonical_text(self) -> None:
        assert is_canonical("HELLO WORLD")
        assert is_canonical("")

    @pytest.mark.parametrize("text", ["hello", "HELLO  WORLD", " HELLO", "HELLO!"])
    def test_non_canonical_text(self, text: str) -> None:
        assert not is_canonical(text)


class TestChunkText:
    """chunk_text() packs whole words and never loses characters."""

    @pytest.mark.parametrize(
        ("text", "size", "expected"),
        [
            ("THE QUICK BROWN FOX", 10, ["THE QUICK", "BROWN FOX"]),
            ("HELLO WORLD", 11, ["HELLO WORLD"]),
            ("HELLO WORLD", 10, ["HELLO", "WORLD"]),
            ("A B C D", 3, ["A B", "C D"]),
            ("SUPERCALIFRAGILISTIC IS LONG", 6, ["SUPERCALIFRAGILISTIC", "IS", "LONG"]),
            ("", 5, []),
        ],
    )
    def test_examples(self, text: str, size: int, expected: list[str]) -> None:
        assert chunk_text(text, size) == expected

    @pytest.mark.parametrize("size", [1, 4, 12, 80])
    def test_join_restores_text(self, size: int) -> None:
        text = "THE QUICK BROWN FOX JUMPS OVER THE LAZY DOG"
        chunks = chunk_text(text, size)
        assert " ".join(chunks) == text
        assert all(is_canonical(chunk) for chunk in chunks)

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            chunk_text("HELLO", 0)
