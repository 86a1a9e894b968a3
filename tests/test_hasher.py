"""Tests for content hashing.

The pinned digests below were computed independently from the canonical
JSON documented in DESIGN.md; any change to them is a breaking change of
the hash scheme.
"""

import json
from dataclasses import replace

import pytest

from qbc_glyph.codec.encoder import encode
from qbc_glyph.codec.hasher import (
    COMPOSITE_SCHEME,
    HASH_SCHEME,
    composite_hash,
    content_hash,
    dump_canonical,
    hash_glyph,
)
from qbc_glyph.exceptions import SerializationError
from qbc_glyph.lattice import Lattice
from qbc_glyph.path import Connector, Path, Step

HELLO_WORLD_HASH = "5ce3152ddbd344e30defd1bf7b295e2af331260ba52b2d8421570e2de5efae2c"
EMPTY_TEXT_HASH = "d05e009b9249f101a69d531885a4d4d1b98ccd9ed8a3f9e5b24de5b5fffb4772"


class TestPinnedDigests:
    def test_hello_world(self, lattice: Lattice) -> None:
        path = encode("HELLO WORLD", lattice)
        assert hash_glyph("HELLO WORLD", lattice, path) == HELLO_WORLD_HASH

    def test_empty_text(self, lattice: Lattice) -> None:
        assert hash_glyph("", lattice, Path(())) == EMPTY_TEXT_HASH

    def test_style_is_not_hashed(self, lattice: Lattice) -> None:
        restyled = replace(lattice, style=replace(lattice.style, stroke_color="#ff0000"))
        path = encode("HELLO WORLD", restyled)
        assert hash_glyph("HELLO WORLD", restyled, path) == HELLO_WORLD_HASH


class TestHashSensitivity:
    """Every hashed input changes the digest."""

    def test_format(self, lattice: Lattice) -> None:
        digest = hash_glyph("HELLO WORLD", lattice, encode("HELLO WORLD", lattice))
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_text(self, lattice: Lattice) -> None:
        path = encode("HELLO WORLD", lattice)
        assert hash_glyph("HELLO WORLDS", lattice, path) != HELLO_WORLD_HASH

    def test_lattice_version(self, make_lattice) -> None:
        lattice = make_lattice(version=2)
        path = encode("HELLO WORLD", lattice)
        assert hash_glyph("HELLO WORLD", lattice, path) != HELLO_WORLD_HASH

    def test_lattice_id(self, make_lattice) -> None:
        lattice = make_lattice(latticeId="other")
        path = encode("HELLO WORLD", lattice)
        assert hash_glyph("HELLO WORLD", lattice, path) != HELLO_WORLD_HASH

    def test_rules_without_version_bump(self, make_lattice) -> None:
        lattice = make_lattice(notch_depth_factor=0.2)
        path = encode("HELLO WORLD", lattice)
        assert path == encode("HELLO WORLD", make_lattice())
        assert hash_glyph("HELLO WORLD", lattice, path) != HELLO_WORLD_HASH

    def test_connector_policy_without_version_bump(self, make_lattice) -> None:
        word = make_lattice()
        symbol = make_lattice(connector_policy="symbol")
        word_path = encode("HELLO WORLD", word)
        symbol_path = encode("HELLO WORLD", symbol)

        assert word.anchors_2d == symbol.anchors_2d
        assert word_path.anchors == symbol_path.anchors
        assert word_path.connectors != symbol_path.connectors
        assert hash_glyph("HELLO WORLD", word, word_path) == HELLO_WORLD_HASH
        assert hash_glyph("HELLO WORLD", symbol, symbol_path) != HELLO_WORLD_HASH

    def test_connector(self, lattice: Lattice) -> None:
        steps = list(encode("HELLO WORLD", lattice))
        steps[1] = Step(steps[1].anchor, Connector.NOTCH)
        assert hash_glyph("HELLO WORLD", lattice, Path(tuple(steps))) != HELLO_WORLD_HASH


class TestCanonicalSerialization:
    def test_sorted_compact_json(self) -> None:
        assert dump_canonical({"b": 1, "a": [1.5, None, True]}) == b'{"a":[1.5,null,true],"b":1}'

    def test_integral_floats_collapse(self) -> None:
        assert dump_canonical({"x": 1.0}) == dump_canonical({"x": 1})

    def test_unicode_is_not_escaped(self) -> None:
        assert dump_canonical("é") == '"é"'.encode("utf-8")

    def test_payload_carries_scheme(self, lattice: Lattice) -> None:
        path = encode("HI", lattice)
        payload = {
            "scheme": HASH_SCHEME,
            "canonical_text": "HI",
            "lattice_id": "test",
            "lattice_version": 1,
            "rules": lattice.rules,
            "path": path,
        }
        decoded = json.loads(dump_canonical(payload))
        assert decoded["scheme"] == "qbc-glyph-hash/1"
        assert decoded["path"][0] == {"anchor": "H", "connector": None}

    def test_mapping_and_objects_hash_alike(self, lattice: Lattice) -> None:
        path = encode("HI", lattice)
        from_objects = content_hash("HI", "test", 1, lattice.rules, path)
        from_plain = content_hash("HI", "test", 1, lattice.rules.to_dict(), path.to_list())
        assert from_objects == from_plain


class TestSerializationErrors:
    def test_nan_rejected(self, lattice: Lattice) -> None:
        rules = lattice.rules.to_dict()
        rules["tick_length_factor"] = float("nan")
        with pytest.raises(SerializationError, match="non-finite"):
            content_hash("HI", "test", 1, rules, [])

    def test_non_string_key_rejected(self) -> None:
        with pytest.raises(SerializationError, match="not a string"):
            content_hash("HI", "test", 1, {1: "x"}, [])

    def test_unserializable_value_rejected(self) -> None:
        with pytest.raises(SerializationError, match="not serializable"):
            content_hash("HI", "test", 1, {"x": object()}, [])

    @pytest.mark.parametrize(
        ("text", "lattice_id", "version"),
        [(None, "test", 1), ("HI", 7, 1), ("HI", "test", "1"), ("HI", "test", True)],
    )
    def test_bad_identity_types(self, text, lattice_id, version) -> None:
        with pytest.raises(SerializationError):
            content_hash(text, lattice_id, version, {}, [])


class TestCompositeHash:
    CHUNKS = ["a" * 64, "b" * 64]

    def test_format(self) -> None:
        digest = composite_hash("HELLO WORLD", "test", 1, self.CHUNKS)
        assert len(digest) == 64
        assert digest == composite_hash("HELLO WORLD", "test", 1, list(self.CHUNKS))
        assert COMPOSITE_SCHEME != HASH_SCHEME

    def test_chunk_order_matters(self) -> None:
        assert composite_hash("HELLO WORLD", "test", 1, self.CHUNKS) != composite_hash(
            "HELLO WORLD", "test", 1, list(reversed(self.CHUNKS))
        )

    def test_text_and_lattice_are_bound(self) -> None:
        digest = composite_hash("HELLO WORLD", "test", 1, self.CHUNKS)
        assert composite_hash("HELLO WORLDS", "test", 1, self.CHUNKS) != digest
        assert composite_hash("HELLO WORLD", "test", 2, self.CHUNKS) != digest
        assert composite_hash("HELLO WORLD", "other", 1, self.CHUNKS) != digest

    def test_differs_from_single_glyph_hash(self, lattice: Lattice) -> None:
        assert composite_hash("HELLO WORLD", "test", 1, [HELLO_WORLD_HASH]) != HELLO_WORLD_HASH
