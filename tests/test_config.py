"""Tests for YAML configuration loading."""

from pathlib import Path
from textwrap import dedent

import pytest

from qbc_glyph.config import Config
from qbc_glyph.exceptions import ConfigError


class TestConfigLoad:
    def test_defaults(self) -> None:
        config = Config()
        assert config.size == 200
        assert config.margin == 20
        assert config.precision == 3
        assert config.log_level == "WARNING"
        assert config.lattice_paths == []

    def test_full_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            dedent(f"""
                size: 320
                margin: 16
                precision: 2
                raster_scale: 2
                log_level: debug
                lattice_paths:
                  - {tmp_path}
            """),
            encoding="utf-8",
        )
        config = Config.load(config_file)

        assert config.size == 320
        assert config.margin == 16
        assert config.precision == 2
        assert config.raster_scale == 2.0
        assert config.log_level == "DEBUG"
        assert config.lattice_paths == [tmp_path]

    def test_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("", encoding="utf-8")
        assert Config.load(config_file) == Config()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            Config.load(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("size: [200", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML syntax"):
            Config.load(config_file)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            Config.load(config_file)


class TestConfigValidation:
    @pytest.mark.parametrize(
        ("data", "key"),
        [
            ({"colour": "red"}, "colour"),
            ({"size": "big"}, "size"),
            ({"size": 8}, "size"),
            ({"margin": 100}, "margin"),
            ({"precision": 0}, "precision"),
            ({"raster_scale": 0}, "raster_scale"),
            ({"raster_scale": True}, "raster_scale"),
            ({"log_level": "LOUD"}, "log_level"),
            ({"chunk_size": 0}, "chunk_size"),
            ({"chunk_size": "long"}, "chunk_size"),
            ({"lattice_paths": "lattices"}, "lattice_paths"),
        ],
    )
    def test_invalid_values(self, data: dict, key: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Config.from_dict(data)
        assert exc_info.value.key == key

    def test_chunk_size(self) -> None:
        assert Config().chunk_size == 12
        assert Config.from_dict({"chunk_size": 20}).chunk_size == 20


class TestFindLattice:
    def test_direct_path(self, reference_lattice_file: Path) -> None:
        assert Config().find_lattice(str(reference_lattice_file)) == reference_lattice_file

    def test_search_paths(self, fixtures_dir: Path) -> None:
        config = Config(lattice_paths=[fixtures_dir])
        assert config.find_lattice("test_v1") == fixtures_dir / "test_v1.yaml"
        assert config.find_lattice("legacy_v3") == fixtures_dir / "legacy_v3.json"

    def test_not_found(self, fixtures_dir: Path) -> None:
        assert Config(lattice_paths=[fixtures_dir]).find_lattice("nope") is None
