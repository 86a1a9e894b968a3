"""User configuration for qbc-glyph (render defaults, logging, lattice lookup).

The codec itself takes every parameter explicitly; this configuration only
supplies defaults to the high-level API and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from qbc_glyph.exceptions import ConfigError
from qbc_glyph.svg.projection import DEFAULT_MARGIN, DEFAULT_SIZE
from qbc_glyph.svg.renderer import DEFAULT_PRECISION

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "qbc-glyph" / "config.yaml"
DEFAULT_CHUNK_SIZE = 12

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Render defaults and environment settings."""

    size: int = DEFAULT_SIZE
    margin: int = DEFAULT_MARGIN
    precision: int = DEFAULT_PRECISION
    raster_scale: float = 1.0
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "WARNING"
    lattice_paths: list[Path] = field(default_factory=list)

    def validate(self) -> None:
        """Raise ConfigError for out-of-range values."""
        if self.size < 16:
            raise ConfigError("size: must be at least 16", "size")
        if self.margin < 0 or self.size <= 2 * self.margin:
            raise ConfigError("margin: must be non-negative and leave room on the canvas", "margin")
        if not 1 <= self.precision <= 10:
            raise ConfigError("precision: must be between 1 and 10", "precision")
        if self.raster_scale <= 0:
            raise ConfigError("raster_scale: must be positive", "raster_scale")
        if self.chunk_size < 1:
            raise ConfigError("chunk_size: must be at least 1", "chunk_size")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(f"log_level: must be one of {', '.join(_LOG_LEVELS)}", "log_level")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigError(f"{key}: unknown setting", key)
            if key == "lattice_paths":
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError("lattice_paths: expected list of strings", key)
                kwargs[key] = [Path(v).expanduser() for v in value]
            elif key == "log_level":
                if not isinstance(value, str):
                    raise ConfigError("log_level: expected string", key)
                kwargs[key] = value.upper()
            elif key == "raster_scale":
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigError(f"raster_scale: expected number, got {type(value).__name__}", key)
                kwargs[key] = float(value)
            else:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigError(f"{key}: expected integer, got {type(value).__name__}", key)
                kwargs[key] = value
        config = cls(**kwargs)
        config.validate()
        return config

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load configuration from YAML.

        Args:
            path: Explicit config file. When omitted, the user config file is
                read if it exists, otherwise defaults are returned.

        Raises:
            FileNotFoundError: If an explicit path does not exist.
            ConfigError: If the file is invalid.
        """
        if path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                return cls()
            path = DEFAULT_CONFIG_PATH
        elif not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return cls.from_dict(data)

    def find_lattice(self, name: str) -> Path | None:
        """Locate ``<name>.yaml`` / ``.yml`` / ``.json`` in the lattice paths."""
        candidate = Path(name)
        if candidate.exists():
            return candidate
        for directory in self.lattice_paths:
            for suffix in (".yaml", ".yml", ".json"):
                found = directory / f"{name}{suffix}"
                if found.exists():
                    return found
        return None
