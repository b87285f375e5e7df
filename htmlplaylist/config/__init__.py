"""
Configuration management for htmlplaylist.

This module loads the generator settings from TOML files: the packaged
`defaults.toml` first, then an optional user file layered on top.
"""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent
DEFAULTS_PATH = CONFIG_DIR / "defaults.toml"


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Settings for one playlist generation run."""

    output_dir: Path = Path("playlist")
    covers_dirname: str = "covers"
    index_filename: str = "index.html"
    page_title: str = "Playlist"
    thumbnail_size: int = 64
    jpeg_quality: int = 85
    recursive: bool = False
    junk_patterns: tuple[str, ...] = ()
    unknown_artist: str = "Unknown Artist"
    unknown_album: str = "Unknown Album"

    def __post_init__(self) -> None:
        if self.thumbnail_size <= 0:
            raise ValueError(f"thumbnail_size must be positive, got {self.thumbnail_size}")
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be in 1..95, got {self.jpeg_quality}")
        for name in (self.covers_dirname, self.index_filename):
            if not name or "/" in name or "\\" in name or name in (".", ".."):
                raise ValueError(f"invalid file name in config: {name!r}")

    @property
    def covers_dir(self) -> Path:
        return self.output_dir / self.covers_dirname

    @property
    def index_path(self) -> Path:
        return self.output_dir / self.index_filename

    def with_overrides(self, **overrides: Any) -> GeneratorConfig:
        """
        Return a copy with the given fields replaced.

        `None` values are skipped so argparse defaults can be passed straight through.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "output_dir" in changes:
            changes["output_dir"] = Path(changes["output_dir"])
        return dataclasses.replace(self, **changes)


_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(GeneratorConfig))


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten the TOML tables ([output], [covers], ...) into one key space."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(_flatten(value))
        else:
            flat[key] = value
    return flat


def _read_toml(path: Path) -> dict[str, Any]:
    logger.debug("Loading config from %s", path)
    with path.open("rb") as f:
        return _flatten(tomllib.load(f))


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key not in _FIELD_NAMES:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        if key == "output_dir":
            value = Path(value)
        elif key == "junk_patterns":
            value = tuple(str(p) for p in value)
        elif key in ("thumbnail_size", "jpeg_quality"):
            value = int(value)
        elif key == "recursive":
            if not isinstance(value, bool):
                raise ValueError(f"recursive must be true or false, got {value!r}")
        else:
            value = str(value)
        out[key] = value
    return out


def load_config(config_path: Path | None = None) -> GeneratorConfig:
    """
    Load generator configuration.

    Args:
        config_path: Optional user TOML file. Its keys override the packaged defaults.

    Returns:
        Loaded GeneratorConfig instance.
    """
    values = _read_toml(DEFAULTS_PATH)
    if config_path is not None:
        values.update(_read_toml(config_path))

    return GeneratorConfig(**_coerce(values))


# Global singleton instance (lazy loaded)
_config: GeneratorConfig | None = None


def get_config() -> GeneratorConfig:
    """
    Get the default configuration (lazy loaded singleton).

    Returns:
        The GeneratorConfig built from the packaged defaults.
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config
