"""
Configuration management for musicdb.

This module loads database, record-file and scanner defaults from a TOML file.
The packaged `defaults.toml` is used unless another path is given.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path

from musicdb.core import ResourceError
from musicdb.core.kernel import DEFAULT_KIND, available_kinds
from musicdb.core.scanner import DEFAULT_AUDIO_EXTENSIONS

logger = logging.getLogger(__name__)

# Path to the config directory
CONFIG_DIR = Path(__file__).parent


@dataclass(frozen=True)
class DatabaseConfig:
    """Loaded musicdb configuration."""

    default_kind: str = DEFAULT_KIND
    initial_capacity: int = 0
    encoding: str = "utf-8"
    audio_extensions: frozenset[str] = DEFAULT_AUDIO_EXTENSIONS


def _parse_extensions(values: object) -> frozenset[str]:
    if not isinstance(values, list):
        return DEFAULT_AUDIO_EXTENSIONS
    out: set[str] = set()
    for v in values:
        s = str(v).strip().lower()
        if not s:
            continue
        out.add(s if s.startswith(".") else f".{s}")
    return frozenset(out)


def load_config(config_path: Path | None = None) -> DatabaseConfig:
    """
    Load configuration from a TOML file.

    Args:
        config_path: Path to a TOML file. If None, uses the packaged defaults.

    Returns:
        Loaded DatabaseConfig instance.

    Raises:
        ResourceError: If the file cannot be read or is not valid TOML.
    """
    if config_path is None:
        config_path = CONFIG_DIR / "defaults.toml"

    logger.debug("Loading config from %s", config_path)

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ResourceError(f"cannot load config {config_path}: {e}") from e

    database = data.get("database", {})
    records = data.get("records", {})
    scanner = data.get("scanner", {})

    kind = str(database.get("default_kind", DEFAULT_KIND))
    if kind not in available_kinds():
        logger.warning("Unknown default_kind %r in %s, using %r", kind, config_path, DEFAULT_KIND)
        kind = DEFAULT_KIND

    capacity = database.get("initial_capacity", 0)
    if not isinstance(capacity, int) or capacity < 0:
        logger.warning("Invalid initial_capacity %r in %s, using 0", capacity, config_path)
        capacity = 0

    return DatabaseConfig(
        default_kind=kind,
        initial_capacity=capacity,
        encoding=str(records.get("encoding", "utf-8")),
        audio_extensions=_parse_extensions(scanner.get("extensions")),
    )


# Global singleton instance (lazy loaded)
_config: DatabaseConfig | None = None


def get_config() -> DatabaseConfig:
    """
    Get the global configuration (lazy loaded singleton).

    Returns:
        The DatabaseConfig instance.
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reload_config(config_path: Path | None = None) -> DatabaseConfig:
    """
    Force reload of the configuration.

    Returns:
        The newly loaded DatabaseConfig instance.
    """
    global _config
    _config = load_config(config_path)
    return _config
