"""Load migration configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .models import ConfigError, MigrationConfig

_PATH_KEYS = ("source_root", "output_root", "store_dir")


def load_migration_config(path: Path | None = None) -> MigrationConfig:
    """Load the YAML file describing where and how docs are migrated.

    Parameters
    ----------
    path : Path, optional
        Filesystem path to the YAML configuration (for example
        ``config/docshift.yaml``). When ``None``, built-in defaults are used.

    Returns
    -------
    MigrationConfig
        Parsed configuration with defaults applied for absent keys.

    Raises
    ------
    FileNotFoundError
        If ``path`` is given but does not exist.
    ConfigError
        If the top-level YAML structure is not a mapping, a key is unknown,
        or a value has the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docshift.config import load_migration_config
    >>> load_migration_config().output_root
    PosixPath('content-out')
    """
    if path is None:
        return MigrationConfig()
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    base = MigrationConfig()
    unknown = sorted(set(raw) - {*_PATH_KEYS, "rewrite_links"})
    if unknown:
        msg = f"Unknown configuration keys in '{path}': {', '.join(unknown)}"
        raise ConfigError(msg)

    paths = {key: _as_path(raw, key, getattr(base, key)) for key in _PATH_KEYS}
    rewrite_links = raw.get("rewrite_links", base.rewrite_links)
    if not isinstance(rewrite_links, bool):
        msg = f"'rewrite_links' must be true or false, got {rewrite_links!r}."
        raise ConfigError(msg)

    return MigrationConfig(rewrite_links=rewrite_links, **paths)


def _as_path(raw: typ.Mapping[str, typ.Any], key: str, default: Path) -> Path:
    """Return ``raw[key]`` as a Path, falling back to ``default``."""
    value = raw.get(key)
    match value:
        case None:
            return default
        case str() if value.strip():
            return Path(value.strip())
        case _:
            msg = f"'{key}' must be a non-empty path string, got {value!r}."
            raise ConfigError(msg)


__all__ = ["load_migration_config"]
