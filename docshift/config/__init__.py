"""Load and validate migration configuration YAML for docshift runs.

This subpackage parses the optional ``docshift.yaml`` file and produces a
:class:`MigrationConfig` that the pipeline and CLI consume. The primary entry
point is :func:`load_migration_config`, which applies defaults for absent
keys and rejects unknown ones.

Examples
--------
>>> from pathlib import Path
>>> from docshift.config import load_migration_config
>>> config = load_migration_config(Path("config/docshift.yaml"))  # doctest: +SKIP
>>> config.source_root  # doctest: +SKIP
PosixPath('content/en')
"""

from .loader import load_migration_config
from .models import ConfigError, MigrationConfig

__all__ = ["ConfigError", "MigrationConfig", "load_migration_config"]
