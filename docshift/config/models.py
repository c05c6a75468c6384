"""Typed dataclasses describing docshift migration settings."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path


class ConfigError(ValueError):
    """Raised when the migration configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class MigrationConfig:
    """A fully resolved migration definition.

    Attributes
    ----------
    source_root : Path
        Root of the Hugo content tree (for example ``content/en``).
    output_root : Path
        Root of the migrated tree; each top-level directory gets a manifest.
    store_dir : Path
        Directory holding the replacement, description, and metadata stores.
    rewrite_links : bool
        Whether relative links in page bodies are rewritten.
    """

    source_root: Path = Path("content/en")
    output_root: Path = Path("content-out")
    store_dir: Path = Path()
    rewrite_links: bool = True

    def with_overrides(
        self, *, source_root: Path | None = None, output_root: Path | None = None
    ) -> MigrationConfig:
        """Return a copy with any non-``None`` CLI overrides applied."""
        return dc.replace(
            self,
            source_root=source_root or self.source_root,
            output_root=output_root or self.output_root,
        )


__all__ = ["ConfigError", "MigrationConfig"]
