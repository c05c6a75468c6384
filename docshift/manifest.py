"""Build weighted navigation manifests from the migrated output tree.

The filesystem is the authority on structure: :class:`ManifestBuilder` walks
an output directory and looks up each page's title and weight in the metadata
recorded while pages were migrated. Directories holding a ``README.md``
become nested navigation nodes; directories without one exist only for
on-disk organization, so their pages are promoted into the nearest indexed
ancestor.

Typical usage after the pipeline has finished:

>>> from pathlib import Path
>>> from docshift.manifest import write_manifests
>>> run = write_manifests(Path("content-out"), metadata)  # doctest: +SKIP
>>> run.written  # doctest: +SKIP
[PosixPath('content-out/v1.0/manifest.json')]

Side effects are limited to :func:`write_manifests`, which writes one
``manifest.json`` per top-level output directory.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import typing as typ
from pathlib import Path

from ._constants import (
    INDEX_OUTPUT_NAME,
    INDEX_TITLE,
    INDEX_WEIGHT,
    MANIFEST_FILENAME,
    MARKDOWN_SUFFIX,
)
from .models import DirEntry, FileEntry, ManifestEntry, encode_manifest, sort_entries
from .paths import metadata_key, site_path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import PageMetadata

logger = logging.getLogger(__name__)


class MissingMetadataError(LookupError):
    """Raised when a navigable page has no recorded front matter metadata."""


@dc.dataclass(frozen=True, slots=True)
class ListedEntry:
    """One immediate child of a directory, as reported by a listing."""

    name: str
    is_dir: bool


def list_directory(directory: Path) -> list[ListedEntry]:
    """Return the children of ``directory`` sorted by name."""
    with os.scandir(directory) as handle:
        listed = [ListedEntry(entry.name, entry.is_dir()) for entry in handle]
    return sorted(listed, key=lambda entry: entry.name)


def _file_exists(path: Path) -> bool:
    return path.is_file()


class ManifestBuilder:
    """Reconstruct the navigation tree for one output directory."""

    def __init__(
        self,
        metadata: cabc.Mapping[str, PageMetadata],
        output_root: Path,
        *,
        list_dir: cabc.Callable[[Path], cabc.Sequence[ListedEntry]] | None = None,
        file_exists: cabc.Callable[[Path], bool] | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        metadata : Mapping[str, PageMetadata]
            Completed, read-only metadata keyed by each output Markdown
            path relative to ``output_root``, in POSIX form.
        output_root : Path
            Root of the output tree; site paths are computed relative to it.
        list_dir : Callable[[Path], Sequence[ListedEntry]], optional
            Directory listing capability. Defaults to :func:`list_directory`.
        file_exists : Callable[[Path], bool], optional
            Predicate used to detect index pages in subdirectories. Defaults
            to :meth:`pathlib.Path.is_file`.
        """
        self.metadata = metadata
        self.output_root = output_root
        self._list_dir = list_dir or list_directory
        self._file_exists = file_exists or _file_exists

    def build(self, directory: Path) -> DirEntry:
        """Return the navigation node for ``directory`` and its descendants.

        Raises
        ------
        MissingMetadataError
            If ``directory`` has no recorded index page, or any Markdown page
            beneath it has no recorded metadata.
        """
        index_path = directory / INDEX_OUTPUT_NAME
        index_meta = self.metadata.get(metadata_key(self.output_root, index_path))
        if index_meta is None:
            msg = f"No index page metadata found for directory '{directory}'."
            raise MissingMetadataError(msg)

        children = self._collect(directory)
        return DirEntry(
            title=index_meta.title,
            weight=index_meta.weight,
            children=sort_entries(children),
        )

    def _collect(self, directory: Path) -> list[ManifestEntry]:
        """Gather entries for ``directory``, splicing in non-indexed subdirs."""
        entries: list[ManifestEntry] = []
        for child in self._list_dir(directory):
            child_path = directory / child.name
            logger.debug("processing %s", child_path)
            if not child.is_dir:
                entry = self._file_entry(child_path)
                if entry is not None:
                    entries.append(entry)
            elif self._file_exists(child_path / INDEX_OUTPUT_NAME):
                entries.append(self.build(child_path))
            else:
                logger.debug("flattening %s into %s", child_path, directory)
                entries.extend(self._collect(child_path))
        return entries

    def _file_entry(self, path: Path) -> FileEntry | None:
        """Return a leaf for a Markdown page, or None for any other file."""
        if path.suffix != MARKDOWN_SUFFIX:
            return None

        page_meta = self.metadata.get(metadata_key(self.output_root, path))
        if page_meta is None:
            msg = f"Missing metadata for page '{path}'."
            raise MissingMetadataError(msg)

        title = page_meta.title
        weight = page_meta.weight
        if path.name == INDEX_OUTPUT_NAME:
            title = INDEX_TITLE
            weight = INDEX_WEIGHT
        return FileEntry(
            title=title, path=site_path(self.output_root, path), weight=weight
        )


@dc.dataclass(slots=True)
class ManifestRun:
    """Outcome of writing manifests for every top-level output directory."""

    written: list[Path] = dc.field(default_factory=list)
    failures: dict[Path, str] = dc.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Return True when every manifest root was written."""
        return not self.failures


def write_manifests(
    output_root: Path, metadata: cabc.Mapping[str, PageMetadata]
) -> ManifestRun:
    """Build and write ``manifest.json`` for each top-level output directory.

    Each root is all-or-nothing: a :class:`MissingMetadataError` skips that
    root's manifest and is recorded in :attr:`ManifestRun.failures` while the
    remaining roots are still written.
    """
    if not output_root.is_dir():
        msg = f"Output directory '{output_root}' not found."
        raise FileNotFoundError(msg)

    builder = ManifestBuilder(metadata, output_root)
    run = ManifestRun()
    for entry in list_directory(output_root):
        if not entry.is_dir:
            continue
        root_dir = output_root / entry.name
        manifest_path = root_dir / MANIFEST_FILENAME
        try:
            manifest = builder.build(root_dir)
        except MissingMetadataError as exc:
            logger.error("failed to create manifest for %s: %s", manifest_path, exc)
            run.failures[root_dir] = str(exc)
            continue
        manifest_path.write_bytes(encode_manifest(manifest))
        logger.info("wrote manifest %s", manifest_path)
        run.written.append(manifest_path)
    return run


__all__ = [
    "ListedEntry",
    "ManifestBuilder",
    "ManifestRun",
    "MissingMetadataError",
    "list_directory",
    "write_manifests",
]
