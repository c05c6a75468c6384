"""Dataclasses shared by the migration pipeline and the manifest builder.

Navigation entries are a tagged variant: :class:`FileEntry` leaves and
:class:`DirEntry` nodes. Only directories carry children, so leaves expose no
child-list API at all.

Example
-------
>>> from docshift.models import DirEntry, FileEntry, manifest_document
>>> root = DirEntry(title="Docs", weight=1, children=[
...     FileEntry(title="Install", path="/v1/install.md", weight=2),
... ])
>>> manifest_document(root)["routes"][0]["routes"][0]
{'title': 'Install', 'path': '/v1/install.md'}
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import msgspec.json as msgspec_json

from ._constants import DEFAULT_WEIGHT
from .paths import metadata_key

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True)
class PageMetadata:
    """Navigation metadata recorded for one migrated Markdown page."""

    title: str
    weight: int = DEFAULT_WEIGHT

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the JSON-ready form stored in the metadata store."""
        return {"title": self.title, "weight": self.weight}

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> PageMetadata:
        """Build metadata from a stored mapping, applying the weight default."""
        weight = int(data.get("weight") or DEFAULT_WEIGHT)
        return cls(title=str(data.get("title", "")), weight=weight)


@dc.dataclass(frozen=True, slots=True)
class PageRecord:
    """A processed page and the front matter fields navigation cares about.

    Attributes
    ----------
    source_path : Path
        Markdown file in the source tree.
    output_path : Path
        Where the migrated page was written.
    title : str
        Page title from front matter.
    link_title : str
        Short navigation title; defaults to ``title``.
    weight : int
        Navigation sort key; 9999 when unspecified.
    """

    source_path: Path
    output_path: Path
    title: str
    link_title: str
    weight: int = DEFAULT_WEIGHT

    @property
    def metadata(self) -> PageMetadata:
        """Return the navigation view of this record."""
        return PageMetadata(title=self.link_title, weight=self.weight)


@dc.dataclass(slots=True)
class FileEntry:
    """Navigation leaf pointing at a single page."""

    title: str
    path: str
    weight: int

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the manifest JSON object for this page."""
        return {"title": self.title, "path": self.path}


@dc.dataclass(slots=True)
class DirEntry:
    """Navigation node for a directory that has an index page."""

    title: str
    weight: int
    children: list[ManifestEntry] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the manifest JSON object, omitting ``routes`` when empty."""
        payload: dict[str, typ.Any] = {"title": self.title}
        if self.children:
            payload["routes"] = [child.to_dict() for child in self.children]
        return payload


ManifestEntry = FileEntry | DirEntry


def sort_entries(entries: typ.Iterable[ManifestEntry]) -> list[ManifestEntry]:
    """Order entries by ascending weight, keeping discovery order for ties."""
    return sorted(entries, key=lambda entry: entry.weight)


def metadata_by_output_path(
    records: typ.Iterable[PageRecord], output_root: Path
) -> dict[str, PageMetadata]:
    """Index page records by their output path relative to ``output_root``."""
    return {
        metadata_key(output_root, record.output_path): record.metadata
        for record in records
    }


def manifest_document(root: DirEntry) -> dict[str, typ.Any]:
    """Wrap ``root`` in the top-level ``{"routes": [...]}`` manifest object."""
    return {"routes": [root.to_dict()]}


def encode_manifest(root: DirEntry) -> bytes:
    """Serialize the manifest for ``root`` as two-space indented JSON."""
    encoded = msgspec_json.encode(manifest_document(root))
    return msgspec_json.format(encoded, indent=2) + b"\n"


__all__ = [
    "DirEntry",
    "FileEntry",
    "ManifestEntry",
    "PageMetadata",
    "PageRecord",
    "encode_manifest",
    "manifest_document",
    "metadata_by_output_path",
    "sort_entries",
]
