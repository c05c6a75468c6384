"""Unit tests for navigation manifest construction.

These tests build small output trees beneath ``tmp_path`` and check the
weighted ordering, index precedence, directory flattening, serialization
shape, and per-root failure isolation of :mod:`docshift.manifest`.
"""

from __future__ import annotations

from pathlib import Path

import msgspec.json as msgspec_json
import pytest

from docshift.manifest import (
    ListedEntry,
    ManifestBuilder,
    MissingMetadataError,
    write_manifests,
)
from docshift.models import (
    DirEntry,
    FileEntry,
    PageMetadata,
    PageRecord,
    encode_manifest,
    metadata_by_output_path,
)
from docshift.paths import metadata_key


def _page(
    metadata: dict[str, PageMetadata],
    output_root: Path,
    path: Path,
    title: str,
    weight: int = 9999,
) -> None:
    """Write a page at ``path`` and record its metadata."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("---\ntitle: x\n---\n", encoding="utf-8")
    metadata[metadata_key(output_root, path)] = PageMetadata(title=title, weight=weight)


def _titles(entry: DirEntry) -> list[str]:
    return [child.title for child in entry.children]


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    root = tmp_path / "out"
    root.mkdir()
    return root


def test_flattened_directory_children_join_nearest_indexed_ancestor(
    output_root: Path,
) -> None:
    """``docs/b`` has no index, so ``c.md`` sorts among ``docs``' children."""
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Docs")
    _page(metadata, output_root, docs / "a" / "README.md", "A", 1)
    _page(metadata, output_root, docs / "b" / "c.md", "C", 5)
    _page(metadata, output_root, docs / "d.md", "D", 2)

    manifest = ManifestBuilder(metadata, output_root).build(docs)

    assert _titles(manifest) == ["Introduction", "A", "D", "C"]
    assert [child.weight for child in manifest.children] == [-9999, 1, 2, 5]
    assert "b" not in _titles(manifest)
    c_entry = manifest.children[-1]
    assert isinstance(c_entry, FileEntry)
    assert c_entry.path == "/docs/b/c.md"


def test_non_indexed_grandchild_joins_its_indexed_parent(output_root: Path) -> None:
    """``docs/a/b/c.md`` is promoted into ``a``, its nearest indexed ancestor."""
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Docs")
    _page(metadata, output_root, docs / "a" / "README.md", "A", 1)
    _page(metadata, output_root, docs / "a" / "b" / "c.md", "C", 5)
    _page(metadata, output_root, docs / "d.md", "D", 2)

    manifest = ManifestBuilder(metadata, output_root).build(docs)

    assert _titles(manifest) == ["Introduction", "A", "D"]
    nested = manifest.children[1]
    assert isinstance(nested, DirEntry)
    assert (nested.title, nested.weight) == ("A", 1)
    assert _titles(nested) == ["Introduction", "C"]


def test_flattening_recurses_through_nested_unindexed_dirs(output_root: Path) -> None:
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Docs")
    _page(metadata, output_root, docs / "x" / "y" / "deep.md", "Deep", 3)
    _page(metadata, output_root, docs / "x" / "y" / "z" / "README.md", "Z", 4)

    manifest = ManifestBuilder(metadata, output_root).build(docs)

    assert _titles(manifest) == ["Introduction", "Deep", "Z"]
    assert isinstance(manifest.children[2], DirEntry)


def test_root_without_index_page_raises(output_root: Path) -> None:
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "page.md", "Page", 1)

    with pytest.raises(MissingMetadataError, match="docs"):
        ManifestBuilder(metadata, output_root).build(docs)


def test_page_without_metadata_raises(output_root: Path) -> None:
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Docs")
    (docs / "orphan.md").write_text("no metadata", encoding="utf-8")

    with pytest.raises(MissingMetadataError, match="orphan.md"):
        ManifestBuilder(metadata, output_root).build(docs)


def test_non_markdown_files_are_ignored(output_root: Path) -> None:
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Docs")
    (docs / "logo.png").write_bytes(b"\x89PNG")
    (docs / "manifest.json").write_text("{}", encoding="utf-8")

    manifest = ManifestBuilder(metadata, output_root).build(docs)

    assert _titles(manifest) == ["Introduction"]


def test_index_page_precedes_any_authored_weight(output_root: Path) -> None:
    """Index pages sort first even against a sibling weighted -9998."""
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "docs"
    _page(metadata, output_root, docs / "README.md", "Authored Title", 50)
    _page(metadata, output_root, docs / "early.md", "Early", -9998)

    manifest = ManifestBuilder(metadata, output_root).build(docs)

    intro = manifest.children[0]
    assert (intro.title, intro.weight) == ("Introduction", -9999)
    assert (manifest.title, manifest.weight) == ("Authored Title", 50)


def test_equal_weights_keep_listing_order(output_root: Path) -> None:
    """Ties are stable with respect to the directory listing."""
    docs = output_root / "docs"
    metadata = {
        "docs/README.md": PageMetadata("Docs", 1),
        "docs/zeta.md": PageMetadata("Zeta", 7),
        "docs/alpha.md": PageMetadata("Alpha", 7),
        "docs/mid.md": PageMetadata("Mid", 3),
    }
    listing = [
        ListedEntry("zeta.md", is_dir=False),
        ListedEntry("README.md", is_dir=False),
        ListedEntry("alpha.md", is_dir=False),
        ListedEntry("mid.md", is_dir=False),
    ]
    builder = ManifestBuilder(
        metadata,
        output_root,
        list_dir=lambda _path: listing,
        file_exists=lambda _path: False,
    )

    manifest = builder.build(docs)

    assert _titles(manifest) == ["Introduction", "Mid", "Zeta", "Alpha"]


def test_encode_manifest_shape(output_root: Path) -> None:
    metadata: dict[str, PageMetadata] = {}
    docs = output_root / "v1.0"
    _page(metadata, output_root, docs / "README.md", "Docs", 1)
    _page(metadata, output_root, docs / "acme" / "README.md", "ACME", 2)
    _page(metadata, output_root, docs / "install.md", "Install", 3)

    manifest = ManifestBuilder(metadata, output_root).build(docs)
    decoded = msgspec_json.decode(encode_manifest(manifest))

    assert decoded == {
        "routes": [
            {
                "title": "Docs",
                "routes": [
                    {"title": "Introduction", "path": "/v1.0/README.md"},
                    {
                        "title": "ACME",
                        "routes": [
                            {"title": "Introduction", "path": "/v1.0/acme/README.md"}
                        ],
                    },
                    {"title": "Install", "path": "/v1.0/install.md"},
                ],
            }
        ]
    }


def test_empty_dir_entry_omits_routes() -> None:
    assert DirEntry(title="Empty", weight=1).to_dict() == {"title": "Empty"}


def test_write_manifests_isolates_failing_roots(output_root: Path) -> None:
    """A root missing metadata is skipped while the others are written."""
    metadata: dict[str, PageMetadata] = {}
    _page(metadata, output_root, output_root / "v1.0" / "README.md", "v1.0", 1)
    _page(metadata, output_root, output_root / "next" / "page.md", "Page", 1)
    (output_root / "stray.txt").write_text("ignored", encoding="utf-8")

    run = write_manifests(output_root, metadata)

    assert run.written == [output_root / "v1.0" / "manifest.json"]
    assert list(run.failures) == [output_root / "next"]
    assert not (output_root / "next" / "manifest.json").exists()
    assert not run.ok
    written = msgspec_json.decode((output_root / "v1.0" / "manifest.json").read_bytes())
    assert written["routes"][0]["title"] == "v1.0"


def test_builder_accepts_metadata_from_page_records(output_root: Path) -> None:
    """Records from the transform phase feed the builder via their output paths."""
    docs = output_root / "docs"
    docs.mkdir()
    records = [
        PageRecord(
            source_path=docs / "_index.md",
            output_path=docs / "README.md",
            title="Documentation",
            link_title="Docs",
            weight=1,
        ),
        PageRecord(
            source_path=docs / "faq.md",
            output_path=docs / "faq.md",
            title="Frequently Asked Questions",
            link_title="FAQ",
        ),
    ]
    for record in records:
        record.output_path.write_text("page\n", encoding="utf-8")

    metadata = metadata_by_output_path(records, output_root)
    manifest = ManifestBuilder(metadata, output_root).build(docs)

    assert manifest.title == "Docs"
    assert [(child.title, child.weight) for child in manifest.children] == [
        ("Introduction", -9999),
        ("FAQ", 9999),
    ]


def test_manifest_roots_resolve_whichever_way_the_output_root_is_spelled(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Metadata recorded under ``out`` still serves a build rooted at ``/abs/out``."""
    monkeypatch.chdir(tmp_path)
    relative_root = Path("out")
    metadata: dict[str, PageMetadata] = {}
    _page(metadata, relative_root, relative_root / "v1.0" / "README.md", "v1.0", 1)
    _page(metadata, relative_root, relative_root / "v1.0" / "faq.md", "FAQ", 2)

    run = write_manifests(tmp_path / "out", metadata)

    assert run.ok
    assert run.written == [tmp_path / "out" / "v1.0" / "manifest.json"]
