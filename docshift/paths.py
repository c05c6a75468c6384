"""Map source documentation paths onto the migrated output tree.

Source pages live under a root such as ``content/en`` and are written to a
mirrored tree such as ``content-out``. Hugo section pages (``_index.md``) are
renamed to ``README.md`` so the output tree can be browsed directly on GitHub.
Every helper here is pure: none of them touch the filesystem.

Examples
--------
>>> from pathlib import Path
>>> from docshift.paths import to_output_path, version_independent_key
>>> to_output_path(Path("content/en"), Path("out"), Path("content/en/v1/_index.md"))
PosixPath('out/v1/README.md')
>>> version_independent_key(Path("content/en/v1.0/acme/http01.md"))
'acme/http01.md'
"""

from __future__ import annotations

from pathlib import Path, PurePath, PurePosixPath

from ._constants import INDEX_OUTPUT_NAME, INDEX_SOURCE_NAME

INDEX_NAMES = frozenset({INDEX_SOURCE_NAME, INDEX_OUTPUT_NAME})


class InvalidPathError(ValueError):
    """Raised when a path lies outside the root it is expected to live under."""


def _relative_to(path: PurePath, root: PurePath) -> PurePath:
    try:
        return path.relative_to(root)
    except ValueError as exc:
        msg = f"Path '{path}' is not inside '{root}'."
        raise InvalidPathError(msg) from exc


def is_index_page(path: PurePath) -> bool:
    """Return True when ``path`` names the page representing its directory."""
    return path.name in INDEX_NAMES


def to_index_output_path(path: Path) -> Path:
    """Rename an index page to ``README.md``, keeping its directory."""
    if not is_index_page(path):
        return path
    return path.with_name(INDEX_OUTPUT_NAME)


def to_output_path(source_root: Path, dest_root: Path, path: Path) -> Path:
    """Return the location ``path`` is migrated to beneath ``dest_root``.

    Parameters
    ----------
    source_root : Path
        Root of the source documentation tree.
    dest_root : Path
        Root of the output tree mirroring ``source_root``.
    path : Path
        File or directory inside ``source_root``.

    Returns
    -------
    Path
        The mirrored output path. Index pages are renamed to ``README.md``.

    Raises
    ------
    InvalidPathError
        If ``path`` does not start with ``source_root``.
    """
    relative = _relative_to(path, source_root)
    return to_index_output_path(dest_root / relative)


def version_independent_key(path: PurePath) -> str:
    """Return ``<parent dir>/<file name>`` for ``path``.

    Docs are published under version-named top directories (``v1.0``,
    ``next``) that share page content, so this key lets a description written
    once be reused for every version. Files without a parent directory use an
    empty segment and the key is just the file name.
    """
    posix = PurePosixPath(path.as_posix())
    parent = posix.parent.name
    if not parent:
        return posix.name
    return f"{parent}/{posix.name}"


def metadata_key(output_root: PurePath, path: PurePath) -> str:
    """Return the metadata store key (``v1.0/page.md``) for an output file.

    Keys are relative to ``output_root`` so a tree migrated with a relative
    output root can be re-indexed later through an absolute one.
    """
    return _relative_to(path, output_root).as_posix()


def site_path(output_root: Path, path: Path) -> str:
    """Return the absolute site path (``/v1.0/page.md``) for an output file."""
    return "/" + metadata_key(output_root, path)


__all__ = [
    "INDEX_NAMES",
    "InvalidPathError",
    "is_index_page",
    "metadata_key",
    "site_path",
    "to_index_output_path",
    "to_output_path",
    "version_independent_key",
]
