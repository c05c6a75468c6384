"""JSON-backed key/value stores reused across migration runs.

Three stores survive between runs so work is never repeated: replacement
text for lines that needed a manual edit (keyed by the line's SHA-256),
descriptions (keyed by :func:`docshift.paths.version_independent_key`), and
page metadata (keyed by :func:`docshift.paths.metadata_key`) for rebuilding
manifests on their own.
"""

from __future__ import annotations

import collections.abc as cabc
import hashlib
import logging
import typing as typ

import msgspec
import msgspec.json as msgspec_json

from ._constants import DESCRIPTIONS_FILENAME, METADATA_FILENAME, REPLACEMENTS_FILENAME
from .models import PageMetadata

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a store file exists but cannot be decoded."""


class JsonStore(cabc.MutableMapping[str, typ.Any]):
    """A ``dict`` persisted as a JSON object in a single file."""

    def __init__(self, path: Path, data: dict[str, typ.Any] | None = None) -> None:
        self.path = path
        self._data: dict[str, typ.Any] = dict(data or {})

    @classmethod
    def load(cls, path: Path) -> JsonStore:
        """Load ``path``; a missing file yields an empty store.

        Raises
        ------
        StoreError
            If the file is not valid JSON or its top level is not an object.
        """
        if not path.exists():
            logger.debug("store %s not found; starting empty", path)
            return cls(path)
        try:
            data = msgspec_json.decode(path.read_bytes(), type=dict[str, typ.Any])
        except msgspec.DecodeError as exc:
            msg = f"Failed to load store '{path}': {exc}"
            raise StoreError(msg) from exc
        return cls(path, data)

    def save(self) -> None:
        """Write the store back to :attr:`path` as indented JSON."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        encoded = msgspec_json.encode(self._data, order="sorted")
        self.path.write_bytes(msgspec_json.format(encoded, indent=2) + b"\n")

    def __getitem__(self, key: str) -> typ.Any:
        return self._data[key]

    def __setitem__(self, key: str, value: typ.Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> cabc.Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


def line_hash(line: str) -> str:
    """Return the hex SHA-256 digest used to key replacement lines."""
    return hashlib.sha256(line.encode("utf-8")).hexdigest()


def metadata_view(store: cabc.Mapping[str, typ.Any]) -> dict[str, PageMetadata]:
    """Decode a metadata store into :class:`PageMetadata` values."""
    return {key: PageMetadata.from_mapping(value) for key, value in store.items()}


class MigrationStores(typ.NamedTuple):
    """The three stores a migration run reads and updates."""

    replacements: JsonStore
    descriptions: JsonStore
    metadata: JsonStore

    @classmethod
    def load(cls, directory: Path) -> MigrationStores:
        """Load every store from ``directory``."""
        return cls(
            replacements=JsonStore.load(directory / REPLACEMENTS_FILENAME),
            descriptions=JsonStore.load(directory / DESCRIPTIONS_FILENAME),
            metadata=JsonStore.load(directory / METADATA_FILENAME),
        )

    def save(self) -> None:
        """Persist every store."""
        for store in self:
            store.save()


__all__ = [
    "JsonStore",
    "MigrationStores",
    "StoreError",
    "line_hash",
    "metadata_view",
]
