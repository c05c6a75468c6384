r"""Read Hugo YAML front matter and render the migrated page header.

Source pages open with a ``---`` delimited YAML block carrying ``title``,
``linkTitle``, and ``weight``. Migrated pages keep only ``title`` and a
``description`` written for the target site.

Example
-------
>>> from docshift.frontmatter import parse_front_matter, split_front_matter
>>> header, body = split_front_matter("---\ntitle: ACME\n---\nBody\n")
>>> parse_front_matter(header).weight
9999
"""

from __future__ import annotations

import dataclasses as dc
import io

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ._constants import DEFAULT_WEIGHT

DELIMITER = "---"


class FrontMatterError(ValueError):
    """Raised when a page header is missing, malformed, or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class FrontMatter:
    """Front matter fields used for navigation."""

    title: str
    link_title: str
    weight: int = DEFAULT_WEIGHT


def _loader() -> YAML:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader


def split_front_matter(text: str) -> tuple[str, str]:
    """Split ``text`` into its YAML header and the remaining body.

    Raises
    ------
    FrontMatterError
        If fewer than two ``---`` delimiters are present or anything other
        than whitespace precedes the opening delimiter.
    """
    parts = text.split(DELIMITER, 2)
    if len(parts) != 3:  # noqa: PLR2004 - pre-header, header, body
        msg = (
            f"Malformed header section; found {len(parts)} parts but wanted 3."
        )
        raise FrontMatterError(msg)
    pre_header, header, body = parts
    if pre_header.strip():
        msg = f"Unexpected content before header: {pre_header!r}."
        raise FrontMatterError(msg)
    return header, body


def _coerce_weight(value: object) -> int:
    match value:
        case None | 0:
            return DEFAULT_WEIGHT
        case int() if not isinstance(value, bool):
            return value
        case _:
            msg = f"Weight must be an integer, got {value!r}."
            raise FrontMatterError(msg)


def parse_front_matter(header: str) -> FrontMatter:
    """Parse a YAML header into :class:`FrontMatter`.

    ``linkTitle`` falls back to ``title``; a missing or zero ``weight``
    becomes the 9999 sentinel so the page sorts last.

    Raises
    ------
    FrontMatterError
        If the YAML is invalid, is not a mapping, or has no ``title``.
    """
    try:
        loaded = _loader().load(header)
    except YAMLError as exc:
        msg = f"Failed to parse header as YAML: {exc}"
        raise FrontMatterError(msg) from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        msg = "Header must be a YAML mapping."
        raise FrontMatterError(msg)

    title = str(loaded.get("title") or "").strip()
    if not title:
        msg = "Missing title in header."
        raise FrontMatterError(msg)
    link_title = str(loaded.get("linkTitle") or "").strip() or title
    return FrontMatter(
        title=title,
        link_title=link_title,
        weight=_coerce_weight(loaded.get("weight")),
    )


def render_page_header(title: str, description: str) -> str:
    """Return the ``---`` delimited YAML header for a migrated page."""
    dumper = YAML()
    dumper.default_flow_style = False
    dumper.width = 4096
    buffer = io.StringIO()
    dumper.dump({"title": title, "description": description}, buffer)
    return f"{DELIMITER}\n{buffer.getvalue()}{DELIMITER}\n\n"


__all__ = [
    "FrontMatter",
    "FrontMatterError",
    "parse_front_matter",
    "render_page_header",
    "split_front_matter",
]
