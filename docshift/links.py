"""Rewrite Hugo-relative links so they resolve in the migrated Markdown tree.

Hugo serves ``docs/page.md`` at ``docs/page/``, so relative links in the
source are written one directory deeper than the Markdown file that holds
them. Once pages are browsed as files, every link that climbs two or more
levels loses one ``../`` hop, and the target gains an explicit ``.md`` (for a
page) or ``/README.md`` (for a section) suffix.

Example
-------
>>> from docshift.links import rewrite_relative_link
>>> rewrite_relative_link("../../configuration/acme/dns01/#frag", lambda _: True)
'../configuration/acme/dns01.md#frag'
>>> rewrite_relative_link("../", lambda _: False)
'../README.md'
"""

from __future__ import annotations

import re
import typing as typ
from pathlib import PurePosixPath
from urllib.parse import urlsplit

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    TargetExists = cabc.Callable[[str], bool]

_INVALID_URL_CHARS = re.compile(r"[\x00-\x20\x7f]")
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

INLINE_LINK_PATTERN = re.compile(r"(\]\()([^)\s]+)((?:\s+\"[^\"]*\")?\))")
REFERENCE_LINK_PATTERN = re.compile(r"^(\s*\[[^\]]+\]:\s*)(\S+)", re.MULTILINE)
SHORTCODE_MARKERS = ("{{%", "{{<")
RELATIVE_PREFIXES = ("./", "../")
PARENT_HOP = "../"
FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")

# Suffixes that mark a link as a file rather than a page. Version-like names
# such as ``release-notes-0.5`` are pages despite the dot.
FILE_SUFFIXES = frozenset(
    (
        ".md .html .txt .pdf .png .jpg .jpeg .gif .svg .webp .ico .mp4 .webm "
        ".json .yaml .yml .toml .xml .csv .sh .py .go .js .css .zip .tar .gz .tgz"
    ).split()
)


class InvalidURLError(ValueError):
    """Raised when a link target cannot be parsed as a URL."""


def _validate(url_in: str) -> None:
    """Raise InvalidURLError when ``url_in`` is not URL-shaped."""
    if _INVALID_URL_CHARS.search(url_in) or _MALFORMED_ESCAPE.search(url_in):
        msg = f"Invalid URL {url_in!r}: contains characters not allowed in a URL."
        raise InvalidURLError(msg)
    try:
        urlsplit(url_in)
    except ValueError as exc:
        msg = f"Invalid URL {url_in!r}: {exc}"
        raise InvalidURLError(msg) from exc


def rewrite_relative_link(url_in: str, target_exists: TargetExists) -> str:
    """Return ``url_in`` rewritten for the flattened Markdown tree.

    Parameters
    ----------
    url_in : str
        Relative URL taken from a page body, optionally carrying a query and
        a ``#fragment``.
    target_exists : Callable[[str], bool]
        Oracle answering whether a page file exists for the (collapsed,
        suffix-less) link path. The caller decides what the path is resolved
        against.

    Returns
    -------
    str
        The collapsed path with a ``.md`` suffix when the oracle reports a
        page, or ``/README.md`` otherwise, followed by the untouched query and
        fragment.

    Raises
    ------
    InvalidURLError
        If ``url_in`` contains whitespace, control characters, or malformed
        percent escapes, or cannot be split into URL components.
    """
    _validate(url_in)

    head, hash_sep, fragment = url_in.partition("#")
    path, query_sep, query = head.partition("?")

    path = path.rstrip("/")
    if path.startswith(PARENT_HOP * 2):
        path = path.removeprefix(PARENT_HOP)

    if target_exists(path):
        path += ".md"
    else:
        path += "/README.md"

    return f"{path}{query_sep}{query}{hash_sep}{fragment}"


def is_rewritable_target(target: str) -> bool:
    """Return True for relative page links (not assets or explicit files)."""
    if not target.startswith(RELATIVE_PREFIXES) and target not in (".", ".."):
        return False
    path = target.split("#", 1)[0].split("?", 1)[0]
    if path.endswith("/") or path in (".", ".."):
        return True
    return PurePosixPath(path).suffix.lower() not in FILE_SUFFIXES


def needs_manual_edit(line: str) -> bool:
    """Return True when ``line`` holds a Hugo shortcode that needs a human."""
    return any(marker in line for marker in SHORTCODE_MARKERS)


class FenceTracker:
    """Follow fenced code block state across consecutive Markdown lines.

    Feed every line of a page, in order, to :meth:`in_code`. Fence lines and
    the lines between them are code samples and must pass through unchanged.
    """

    __slots__ = ("_marker",)

    def __init__(self) -> None:
        self._marker: str | None = None

    def in_code(self, line: str) -> bool:
        """Return True when ``line`` is a fence or lies inside a fenced block."""
        match = FENCE_PATTERN.match(line)
        if self._marker is None:
            if match is not None:
                self._marker = match.group(1)
            return match is not None
        if match is not None and self._closes(match, line):
            self._marker = None
        return True

    def _closes(self, match: re.Match[str], line: str) -> bool:
        # A closing fence repeats the opening character at least as many times
        # and carries no info string.
        fence = match.group(1)
        marker = typ.cast("str", self._marker)
        return (
            fence[0] == marker[0]
            and len(fence) >= len(marker)
            and not line[match.end() :].strip()
        )


def rewrite_markdown_links(
    text: str, target_exists: TargetExists
) -> tuple[str, int]:
    """Rewrite relative inline and reference-style links within ``text``.

    Returns the rewritten text and the number of link targets changed. Lines
    inside fenced code blocks are left as written.
    InvalidURLError from any target propagates so the caller can fail the
    whole page rather than emit a broken link.
    """
    count = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal count
        target = match.group(2)
        if not is_rewritable_target(target):
            return match.group(0)
        rewritten = rewrite_relative_link(target, target_exists)
        count += 1
        trailer = match.string[match.end(2) : match.end(0)]
        return f"{match.group(1)}{rewritten}{trailer}"

    fences = FenceTracker()
    lines_out: list[str] = []
    for line in text.splitlines(keepends=True):
        if not fences.in_code(line):
            line = INLINE_LINK_PATTERN.sub(_replace, line)
            line = REFERENCE_LINK_PATTERN.sub(_replace, line)
        lines_out.append(line)
    return "".join(lines_out), count


__all__ = [
    "FENCE_PATTERN",
    "FILE_SUFFIXES",
    "INLINE_LINK_PATTERN",
    "REFERENCE_LINK_PATTERN",
    "FenceTracker",
    "InvalidURLError",
    "is_rewritable_target",
    "needs_manual_edit",
    "rewrite_markdown_links",
    "rewrite_relative_link",
]
