"""Transform a Hugo content tree into the migrated Markdown tree.

:class:`MigrationPipeline` walks the source tree once, in sorted order:

* directories are recreated beneath the output root;
* non-Markdown files are copied verbatim;
* Markdown pages have their front matter replaced with ``title`` and
  ``description``, relative links rewritten, and shortcode lines swapped for
  stored replacements.

Each page's navigation metadata is recorded in the metadata store so the
manifest phase can run once every page is done. Failures are isolated per
file and collected on the returned :class:`MigrationReport`.

Example
-------
>>> from docshift.config import MigrationConfig
>>> from docshift.pipeline import MigrationPipeline
>>> from docshift.stores import MigrationStores
>>> config = MigrationConfig()
>>> stores = MigrationStores.load(config.store_dir)  # doctest: +SKIP
>>> report = MigrationPipeline(config, stores).run()  # doctest: +SKIP
>>> report.pages_written  # doctest: +SKIP
42
"""

from __future__ import annotations

import dataclasses as dc
import logging
import os
import shutil
import typing as typ
from pathlib import Path
from urllib.parse import unquote

from ._constants import MARKDOWN_SUFFIX
from .frontmatter import (
    FrontMatterError,
    parse_front_matter,
    render_page_header,
    split_front_matter,
)
from .links import (
    FenceTracker,
    InvalidURLError,
    needs_manual_edit,
    rewrite_markdown_links,
)
from .models import PageRecord
from .paths import (
    InvalidPathError,
    metadata_key,
    to_output_path,
    version_independent_key,
)
from .stores import line_hash

if typ.TYPE_CHECKING:
    from .config import MigrationConfig
    from .stores import MigrationStores

logger = logging.getLogger(__name__)

PAGE_ERRORS = (
    FrontMatterError,
    InvalidURLError,
    InvalidPathError,
    OSError,
    UnicodeDecodeError,
)


@dc.dataclass(frozen=True, slots=True)
class PageFailure:
    """A source file that could not be migrated."""

    path: Path
    error: str


@dc.dataclass(frozen=True, slots=True)
class UnresolvedLine:
    """A shortcode line with no stored replacement, left unchanged."""

    path: Path
    line: str
    key: str


@dc.dataclass(slots=True)
class MigrationReport:
    """Counts and findings aggregated over one pipeline run."""

    records: list[PageRecord] = dc.field(default_factory=list)
    files_copied: int = 0
    links_rewritten: int = 0
    replacements_needed: int = 0
    replacements_applied: int = 0
    unresolved: list[UnresolvedLine] = dc.field(default_factory=list)
    missing_descriptions: list[Path] = dc.field(default_factory=list)
    failures: list[PageFailure] = dc.field(default_factory=list)

    @property
    def pages_written(self) -> int:
        """Return the number of Markdown pages migrated."""
        return len(self.records)

    @property
    def ok(self) -> bool:
        """Return True when no file failed to migrate."""
        return not self.failures

    def summary_lines(self) -> list[str]:
        """Return human-readable totals for end-of-run reporting."""
        return [
            f"{self.pages_written} pages written",
            f"{self.files_copied} files copied verbatim",
            f"{self.links_rewritten} links rewritten",
            f"{self.replacements_needed} lines needing replacement "
            f"({self.replacements_applied} from store, "
            f"{len(self.unresolved)} unresolved)",
            f"{len(self.missing_descriptions)} pages without a description",
            f"{len(self.failures)} failures",
        ]


class MigrationPipeline:
    """Migrate every file beneath ``config.source_root``."""

    def __init__(self, config: MigrationConfig, stores: MigrationStores) -> None:
        self.config = config
        self.stores = stores

    def run(self) -> MigrationReport:
        """Walk the source tree and migrate each file.

        Returns
        -------
        MigrationReport
            Records of migrated pages plus counters, unresolved lines,
            missing descriptions, and per-file failures.

        Raises
        ------
        FileNotFoundError
            If the configured source root is not a directory.

        Notes
        -----
        Side effects include writing the output tree and updating the
        metadata store in place; saving the stores is left to the caller.
        """
        source_root = self.config.source_root
        if not source_root.is_dir():
            msg = f"Source directory '{source_root}' not found."
            raise FileNotFoundError(msg)

        report = MigrationReport()
        for dirpath, dirnames, filenames in os.walk(source_root):
            dirnames.sort()
            directory = Path(dirpath)
            target_dir = to_output_path(
                source_root, self.config.output_root, directory
            )
            target_dir.mkdir(parents=True, exist_ok=True)
            for name in sorted(filenames):
                self._process_file(directory / name, report)
        return report

    def _process_file(self, path: Path, report: MigrationReport) -> None:
        """Copy or migrate ``path``, recording failures instead of raising."""
        output_root = self.config.output_root
        target: Path | None = None
        try:
            target = to_output_path(self.config.source_root, output_root, path)
            if path.suffix != MARKDOWN_SUFFIX:
                logger.debug("copying non-markdown file %s verbatim", path)
                shutil.copyfile(path, target)
                report.files_copied += 1
                return
            record = self._migrate_page(path, target, report)
        except PAGE_ERRORS as exc:
            logger.error("failed to process %s: %s", path, exc)
            report.failures.append(PageFailure(path=path, error=str(exc)))
            if target is not None:
                # A failed page keeps no metadata from an earlier run.
                self.stores.metadata.pop(metadata_key(output_root, target), None)
            return

        key = metadata_key(output_root, record.output_path)
        self.stores.metadata[key] = record.metadata.to_dict()
        report.records.append(record)
        logger.info("migrated %s -> %s", path, record.output_path)

    def _migrate_page(
        self, path: Path, target: Path, report: MigrationReport
    ) -> PageRecord:
        """Rewrite one Markdown page and return its record."""
        header, body = split_front_matter(path.read_text(encoding="utf-8"))
        front = parse_front_matter(header)

        # Counters only land on the report once the page has been written.
        page_report = MigrationReport()
        complete_body = self._rewrite_body(path, body, page_report).strip()
        description = self._description_for(path, page_report)

        output = render_page_header(front.title, description) + complete_body + "\n"
        target.write_text(output, encoding="utf-8")

        report.links_rewritten += page_report.links_rewritten
        report.replacements_needed += page_report.replacements_needed
        report.replacements_applied += page_report.replacements_applied
        report.unresolved.extend(page_report.unresolved)
        report.missing_descriptions.extend(page_report.missing_descriptions)
        return PageRecord(
            source_path=path,
            output_path=target,
            title=front.title,
            link_title=front.link_title,
            weight=front.weight,
        )

    def _rewrite_body(self, path: Path, body: str, report: MigrationReport) -> str:
        """Return ``body`` with stored replacements and link rewrites applied.

        Fenced code blocks are copied unchanged.
        """
        page_dir = path.parent

        def target_exists(link_path: str) -> bool:
            candidate = page_dir / f"{unquote(link_path)}{MARKDOWN_SUFFIX}"
            return candidate.is_file()

        fences = FenceTracker()
        lines_out: list[str] = []
        for raw_line in body.splitlines(keepends=True):
            line = raw_line.rstrip("\r\n") + "\n"
            if fences.in_code(line):
                lines_out.append(line)
                continue
            key = line_hash(line)
            if key in self.stores.replacements:
                logger.debug("using stored replacement %s", key)
                report.replacements_needed += 1
                report.replacements_applied += 1
                lines_out.append(str(self.stores.replacements[key]))
                continue
            if needs_manual_edit(line):
                logger.info("no replacement for %r (%s)", line.strip(), key)
                report.replacements_needed += 1
                report.unresolved.append(
                    UnresolvedLine(path=path, line=line.strip(), key=key)
                )
                lines_out.append(line)
                continue
            if self.config.rewrite_links:
                line, count = rewrite_markdown_links(line, target_exists)
                report.links_rewritten += count
            lines_out.append(line)
        return "".join(lines_out)

    def _description_for(self, path: Path, report: MigrationReport) -> str:
        """Return the stored description shared by every version of ``path``."""
        key = version_independent_key(path)
        description = self.stores.descriptions.get(key)
        if description is None:
            logger.warning("no description stored for %s (key %s)", path, key)
            report.missing_descriptions.append(path)
            return ""
        return str(description)


__all__ = [
    "MigrationPipeline",
    "MigrationReport",
    "PageFailure",
    "UnresolvedLine",
]
