"""Cyclopts CLI entrypoint for migrating Hugo docs and writing manifests.

The ``docshift`` console script defined here runs the two migration phases:
``docshift migrate`` transforms every page under the source root and then
writes a ``manifest.json`` per top-level output directory, while
``docshift manifest`` rebuilds only the manifests from an existing output tree
and the persisted metadata store.

Examples
--------
Migrate using ``config/docshift.yaml`` when present:

>>> from docshift.cli import main
>>> main()  # doctest: +SKIP

Migrate a different tree:

>>> from docshift.cli import app
>>> app(["migrate", "--source", "content/de", "--output", "out"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import MigrationConfig, load_migration_config
from .manifest import ManifestRun, write_manifests
from .pipeline import MigrationPipeline
from .stores import MigrationStores, metadata_view

DEFAULT_CONFIG = Path("config/docshift.yaml")

app = App(name="docshift", config=cyclopts.config.Env("DOCSHIFT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _setup_logging(verbose: bool) -> None:  # noqa: FBT001
    """Configure logging for a CLI run."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _resolve_config(
    config: Path | None,
    *,
    source: Path | None = None,
    output: Path | None = None,
) -> MigrationConfig:
    """Load the explicit config, the default file if present, or defaults."""
    if config is None and DEFAULT_CONFIG.exists():
        config = DEFAULT_CONFIG
    loaded = load_migration_config(config)
    return loaded.with_overrides(source_root=source, output_root=output)


def _report_manifests(run: ManifestRun) -> None:
    for path in run.written:
        print(f"wrote {_format_path(path)}")
    for root, error in run.failures.items():
        print(f"skipped manifest for {_format_path(root)}: {error}")


@app.command(help="Migrate Hugo pages and write navigation manifests.")
def migrate(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to migration config")
    ] = None,
    source: typ.Annotated[
        Path | None, Parameter(help="Override the source content root")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Override the output root")
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Enable verbose (DEBUG) logging")
    ] = False,
) -> None:
    """Run the transform phase, then build every manifest.

    Parameters
    ----------
    config : Path or None, optional
        Path to a ``docshift.yaml`` file. Defaults to ``config/docshift.yaml``
        when it exists, otherwise to built-in defaults.
    source : Path or None, optional
        Override for the source content root.
    output : Path or None, optional
        Override for the output root.
    verbose : bool, optional
        Log every processed file at DEBUG level.

    Raises
    ------
    SystemExit
        With status 1 when any page failed to migrate or any manifest root
        was skipped.
    """
    _setup_logging(verbose)
    settings = _resolve_config(config, source=source, output=output)
    stores = MigrationStores.load(settings.store_dir)

    try:
        report = MigrationPipeline(settings, stores).run()
    finally:
        stores.save()

    for line in report.summary_lines():
        print(line)
    for failure in report.failures:
        print(f"failed {_format_path(failure.path)}: {failure.error}")
    for unresolved in report.unresolved:
        print(
            f"unresolved {_format_path(unresolved.path)} "
            f"[{unresolved.key}]: {unresolved.line}"
        )

    run = write_manifests(settings.output_root, metadata_view(stores.metadata))
    _report_manifests(run)
    if not (report.ok and run.ok):
        raise SystemExit(1)


@app.command(help="Rebuild manifests from the output tree and stored metadata.")
def manifest(
    *,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to migration config")
    ] = None,
    output: typ.Annotated[
        Path | None, Parameter(help="Override the output root")
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Enable verbose (DEBUG) logging")
    ] = False,
) -> None:
    """Write ``manifest.json`` for each top-level output directory.

    Raises
    ------
    SystemExit
        With status 1 when any manifest root was skipped.
    """
    _setup_logging(verbose)
    settings = _resolve_config(config, output=output)
    stores = MigrationStores.load(settings.store_dir)
    run = write_manifests(settings.output_root, metadata_view(stores.metadata))
    _report_manifests(run)
    if not run.ok:
        raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docshift`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
