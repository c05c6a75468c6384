"""Migrate Hugo documentation trees into browsable Markdown with manifests.

This package exposes the CLI entry points used by the ``docshift`` console
script, along with the link rewriter and manifest builder it is built on.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``rewrite_relative_link``: Collapse and suffix one relative link.
- ``ManifestBuilder``: Build the navigation tree for an output directory.

Examples
--------
>>> from docshift import rewrite_relative_link
>>> rewrite_relative_link("./release-notes-0.5/#something", lambda _: True)
'./release-notes-0.5.md#something'
"""

from __future__ import annotations

from .cli import app, main
from .links import rewrite_relative_link
from .manifest import ManifestBuilder

__all__ = ["ManifestBuilder", "app", "main", "rewrite_relative_link"]
