"""Common literal values used across docshift.

These constants keep file names, sentinel weights, and store locations
centralized so the pipeline, manifest builder, and tests import the same
values without drifting. Intended for internal use within the docshift
package.

Examples
--------
>>> from docshift import _constants
>>> _constants.INDEX_OUTPUT_NAME
'README.md'
>>> _constants.DEFAULT_WEIGHT > _constants.INDEX_WEIGHT
True
"""

INDEX_SOURCE_NAME = "_index.md"
INDEX_OUTPUT_NAME = "README.md"
MARKDOWN_SUFFIX = ".md"
MANIFEST_FILENAME = "manifest.json"

DEFAULT_WEIGHT = 9999
INDEX_WEIGHT = -9999
INDEX_TITLE = "Introduction"

REPLACEMENTS_FILENAME = "replacements.json"
DESCRIPTIONS_FILENAME = "descriptions.json"
METADATA_FILENAME = "metadata.json"
