"""Directory structure encoding and tree rendering utilities.

This package converts directory hierarchies into a flat, line-oriented
structure text, parses that text back into a tree and renders the tree as an
indented ASCII listing.
"""

from importlib.metadata import PackageNotFoundError, version

# Expose the version for both programmatic use and CLI
try:
    __version__ = version("treegen")
except PackageNotFoundError:
    __version__ = "unknown"
