"""
catalogkeeper: dependency update checker for Gradle version catalogs

catalogkeeper reads a ``libs.versions.toml`` version catalog, asks Maven
repositories which versions of each library and plugin exist, decides
whether a newer acceptable version is available under Gradle's version
semantics, and can rewrite the catalog in place while leaving every
comment, quote style and line break untouched.

Features include:
    • Gradle version ordering (exact, snapshot, range, prefix, latest)
    • Rich version constraints (require / strictly / prefer / reject)
    • Pluggable update policies (stability level, coordinate-scoped rules)
    • Repository priority with per-repository component filters
    • Surgical, atomic catalog rewriting
"""

from __future__ import annotations

from catalogkeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "catalogkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency update checker for Gradle version catalogs."

# ---------------------------------------------------------------------------
# Public API
#
# Only expose stable, documented interfaces here.
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]
