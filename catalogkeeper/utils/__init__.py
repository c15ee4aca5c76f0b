"""
Utility helpers for catalogkeeper.

This package provides reusable utilities used across catalogkeeper, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client utilities
- Update classification helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from catalogkeeper.utils.logger import (
    disable_logging,
    get_logger,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from catalogkeeper.utils.filesystem import (
    atomic_write,
    create_backup,
    resolve_catalog_path,
    restore_backup,
    safe_read_file,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from catalogkeeper.utils.console import (
    colorize_update_type,
    confirm,
    print_error,
    print_plain,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from catalogkeeper.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from catalogkeeper.utils.version_utils import get_update_type

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_plain",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "verbosity_to_level",
    # Filesystem
    "atomic_write",
    "safe_read_file",
    "create_backup",
    "restore_backup",
    "resolve_catalog_path",
    # HTTP
    "HTTPClient",
    # Version utilities
    "get_update_type",
]
