"""
Executable module for catalogkeeper.

Running:
    python -m catalogkeeper

is equivalent to:
    catalogkeeper

This module simply forwards execution to the CLI entrypoint defined in
`catalogkeeper.cli`.
"""

from __future__ import annotations

import sys

from catalogkeeper.cli import main

if __name__ == "__main__":
    sys.exit(main())
