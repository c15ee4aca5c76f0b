"""
Shared state handed from the root ``catalogkeeper`` command to subcommands.

The root command builds a :class:`CatalogKeeperContext` from the global
options and the loaded configuration.  Subcommands receive it through
:data:`pass_context`; when a subcommand is invoked on its own (as in tests)
a default context is created on the fly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from catalogkeeper.config import CatalogKeeperConfig


class CatalogKeeperContext:
    """Global options and configuration for one CLI invocation.

    Attributes:
        config_path: Configuration file in use, if any.
        config: Effective configuration.
        verbose: ``-v`` count (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Forced color mode, ``None`` to auto-detect.
    """

    __slots__ = ("config_path", "config", "verbose", "color")

    def __init__(
        self,
        config: Optional[CatalogKeeperConfig] = None,
        *,
        config_path: Optional[Path] = None,
        verbose: int = 0,
        color: Optional[bool] = None,
    ) -> None:
        self.config: CatalogKeeperConfig = config or CatalogKeeperConfig()
        self.config_path = config_path
        self.verbose = verbose
        self.color = color


pass_context = click.make_pass_decorator(CatalogKeeperContext, ensure=True)
