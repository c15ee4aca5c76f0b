"""
CLI subcommands for catalogkeeper.

``check`` and ``update`` share the same first half: resolve the catalog
path, build the update selector from the configuration, and run the
checker. That part lives here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from catalogkeeper.context import CatalogKeeperContext
from catalogkeeper.core import (
    CatalogUpdateResult,
    DependencyUpdateChecker,
    MavenMetadataSource,
    UpdateSelector,
)
from catalogkeeper.policies import get_policy
from catalogkeeper.utils import HTTPClient, get_logger, resolve_catalog_path

logger = get_logger("commands")


def catalog_path_for(ctx: CatalogKeeperContext, catalog: Optional[Path]) -> Path:
    """Catalog given on the command line, else the configured one."""
    return resolve_catalog_path(catalog, ctx.config.version_catalog_path)


async def check_catalog(
    ctx: CatalogKeeperContext,
    catalog: Path,
    policy_name: Optional[str] = None,
) -> CatalogUpdateResult:
    """Look for updates of every dependency in *catalog*.

    Args:
        ctx: CLI context holding the loaded configuration.
        catalog: Path to the version catalog.
        policy_name: Policy overriding the configured one.

    Raises:
        PolicyError: The policy name is unknown.
        ParseError: The catalog is invalid.
    """
    config = ctx.config
    policy = get_policy(policy_name or config.policy)
    logger.info(
        "Checking %s (policy: %s)", catalog, policy.name if policy else "none"
    )

    async with HTTPClient() as http:
        selector = UpdateSelector(
            MavenMetadataSource(http),
            config.repositories,
            config.plugin_repositories,
            policy=policy,
            only_check_static_versions=config.only_check_static_versions,
        )
        checker = DependencyUpdateChecker(config, selector)
        return await checker.check(catalog)
