"""Update command implementation for catalogkeeper.

Rewrites a Gradle version catalog in place so that each outdated library
and plugin points at the version selected by the check. Only the version
literals change: comments, ordering, quoting and line endings are kept.

When several libraries share a ``version.ref``, the shared entry in
``[versions]`` is edited once.

Typical usage::

    # Update every outdated dependency
    $ catalogkeeper update

    # Preview changes without applying
    $ catalogkeeper update --dry-run

    # Update only some catalog keys
    $ catalogkeeper update -k okhttp -k kotlin-jvm

    # Create backup and skip confirmation
    $ catalogkeeper update --backup -y
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import click

from catalogkeeper.commands import catalog_path_for, check_catalog
from catalogkeeper.context import pass_context, CatalogKeeperContext
from catalogkeeper.core import CatalogRewriter, CatalogUpdateResult
from catalogkeeper.exceptions import CatalogKeeperError, FileOperationError
from catalogkeeper.utils import (
    colorize_update_type,
    confirm,
    create_backup,
    get_logger,
    print_error,
    print_success,
    print_table,
    print_warning,
    restore_backup,
)

logger = get_logger("commands.update")


@click.command()
@click.argument(
    "catalog",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without applying them.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="Create backup file before updating.",
)
@click.option(
    "--key",
    "-k",
    "keys",
    multiple=True,
    help="Update only these catalog keys (can be repeated).",
)
@click.option(
    "--policy",
    "-p",
    default=None,
    help="Update policy to apply (overrides the configuration).",
)
@pass_context
def update(
    ctx: CatalogKeeperContext,
    catalog: Optional[Path],
    dry_run: bool,
    yes: bool,
    backup: bool,
    keys: Tuple[str, ...],
    policy: Optional[str],
) -> None:
    """Update a version catalog to newer versions.

    CATALOG defaults to the configured ``version_catalog_path``
    (``gradle/libs.versions.toml``).

    Exits with 0 when updates were applied or none were needed, 1 when an
    error occurred.
    """
    try:
        asyncio.run(_update_async(ctx, catalog, dry_run, yes, backup, list(keys), policy))
        sys.exit(0)

    except CatalogKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in update command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _update_async(
    ctx: CatalogKeeperContext,
    catalog: Optional[Path],
    dry_run: bool,
    skip_confirm: bool,
    backup: bool,
    key_filter: List[str],
    policy: Optional[str],
) -> None:
    """Check the catalog, show the plan, then rewrite it.

    Raises:
        CatalogKeeperError: The catalog cannot be parsed or rewritten.
    """
    catalog_path = catalog_path_for(ctx, catalog)
    result = await check_catalog(ctx, catalog_path, policy)

    if key_filter:
        result = result.restricted_to(key_filter)
        if not result.has_updates:
            print_warning(f"No updates for: {', '.join(key_filter)}")
            return

    if not result.has_updates:
        print_success("All dependencies are up to date!")
        return

    _display_update_plan(result, dry_run)

    if dry_run:
        print_warning("\nDry run mode - no changes applied")
        return

    count = len(result.updates)
    if not skip_confirm and not confirm(
        f"\nUpdate {count} dependency(ies)?", default=True
    ):
        logger.info("Update cancelled by user")
        return

    backup_path = create_backup(catalog_path) if backup else None
    if backup_path:
        logger.info("Created backup: %s", backup_path)

    try:
        edited = CatalogRewriter().rewrite(
            catalog_path,
            result.parsed,
            library_updates=result.library_updates,
            plugin_updates=result.plugin_updates,
        )
    except FileOperationError:
        if backup_path:
            logger.info("Restoring %s from backup", catalog_path)
            restore_backup(backup_path, catalog_path)
        raise

    for entry in result.updates:
        logger.debug("  %s: %s → %s", entry.key, entry.current_text, entry.updated_text)

    print_success(
        f"Updated {count} dependency(ies) in {catalog_path} "
        f"({edited} version literal(s) changed)"
    )
    if backup_path:
        print_success(f"Backup saved to {backup_path}")


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _display_update_plan(result: CatalogUpdateResult, dry_run: bool) -> None:
    """Display planned updates as a Rich table."""
    title = "Update Plan (Dry Run)" if dry_run else "Update Plan"
    rows = [
        {
            "Key": entry.key,
            "Module": entry.module_id,
            "Current": entry.current_text,
            "New Version": entry.updated_text,
            "Change": colorize_update_type(entry.update_type),
        }
        for entry in result.updates
    ]
    print_table(
        rows,
        title=title,
        column_styles={"Key": "bold cyan", "Current": "dim", "New Version": "bold green"},
    )
