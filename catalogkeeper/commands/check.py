"""Check command implementation for catalogkeeper.

Reads a Gradle version catalog and reports the libraries and plugins for
which a newer acceptable version is published.

The command orchestrates three core components:

1. **CatalogParser**: reads the catalog into libraries, plugins and
   shared versions.
2. **MavenMetadataSource**: fetches ``maven-metadata.xml`` from each
   configured repository, at most once per artifact and repository.
3. **UpdateSelector**: picks, for each dependency, the greatest candidate
   which is an update under Gradle's version semantics and passes the
   configured policy.

Typical usage::

    # Check the default catalog (gradle/libs.versions.toml)
    $ catalogkeeper check

    # Machine-readable JSON output
    $ catalogkeeper check --format json > report.json

    # Only consider candidates at least as stable as the current version
    $ catalogkeeper check --policy stability-level
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from pathlib import Path
from typing import Dict, List, Optional

from catalogkeeper.commands import catalog_path_for, check_catalog
from catalogkeeper.context import pass_context, CatalogKeeperContext
from catalogkeeper.core import CatalogUpdateResult, DependencyUpdate
from catalogkeeper.exceptions import CatalogKeeperError
from catalogkeeper.utils import (
    get_logger,
    print_error,
    print_plain,
    print_success,
    print_table,
    print_warning,
    colorize_update_type,
)

logger = get_logger("commands.check")


@click.command()
@click.argument(
    "catalog",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--policy",
    "-p",
    default=None,
    help="Update policy to apply (overrides the configuration).",
)
@pass_context
def check(
    ctx: CatalogKeeperContext,
    catalog: Optional[Path],
    format: str,
    policy: Optional[str],
) -> None:
    """Check a version catalog for available updates.

    CATALOG defaults to the configured ``version_catalog_path``
    (``gradle/libs.versions.toml``).

    Exits with 0 when everything is up to date, 1 when updates are
    available or an error occurred.
    """
    try:
        has_updates = asyncio.run(_check_async(ctx, catalog, format.lower(), policy))
        sys.exit(1 if has_updates else 0)

    except CatalogKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        logger.exception("Error in check command")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _check_async(
    ctx: CatalogKeeperContext,
    catalog: Optional[Path],
    format: str,
    policy: Optional[str],
) -> bool:
    """Run the check and display the result.

    Returns:
        ``True`` if any dependency has an update.
    """
    catalog_path = catalog_path_for(ctx, catalog)
    result = await check_catalog(ctx, catalog_path, policy)

    if format == "json":
        _display_json(result)
        return result.has_updates

    if len(result.parsed.catalog) == 0:
        print_warning("No dependencies found in the version catalog")
        return False

    if result.has_updates:
        if format == "table":
            _display_table(result.libraries, "Library Updates")
            _display_table(result.plugins, "Plugin Updates")
        else:
            _display_simple(result.updates)

    if result.failed:
        print_warning(
            f"Could not check {len(result.failed)} dependency(ies): "
            f"{', '.join(sorted(result.failed))}"
        )

    if result.has_updates:
        print_warning(f"\n{len(result.updates)} dependency(ies) have updates available")
    else:
        print_success("All dependencies are up to date!")

    return result.has_updates


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(updates: List[DependencyUpdate], title: str) -> None:
    """Render updates as a Rich table; nothing is printed for an empty list."""
    rows: List[Dict[str, object]] = [
        {
            "Key": update.key,
            "Module": update.module_id,
            "Current": update.current_text,
            "Updated": update.updated_text,
            "Change": colorize_update_type(update.update_type),
            "Repository": update.repository.url,
        }
        for update in updates
    ]

    print_table(
        rows,
        title=title,
        column_styles={
            "Key": "bold cyan",
            "Current": "dim",
            "Updated": "bold green",
            "Repository": "dim",
        },
    )


def _display_simple(updates: List[DependencyUpdate]) -> None:
    """One line per update, suitable for piping to other tools.

    Example::

        okhttp    com.squareup.okhttp3:okhttp    4.11.0 -> 4.12.0
    """
    for update in updates:
        print_plain(
            f"{update.key:20} {update.module_id:40} "
            f"{update.current_text} -> {update.updated_text}"
        )


def _display_json(result: CatalogUpdateResult) -> None:
    """Print the result as JSON for machine consumption."""
    data = {
        "libraries": [update.to_json() for update in result.libraries],
        "plugins": [update.to_json() for update in result.plugins],
        "skipped": sorted(result.skipped),
        "failed": sorted(result.failed),
    }
    print(json.dumps(data, indent=2))
