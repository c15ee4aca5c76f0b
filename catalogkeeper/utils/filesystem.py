"""
Filesystem utilities for catalogkeeper.

Version catalogs are read and written verbatim: line endings are preserved
(``newline=""``) so that a rewrite only touches the characters that changed.
Writes go through a uniquely named temporary file in the target directory
which then atomically replaces the catalog, so a failure never leaves a
partially written file behind. All filesystem errors are normalized to
``FileOperationError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from catalogkeeper.utils.logger import get_logger
from catalogkeeper.exceptions import FileOperationError
from catalogkeeper.constants import DEFAULT_VERSION_CATALOG_PATH, MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def atomic_write(target: PathLike, content: str, *, encoding: str = "utf-8") -> None:
    """Atomically replace *target* with *content*.

    The content is written without newline translation to a temporary file
    created next to *target*, flushed to disk, then moved over *target*.
    The temporary file is removed if anything fails before the move, and
    *target* is left untouched.

    Args:
        target: File to replace.
        content: Full new content.
        encoding: Text encoding.

    Raises:
        FileOperationError: If writing or replacing fails.
    """
    target = Path(target)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding=encoding,
            newline="",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        if target.exists():
            shutil.copymode(target, temp_path)
        os.replace(temp_path, target)

    except Exception as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file verbatim, line endings included.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        with path.open("r", encoding=encoding, newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def create_backup(file_path: PathLike) -> Path:
    """Copy *file_path* to ``{name}.{timestamp}.backup`` next to it.

    Returns:
        Path of the backup.
    """
    path = _validated_file(Path(file_path))
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = path.with_name(f"{path.name}.{timestamp}.backup")

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created backup: %s", backup_path)
    return backup_path


def restore_backup(backup_path: PathLike, target_path: PathLike) -> None:
    """Copy a backup created by :func:`create_backup` back over *target_path*."""
    backup = Path(backup_path)
    if not backup.exists():
        raise FileOperationError(
            f"Backup file not found: {backup}",
            file_path=str(backup),
            operation="restore",
        )

    logger.debug("Restoring %s from backup %s", target_path, backup)
    try:
        shutil.copy2(backup, target_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to restore backup: {exc}",
            file_path=str(target_path),
            operation="restore",
            original_error=exc,
        ) from exc


def resolve_catalog_path(
    catalog: Optional[PathLike],
    default: PathLike = DEFAULT_VERSION_CATALOG_PATH,
) -> Path:
    """Pick the catalog to work on.

    An explicit path wins; otherwise *default* is used, relative to the
    current directory.

    Raises:
        FileOperationError: If the resulting path is not an existing file.
    """
    path = Path(catalog) if catalog is not None else Path(default)
    return _validated_file(path.expanduser())
