"""File utilities for controller and configuration writes."""

from __future__ import annotations

import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)


def write_file_atomic(path: Path, content: str, mode: int) -> None:
    """Create a new file with permissions set at creation time.

    Uses os.open() with O_CREAT | O_EXCL so an existing file is never
    overwritten and there is no window between write and chmod.

    Args:
        path: Path to write to
        content: File content
        mode: File permission mode (e.g., 0o644)

    Raises:
        FileExistsError: If the file already exists
        OSError: If file creation fails
    """
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    try:
        os.write(fd, content.encode())
    finally:
        os.close(fd)


def ensure_directory(path: Path, mode: int) -> None:
    """Create path and any missing parents.

    Raises:
        OSError: If the directory cannot be created
    """
    if path.is_dir():
        return
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    log.debug(f"Created directory {path}")


def normalize_permissions(path: Path, mode: int | None) -> bool:
    """Apply mode to path, returning False instead of raising on failure."""
    if mode is None:
        return True
    try:
        os.chmod(path, mode)
    except OSError as e:
        log.warning(f"Could not set permissions on {path}: {e}")
        return False
    return True
