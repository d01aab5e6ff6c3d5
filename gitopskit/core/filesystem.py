"""
Binary placement and directory copying.

Installing a freshly downloaded file prefers an atomic rename. When the rename
fails (typically EXDEV because the scratch directory lives on another volume)
the file is copied and the source removed instead.
"""

import logging
import os
import shutil
import stat
from pathlib import Path
from typing import Optional, Union

from gitopskit.core.exceptions import GitopsKitError

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


class FilesystemError(GitopsKitError):
    """Base exception for filesystem operation errors."""

    pass


def install_binary(
    source: Optional[Union[str, Path]], destination: Union[str, Path]
) -> Path:
    """
    Place a file at the binary path and make it executable.

    Args:
        source: Freshly downloaded file, or None when the destination was
            already populated from the cache
        destination: Final executable path

    Returns:
        The destination path

    Raises:
        OSError: If both the rename and the copy fallback fail

    Example:
        >>> install_binary(Path("/tmp/5f1c..."), Path("~/.gitops-cli/bin/gitops"))
    """
    destination = Path(destination)

    if source is not None:
        source = Path(source)
        try:
            logger.info(f"Renaming {source} to {destination}")
            os.replace(source, destination)
        except OSError as e:
            # For example: EXDEV, cross-device link not permitted
            logger.warning(
                f"Failed to rename {source} to {destination}: {e}. Trying to copy."
            )
            logger.info(f"Copying {source} to {destination}")
            shutil.copyfile(source, destination)
            try:
                source.unlink()
            except OSError as unlink_error:
                logger.warning(f"Failed to remove {source}: {unlink_error}")

    make_executable(destination)
    return destination


def make_executable(path: Union[str, Path]) -> bool:
    """
    Set read/execute bits for owner, group and other (0o755).

    A failure is only logged: the file may already be usable.

    Returns:
        True if permissions were applied
    """
    path = Path(path)
    try:
        current = stat.S_IMODE(path.stat().st_mode)
        os.chmod(path, current | EXECUTABLE_MODE)
        return True
    except OSError as e:
        logger.warning(f"Failed to chmod {path}: {e}")
        return False


def materialize_directory(
    source: Union[str, Path], destination: Union[str, Path]
) -> None:
    """
    Recursively copy the contents of a directory into another one.

    Existing files in the destination are overwritten; file modes are kept.

    Raises:
        FilesystemError: If the source is missing or not a directory
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        raise FilesystemError(f"Source does not exist: {source}")

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    logger.debug(f"Copying {source} to {destination}")
    shutil.copytree(source, destination, dirs_exist_ok=True)


__all__ = [
    "FilesystemError",
    "install_binary",
    "make_executable",
    "materialize_directory",
]
