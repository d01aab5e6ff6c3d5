"""
Working directory layout for gitopskit.

Layout (default base ``~/.gitops-cli``):
    - bin/         : installed gitops executable, registered on PATH

The local tool cache lives outside the base directory (``$RUNNER_TOOL_CACHE``
or ``~/.cache/gitopskit/tool-cache``) because cache entries are copies of
the base directory.

The base directory is always passed explicitly so that parallel invocations
and tests can use isolated roots.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from gitopskit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BASE_DIR_NAME = ".gitops-cli"
BASE_DIR_ENV = "GITOPSKIT_HOME"


def get_default_base_dir() -> Path:
    """
    Get the default working base directory.

    Returns:
        ``$GITOPSKIT_HOME`` if set, otherwise ``~/.gitops-cli``

    Example:
        >>> get_default_base_dir()
        PosixPath('/home/runner/.gitops-cli')  # on a Linux runner
    """
    override = os.environ.get(BASE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / BASE_DIR_NAME


def get_binary_dir(base_dir: Path) -> Path:
    """Directory holding the installed executable."""
    return Path(base_dir) / "bin"


def get_default_tool_cache_dir() -> Path:
    """
    Get the default root of the local tool cache.

    Returns:
        ``$RUNNER_TOOL_CACHE`` if set, otherwise ``~/.cache/gitopskit/tool-cache``
    """
    runner_cache = os.environ.get("RUNNER_TOOL_CACHE")
    if runner_cache:
        return Path(runner_cache)
    return Path.home() / ".cache" / "gitopskit" / "tool-cache"


def get_scratch_dir(scratch_dir: Optional[Path] = None) -> Path:
    """
    Get the scratch directory for temporary downloads.

    Args:
        scratch_dir: Explicit directory; falls back to ``$RUNNER_TEMP`` and
            then to the system temp directory

    Returns:
        Existing scratch directory
    """
    if scratch_dir is None:
        runner_temp = os.environ.get("RUNNER_TEMP")
        if runner_temp:
            scratch_dir = Path(runner_temp)
        else:
            scratch_dir = Path(tempfile.gettempdir())

    scratch_dir = Path(scratch_dir)
    scratch_dir.mkdir(parents=True, exist_ok=True)
    return scratch_dir


def prepare_binary_directory(binary_dir: Path, add_to_path: bool = True) -> Path:
    """
    Create the binary directory and make it discoverable on PATH.

    Args:
        binary_dir: Directory to create (recursively)
        add_to_path: Prepend the directory to this process' PATH

    Returns:
        The binary directory

    Raises:
        ConfigurationError: If the path exists but is not a directory
    """
    binary_dir = Path(binary_dir)
    try:
        binary_dir.mkdir(parents=True, exist_ok=True)
    except FileExistsError as e:
        raise ConfigurationError(
            f"Binary directory path exists and is not a directory: {binary_dir}"
        ) from e

    if add_to_path:
        prepend_path(binary_dir)

    return binary_dir


def prepend_path(directory: Path) -> None:
    """Prepend a directory to PATH of the current process (idempotent)."""
    directory = str(directory)
    entries = os.environ.get("PATH", "").split(os.pathsep)
    if directory in entries:
        return
    os.environ["PATH"] = os.pathsep.join([directory] + [e for e in entries if e])
    logger.debug(f"Added {directory} to PATH")


__all__ = [
    "get_default_base_dir",
    "get_binary_dir",
    "get_default_tool_cache_dir",
    "get_scratch_dir",
    "prepare_binary_directory",
    "prepend_path",
]
