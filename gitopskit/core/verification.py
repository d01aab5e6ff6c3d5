"""
Version probing of installed binaries.

A probe that cannot start the process or cannot find a version in its output
yields ``UNKNOWN_VERSION``. The caller decides what a mismatch means.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Union

from gitopskit.core.versions import UNKNOWN_VERSION, extract_version

logger = logging.getLogger(__name__)

DEFAULT_TOOL_NAME = "gitops"
VERSION_FLAG = "--version"


def probe_version(
    binary: Optional[Union[str, Path]] = None, tool_name: str = DEFAULT_TOOL_NAME
) -> str:
    """
    Run ``<binary> --version`` and extract the reported semantic version.

    Args:
        binary: Path to the executable. If None, ``tool_name`` is resolved
            through PATH.
        tool_name: Bare executable name used when no path is given

    Returns:
        Version string such as '2.2.2', or 'unknown'

    Example:
        >>> probe_version(Path("~/.gitops-cli/bin/gitops").expanduser())
        '2.2.2'
    """
    command = str(binary) if binary else tool_name
    logger.info(f"Checking the version of {command}")

    try:
        result = subprocess.run(
            [command, VERSION_FLAG],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to check the version of {command}: {e}")
        return UNKNOWN_VERSION

    if result.returncode < 0:
        logger.warning(
            f"{command} {VERSION_FLAG} was terminated by signal {-result.returncode}"
        )
        return UNKNOWN_VERSION

    version = extract_version(result.stdout)
    if version is None:
        logger.debug(
            f"No version found in output of {command}: {result.stdout[:100]!r}"
        )
        return UNKNOWN_VERSION

    return version


__all__ = ["probe_version", "UNKNOWN_VERSION"]
