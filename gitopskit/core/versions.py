"""
Version request helpers.

A requested version is either a concrete ``MAJOR.MINOR.PATCH`` string or a
moving target (``latest``, ``canary``, ``*action*``) whose content can change
under the same name.
"""

import re
from typing import Optional

DEFAULT_VERSION = "2.2.2"

UNKNOWN_VERSION = "unknown"

MOVING_TARGET_PATTERN = re.compile(r"latest|canary|action", re.IGNORECASE)

SEMVER_PATTERN = re.compile(r"(\d+\.\d+\.\d+)")


def is_moving_target(version: Optional[str]) -> bool:
    """
    Check whether a version names a moving target.

    Args:
        version: Requested version string

    Returns:
        True if the version contains a reserved moving-target token

    Example:
        >>> is_moving_target("latest")
        True
        >>> is_moving_target("2.2.2")
        False
    """
    if not version:
        return False
    return MOVING_TARGET_PATTERN.search(version) is not None


def extract_version(text: str) -> Optional[str]:
    """Return the first ``MAJOR.MINOR.PATCH`` substring of text, or None."""
    match = SEMVER_PATTERN.search(text or "")
    return match.group(1) if match else None


__all__ = [
    "DEFAULT_VERSION",
    "UNKNOWN_VERSION",
    "is_moving_target",
    "extract_version",
]
