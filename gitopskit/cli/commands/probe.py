"""
Probe command implementation.

Prints the version a gitops binary reports about itself.
"""

import logging

from gitopskit.core.verification import probe_version
from gitopskit.core.versions import UNKNOWN_VERSION

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the probe command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if a version was found, 1 otherwise)
    """
    version = probe_version(args.binary)
    print(version)
    return 0 if version != UNKNOWN_VERSION else 1
