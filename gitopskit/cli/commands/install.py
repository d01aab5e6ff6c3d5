"""
Install command implementation.

Acquires the gitops CLI into the working directory and prints where it went.
"""

import logging

from gitopskit.acquire.orchestrator import AcquireOptions, create_acquirer
from gitopskit.config.settings import load_settings
from gitopskit.core.exceptions import GitopsKitError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    try:
        settings = load_settings(
            config_file=args.config,
            base_dir=args.base_dir,
            tool_cache_dir=args.tool_cache,
        )
        options = AcquireOptions(
            version=args.tool_version or settings.version,
            os=args.os or settings.os,
            arch=args.arch or settings.arch,
            no_cache=args.no_cache or settings.no_cache,
        )
        result = create_acquirer(settings).acquire(options)
    except GitopsKitError as e:
        logger.error(f"Installation failed: {e}")
        return 1
    except OSError as e:
        logger.debug("Filesystem error", exc_info=True)
        logger.error(f"Installation failed: {e}")
        return 1

    source = "tool cache" if result.cache_hit else "download"
    print(f"gitops {result.version} installed at {result.binary_path} ({source})")
    return 0
