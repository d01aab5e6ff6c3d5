"""
Tool cache keyed by tool name, version and platform.

The pipeline talks to a CacheBackend through CacheGateway, which owns the
eligibility policy and re-checks that looked-up entries still exist on disk.
ToolCache is the local backend: a directory per key, laid out like the
GitHub Actions tool cache::

    <root>/<tool>/<version>/<platform>/          cached directory
    <root>/<tool>/<version>/<platform>.complete  completion marker
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from filelock import FileLock, Timeout

from gitopskit.core.exceptions import CacheError
from gitopskit.core.filesystem import materialize_directory
from gitopskit.core.versions import is_moving_target

logger = logging.getLogger(__name__)

TOOL_NAME = "gitops-cli"


@dataclass(frozen=True)
class CacheKey:
    """
    Exact cache key; no partial matching.

    Attributes:
        name: Fixed tool identifier
        version: Requested version
        platform: Normalized ``os-arch`` string
    """

    name: str
    version: str
    platform: str

    def __str__(self) -> str:
        return f"{self.name}-{self.version}-{self.platform}"


class CacheBackend(ABC):
    """Storage backend used by CacheGateway."""

    @abstractmethod
    def available(self) -> bool:
        """Check whether the backend can be used in this environment."""
        pass

    @abstractmethod
    def find(self, key: CacheKey) -> Optional[Path]:
        """
        Look up the directory recorded for a key.

        The returned path is what the backend has on record; it may no
        longer exist on disk.
        """
        pass

    @abstractmethod
    def store(self, key: CacheKey, source_dir: Path) -> Path:
        """
        Record a copy of ``source_dir`` under a key.

        Returns:
            Directory of the new cache entry

        Raises:
            CacheError: If the entry cannot be written
        """
        pass


class ToolCache(CacheBackend):
    """
    Local directory tool cache.

    Example:
        >>> cache = ToolCache(Path("/opt/hostedtoolcache"))
        >>> key = CacheKey("gitops-cli", "2.2.2", "ubuntu-amd64")
        >>> cache.store(key, Path("~/.gitops-cli").expanduser())
    """

    def __init__(self, root: Path, lock_timeout: int = 60):
        """
        Initialize tool cache.

        Args:
            root: Cache root directory (created on demand)
            lock_timeout: Seconds to wait for the per-key write lock
        """
        self.root = Path(root)
        self.lock_timeout = lock_timeout

    def entry_dir(self, key: CacheKey) -> Path:
        return self.root / key.name / key.version / key.platform

    def marker_path(self, key: CacheKey) -> Path:
        return self.root / key.name / key.version / f"{key.platform}.complete"

    def lock_path(self, key: CacheKey) -> Path:
        return self.root / "lock" / f"{key}.lock"

    def available(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug(f"Tool cache root {self.root} cannot be created: {e}")
            return False
        return os.access(self.root, os.W_OK)

    def find(self, key: CacheKey) -> Optional[Path]:
        if not self.marker_path(key).exists():
            logger.debug(f"No completed tool cache entry for {key}")
            return None
        return self.entry_dir(key)

    def store(self, key: CacheKey, source_dir: Path) -> Path:
        source_dir = Path(source_dir)
        entry = self.entry_dir(key)
        marker = self.marker_path(key)

        try:
            self.lock_path(key).parent.mkdir(parents=True, exist_ok=True)
            with FileLock(self.lock_path(key), timeout=self.lock_timeout):
                marker.unlink(missing_ok=True)
                if entry.exists():
                    shutil.rmtree(entry)
                shutil.copytree(source_dir, entry)
                marker.write_text("", encoding="utf-8")
        except Timeout as e:
            raise CacheError(
                f"Could not acquire tool cache lock for {key} "
                f"within {self.lock_timeout} seconds"
            ) from e
        except OSError as e:
            raise CacheError(f"Failed to cache {source_dir} as {key}: {e}") from e

        logger.debug(f"Cached {source_dir} as {key} at {entry}")
        return entry


class CacheGateway:
    """
    Cache policy and access for the acquisition pipeline.

    Example:
        >>> gateway = CacheGateway(ToolCache(tool_cache_root))
        >>> if gateway.is_cache_eligible("2.2.2", no_cache=False):
        ...     entry = gateway.lookup(gateway.key("2.2.2", "ubuntu-amd64"))
    """

    def __init__(self, backend: CacheBackend, tool_name: str = TOOL_NAME):
        self.backend = backend
        self.tool_name = tool_name

    def key(self, version: str, platform_string: str) -> CacheKey:
        return CacheKey(self.tool_name, version, platform_string)

    def is_cache_eligible(self, version: Optional[str], no_cache: bool = False) -> bool:
        """
        Decide whether a request may use the cache.

        Args:
            version: Requested version
            no_cache: Caller explicitly disabled caching

        Returns:
            False for explicit opt-out, missing or moving-target versions and
            an unavailable backend; True otherwise
        """
        if no_cache:
            logger.debug("Cache disabled by caller.")
            return False

        if not version or is_moving_target(version):
            logger.debug(f"Version '{version}' is not cacheable.")
            return False

        if not self.backend.available():
            logger.warning("Cache service is not available. Skipping cache.")
            return False

        logger.debug("Cache service is available.")
        return True

    def lookup(self, key: CacheKey) -> Optional[Path]:
        """
        Find a cache entry that exists on disk.

        Returns:
            Entry directory, or None on a miss (including a recorded entry
            whose directory is gone)
        """
        cached_path = self.backend.find(key)
        if not cached_path:
            return None

        cached_path = Path(cached_path)
        if not cached_path.exists():
            logger.warning(
                f"Found a cached version of {key.name}: {key.version}, "
                f"but the path does not exist: {cached_path}"
            )
            return None

        logger.info(f"Found a cached version of {key.name}: {key.version}")
        return cached_path

    def materialize(self, entry: Path, destination: Path) -> None:
        """Copy a cache entry into the working directory."""
        logger.debug(f"Copying {entry} to {destination}")
        materialize_directory(entry, destination)

    def store(self, key: CacheKey, source_dir: Path) -> Path:
        """
        Store a directory under a key.

        Raises:
            CacheError: If the backend cannot store the entry
        """
        logger.info(f"Updating tool cache for {key}")
        return self.backend.store(key, source_dir)


__all__ = [
    "TOOL_NAME",
    "CacheKey",
    "CacheBackend",
    "ToolCache",
    "CacheGateway",
]
