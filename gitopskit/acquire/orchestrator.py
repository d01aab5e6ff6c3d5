"""
Acquisition of the gitops CLI binary.

This module sequences the pipeline for one invocation:

1. Init: normalize the platform, compute the asset name, decide cache
   eligibility
2. CacheCheck: look up and materialize a cached copy
3. CacheVerify: probe the cached binary; a mismatch discards the hit
4. Download: resolve the release asset and stream it to a temp file
5. Install: move (or copy) it into place and fix permissions
6. PostVerify: probe again, warn on mismatch
7. Update the tool cache with the fresh binary

Fatal errors (release resolution, download) propagate to the caller.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gitopskit.config.settings import Settings, load_settings
from gitopskit.core.cache import CacheGateway, ToolCache
from gitopskit.core.directory import (
    get_binary_dir,
    get_scratch_dir,
    prepare_binary_directory,
)
from gitopskit.core.download import download_to_temp
from gitopskit.core.exceptions import CacheError
from gitopskit.core.filesystem import FilesystemError, install_binary
from gitopskit.core.platform import (
    NormalizedPlatform,
    detect_raw_arch,
    detect_raw_os,
    executable_name,
    normalize,
)
from gitopskit.core.releases import ReleaseClient, asset_file_name
from gitopskit.core.verification import DEFAULT_TOOL_NAME, probe_version
from gitopskit.core.versions import DEFAULT_VERSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcquireOptions:
    """Caller-supplied request for one acquisition."""

    version: Optional[str] = None
    os: Optional[str] = None
    arch: Optional[str] = None
    no_cache: bool = False


@dataclass(frozen=True)
class AcquireResult:
    """Result of an acquisition."""

    version: str
    """Requested version that was installed"""

    binary_path: Path
    """Absolute path of the installed executable"""

    cache_hit: bool
    """Whether the binary came from the tool cache"""


class GitopsAcquirer:
    """
    Acquires and verifies the gitops CLI binary.

    Example:
        >>> acquirer = GitopsAcquirer(
        ...     base_dir=Path.home() / ".gitops-cli",
        ...     release_client=ReleaseClient(),
        ...     cache=CacheGateway(ToolCache(tool_cache_root)),
        ... )
        >>> result = acquirer.acquire(AcquireOptions(version="2.2.2"))
        >>> print(result.binary_path, result.cache_hit)
    """

    def __init__(
        self,
        base_dir: Path,
        release_client: ReleaseClient,
        cache: CacheGateway,
        scratch_dir: Optional[Path] = None,
        timeout: int = 30,
        max_retries: int = 3,
        add_to_path: bool = True,
    ):
        """
        Initialize acquirer.

        Args:
            base_dir: Working base directory; the binary goes to ``base_dir/bin``
            release_client: Client resolving release assets
            cache: Cache gateway with its backend
            scratch_dir: Directory for temporary downloads
            timeout: Download timeout in seconds
            max_retries: Total download attempts for transient failures
            add_to_path: Put the binary directory on this process' PATH
        """
        self.base_dir = Path(base_dir)
        self.binary_dir = get_binary_dir(self.base_dir)
        self.release_client = release_client
        self.cache = cache
        self.scratch_dir = scratch_dir
        self.timeout = timeout
        self.max_retries = max_retries
        self.add_to_path = add_to_path

    def acquire(self, options: AcquireOptions) -> AcquireResult:
        """
        Acquire the requested version.

        Args:
            options: Version and platform request

        Returns:
            AcquireResult with version, binary path and cache-hit flag

        Raises:
            ReleaseError: If the release or its asset cannot be resolved
            DownloadError: If the asset cannot be downloaded
        """
        version = options.version or DEFAULT_VERSION
        raw_os = options.os or detect_raw_os()
        raw_arch = options.arch or detect_raw_arch()

        # Init
        platform = normalize(raw_os, raw_arch)
        asset_name = asset_file_name(platform)
        cache_enabled = self.cache.is_cache_eligible(options.version, options.no_cache)

        prepare_binary_directory(self.binary_dir, add_to_path=self.add_to_path)
        binary_path = (
            self.binary_dir / executable_name(DEFAULT_TOOL_NAME)
        ).absolute()

        logger.debug(
            f"Acquiring {asset_name} version {version} "
            f"(platform {platform.platform_string()}, cache "
            f"{'enabled' if cache_enabled else 'disabled'})"
        )

        cache_hit = False
        if cache_enabled:
            cache_hit = self._use_cache(version, platform, binary_path)

        if not cache_hit:
            self._download_and_install(version, asset_name, binary_path)
            self._update_cache(version, platform)

        return AcquireResult(
            version=version, binary_path=binary_path, cache_hit=cache_hit
        )

    def _use_cache(
        self, version: str, platform: NormalizedPlatform, binary_path: Path
    ) -> bool:
        """
        CacheCheck and CacheVerify.

        Returns:
            True only if a cached binary was materialized and reports the
            requested version
        """
        key = self.cache.key(version, platform.platform_string())
        entry = self.cache.lookup(key)
        if entry is None:
            return False

        try:
            self.cache.materialize(entry, self.base_dir)
        except (OSError, FilesystemError) as e:
            logger.warning(f"Cache entry {entry} could not be materialized: {e}")
            return False
        install_binary(None, binary_path)

        cached_version = probe_version(binary_path)
        if cached_version != version:
            logger.warning(
                f"Found a cached version of gitops: {cached_version} "
                f"(but it appears to be corrupted?)"
            )
            return False

        return True

    def _download_and_install(
        self, version: str, asset_name: str, binary_path: Path
    ) -> None:
        """Download, Install and PostVerify."""
        logger.info(f"Downloading '{asset_name}' version '{version}'")
        url = self.release_client.resolve_download_url(version, asset_name)
        download_path = download_to_temp(
            url,
            get_scratch_dir(self.scratch_dir),
            headers=self.release_client.auth_headers(),
            timeout=self.timeout,
            max_retries=self.max_retries,
        )

        install_binary(download_path, binary_path)

        logger.info(f"Download done. Checking the version of {binary_path}")
        downloaded_version = probe_version(binary_path)
        if downloaded_version != version:
            logger.warning(
                f"Downloaded a new version of gitops-cli: {downloaded_version} "
                f"(but it appears to be corrupted?)"
            )
        else:
            logger.info(f"Downloaded version: {downloaded_version}")

    def _update_cache(self, version: str, platform: NormalizedPlatform) -> None:
        key = self.cache.key(version, platform.platform_string())
        try:
            self.cache.store(key, self.base_dir)
        except CacheError as e:
            logger.warning(f"Failed to update tool cache: {e}")


def create_acquirer(settings: Settings, add_to_path: bool = True) -> GitopsAcquirer:
    """
    Build an acquirer and its collaborators from settings.

    Args:
        settings: Resolved settings
        add_to_path: Put the binary directory on this process' PATH

    Returns:
        Configured GitopsAcquirer
    """
    release_client = ReleaseClient(
        owner=settings.owner,
        repo=settings.repo,
        api_url=settings.api_url,
        token=settings.github_token,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    )
    cache = CacheGateway(ToolCache(settings.tool_cache_dir))
    return GitopsAcquirer(
        base_dir=settings.base_dir,
        release_client=release_client,
        cache=cache,
        scratch_dir=settings.scratch_dir,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        add_to_path=add_to_path,
    )


def acquire(
    version: Optional[str] = None,
    os: Optional[str] = None,
    arch: Optional[str] = None,
    no_cache: bool = False,
    settings: Optional[Settings] = None,
) -> AcquireResult:
    """
    Convenience function to acquire the gitops CLI.

    Args:
        version: Requested version (default: 2.2.2)
        os: Raw OS identifier (default: host)
        arch: Raw architecture identifier (default: host)
        no_cache: Skip the tool cache lookup
        settings: Settings to use (default: loaded from all layers)

    Returns:
        AcquireResult

    Example:
        >>> result = acquire(version="2.2.2")
        >>> print(f"gitops {result.version} at {result.binary_path}")
    """
    if settings is None:
        settings = load_settings()

    acquirer = create_acquirer(settings)
    return acquirer.acquire(
        AcquireOptions(version=version, os=os, arch=arch, no_cache=no_cache)
    )
