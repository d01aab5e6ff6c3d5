"""
Core building blocks of the gitopskit acquisition pipeline.

Provides platform normalization, release resolution, download, installation,
version probing and tool caching.
"""

from gitopskit.core.cache import CacheBackend, CacheGateway, CacheKey, ToolCache
from gitopskit.core.download import download_to_temp, retry_with_backoff
from gitopskit.core.exceptions import (
    AssetNotFoundError,
    CacheError,
    ConfigurationError,
    DownloadCollisionError,
    DownloadError,
    GitopsKitError,
    ReleaseError,
    ReleaseNotFoundError,
)
from gitopskit.core.filesystem import install_binary, materialize_directory
from gitopskit.core.platform import NormalizedPlatform, normalize
from gitopskit.core.releases import ReleaseClient, asset_file_name
from gitopskit.core.verification import probe_version
from gitopskit.core.versions import UNKNOWN_VERSION, is_moving_target

__all__ = [
    # Cache
    "CacheBackend",
    "CacheGateway",
    "CacheKey",
    "ToolCache",
    # Download
    "download_to_temp",
    "retry_with_backoff",
    # Exceptions
    "GitopsKitError",
    "ConfigurationError",
    "ReleaseError",
    "ReleaseNotFoundError",
    "AssetNotFoundError",
    "DownloadError",
    "DownloadCollisionError",
    "CacheError",
    # Filesystem
    "install_binary",
    "materialize_directory",
    # Platform
    "NormalizedPlatform",
    "normalize",
    # Releases
    "ReleaseClient",
    "asset_file_name",
    # Verification
    "probe_version",
    "UNKNOWN_VERSION",
    "is_moving_target",
]
