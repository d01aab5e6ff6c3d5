"""
Centralized exception hierarchy for gitopskit.

Fatal acquisition failures are raised as subclasses of GitopsKitError.
Recoverable conditions (unavailable cache, corrupted cache entry, failed
chmod) are logged as warnings and never raised.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class GitopsKitError(Exception):
    """Base exception for all gitopskit errors."""

    pass


class ConfigurationError(GitopsKitError):
    """Raised when settings or CI inputs are invalid."""

    pass


# ============================================================================
# Release Resolution Exceptions
# ============================================================================


class ReleaseError(GitopsKitError):
    """Base exception for release-index errors."""

    pass


class ReleaseNotFoundError(ReleaseError):
    """Raised when the release index does not return a release for a tag."""

    def __init__(self, tag: str, reason: str = ""):
        self.tag = tag
        self.reason = reason
        msg = f"Release not found: {tag}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class AssetNotFoundError(ReleaseError):
    """Raised when a release has no asset with the requested name."""

    def __init__(self, tag: str, asset_name: str, available=None):
        self.tag = tag
        self.asset_name = asset_name
        self.available = list(available or [])
        msg = f"No asset named '{asset_name}' in release {tag}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)


# ============================================================================
# Download Exceptions
# ============================================================================


class DownloadError(GitopsKitError):
    """Raised when an asset cannot be downloaded."""

    pass


class DownloadCollisionError(DownloadError):
    """Raised when the temporary download path already exists."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Temporary download path already exists: {path}")


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(GitopsKitError):
    """Raised when the cache backend cannot store an entry."""

    pass
