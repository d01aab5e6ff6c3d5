"""
Release-asset resolution against the GitHub releases API.

Asset names follow ``gitops_<os>_<arch><extension>`` in the vendor
vocabulary, e.g. ``gitops_windows_amd64.exe`` or ``gitops_ubuntu_amd64``.
Release metadata is fetched once per acquisition attempt and never cached.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests
from requests.exceptions import RequestException

from gitopskit.core.download import retry_with_backoff
from gitopskit.core.exceptions import (
    AssetNotFoundError,
    ReleaseError,
    ReleaseNotFoundError,
)
from gitopskit.core.platform import NormalizedPlatform

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_OWNER = "mxcd"
DEFAULT_REPO = "gitops-cli"
ASSET_PREFIX = "gitops"


@dataclass(frozen=True)
class ReleaseAsset:
    """A single downloadable file attached to a release."""

    name: str
    url: str


@dataclass
class Release:
    """Metadata of one tagged release."""

    tag: str
    assets: List[ReleaseAsset] = field(default_factory=list)

    @classmethod
    def from_json(cls, tag: str, data: dict) -> "Release":
        """
        Build a Release from a releases API payload.

        Entries without a name or url are skipped.
        """
        assets = []
        for entry in data.get("assets") or []:
            name = entry.get("name")
            url = entry.get("url")
            if name and url:
                assets.append(ReleaseAsset(name=name, url=url))
        return cls(tag=data.get("tag_name") or tag, assets=assets)

    def asset_names(self) -> List[str]:
        return [asset.name for asset in self.assets]


def asset_file_name(platform: NormalizedPlatform) -> str:
    """
    Build the release asset file name for a normalized platform.

    Example:
        >>> asset_file_name(normalize("win32", "x64"))
        'gitops_windows_amd64.exe'
    """
    return f"{ASSET_PREFIX}_{platform.os}_{platform.arch}{platform.extension}"


def find_asset(release: Release, asset_name: str) -> ReleaseAsset:
    """
    Find an asset by exact name.

    Raises:
        AssetNotFoundError: If no asset has exactly this name
    """
    for asset in release.assets:
        if asset.name == asset_name:
            return asset
    raise AssetNotFoundError(release.tag, asset_name, release.asset_names())


class ReleaseClient:
    """
    Read-only client for the releases of one GitHub repository.

    Example:
        >>> client = ReleaseClient()
        >>> url = client.resolve_download_url("2.2.2", "gitops_ubuntu_amd64")
    """

    def __init__(
        self,
        owner: str = DEFAULT_OWNER,
        repo: str = DEFAULT_REPO,
        api_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
    ):
        """
        Initialize release client.

        Args:
            owner: Repository owner
            repo: Repository name
            api_url: Base URL of the GitHub API
            token: Optional token sent as bearer authorization
            timeout: Request timeout in seconds
            max_retries: Total attempts for transient failures
        """
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries

    def release_url(self, tag: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/releases/tags/{tag}"

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for API and asset requests, if a token is set."""
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def get_release(self, tag: str) -> Release:
        """
        Fetch release metadata for a tag.

        Raises:
            ReleaseNotFoundError: If the index answers with a non-success status
            ReleaseError: If the index cannot be reached or returns invalid JSON
        """
        url = self.release_url(tag)
        headers = {"Accept": "application/vnd.github.v3+json"}
        headers.update(self.auth_headers())

        logger.debug(f"Fetching release metadata: {url}")

        def fetch():
            return requests.get(url, headers=headers, timeout=self.timeout)

        try:
            response = retry_with_backoff(
                fetch,
                max_retries=self.max_retries,
                description="Release index request",
            )
        except RequestException as e:
            raise ReleaseError(f"Failed to fetch release {tag}: {e}") from e

        if not response.ok:
            raise ReleaseNotFoundError(
                tag, f"GitHub API returned {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ReleaseError(f"Invalid release metadata for {tag}: {e}") from e

        release = Release.from_json(tag, data)
        logger.debug(f"Release {tag} has {len(release.assets)} assets")
        return release

    def resolve_download_url(self, version: str, asset_name: str) -> str:
        """
        Resolve the download URL of a named asset of a release.

        Raises:
            ReleaseNotFoundError: If the release cannot be fetched
            AssetNotFoundError: If the release has no such asset
        """
        release = self.get_release(version)
        asset = find_asset(release, asset_name)
        logger.debug(f"Resolved {asset_name} to {asset.url}")
        return asset.url


__all__ = [
    "ReleaseAsset",
    "Release",
    "ReleaseClient",
    "asset_file_name",
    "find_asset",
]
