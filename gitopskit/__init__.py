"""
gitopskit - acquire and verify the gitops CLI in CI jobs.

Downloads a gitops-cli release binary, reuses copies from a tool cache keyed
by version and platform, and probes the installed binary's reported version
after every acquisition path.
"""

__version__ = "0.1.0"

from gitopskit.acquire import AcquireOptions, AcquireResult, GitopsAcquirer, acquire

__all__ = [
    "__version__",
    "AcquireOptions",
    "AcquireResult",
    "GitopsAcquirer",
    "acquire",
]
