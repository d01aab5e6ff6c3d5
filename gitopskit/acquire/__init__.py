"""
gitops CLI acquisition pipeline.
"""

from gitopskit.acquire.orchestrator import (
    AcquireOptions,
    AcquireResult,
    GitopsAcquirer,
    acquire,
    create_acquirer,
)

__all__ = [
    "AcquireOptions",
    "AcquireResult",
    "GitopsAcquirer",
    "acquire",
    "create_acquirer",
]
