"""
Mock implementations for gitopskit tests.
"""

from tests.mocks.cache import InMemoryCacheBackend

__all__ = ["InMemoryCacheBackend"]
