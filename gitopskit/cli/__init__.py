"""
gitopskit CLI module.

This module provides the command-line interface for gitopskit.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
