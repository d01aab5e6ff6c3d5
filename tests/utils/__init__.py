"""
Test utilities for gitopskit.
"""
