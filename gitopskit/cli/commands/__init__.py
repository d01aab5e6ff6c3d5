"""
gitopskit CLI commands.
"""
