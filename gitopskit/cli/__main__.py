"""
Entry point for running the gitopskit CLI as a module.

Usage: python -m gitopskit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
