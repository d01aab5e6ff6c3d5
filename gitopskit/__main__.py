"""
Entry point for running gitopskit as a module.

Usage: python -m gitopskit [command] [options]
"""

from gitopskit.cli.parser import main

if __name__ == "__main__":
    main()
