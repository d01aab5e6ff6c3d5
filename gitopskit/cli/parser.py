"""
gitopskit argument parser.

This module implements the command-line interface for gitopskit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("gitopskit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """gitopskit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="gitopskit",
            description="gitopskit - acquire and verify the gitops CLI in CI jobs",
            epilog='Use "gitopskit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"gitopskit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./gitopskit.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_action_command(subparsers)
        self._add_probe_command(subparsers)

        return parser

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install the gitops CLI",
            description="Acquire a gitops CLI release, using the tool cache "
            "when possible",
        )
        parser.add_argument(
            "--version",
            dest="tool_version",
            metavar="VERSION",
            help="gitops CLI version to install (default: 2.2.2)",
        )
        parser.add_argument(
            "--os",
            metavar="OS",
            help="Target OS identifier: win32, darwin, linux (default: host)",
        )
        parser.add_argument(
            "--arch",
            metavar="ARCH",
            help="Target architecture identifier: x64, arm64 (default: host)",
        )
        parser.add_argument(
            "--no-cache",
            action="store_true",
            help="Skip the tool cache lookup",
        )
        parser.add_argument(
            "--base-dir",
            type=Path,
            metavar="DIR",
            help="Working directory; the binary is placed in DIR/bin",
        )
        parser.add_argument(
            "--tool-cache",
            type=Path,
            metavar="DIR",
            help="Root directory of the local tool cache",
        )

    def _add_action_command(self, subparsers):
        """Add 'action' subcommand."""
        subparsers.add_parser(
            "action",
            help="Run as a GitHub Actions step",
            description="Read INPUT_* variables, install the gitops CLI and "
            "publish the step outputs",
        )

    def _add_probe_command(self, subparsers):
        """Add 'probe' subcommand."""
        parser = subparsers.add_parser(
            "probe",
            help="Print the version reported by a gitops binary",
            description="Run BINARY --version and print the semantic version",
        )
        parser.add_argument(
            "binary",
            nargs="?",
            type=Path,
            help="Binary to probe (default: gitops on PATH)",
        )

    def run(self, argv: Optional[List[str]] = None) -> int:
        """
        Parse arguments and run command.

        Args:
            argv: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        args = self.parser.parse_args(argv)

        if not args.command:
            self.parser.print_help()
            return 0

        # The action configures its own workflow-command logging
        if args.command != "action":
            self._configure_logging(args)

        return self._dispatch_command(args)

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        from gitopskit.cli.commands import action, install, probe

        command_map = {
            "install": install.run,
            "action": action.run,
            "probe": probe.run,
        }

        handler = command_map.get(args.command)
        if not handler:
            logger.error(f"Unknown command: {args.command}")
            return 1

        return handler(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
