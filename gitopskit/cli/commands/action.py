"""
Action command implementation.

Runs gitopskit as a GitHub Actions step.
"""

from gitopskit.ci.actions import configure_logging, run_action


def run(args) -> int:
    """
    Run the action command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    configure_logging()
    return run_action()
