"""
CI platform integration for gitopskit.
"""

from gitopskit.ci.actions import (
    add_path,
    configure_logging,
    get_boolean_input,
    get_input,
    run_action,
    set_failed,
    set_output,
)

__all__ = [
    "add_path",
    "configure_logging",
    "get_boolean_input",
    "get_input",
    "run_action",
    "set_failed",
    "set_output",
]
