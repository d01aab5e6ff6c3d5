"""
GitHub Actions integration.

Implements the small part of the Actions runner protocol the action needs:
inputs from ``INPUT_*`` variables, outputs appended to ``$GITHUB_OUTPUT``,
PATH registration through ``$GITHUB_PATH`` and workflow commands
(``::warning::``, ``::error::``, ``::debug::``) for log annotations.

Inputs:
    version   Requested gitops-cli version (default 2.2.2)
    os        Raw OS identifier override (win32, darwin, linux)
    arch      Raw architecture override (x64, arm64)
    no-cache  Skip the tool cache lookup

Outputs:
    gitops-cli-version  Installed version
    cache-hit           'true' if the binary came from the tool cache
"""

import logging
import os
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from gitopskit.config.settings import load_settings, parse_bool
from gitopskit.core.directory import prepend_path
from gitopskit.core.exceptions import ConfigurationError, GitopsKitError

logger = logging.getLogger(__name__)


# ============================================================================
# Workflow Commands
# ============================================================================


def escape_data(value: Any) -> str:
    """Escape a workflow command message."""
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_command(command: str, message: Any) -> str:
    """
    Format a workflow command line.

    Example:
        >>> format_command("warning", "cache miss")
        '::warning::cache miss'
    """
    return f"::{command}::{escape_data(message)}"


class WorkflowCommandHandler(logging.Handler):
    """
    Logging handler rendering records as workflow commands.

    DEBUG becomes ``::debug::``, WARNING ``::warning::``, ERROR and above
    ``::error::``; INFO is printed as plain text.
    """

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                line = format_command("error", message)
            elif record.levelno >= logging.WARNING:
                line = format_command("warning", message)
            elif record.levelno >= logging.INFO:
                line = message
            else:
                line = format_command("debug", message)

            stream = self.stream or sys.stdout
            stream.write(line + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)


def configure_logging(stream=None) -> WorkflowCommandHandler:
    """Route all logging through a WorkflowCommandHandler."""
    handler = WorkflowCommandHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    # The runner hides ::debug:: lines unless step debug logging is enabled
    root.setLevel(logging.DEBUG)
    return handler


# ============================================================================
# Inputs and Outputs
# ============================================================================


def get_input(
    name: str, required: bool = False, environ: Optional[Dict[str, str]] = None
) -> str:
    """
    Read an action input.

    Args:
        name: Input name as declared in action.yml (e.g. 'no-cache')
        required: Raise if the input is empty
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Stripped input value ('' when not set)

    Raises:
        ConfigurationError: If a required input is missing
    """
    environ = os.environ if environ is None else environ
    value = environ.get(f"INPUT_{name.replace(' ', '_').upper()}", "").strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def get_boolean_input(name: str, environ: Optional[Dict[str, str]] = None) -> bool:
    """
    Read a boolean action input; an empty input is False.

    Raises:
        ConfigurationError: If the value is not a YAML 1.2 core boolean
    """
    value = get_input(name, environ=environ)
    if not value:
        return False
    return parse_bool(value, name)


def set_output(name: str, value: Any, environ: Optional[Dict[str, str]] = None):
    """
    Publish a step output.

    Appends to ``$GITHUB_OUTPUT`` using a unique heredoc delimiter; falls
    back to the legacy ``::set-output`` command when the file is not set.
    """
    environ = os.environ if environ is None else environ
    if isinstance(value, bool):
        value = "true" if value else "false"
    value = str(value)

    output_file = environ.get("GITHUB_OUTPUT")
    if not output_file:
        sys.stdout.write(f"::set-output name={name}::{escape_data(value)}\n")
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def add_path(directory: Path, environ: Optional[Dict[str, str]] = None):
    """Make a directory available on PATH for this and all later steps."""
    environ = os.environ if environ is None else environ
    path_file = environ.get("GITHUB_PATH")
    if path_file:
        with open(path_file, "a", encoding="utf-8") as f:
            f.write(f"{directory}\n")
    else:
        sys.stdout.write(f"::add-path::{directory}\n")
    prepend_path(directory)


def set_failed(message: Any) -> int:
    """Report a failed step and return the exit code to use."""
    sys.stdout.write(format_command("error", message) + "\n")
    return 1


# ============================================================================
# Entry Point
# ============================================================================


def run_action(environ: Optional[Dict[str, str]] = None) -> int:
    """
    Run the action: read inputs, acquire the binary, publish outputs.

    Args:
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    from gitopskit.acquire.orchestrator import AcquireOptions, create_acquirer

    environ = os.environ if environ is None else environ
    if not environ.get("RUNNER_TEMP"):
        environ["RUNNER_TEMP"] = tempfile.gettempdir()

    try:
        options = AcquireOptions(
            version=get_input("version", environ=environ) or None,
            os=get_input("os", environ=environ) or None,
            arch=get_input("arch", environ=environ) or None,
            no_cache=get_boolean_input("no-cache", environ=environ),
        )
        settings = load_settings(environ=environ)
        acquirer = create_acquirer(settings)
        result = acquirer.acquire(options)

        add_path(acquirer.binary_dir, environ=environ)
        set_output("gitops-cli-version", result.version, environ=environ)
        set_output("cache-hit", result.cache_hit, environ=environ)
        return 0

    except GitopsKitError as e:
        return set_failed(e)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        return set_failed(f"Unexpected error: {e}")


__all__ = [
    "WorkflowCommandHandler",
    "configure_logging",
    "get_input",
    "get_boolean_input",
    "set_output",
    "add_path",
    "set_failed",
    "run_action",
]
