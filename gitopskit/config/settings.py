"""
Layered settings for gitopskit.

Sources, lowest to highest precedence:
    1. Built-in defaults
    2. YAML configuration file (``gitopskit.yaml`` or ``--config``)
    3. Environment (GITOPSKIT_HOME, RUNNER_TEMP, RUNNER_TOOL_CACHE, GITHUB_TOKEN)
    4. Explicit overrides (CLI arguments, action inputs)

Example configuration file:

    version: 2.2.2
    no_cache: false
    base_dir: ~/.gitops-cli
    github:
      owner: mxcd
      repo: gitops-cli
    download:
      timeout: 30
      max_retries: 3
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gitopskit.core.directory import (
    get_default_base_dir,
    get_default_tool_cache_dir,
)
from gitopskit.core.exceptions import ConfigurationError
from gitopskit.core.releases import DEFAULT_API_URL, DEFAULT_OWNER, DEFAULT_REPO

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "gitopskit.yaml"

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")

_PATH_FIELDS = ("base_dir", "tool_cache_dir", "scratch_dir")

# Nested YAML sections -> flat settings field names
_SECTIONS = {
    "github": {
        "owner": "owner",
        "repo": "repo",
        "api_url": "api_url",
        "token": "github_token",
    },
    "download": {"timeout": "timeout", "max_retries": "max_retries"},
}


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings for one acquisition.

    Attributes:
        version: Requested version (concrete or moving target); None means
            the default version, which is then not cache-eligible
        os: Raw OS identifier; None means the host OS
        arch: Raw architecture identifier; None means the host architecture
        no_cache: Caller explicitly disabled caching
        base_dir: Working base directory (binary goes to ``base_dir/bin``)
        tool_cache_dir: Root of the local tool cache
        scratch_dir: Directory for temporary downloads; None means
            ``$RUNNER_TEMP`` or the system temp directory
        owner: GitHub owner of the release repository
        repo: GitHub repository publishing the binaries
        api_url: GitHub API base URL
        github_token: Optional token for API and asset requests
        timeout: HTTP timeout in seconds
        max_retries: Total attempts for release fetch and download
    """

    version: Optional[str] = None
    os: Optional[str] = None
    arch: Optional[str] = None
    no_cache: bool = False
    base_dir: Path = field(default_factory=get_default_base_dir)
    tool_cache_dir: Path = field(default_factory=get_default_tool_cache_dir)
    scratch_dir: Optional[Path] = None
    owner: str = DEFAULT_OWNER
    repo: str = DEFAULT_REPO
    api_url: str = DEFAULT_API_URL
    github_token: Optional[str] = field(default=None, repr=False)
    timeout: int = 30
    max_retries: int = 3

    def __post_init__(self):
        """Validate settings after initialization."""
        if not isinstance(self.timeout, int) or self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be a positive integer, got {self.timeout!r}"
            )
        if not isinstance(self.max_retries, int) or self.max_retries < 1:
            raise ConfigurationError(
                f"max_retries must be an integer >= 1, got {self.max_retries!r}"
            )
        if not self.owner or not self.repo:
            raise ConfigurationError("owner and repo must not be empty")

    def with_overrides(self, **overrides: Any) -> "Settings":
        """
        Return a copy with non-None overrides applied.

        Raises:
            ConfigurationError: If an override names an unknown setting
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **_coerce(values))


def parse_bool(value: Any, name: str = "value") -> bool:
    """
    Parse a boolean using the YAML 1.2 core schema spellings.

    Args:
        value: bool or string ('true', 'True', 'TRUE', 'false', 'False', 'FALSE')
        name: Setting name used in the error message

    Raises:
        ConfigurationError: For any other value
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
    raise ConfigurationError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        f"Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required and missing, or not valid YAML
    """
    config_file = Path(config_file)
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration in {config_file} must be a mapping, "
            f"got {type(config).__name__}"
        )
    return config


def flatten_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a YAML configuration dictionary onto Settings field names.

    Unknown keys are logged and ignored.
    """
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}

    for key, value in config.items():
        if key in _SECTIONS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                target = _SECTIONS[key].get(sub_key)
                if target is None:
                    logger.warning(f"Ignoring unknown setting: {key}.{sub_key}")
                    continue
                values[target] = sub_value
        elif key in known:
            values[key] = value
        else:
            logger.warning(f"Ignoring unknown setting: {key}")

    return values


def environment_settings(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Collect settings provided through environment variables."""
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if environ.get("GITOPSKIT_HOME"):
        values["base_dir"] = environ["GITOPSKIT_HOME"]
    if environ.get("RUNNER_TOOL_CACHE"):
        values["tool_cache_dir"] = environ["RUNNER_TOOL_CACHE"]
    if environ.get("RUNNER_TEMP"):
        values["scratch_dir"] = environ["RUNNER_TEMP"]
    if environ.get("GITHUB_TOKEN"):
        values["github_token"] = environ["GITHUB_TOKEN"]

    return values


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """
    Build Settings from all configuration layers.

    Args:
        config_file: Explicit configuration file (must exist). If None,
            ``./gitopskit.yaml`` is used when present.
        environ: Environment mapping (defaults to ``os.environ``)
        **overrides: Highest-precedence values; None values are ignored

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If any layer holds invalid values

    Example:
        >>> settings = load_settings(version="2.2.2", no_cache=True)
        >>> settings.no_cache
        True
    """
    if config_file is not None:
        file_values = flatten_config(load_yaml_config(config_file, required=True))
    else:
        file_values = flatten_config(
            load_yaml_config(Path.cwd() / DEFAULT_CONFIG_FILE, required=False)
        )

    settings = Settings()
    settings = settings.with_overrides(**file_values)
    settings = settings.with_overrides(**environment_settings(environ))
    return settings.with_overrides(**overrides)


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert raw configuration values to Settings field types."""
    coerced = dict(values)

    for name in _PATH_FIELDS:
        if name in coerced:
            coerced[name] = Path(str(coerced[name])).expanduser()

    if "no_cache" in coerced:
        coerced["no_cache"] = parse_bool(coerced["no_cache"], "no_cache")

    if "version" in coerced:
        # YAML reads an unquoted 2.2 as a float
        coerced["version"] = str(coerced["version"]).strip()

    for name in ("timeout", "max_retries"):
        if name in coerced and isinstance(coerced[name], str):
            try:
                coerced[name] = int(coerced[name])
            except ValueError as e:
                raise ConfigurationError(
                    f"{name} must be an integer, got {coerced[name]!r}"
                ) from e

    return coerced


__all__ = [
    "Settings",
    "load_settings",
    "load_yaml_config",
    "flatten_config",
    "environment_settings",
    "parse_bool",
]
