"""
Platform detection and normalization for gitopskit.

Two vocabularies are involved:

- the *raw* vocabulary used by CI inputs and by the runner
  (``win32``, ``darwin``, ``linux`` / ``x64``, ``arm64``, ...)
- the *vendor* vocabulary of the gitops-cli release assets
  (``windows``, ``macos``, ``ubuntu`` / ``amd64``, ...)

Normalization is a table lookup. Identifiers missing from the tables pass
through unchanged, so the mapping is total.

Usage:
    from gitopskit.core.platform import detect_raw_os, detect_raw_arch, normalize

    platform = normalize(detect_raw_os(), detect_raw_arch())
    print(platform.platform_string())  # e.g. 'ubuntu-amd64'
"""

import platform
import sys
from dataclasses import dataclass
from typing import Optional

# Raw OS identifier -> vendor OS name
OS_NAMES = {
    "win32": "windows",
    "darwin": "macos",
    "linux": "ubuntu",
}

# Raw architecture identifier -> vendor architecture name
ARCH_NAMES = {
    "x64": "amd64",
}

# Raw OS identifier -> executable file extension
EXTENSIONS = {
    "win32": ".exe",
}

# platform.machine() values -> raw architecture identifier
_MACHINE_NAMES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
}


@dataclass(frozen=True)
class NormalizedPlatform:
    """
    Platform in the vendor's asset-naming vocabulary.

    Attributes:
        os: Vendor OS name ('windows', 'macos', 'ubuntu')
        arch: Vendor architecture name ('amd64', 'arm64')
        extension: Executable extension ('.exe' or '')
    """

    os: str
    arch: str
    extension: str = ""

    def platform_string(self) -> str:
        """
        Get the ``os-arch`` string used in cache keys.

        Example:
            >>> NormalizedPlatform("windows", "amd64", ".exe").platform_string()
            'windows-amd64'
        """
        return f"{self.os}-{self.arch}"


def normalize(raw_os: str, raw_arch: str) -> NormalizedPlatform:
    """
    Map a raw (OS, architecture) pair into the vendor vocabulary.

    Args:
        raw_os: Raw OS identifier (e.g. 'win32', 'darwin', 'linux')
        raw_arch: Raw architecture identifier (e.g. 'x64', 'arm64')

    Returns:
        NormalizedPlatform for the pair

    Example:
        >>> normalize("win32", "x64")
        NormalizedPlatform(os='windows', arch='amd64', extension='.exe')
    """
    return NormalizedPlatform(
        os=OS_NAMES.get(raw_os, raw_os),
        arch=ARCH_NAMES.get(raw_arch, raw_arch),
        extension=EXTENSIONS.get(raw_os, ""),
    )


def detect_raw_os() -> str:
    """
    Detect the host OS in the raw vocabulary.

    Returns:
        'win32', 'darwin', 'linux' or the ``sys.platform`` value otherwise
    """
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def detect_raw_arch() -> str:
    """
    Detect the host CPU architecture in the raw vocabulary.

    Returns:
        'x64', 'arm64', 'ia32', 'arm' or the lowercased machine name
    """
    machine = platform.machine().lower()

    if machine in _MACHINE_NAMES:
        return _MACHINE_NAMES[machine]
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def executable_name(tool_name: str, raw_os: Optional[str] = None) -> str:
    """
    Get the on-disk executable name for a tool on the given (or host) OS.

    Example:
        >>> executable_name("gitops", "win32")
        'gitops.exe'
    """
    if raw_os is None:
        raw_os = detect_raw_os()
    return f"{tool_name}{EXTENSIONS.get(raw_os, '')}"


__all__ = [
    "NormalizedPlatform",
    "normalize",
    "detect_raw_os",
    "detect_raw_arch",
    "executable_name",
]
