"""
Helper functions for gitopskit tests.
"""

import os
from pathlib import Path


def fake_gitops_script(version: str = "2.2.2") -> bytes:
    """
    Shell script standing in for the gitops binary.

    ``--version`` prints ``gitops version <version>`` like the real CLI.
    """
    return (
        "#!/bin/sh\n"
        'if [ "$1" = "--version" ]; then\n'
        f'  echo "gitops version {version}"\n'
        "fi\n"
    ).encode("utf-8")


def write_fake_gitops(path: Path, version: str = "2.2.2") -> Path:
    """Write an executable fake gitops binary to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(fake_gitops_script(version))
    os.chmod(path, 0o755)
    return path


def populate_base_dir(base_dir: Path, version: str = "2.2.2") -> Path:
    """Create a base directory holding ``bin/gitops`` for the given version."""
    write_fake_gitops(Path(base_dir) / "bin" / "gitops", version)
    return Path(base_dir)


def release_payload(tag: str, assets: dict) -> dict:
    """
    Build a releases API payload.

    Args:
        tag: Release tag
        assets: Mapping of asset name -> asset API url
    """
    return {
        "tag_name": tag,
        "assets": [{"name": name, "url": url} for name, url in assets.items()],
    }
