"""
Unit tests for binary installation and directory copying.
"""

import errno
import os
import stat

import pytest
from unittest.mock import patch

from gitopskit.core.filesystem import (
    FilesystemError,
    install_binary,
    make_executable,
    materialize_directory,
)
from gitopskit.core.exceptions import GitopsKitError

IS_WINDOWS = os.name == "nt"


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


class TestInstallBinary:
    """Test install_binary function."""

    def test_rename_into_place(self, tmp_path):
        """Test a downloaded file is moved to the destination."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        destination = tmp_path / "bin" / "gitops"
        destination.parent.mkdir()

        result = install_binary(source, destination)

        assert result == destination
        assert destination.read_bytes() == b"binary"
        assert not source.exists()

    def test_overwrites_existing_binary(self, tmp_path):
        """Test installation replaces a previously installed binary."""
        source = tmp_path / "download"
        source.write_bytes(b"new")
        destination = tmp_path / "gitops"
        destination.write_bytes(b"old")

        install_binary(source, destination)

        assert destination.read_bytes() == b"new"

    def test_cross_device_rename_falls_back_to_copy(self, tmp_path, caplog):
        """Test EXDEV during rename copies the file and removes the source."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        destination = tmp_path / "gitops"

        exdev = OSError(errno.EXDEV, "Invalid cross-device link")
        with patch("gitopskit.core.filesystem.os.replace", side_effect=exdev):
            install_binary(source, destination)

        assert destination.read_bytes() == b"binary"
        assert not source.exists()
        assert "Trying to copy" in caplog.text

    def test_any_rename_failure_falls_back_to_copy(self, tmp_path):
        """Test the copy fallback is used for every rename failure."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        destination = tmp_path / "gitops"

        with patch(
            "gitopskit.core.filesystem.os.replace",
            side_effect=PermissionError("denied"),
        ):
            install_binary(source, destination)

        assert destination.read_bytes() == b"binary"

    @pytest.mark.skipif(IS_WINDOWS, reason="Unix-specific test")
    def test_copy_fallback_sets_permissions(self, tmp_path):
        """Test the copied file is executable for owner, group and other."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        os.chmod(source, 0o600)
        destination = tmp_path / "gitops"

        with patch(
            "gitopskit.core.filesystem.os.replace",
            side_effect=OSError(errno.EXDEV, "Invalid cross-device link"),
        ):
            install_binary(source, destination)

        assert _mode(destination) & 0o111 == 0o111

    @pytest.mark.skipif(IS_WINDOWS, reason="Unix-specific test")
    def test_sets_execute_bits_regardless_of_source_mode(self, tmp_path):
        """Test installed binaries end up with 0o755 permission bits."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        os.chmod(source, 0o600)
        destination = tmp_path / "gitops"

        install_binary(source, destination)

        assert _mode(destination) & 0o755 == 0o755

    @pytest.mark.skipif(IS_WINDOWS, reason="Unix-specific test")
    def test_without_source_only_fixes_permissions(self, tmp_path):
        """Test the cache-hit path only normalizes permissions."""
        destination = tmp_path / "gitops"
        destination.write_bytes(b"cached")
        os.chmod(destination, 0o644)

        install_binary(None, destination)

        assert destination.read_bytes() == b"cached"
        assert _mode(destination) & 0o111 == 0o111

    def test_chmod_failure_is_only_a_warning(self, tmp_path, caplog):
        """Test a failing chmod does not abort installation."""
        source = tmp_path / "download"
        source.write_bytes(b"binary")
        destination = tmp_path / "gitops"

        with patch(
            "gitopskit.core.filesystem.os.chmod",
            side_effect=PermissionError("read-only filesystem"),
        ):
            install_binary(source, destination)

        assert destination.read_bytes() == b"binary"
        assert "Failed to chmod" in caplog.text

    def test_copy_failure_propagates(self, tmp_path):
        """Test installation fails when rename and copy both fail."""
        source = tmp_path / "missing"
        destination = tmp_path / "gitops"

        with pytest.raises(OSError):
            install_binary(source, destination)


class TestMakeExecutable:
    """Test make_executable function."""

    def test_missing_file_returns_false(self, tmp_path, caplog):
        assert make_executable(tmp_path / "missing") is False
        assert "Failed to chmod" in caplog.text

    @pytest.mark.skipif(IS_WINDOWS, reason="Unix-specific test")
    def test_keeps_existing_bits(self, tmp_path):
        """Test existing permission bits are preserved."""
        path = tmp_path / "gitops"
        path.write_bytes(b"")
        os.chmod(path, 0o770)

        assert make_executable(path) is True
        assert _mode(path) == 0o775


class TestMaterializeDirectory:
    """Test materialize_directory function."""

    def test_copies_tree_into_existing_directory(self, tmp_path):
        """Test cached contents are merged into the working directory."""
        source = tmp_path / "cache" / "entry"
        (source / "bin").mkdir(parents=True)
        (source / "bin" / "gitops").write_bytes(b"cached")

        destination = tmp_path / "base"
        (destination / "bin").mkdir(parents=True)
        (destination / "bin" / "gitops").write_bytes(b"old")
        (destination / "keep.txt").write_text("keep")

        materialize_directory(source, destination)

        assert (destination / "bin" / "gitops").read_bytes() == b"cached"
        assert (destination / "keep.txt").read_text() == "keep"

    def test_missing_source(self, tmp_path):
        with pytest.raises(FilesystemError, match="does not exist"):
            materialize_directory(tmp_path / "missing", tmp_path / "dest")

    def test_source_is_file(self, tmp_path):
        source = tmp_path / "file"
        source.write_text("x")

        with pytest.raises(FilesystemError, match="not a directory"):
            materialize_directory(source, tmp_path / "dest")

    def test_errors_belong_to_package_hierarchy(self, tmp_path):
        with pytest.raises(GitopsKitError):
            materialize_directory(tmp_path / "missing", tmp_path / "dest")
