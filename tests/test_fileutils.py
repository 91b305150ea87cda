"""Tests for file utilities."""

import stat
from unittest.mock import patch

import pytest

from fileutils import ensure_directory, normalize_permissions, write_file_atomic


class TestWriteFileAtomic:
    """Test write_file_atomic function."""

    def test_creates_file_with_content(self, tmp_path):
        """File is created with correct content."""
        path = tmp_path / "Posts.php"
        write_file_atomic(path, "<?php\n", 0o644)
        assert path.read_text() == "<?php\n"

    def test_raises_if_file_exists(self, tmp_path):
        """Raises FileExistsError and leaves the existing file alone."""
        path = tmp_path / "Posts.php"
        path.write_text("existing")
        with pytest.raises(FileExistsError):
            write_file_atomic(path, "new content", 0o644)
        assert path.read_text() == "existing"

    def test_permissions_set_atomically(self, tmp_path):
        """Permissions are set at creation time, not after."""
        path = tmp_path / "config_form.yaml"
        write_file_atomic(path, "content", 0o400)
        assert path.stat().st_mode & 0o777 == 0o400

    def test_handles_unicode_content(self, tmp_path):
        """Handles unicode content correctly."""
        path = tmp_path / "config_list.yaml"
        content = "title: Articles été 世界\n"
        write_file_atomic(path, content, 0o644)
        assert path.read_text(encoding="utf-8") == content


class TestEnsureDirectory:
    """Test ensure_directory function."""

    def test_creates_nested_directories(self, tmp_path):
        path = tmp_path / "acme" / "blog" / "controllers"
        ensure_directory(path, 0o777)
        assert path.is_dir()

    def test_existing_directory(self, tmp_path):
        ensure_directory(tmp_path, 0o777)
        assert tmp_path.is_dir()

    def test_file_in_the_way(self, tmp_path):
        (tmp_path / "posts").write_text("")
        with pytest.raises(OSError):
            ensure_directory(tmp_path / "posts", 0o777)


class TestNormalizePermissions:
    """Test normalize_permissions function."""

    def test_applies_mode(self, tmp_path):
        path = tmp_path / "config_list.yaml"
        path.write_text("")
        assert normalize_permissions(path, 0o640) is True
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_none_skips(self, tmp_path):
        path = tmp_path / "config_list.yaml"
        path.write_text("")
        with patch("fileutils.os.chmod") as chmod:
            assert normalize_permissions(path, None) is True
        chmod.assert_not_called()

    def test_failure_is_reported_not_raised(self, tmp_path):
        with patch("fileutils.os.chmod", side_effect=PermissionError("denied")):
            assert normalize_permissions(tmp_path / "config_list.yaml", 0o644) is False
