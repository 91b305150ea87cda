"""Tests for name validators."""

import pytest

from errors import InvalidName
from validators import (
    file_extension,
    file_stem,
    require_valid_file_name,
    trim_extension,
    validate_class_name,
    validate_file_name,
)


class TestValidateFileName:
    """Tests for validate_file_name function."""

    @pytest.mark.parametrize("name", [
        "Posts",
        "Posts.php",
        "blog-posts",
        "blog_posts.php",
        "A1",
        "UPPER.php",
        "v1.2.php",
    ])
    def test_valid_names(self, name):
        """Names in the safe charset with the allowed or no extension pass."""
        assert validate_file_name(name, "php") is True

    @pytest.mark.parametrize("name", [
        "",
        "../Posts",
        "..",
        "a..php",
        "posts/edit",
        "posts\\edit",
        "/etc/passwd",
        "Posts php",
        "Posts;rm",
        "Posts$",
        "Pösts",
        "Posts.phtml",
        "Posts.PHP",
        "config.yaml",
        ".php",
        ".",
    ])
    def test_invalid_names(self, name):
        """Separators, traversal, punctuation and other extensions fail."""
        assert validate_file_name(name, "php") is False

    def test_extension_is_case_sensitive(self):
        """Extension must match exactly."""
        assert validate_file_name("config_list.yaml", "yaml") is True
        assert validate_file_name("config_list.YAML", "yaml") is False

    def test_yaml_extension(self):
        """A .yml file is not a .yaml file."""
        assert validate_file_name("config_list.yml", "yaml") is False


class TestRequireValidFileName:
    """Tests for require_valid_file_name function."""

    def test_returns_name(self):
        assert require_valid_file_name("Posts.php", "php") == "Posts.php"

    def test_raises_invalid_name(self):
        """Invalid names raise InvalidName naming the value and field."""
        with pytest.raises(InvalidName) as exc_info:
            require_valid_file_name("../Posts", "php", field="controller")
        assert exc_info.value.field == "controller"
        assert "../Posts" in str(exc_info.value)


class TestHelpers:
    """Tests for extension helpers."""

    def test_file_stem(self):
        assert file_stem("config_list.yaml") == "config_list"
        assert file_stem("v1.2.php") == "v1.2"
        assert file_stem("Posts") == "Posts"
        assert file_stem(".php") == ""

    def test_trim_extension(self):
        assert trim_extension("Posts.php", "php") == "Posts"

    def test_trim_extension_without_extension(self):
        assert trim_extension("Posts", "php") == "Posts"

    def test_trim_extension_other_extension(self):
        """Only the given extension is stripped."""
        assert trim_extension("Posts.yaml", "php") == "Posts.yaml"

    def test_file_extension(self):
        assert file_extension("a.b.yaml") == "yaml"
        assert file_extension("noext") == ""
        assert file_extension("trailing.") == ""


class TestValidateClassName:
    """Tests for validate_class_name function."""

    @pytest.mark.parametrize("name", ["Posts", "BlogPosts", "Posts2", "API_Keys"])
    def test_valid(self, name):
        assert validate_class_name(name) is True

    @pytest.mark.parametrize("name", ["", "posts", "P", "1Posts", "Blog-Posts", "Posts.php"])
    def test_invalid(self, name):
        assert validate_class_name(name) is False
