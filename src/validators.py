"""Validation functions for user-supplied names.

Every function that builds a filesystem path from user input runs the name
through validate_file_name() first.
"""

import re

from errors import InvalidName

FILE_NAME_PATTERN = re.compile(r"^[a-z0-9.\-_]+$", re.IGNORECASE | re.ASCII)
CLASS_NAME_PATTERN = re.compile(r"^[A-Z]+[a-zA-Z0-9_]+$")


def file_extension(name: str) -> str:
    """Return the text after the last dot, or "" when there is none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def file_stem(name: str) -> str:
    """Return the text before the last dot, or the whole name."""
    return name.rsplit(".", 1)[0]


def validate_file_name(name: str, allowed_extension: str) -> bool:
    """Check a file name against the safe charset and extension rule.

    Valid names:
    - Letters, digits, dot, hyphen, underscore only
    - No ".." sequence
    - Non-empty name before the extension (".php" and "." are rejected)
    - Extension, if any, equal to allowed_extension (case-sensitive)

    Args:
        name: Name supplied by the user or read from source
        allowed_extension: The only extension accepted, without the dot

    Returns:
        True if the name is safe to join onto a directory path
    """
    if not name or not FILE_NAME_PATTERN.fullmatch(name):
        return False

    if ".." in name or not file_stem(name):
        return False

    extension = file_extension(name)
    if extension and extension != allowed_extension:
        return False

    return True


def require_valid_file_name(name: str, allowed_extension: str, field: str = "name") -> str:
    """Return name unchanged, or raise InvalidName."""
    if not validate_file_name(name, allowed_extension):
        raise InvalidName(field, f"Invalid file name: '{name}'")
    return name


def trim_extension(name: str, extension: str) -> str:
    """Strip a trailing .extension from name if present."""
    suffix = f".{extension}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name


def validate_class_name(value: str) -> bool:
    """Check a controller class name, e.g. "Posts" or "BlogPosts"."""
    return bool(CLASS_NAME_PATTERN.fullmatch(value or ""))
