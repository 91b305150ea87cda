"""Error types for the controller builder.

Every error carries a human-readable message naming the offending file or
field. Callers show ``str(error)`` to the user; nothing else is exposed.
"""

from __future__ import annotations


class BuilderError(Exception):
    """Base class for all builder errors."""


class SettingsError(BuilderError):
    """Raised when environment-provided settings are malformed."""


class ValidationError(BuilderError):
    """Raised when a record field fails validation."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidName(ValidationError):
    """Raised when a file or identifier name fails the charset/extension rule."""


class ControllerFileNotFound(BuilderError):
    """Raised when the controller source file does not exist."""


class ControllerExists(BuilderError):
    """Raised when generation would overwrite an existing file."""


class NoBehaviorsDeclared(BuilderError):
    """Raised when a controller declares no behaviors."""


class InvalidConfigFileName(BuilderError):
    """Raised when a behavior configuration file name is unsafe."""


class ConfigFileNotYamlLike(InvalidConfigFileName):
    """Raised when a configuration file name has a non-YAML extension."""


class ConfigNotFound(BuilderError):
    """Raised when a behavior configuration file does not exist."""


class InvalidDocument(BuilderError):
    """Raised when configuration content cannot be parsed."""


class DirectoryCreateFailed(BuilderError):
    """Raised when a configuration directory cannot be created."""


class WriteFailed(BuilderError):
    """Raised when a file cannot be written."""
