"""Shared constants for the controller builder."""

# Native extension of controller source files
CONTROLLER_EXTENSION = "php"

# Extension of behavior configuration documents
CONFIG_EXTENSION = "yaml"

# Class-level property listing a controller's behaviors
IMPLEMENT_PROPERTY = "implement"

# Behavior whose configuration uses the import./export. flat namespace
IMPORT_EXPORT_BEHAVIOR = "Backend\\Behaviors\\ImportExportController"

# Top-level sections flattened for the import/export behavior
IMPORT_EXPORT_SECTIONS = ("import", "export")

DEFAULT_YAML_INDENT = 4
DEFAULT_FILE_MODE = 0o644
DEFAULT_DIRECTORY_MODE = 0o777
