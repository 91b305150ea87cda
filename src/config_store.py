"""Behavior configuration storage.

Configuration documents live in a per-controller directory next to the
controller source:

    <plugin>/controllers/<lowercase controller>/<file name>.yaml

The import/export behavior keeps two sections (import:, export:) that are
edited as one flat namespace ("import.title", "export.list", ...).
flatten_import_export() and nest_import_export() convert between the two
forms and are inverses of each other.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from behaviors import is_import_export
from constants import (
    CONFIG_EXTENSION,
    DEFAULT_DIRECTORY_MODE,
    DEFAULT_FILE_MODE,
    DEFAULT_YAML_INDENT,
    IMPORT_EXPORT_SECTIONS,
)
from errors import (
    ConfigFileNotYamlLike,
    ConfigNotFound,
    DirectoryCreateFailed,
    InvalidConfigFileName,
    InvalidDocument,
    WriteFailed,
)
from fileutils import ensure_directory, normalize_permissions
from validators import FILE_NAME_PATTERN, file_extension, file_stem, validate_file_name

log = logging.getLogger(__name__)


def flatten_import_export(document: dict) -> dict:
    """Replace import:/export: mappings with "import.<key>" entries.

    Flat keys take the position of the section they came from. Sections
    whose value is not a mapping are left alone.
    """
    result: dict = {}
    for key, value in document.items():
        if key in IMPORT_EXPORT_SECTIONS and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                result[f"{key}.{sub_key}"] = sub_value
        else:
            result[key] = value
    return result


def nest_import_export(document: dict) -> dict:
    """Move "import.<key>" entries back under an import: mapping.

    Only the first dot separates the section from the key, so
    "export.list.columns" becomes export: {"list.columns": ...}.
    """
    result: dict = {}
    for key, value in document.items():
        section, dot, sub_key = key.partition(".") if isinstance(key, str) else (key, "", "")
        if dot and section in IMPORT_EXPORT_SECTIONS:
            nested = result.get(section)
            if not isinstance(nested, dict):
                if section in result:
                    log.warning(f"Replacing non-mapping '{section}' value with flattened keys")
                nested = result[section] = {}
            nested[sub_key] = value
        elif key in IMPORT_EXPORT_SECTIONS and isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key].update(value)
        else:
            result[key] = value
    return result


def dump_document(document: Any, indent: int = DEFAULT_YAML_INDENT) -> str:
    """Serialize a document to block-style YAML.

    Key order is preserved and long scalars are never wrapped. None and
    empty containers produce an empty string.
    """
    if document is None or (isinstance(document, (dict, list)) and not document):
        return ""
    return yaml.safe_dump(
        document,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        indent=indent,
        width=float("inf"),
    )


def parse_document(content: str, file_name: str) -> dict | list:
    """Parse YAML content into a mapping or list.

    Raises:
        InvalidDocument: If the content is not YAML or is a bare scalar.
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        log.debug(f"YAML error in {file_name}: {e}")
        raise InvalidDocument(f"Invalid YAML configuration in file {file_name}") from e

    if document is None:
        return {}
    if not isinstance(document, (dict, list)):
        raise InvalidDocument(f"Invalid YAML configuration in file {file_name}")
    return document


class ConfigStore:
    """Loads and saves behavior configuration files for controllers."""

    def __init__(
        self,
        controllers_dir: Path,
        indent: int = DEFAULT_YAML_INDENT,
        file_mode: int | None = DEFAULT_FILE_MODE,
        directory_mode: int = DEFAULT_DIRECTORY_MODE,
    ):
        """Initialize the store.

        Args:
            controllers_dir: The plugin's controllers directory
            indent: YAML indentation width for saved documents
            file_mode: Permissions applied after each write (None to skip)
            directory_mode: Mode for created configuration directories
        """
        self.controllers_dir = controllers_dir
        self.indent = indent
        self.file_mode = file_mode
        self.directory_mode = directory_mode

    def controller_directory(self, controller: str) -> Path:
        """Private configuration directory of a controller."""
        return self.controllers_dir / controller.lower()

    def config_path(self, controller: str, file_name: str) -> Path:
        return self.controller_directory(controller) / file_name

    def load(self, controller: str, file_name: str, behavior: str) -> dict | list:
        """Load a behavior's configuration document.

        Raises:
            InvalidConfigFileName: If file_name is unsafe or not YAML.
            ConfigNotFound: If the file does not exist.
            InvalidDocument: If the file is not valid YAML.
        """
        if not validate_file_name(file_name, CONFIG_EXTENSION):
            raise InvalidConfigFileName(
                f"Invalid configuration file name '{file_name}' for behavior {behavior}"
            )

        path = self.config_path(controller, file_name)
        if not path.is_file():
            raise ConfigNotFound(f"Configuration file {file_name} does not exist")

        try:
            content = path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidDocument(f"Cannot read configuration file {file_name}: {e}") from e

        document = parse_document(content, file_name)
        if is_import_export(behavior) and isinstance(document, dict):
            document = flatten_import_export(document)
        return document

    def save(self, controller: str, file_name: str, behavior: str, document: Any) -> Path:
        """Write a behavior's configuration document.

        The caller's document is not modified.

        Returns:
            Path of the written file

        Raises:
            InvalidConfigFileName: If file_name contains unsafe characters.
            ConfigFileNotYamlLike: If file_name has a non-YAML extension.
            DirectoryCreateFailed: If the directory cannot be created.
            WriteFailed: If the file cannot be written.
        """
        if (
            not file_name
            or not FILE_NAME_PATTERN.fullmatch(file_name)
            or ".." in file_name
            or not file_stem(file_name)
        ):
            raise InvalidConfigFileName(
                f"Invalid configuration file name '{file_name}' for behavior {behavior}"
            )
        extension = file_extension(file_name)
        if extension and extension != CONFIG_EXTENSION:
            raise ConfigFileNotYamlLike(
                f"Configuration file {file_name} for behavior {behavior} is not a YAML file"
            )

        path = self.config_path(controller, file_name)
        try:
            ensure_directory(path.parent, self.directory_mode)
        except OSError as e:
            raise DirectoryCreateFailed(f"Error creating directory {path.parent}: {e}") from e

        if is_import_export(behavior) and isinstance(document, dict):
            document = nest_import_export(document)

        try:
            content = dump_document(document, self.indent)
        except yaml.YAMLError as e:
            raise InvalidDocument(f"Configuration for {file_name} cannot be written as YAML") from e

        try:
            path.write_text(content)
        except OSError as e:
            raise WriteFailed(f"Error saving file {path}: {e}") from e

        normalize_permissions(path, self.file_mode)
        log.info(f"Saved {behavior} configuration to {path}")
        return path
