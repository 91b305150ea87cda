"""Controller record: discovers, edits and saves a controller's behaviors.

A record starts NEW. load() scans an existing controller and reads the
configuration of every behavior it can configure (LOADED). save() on a NEW
record generates the controller from templates; on a loaded record it
re-scans the source and writes each edited configuration back (SAVED).

The source file is the single source of truth for which behaviors exist and
which files configure them. save() never trusts the in-memory map for that:
behaviors removed from the source since load() are silently dropped.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from behaviors import BehaviorRegistry, default_registry
from config_store import ConfigStore
from constants import CONTROLLER_EXTENSION
from errors import (
    ConfigNotFound,
    ControllerFileNotFound,
    InvalidConfigFileName,
    InvalidDocument,
    InvalidName,
    ValidationError,
)
from model.base_record import BaseRecord
from model.plugin_code import PluginCode
from scanner import SourceScanner
from settings import Settings
from validators import CLASS_NAME_PATTERN, require_valid_file_name, trim_extension

if TYPE_CHECKING:
    from scaffold.generator import ControllerGenerator

log = logging.getLogger(__name__)


class RecordState(Enum):
    NEW = "new"
    LOADED = "loaded"
    SAVED = "saved"


class ControllerRecord(BaseRecord):
    """A plugin controller and the configuration of its behaviors."""

    FILLABLE = (
        "controller",
        "behaviors",
        "base_model_class_name",
        "permissions",
        "menu_item",
    )

    def __init__(
        self,
        plugin: PluginCode,
        settings: Settings | None = None,
        registry: BehaviorRegistry | None = None,
        store: ConfigStore | None = None,
        generator: ControllerGenerator | None = None,
    ):
        """Initialize an empty (NEW) record.

        Args:
            plugin: Plugin the controller belongs to
            settings: Plugin location and write settings
            registry: Behavior catalog (defaults to the built-in one)
            store: Configuration store (defaults to one for this plugin)
            generator: Controller generator used by save() on new records
        """
        super().__init__()
        self.plugin = plugin
        self.settings = settings or Settings()
        self.registry = registry or default_registry()
        self.store = store or ConfigStore(
            self.controllers_directory,
            indent=self.settings.yaml_indent,
            file_mode=self.settings.file_mode,
            directory_mode=self.settings.directory_mode,
        )
        self._generator = generator

        self.controller = ""
        # NEW records: list of chosen behavior identifiers
        # Loaded records: identifier -> configuration document
        self.behaviors: dict[str, Any] | list[str] = {}
        self.base_model_class_name = ""
        self.permissions: list[str] = []
        self.menu_item = ""
        self.state = RecordState.NEW

        self.validation_rules = {"controller": [("regex", CLASS_NAME_PATTERN.pattern)]}

    @property
    def controllers_directory(self) -> Path:
        return self.plugin.controllers_directory(self.settings.plugins_dir)

    def get_controller_file_path(self, files_directory: bool = False) -> Path:
        """Path of the controller source, or of its configuration directory."""
        if files_directory:
            return self.controllers_directory / self.controller.lower()
        return self.controllers_directory / f"{self.controller}.{CONTROLLER_EXTENSION}"

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    def load(self, controller: str) -> None:
        """Scan a controller and load its behavior configurations.

        Raises:
            InvalidName: If the controller name is unsafe.
            ControllerFileNotFound: If the source file does not exist.
            NoBehaviorsDeclared: If the controller implements no behaviors.
            InvalidDocument: If a configuration file is not valid YAML.
        """
        require_valid_file_name(controller, CONTROLLER_EXTENSION, field="controller")
        self.controller = trim_extension(controller, CONTROLLER_EXTENSION)

        scanner = self._scan_source()
        behaviors: dict[str, Any] = {}
        for behavior, file_name in self._configured_behaviors(scanner):
            try:
                behaviors[behavior] = self.store.load(self.controller, file_name, behavior)
            except (ConfigNotFound, InvalidConfigFileName) as e:
                log.info(f"Skipping {behavior} on {self.controller}: {e}")

        self.behaviors = behaviors
        self.exists = True
        self.state = RecordState.LOADED
        log.debug(f"Loaded controller {self.controller} with {len(behaviors)} configured behavior(s)")

    # -------------------------------------------------------------------------
    # Fill / save
    # -------------------------------------------------------------------------

    def fill(self, attributes: dict[str, Any]) -> None:
        """Assign form data.

        Configurations of an existing record may arrive JSON-encoded; they
        are decoded into documents.
        """
        super().fill(attributes)

        if self.is_new_record() or not isinstance(self.behaviors, dict):
            return

        for behavior, configuration in list(self.behaviors.items()):
            if isinstance(configuration, str):
                try:
                    self.behaviors[behavior] = json.loads(configuration)
                except json.JSONDecodeError as e:
                    raise InvalidDocument(f"Invalid configuration data for behavior {behavior}") from e

    def save(self) -> list[Path]:
        """Generate a new controller or write edited configurations.

        Returns:
            Paths of the files written

        Raises:
            InvalidName: If the controller name fails validation.
            ValidationError: If other record data is invalid.
            ControllerFileNotFound: If an existing controller disappeared.
            NoBehaviorsDeclared: If the controller no longer declares behaviors.
            BuilderError: Any store or generator failure.
        """
        if self.is_new_record():
            written = self._generate_controller()
        else:
            written = self._save_controller()

        self.exists = True
        self.state = RecordState.SAVED
        return written

    def _generate_controller(self) -> list[Path]:
        self.validation_messages = {
            "controller.regex": "Controller name should start with a capital letter "
                                "and contain only letters, digits and underscores.",
        }
        self.validation_rules["controller"] = ["required", *self.validation_rules["controller"]]
        try:
            self.validate()
        finally:
            self.validation_rules["controller"].remove("required")

        written = self.generator.generate()
        # From here on the record holds documents, as after load()
        self.behaviors = dict(self.generator.generated)
        return written

    def _save_controller(self) -> list[Path]:
        self.validate()
        scanner = self._scan_source()

        if not isinstance(self.behaviors, dict):
            raise ValidationError("behaviors", "The behaviors data should be a mapping.")

        written = []
        for behavior, file_name in self._configured_behaviors(scanner):
            if behavior not in self.behaviors:
                continue
            written.append(
                self.store.save(self.controller, file_name, behavior, self.behaviors[behavior])
            )
        return written

    def _error(self, field_name: str, rule_name: str, default: str) -> ValidationError:
        error = super()._error(field_name, rule_name, default)
        if field_name == "controller":
            return InvalidName(field_name, str(error))
        return error

    @property
    def generator(self) -> ControllerGenerator:
        if self._generator is None:
            from scaffold.generator import ControllerGenerator

            self._generator = ControllerGenerator(self)
        return self._generator

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _scan_source(self) -> SourceScanner:
        path = self.get_controller_file_path()
        if not path.is_file():
            raise ControllerFileNotFound(f"Controller file {path.name} not found")
        return SourceScanner(path.read_text())

    def _configured_behaviors(self, scanner: SourceScanner) -> list[tuple[str, str]]:
        """(behavior, config file name) for each configurable behavior.

        Unknown behaviors and behaviors without a literal config file
        reference are skipped.
        """
        result = []
        for behavior in scanner.list_behaviors():
            info = self.registry.get_behavior_info(behavior)
            if info is None or not info.config_property_name:
                log.debug(f"Skipping unsupported behavior {behavior}")
                continue

            file_name = scanner.get_string_property_value(info.config_property_name)
            if not file_name:
                log.debug(f"Behavior {behavior} has no ${info.config_property_name} value")
                continue

            result.append((behavior, file_name))
        return result

    # -------------------------------------------------------------------------
    # Options for editors
    # -------------------------------------------------------------------------

    def behavior_options(self) -> dict[str, tuple[str, str]]:
        """Behaviors selectable for a new controller: id -> (name, description)."""
        return {
            info.identifier: (info.name, info.description)
            for info in self.registry.selectable_behaviors()
        }


def list_plugin_controllers(plugin: PluginCode, settings: Settings | None = None) -> list[str]:
    """Return controller names found in a plugin's controllers directory."""
    settings = settings or Settings()
    directory = plugin.controllers_directory(settings.plugins_dir)
    if not directory.is_dir():
        return []

    suffix = f".{CONTROLLER_EXTENSION}"
    return sorted(
        path.name[: -len(suffix)]
        for path in directory.iterdir()
        if path.is_file() and path.name.endswith(suffix) and path.name != suffix
    )


def get_plugin_registry_data(
    plugin_code: str, subtype: str | None = None, settings: Settings | None = None
) -> dict[str, str]:
    """Back-end URLs of a plugin's controllers, as {url: url}.

    subtype is accepted for registry-provider compatibility and unused.
    """
    plugin = PluginCode.parse(plugin_code)
    url_base = plugin.to_url()

    result = {}
    for controller in list_plugin_controllers(plugin, settings):
        url = f"{url_base}/{controller.lower()}"
        result[url] = url
    return result
