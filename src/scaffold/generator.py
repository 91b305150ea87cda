"""Controller generator.

Generates a controller source file and default behavior configuration files
for a new ControllerRecord. Never overwrites: if any target file exists the
generation is refused before anything is written.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from behaviors import BehaviorInfo, is_import_export
from config_store import flatten_import_export, parse_document
from constants import DEFAULT_FILE_MODE
from errors import ControllerExists, DirectoryCreateFailed, ValidationError, WriteFailed
from fileutils import ensure_directory, write_file_atomic

if TYPE_CHECKING:
    from model.controller_record import ControllerRecord

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
CONTROLLER_TEMPLATE = "controller.php.j2"

_MODEL_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def php_string(value: object) -> str:
    """Render value as a single-quoted PHP string literal."""
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def yaml_string(value: object) -> str:
    """Render value as a YAML scalar that loads back as the same string."""
    text = str(value)
    try:
        if text and yaml.safe_load(text) == text:
            return text
    except yaml.YAMLError:
        pass
    return json.dumps(text)


def create_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["php_string"] = php_string
    env.filters["yaml_string"] = yaml_string
    return env


@dataclass
class RenderedFile:
    """A generated file waiting to be written."""

    path: Path
    content: str
    description: str
    behavior: str = ""
    document: Any = None


class ControllerGenerator:
    """Renders and writes a new controller for a ControllerRecord."""

    def __init__(self, record: ControllerRecord, env: Environment | None = None):
        self.record = record
        self.env = env or create_environment()
        # Configurations written by the last generate(), keyed by behavior
        self.generated: dict[str, Any] = {}

    def generate(self) -> list[Path]:
        """Write the controller source and its configuration files.

        Returns:
            Paths of the written files, source first

        Raises:
            ValidationError: If the chosen behaviors or model are invalid.
            ControllerExists: If any target file already exists.
            InvalidDocument: If a rendered configuration is not valid YAML.
            DirectoryCreateFailed: If a directory cannot be created.
            WriteFailed: If a file cannot be written.
        """
        behaviors = self._selected_behaviors()
        files = self.render(behaviors)

        for rendered in files:
            if rendered.path.exists():
                raise ControllerExists(f"File {rendered.path.name} already exists")

        written = []
        for rendered in files:
            self._write(rendered)
            written.append(rendered.path)
        self.generated = self.configurations(files)
        log.info(f"Generated controller {self.record.controller} ({len(written)} file(s))")
        return written

    def render(self, behaviors: list[BehaviorInfo]) -> list[RenderedFile]:
        """Render all files for the given behaviors without writing them."""
        context = self._context(behaviors)
        record = self.record

        files = [RenderedFile(
            path=record.get_controller_file_path(),
            content=self.env.get_template(CONTROLLER_TEMPLATE).render(context),
            description="controller",
        )]

        config_dir = record.get_controller_file_path(files_directory=True)
        for info in behaviors:
            if not info.config_property_name:
                continue
            content = self.env.get_template(info.config_template).render(context)
            # Generated defaults must load back through the config store
            document = parse_document(content, info.config_file_name)
            files.append(RenderedFile(
                path=config_dir / info.config_file_name,
                content=content,
                description=f"{info.short_name} configuration",
                behavior=info.identifier,
                document=document,
            ))
        return files

    @staticmethod
    def configurations(files: list[RenderedFile]) -> dict[str, Any]:
        """Behavior configurations of rendered files, in their loaded form."""
        result = {}
        for rendered in files:
            if not rendered.behavior:
                continue
            document = rendered.document
            if is_import_export(rendered.behavior) and isinstance(document, dict):
                document = flatten_import_export(document)
            result[rendered.behavior] = document
        return result

    def _selected_behaviors(self) -> list[BehaviorInfo]:
        record = self.record
        chosen = list(record.behaviors or [])
        if not chosen:
            raise ValidationError("behaviors", "Select at least one behavior for the controller.")

        result: list[BehaviorInfo] = []
        for identifier in chosen:
            info = record.registry.get_behavior_info(identifier)
            if info is None:
                raise ValidationError("behaviors", f"Unknown behavior: {identifier}")
            if info.config_property_name and not info.config_template:
                raise ValidationError("behaviors", f"Behavior {info.name} has no configuration template")
            if info not in result:
                result.append(info)

        model = record.base_model_class_name
        needs_model = [info.name for info in result if info.requires_model]
        if needs_model and not model:
            raise ValidationError(
                "base_model_class_name",
                f"The {needs_model[0]} behavior requires a base model class to be selected.",
            )
        if model and not _MODEL_NAME.fullmatch(model):
            raise ValidationError("base_model_class_name", f"Invalid model class name: '{model}'")
        return result

    def _context(self, behaviors: list[BehaviorInfo]) -> dict:
        record = self.record
        plugin = record.plugin
        model = record.base_model_class_name or ""

        menu_context = []
        if record.menu_item:
            menu_context = [plugin.to_code(), *record.menu_item.split("||", 1)]

        return {
            "namespace": plugin.to_namespace(),
            "plugin_path": plugin.to_plugin_path(),
            "controller": record.controller,
            "controller_url": f"{plugin.to_url()}/{record.controller.lower()}",
            "behaviors": behaviors,
            "has_form": any(info.config_property_name == "formConfig" for info in behaviors),
            "model_name": model,
            "model_directory": model.lower(),
            "model_class": f"{plugin.to_namespace()}\\Models\\{model}" if model else "",
            "permissions": list(record.permissions or []),
            "menu_context": menu_context,
        }

    def _write(self, rendered: RenderedFile) -> None:
        settings = self.record.settings
        try:
            ensure_directory(rendered.path.parent, settings.directory_mode)
        except OSError as e:
            raise DirectoryCreateFailed(f"Error creating directory {rendered.path.parent}: {e}") from e

        mode = settings.file_mode if settings.file_mode is not None else DEFAULT_FILE_MODE
        try:
            write_file_atomic(rendered.path, rendered.content, mode)
        except FileExistsError:
            raise ControllerExists(f"File {rendered.path.name} already exists") from None
        except OSError as e:
            raise WriteFailed(f"Error saving file {rendered.path}: {e}") from e
        log.debug(f"Wrote {rendered.description} to {rendered.path}")
