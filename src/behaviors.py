"""Catalog of controller behaviors the builder knows how to configure."""

from __future__ import annotations

from dataclasses import dataclass, replace

from constants import IMPORT_EXPORT_BEHAVIOR
from scanner import normalize_class_name


@dataclass(frozen=True)
class BehaviorInfo:
    """Display metadata and configuration wiring for one behavior."""

    identifier: str
    name: str
    description: str
    config_property_name: str = ""  # Empty: behavior takes no config file
    config_file_name: str = ""
    config_template: str = ""  # Template used when generating a controller
    requires_model: bool = False

    @property
    def short_name(self) -> str:
        """Class name without its namespace."""
        return self.identifier.rsplit("\\", 1)[-1]


DEFAULT_BEHAVIORS = [
    BehaviorInfo(
        identifier="Backend\\Behaviors\\FormController",
        name="Form Controller",
        description="Adds form functionality to a back-end page. "
                    "Provides three pages called Create, Update and Preview.",
        config_property_name="formConfig",
        config_file_name="config_form.yaml",
        config_template="config_form.yaml.j2",
        requires_model=True,
    ),
    BehaviorInfo(
        identifier="Backend\\Behaviors\\ListController",
        name="List Controller",
        description="Provides sortable and searchable lists with optional links "
                    "on its records. Creates the index page.",
        config_property_name="listConfig",
        config_file_name="config_list.yaml",
        config_template="config_list.yaml.j2",
        requires_model=True,
    ),
    BehaviorInfo(
        identifier="Backend\\Behaviors\\ReorderController",
        name="Reorder Controller",
        description="Provides features for sorting and reordering records.",
        config_property_name="reorderConfig",
        config_file_name="config_reorder.yaml",
        config_template="config_reorder.yaml.j2",
        requires_model=True,
    ),
    BehaviorInfo(
        identifier="Backend\\Behaviors\\RelationController",
        name="Relation Controller",
        description="Manages related records of a model on its form.",
        config_property_name="relationConfig",
        config_file_name="config_relation.yaml",
        config_template="config_relation.yaml.j2",
    ),
    BehaviorInfo(
        identifier=IMPORT_EXPORT_BEHAVIOR,
        name="Import Export Controller",
        description="Adds features for importing and exporting data.",
        config_property_name="importExportConfig",
        config_file_name="config_import_export.yaml",
        config_template="config_import_export.yaml.j2",
        requires_model=True,
    ),
]


class BehaviorRegistry:
    """Maps behavior identifiers to their BehaviorInfo.

    Identifiers are matched case-insensitively, with or without a leading
    backslash, in backslash or dotted notation.
    """

    def __init__(self, behaviors: list[BehaviorInfo] | None = None):
        self._behaviors: dict[str, BehaviorInfo] = {}
        for info in DEFAULT_BEHAVIORS if behaviors is None else behaviors:
            self.register(info)

    @staticmethod
    def _key(identifier: str) -> str:
        return normalize_class_name(identifier).lower()

    def register(self, info: BehaviorInfo) -> None:
        """Add a behavior, replacing any entry with the same identifier."""
        normalized = normalize_class_name(info.identifier)
        if normalized != info.identifier:
            info = replace(info, identifier=normalized)
        self._behaviors[self._key(normalized)] = info

    def get_behavior_info(self, identifier: str) -> BehaviorInfo | None:
        return self._behaviors.get(self._key(identifier))

    def list_behaviors(self) -> list[BehaviorInfo]:
        """All registered behaviors in registration order."""
        return list(self._behaviors.values())

    def selectable_behaviors(self) -> list[BehaviorInfo]:
        """Behaviors offered when creating a controller.

        Import/export is configured through its own tool and left out.
        """
        excluded = self._key(IMPORT_EXPORT_BEHAVIOR)
        return [info for key, info in self._behaviors.items() if key != excluded]


_default_registry: BehaviorRegistry | None = None


def default_registry() -> BehaviorRegistry:
    """Process-wide registry populated with the built-in behaviors."""
    global _default_registry
    if _default_registry is None:
        _default_registry = BehaviorRegistry()
    return _default_registry


def is_import_export(identifier: str) -> bool:
    return normalize_class_name(identifier).lower() == IMPORT_EXPORT_BEHAVIOR.lower()
