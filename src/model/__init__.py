"""Model classes for the controller builder."""

from model.base_record import BaseRecord
from model.plugin_code import PluginCode
from model.controller_record import (
    ControllerRecord,
    RecordState,
    get_plugin_registry_data,
    list_plugin_controllers,
)

__all__ = [
    "BaseRecord",
    "PluginCode",
    "ControllerRecord",
    "RecordState",
    "get_plugin_registry_data",
    "list_plugin_controllers",
]
