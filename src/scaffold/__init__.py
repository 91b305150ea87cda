"""Controller scaffolding from templates."""

from scaffold.generator import ControllerGenerator

__all__ = ["ControllerGenerator"]
