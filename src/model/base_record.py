"""Minimal record base: fillable attributes and rule-based validation."""

from __future__ import annotations

import re
from typing import Any, ClassVar

from errors import ValidationError

# A rule is "required" or ("regex", pattern)
Rule = str | tuple[str, str]


class BaseRecord:
    """Base for records edited through forms.

    Subclasses declare FILLABLE attribute names and a validation_rules
    mapping of attribute -> list of rules.
    """

    FILLABLE: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        self.exists = False
        self.validation_rules: dict[str, list[Rule]] = {}
        self.validation_messages: dict[str, str] = {}

    def is_new_record(self) -> bool:
        return not self.exists

    def fill(self, attributes: dict[str, Any]) -> None:
        """Assign fillable attributes, ignoring everything else."""
        for name, value in attributes.items():
            if name in self.FILLABLE:
                setattr(self, name, value)

    def validate(self) -> None:
        """Check every attribute against its rules.

        Raises:
            ValidationError: For the first failing rule.
        """
        for field_name, rules in self.validation_rules.items():
            value = getattr(self, field_name, None)
            for rule in rules:
                self._check_rule(field_name, value, rule)

    def _check_rule(self, field_name: str, value: Any, rule: Rule) -> None:
        if rule == "required":
            if value is None or (isinstance(value, (str, list, dict, set)) and not value):
                raise self._error(field_name, "required", f"The {field_name} field is required.")
            return

        kind, pattern = rule
        if kind == "regex":
            # Empty values are only rejected by "required"
            if value in (None, ""):
                return
            if not isinstance(value, str) or not re.fullmatch(pattern, value):
                raise self._error(field_name, "regex", f"The {field_name} format is invalid.")
            return

        raise ValueError(f"Unknown validation rule: {rule!r}")

    def _error(self, field_name: str, rule_name: str, default: str) -> ValidationError:
        message = self.validation_messages.get(f"{field_name}.{rule_name}", default)
        return ValidationError(field_name, message)
