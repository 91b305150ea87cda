"""Runtime settings for the controller builder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from constants import DEFAULT_DIRECTORY_MODE, DEFAULT_FILE_MODE, DEFAULT_YAML_INDENT
from errors import SettingsError

ENV_PLUGINS_DIR = "BUILDER_PLUGINS_DIR"
ENV_YAML_INDENT = "BUILDER_YAML_INDENT"
ENV_FILE_MODE = "BUILDER_FILE_MODE"


@dataclass
class Settings:
    """Where plugins live and how configuration files are written."""

    plugins_dir: Path = field(default_factory=lambda: Path.cwd() / "plugins")
    yaml_indent: int = DEFAULT_YAML_INDENT
    file_mode: int | None = DEFAULT_FILE_MODE
    directory_mode: int = DEFAULT_DIRECTORY_MODE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from BUILDER_* environment variables.

        Raises:
            SettingsError: If a variable is set but malformed.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        plugins_dir = env.get(ENV_PLUGINS_DIR)
        if plugins_dir:
            settings.plugins_dir = Path(plugins_dir).expanduser()

        indent = env.get(ENV_YAML_INDENT)
        if indent:
            settings.yaml_indent = _parse_indent(indent)

        file_mode = env.get(ENV_FILE_MODE)
        if file_mode:
            try:
                settings.file_mode = int(file_mode, 8)
            except ValueError:
                raise SettingsError(
                    f"{ENV_FILE_MODE} must be an octal mode such as 644, got '{file_mode}'"
                ) from None

        return settings


def _parse_indent(value: str) -> int:
    # PyYAML only honours indents between 2 and 9
    if not value.strip().isdigit() or not (2 <= int(value) <= 9):
        raise SettingsError(f"{ENV_YAML_INDENT} must be a number from 2 to 9, got '{value}'")
    return int(value)
