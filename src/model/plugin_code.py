"""Plugin code model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from errors import InvalidName

_SEGMENT = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class PluginCode:
    """An Author.Plugin code, e.g. "Acme.Blog"."""

    author: str
    plugin: str

    @classmethod
    def parse(cls, code: str) -> "PluginCode":
        """Parse "Author.Plugin".

        Raises:
            InvalidName: If the code is not two identifier segments.
        """
        parts = code.strip().split(".")
        if len(parts) != 2 or not all(_SEGMENT.fullmatch(p) for p in parts):
            raise InvalidName("plugin", f"Invalid plugin code: '{code}'")
        return cls(author=parts[0], plugin=parts[1])

    def __str__(self) -> str:
        return self.to_code()

    def to_code(self) -> str:
        return f"{self.author}.{self.plugin}"

    def to_url(self) -> str:
        """Back-end URL prefix, e.g. "acme/blog"."""
        return f"{self.author.lower()}/{self.plugin.lower()}"

    def to_namespace(self) -> str:
        """PHP namespace, e.g. "Acme\\Blog"."""
        return f"{self.author}\\{self.plugin}"

    def to_plugin_path(self) -> str:
        """Plugin path relative to the plugins directory, e.g. "acme/blog"."""
        return self.to_url()

    def to_directory_path(self, plugins_dir: Path) -> Path:
        return plugins_dir / self.author.lower() / self.plugin.lower()

    def controllers_directory(self, plugins_dir: Path) -> Path:
        return self.to_directory_path(plugins_dir) / "controllers"
