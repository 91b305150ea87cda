"""Shared fixtures for controller builder tests."""

from pathlib import Path

import pytest

from model import PluginCode
from settings import Settings

POSTS_SOURCE = """<?php namespace Acme\\Blog\\Controllers;

use BackendMenu;
use Backend\\Classes\\Controller;

/**
 * Posts Backend Controller
 */
class Posts extends Controller
{
    public $implement = [
        \\Backend\\Behaviors\\ListController::class
    ];

    public $listConfig = 'config_list.yaml';

    public function __construct()
    {
        parent::__construct();
        BackendMenu::setContext('Acme.Blog', 'blog', 'posts');
    }
}
"""

ORDERS_SOURCE = """<?php namespace Acme\\Shop\\Controllers;

use Backend\\Classes\\Controller;
use Backend\\Behaviors\\FormController;
use Backend\\Behaviors\\ListController as Lister;

class Orders extends Controller
{
    // Behaviors used by this controller
    public $implement = [
        FormController::class,
        Lister::class,
        'Backend.Behaviors.ImportExportController',
        \\Acme\\Shop\\Behaviors\\AuditTrail::class,
    ];

    public $formConfig = 'config_form.yaml';
    public $listConfig = "config_list.yaml";
    public $importExportConfig = 'config_import_export.yaml';
}
"""


@pytest.fixture
def plugins_dir(tmp_path):
    """Empty plugins directory."""
    path = tmp_path / "plugins"
    path.mkdir()
    return path


@pytest.fixture
def settings(plugins_dir):
    """Settings pointing at the temporary plugins directory."""
    return Settings(plugins_dir=plugins_dir)


@pytest.fixture
def plugin():
    return PluginCode.parse("Acme.Blog")


@pytest.fixture
def controllers_dir(plugins_dir, plugin):
    """The Acme.Blog controllers directory."""
    path = plugin.controllers_directory(plugins_dir)
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_controller(controllers_dir):
    """Write a controller source file and optional configuration files."""

    def _write(name: str, source: str, configs: dict[str, str] | None = None) -> Path:
        path = controllers_dir / f"{name}.php"
        path.write_text(source)
        if configs:
            config_dir = controllers_dir / name.lower()
            config_dir.mkdir(exist_ok=True)
            for file_name, content in configs.items():
                (config_dir / file_name).write_text(content)
        return path

    return _write


@pytest.fixture
def posts_controller(write_controller):
    """Posts controller with a list behavior configured by config_list.yaml."""
    return write_controller(
        "Posts",
        POSTS_SOURCE,
        {"config_list.yaml": "columns:\n    title:\n        label: Title\n"},
    )
