"""Command-line interface for the controller builder."""

import argparse
import logging
import os
import sys
from pathlib import Path

import yaml

from behaviors import default_registry
from config_store import dump_document, parse_document
from errors import BuilderError
from model import ControllerRecord, PluginCode, get_plugin_registry_data, list_plugin_controllers
from settings import Settings

BUILDER_VERSION = "0.3.0"

log = logging.getLogger(__name__)


def _get_log_path() -> Path:
    """Get the log file path using XDG Base Directory spec."""
    xdg_state = os.environ.get("XDG_STATE_HOME", str(Path.home() / ".local" / "state"))
    log_dir = Path(xdg_state) / "builder"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "builder.log"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        filename=str(_get_log_path()),
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        force=True,
    )


def print_error_box(title: str, *lines: str) -> None:
    """Print a formatted error box to stderr.

    Args:
        title: The error title (will be prefixed with "Error: ")
        *lines: Additional lines to print in the box
    """
    print("=" * 60, file=sys.stderr)
    print(f"Error: {title}", file=sys.stderr)
    print("", file=sys.stderr)
    for line in lines:
        print(line, file=sys.stderr)
    print("=" * 60, file=sys.stderr)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="builder",
        description="Manage back-end controller behaviors and their configuration.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {BUILDER_VERSION}")
    parser.add_argument("--plugins-dir", metavar="PATH", type=Path,
                        help="Plugins directory (default: $BUILDER_PLUGINS_DIR or ./plugins)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("behaviors", help="List behaviors available for new controllers")

    list_cmd = commands.add_parser("list", help="List a plugin's controllers")
    list_cmd.add_argument("plugin", help="Plugin code, e.g. Acme.Blog")

    show = commands.add_parser("show", help="Show a controller's behavior configuration")
    show.add_argument("plugin")
    show.add_argument("controller")

    create = commands.add_parser("create", help="Generate a new controller")
    create.add_argument("plugin")
    create.add_argument("controller")
    create.add_argument("-b", "--behavior", dest="behaviors", metavar="ID", action="append",
                        default=[], help="Behavior class (repeatable)")
    create.add_argument("--model", default="", help="Base model class name, e.g. Post")
    create.add_argument("--permission", dest="permissions", metavar="CODE", action="append",
                        default=[], help="Required permission (repeatable)")
    create.add_argument("--menu", default="", metavar="CODE[||SUBCODE]",
                        help="Back-end menu item to activate")

    set_config = commands.add_parser(
        "set-config",
        help="Replace a behavior's configuration",
        description="Replace a behavior's configuration. Saving rewrites the YAML file of every "
                    "configured behavior of the controller, so comments in those files are lost.",
    )
    set_config.add_argument("plugin")
    set_config.add_argument("controller")
    set_config.add_argument("behavior")
    set_config.add_argument("file", nargs="?", help="YAML file to read (default: stdin)")

    registry = commands.add_parser("registry", help="Print back-end URLs of a plugin's controllers")
    registry.add_argument("plugin")

    return parser


def cmd_behaviors(args: argparse.Namespace, settings: Settings) -> int:
    for info in default_registry().selectable_behaviors():
        print(f"{info.identifier}")
        print(f"    {info.name}: {info.description}")
    return 0


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    plugin = PluginCode.parse(args.plugin)
    controllers = list_plugin_controllers(plugin, settings)
    if not controllers:
        print(f"No controllers found in {plugin.controllers_directory(settings.plugins_dir)}")
        return 0
    for controller in controllers:
        print(controller)
    return 0


def cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    record = ControllerRecord(PluginCode.parse(args.plugin), settings)
    record.load(args.controller)
    if not record.behaviors:
        print(f"{record.controller}: no configurable behaviors")
        return 0
    for behavior, configuration in record.behaviors.items():
        print(f"# {behavior}")
        print(dump_document(configuration, settings.yaml_indent) or "# (empty)")
    return 0


def cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    record = ControllerRecord(PluginCode.parse(args.plugin), settings)
    record.fill({
        "controller": args.controller,
        "behaviors": args.behaviors,
        "base_model_class_name": args.model,
        "permissions": args.permissions,
        "menu_item": args.menu,
    })
    for path in record.save():
        print(f"Created {path}")
    return 0


def cmd_set_config(args: argparse.Namespace, settings: Settings) -> int:
    if args.file:
        content = Path(args.file).read_text()
        source_name = Path(args.file).name
    else:
        content = sys.stdin.read()
        source_name = "<stdin>"
    document = parse_document(content, source_name)

    record = ControllerRecord(PluginCode.parse(args.plugin), settings)
    record.load(args.controller)

    info = record.registry.get_behavior_info(args.behavior)
    behavior = info.identifier if info else args.behavior
    if behavior not in record.behaviors:
        print_error_box(
            f"{behavior} is not configured on {record.controller}",
            "Configured behaviors:",
            *(f"  {name}" for name in record.behaviors),
        )
        return 1

    record.behaviors[behavior] = document
    for path in record.save():
        print(f"Saved {path}")
    return 0


def cmd_registry(args: argparse.Namespace, settings: Settings) -> int:
    for url in get_plugin_registry_data(args.plugin, "controllers", settings):
        print(url)
    return 0


COMMANDS = {
    "behaviors": cmd_behaviors,
    "list": cmd_list,
    "show": cmd_show,
    "create": cmd_create,
    "set-config": cmd_set_config,
    "registry": cmd_registry,
}


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.from_env()
        if args.plugins_dir:
            settings.plugins_dir = args.plugins_dir
        log.debug(f"Running '{args.command}' with plugins dir {settings.plugins_dir}")
        return COMMANDS[args.command](args, settings)
    except BuilderError as e:
        log.error(f"{args.command} failed: {e}")
        print_error_box(str(e))
        return 1
    except (OSError, yaml.YAMLError) as e:
        log.exception(f"{args.command} failed")
        print_error_box(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
