"""Tests for the command-line interface."""

import io

import pytest

import cli
from cli import _get_log_path, create_parser, main
from conftest import POSTS_SOURCE

LIST = "Backend\\Behaviors\\ListController"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep logs and BUILDER_* settings out of the developer's environment."""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    for name in ("BUILDER_PLUGINS_DIR", "BUILDER_YAML_INDENT", "BUILDER_FILE_MODE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda verbose: None)


@pytest.fixture
def run(plugins_dir):
    """Run the CLI against the temporary plugins directory."""

    def _run(*args: str) -> int:
        return main(["--plugins-dir", str(plugins_dir), *args])

    return _run


class TestParser:
    """Test argument parsing."""

    def test_create_options(self):
        args = create_parser().parse_args([
            "create", "Acme.Blog", "Posts",
            "-b", "Backend.Behaviors.FormController",
            "--behavior", "Backend.Behaviors.ListController",
            "--model", "Post",
            "--permission", "acme.blog.access_posts",
            "--menu", "blog||posts",
        ])
        assert args.behaviors == ["Backend.Behaviors.FormController", "Backend.Behaviors.ListController"]
        assert args.model == "Post"
        assert args.permissions == ["acme.blog.access_posts"]
        assert args.menu == "blog||posts"

    def test_create_defaults(self):
        args = create_parser().parse_args(["create", "Acme.Blog", "Posts"])
        assert args.behaviors == []
        assert args.permissions == []
        assert args.model == ""

    def test_set_config_help_mentions_rewrite(self, capsys):
        """The help warns that every configured behavior file is rewritten."""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["set-config", "--help"])
        out = capsys.readouterr().out
        assert "rewrites" in out
        assert "comments" in out

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert cli.BUILDER_VERSION in capsys.readouterr().out


class TestLogPath:
    """Test _get_log_path() function."""

    def test_uses_xdg_state_home(self, tmp_path):
        path = _get_log_path()
        assert path == tmp_path / "state" / "builder" / "builder.log"
        assert path.parent.is_dir()


class TestCommands:
    """Test subcommands end to end."""

    def test_behaviors(self, run, capsys):
        assert run("behaviors") == 0
        out = capsys.readouterr().out
        assert "Backend\\Behaviors\\FormController" in out
        assert "ImportExportController" not in out

    def test_list(self, run, capsys, write_controller):
        write_controller("Posts", POSTS_SOURCE)
        assert run("list", "Acme.Blog") == 0
        assert capsys.readouterr().out == "Posts\n"

    def test_list_empty(self, run, capsys):
        assert run("list", "Acme.Blog") == 0
        assert "No controllers found" in capsys.readouterr().out

    def test_show(self, run, capsys, posts_controller):
        assert run("show", "Acme.Blog", "Posts") == 0
        out = capsys.readouterr().out
        assert f"# {LIST}\n" in out
        assert "columns:\n    title:\n        label: Title\n" in out

    def test_show_missing_controller(self, run, capsys, controllers_dir):
        assert run("show", "Acme.Blog", "Missing") == 1
        assert "Missing.php not found" in capsys.readouterr().err

    def test_create(self, run, capsys, controllers_dir):
        assert run("create", "Acme.Blog", "Posts", "-b", "Backend.Behaviors.ListController", "--model", "Post") == 0
        assert (controllers_dir / "Posts.php").is_file()
        assert (controllers_dir / "posts" / "config_list.yaml").is_file()
        assert "Created" in capsys.readouterr().out

    def test_create_without_behaviors(self, run, capsys):
        assert run("create", "Acme.Blog", "Posts") == 1
        assert "Select at least one behavior" in capsys.readouterr().err

    def test_set_config_from_file(self, run, tmp_path, posts_controller, controllers_dir):
        source = tmp_path / "new_list.yaml"
        source.write_text("title: Posts\nrecordsPerPage: 50\n")
        assert run("set-config", "Acme.Blog", "Posts", "Backend.Behaviors.ListController", str(source)) == 0
        assert (controllers_dir / "posts" / "config_list.yaml").read_text() == "title: Posts\nrecordsPerPage: 50\n"

    def test_set_config_from_stdin(self, run, monkeypatch, posts_controller, controllers_dir):
        monkeypatch.setattr("sys.stdin", io.StringIO("title: From stdin\n"))
        assert run("set-config", "Acme.Blog", "Posts", LIST) == 0
        assert (controllers_dir / "posts" / "config_list.yaml").read_text() == "title: From stdin\n"

    def test_set_config_unconfigured_behavior(self, run, capsys, monkeypatch, posts_controller):
        monkeypatch.setattr("sys.stdin", io.StringIO("name: Post\n"))
        assert run("set-config", "Acme.Blog", "Posts", "Backend.Behaviors.FormController") == 1
        assert "is not configured on Posts" in capsys.readouterr().err

    def test_set_config_invalid_yaml(self, run, capsys, monkeypatch, posts_controller):
        monkeypatch.setattr("sys.stdin", io.StringIO("title: [\n"))
        assert run("set-config", "Acme.Blog", "Posts", LIST) == 1
        assert "Invalid YAML" in capsys.readouterr().err

    def test_registry(self, run, capsys, write_controller):
        write_controller("Posts", POSTS_SOURCE)
        assert run("registry", "Acme.Blog") == 0
        assert capsys.readouterr().out == "acme/blog/posts\n"

    def test_invalid_plugin_code(self, run, capsys):
        assert run("list", "acme") == 1
        assert "Invalid plugin code" in capsys.readouterr().err

    def test_plugins_dir_from_environment(self, monkeypatch, capsys, plugins_dir, write_controller):
        write_controller("Posts", POSTS_SOURCE)
        monkeypatch.setenv("BUILDER_PLUGINS_DIR", str(plugins_dir))
        assert main(["list", "Acme.Blog"]) == 0
        assert capsys.readouterr().out == "Posts\n"

    def test_invalid_setting(self, run, capsys, monkeypatch):
        monkeypatch.setenv("BUILDER_YAML_INDENT", "12")
        assert run("behaviors") == 1
        assert "BUILDER_YAML_INDENT" in capsys.readouterr().err
