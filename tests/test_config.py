"""
Tests for configuration loading.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from style_hook.config import (
    CliOptions,
    HookConfig,
    load_config,
    parse_args,
    parse_bool,
    parse_timeout,
)
from style_hook.decision import FeatureToggles
from style_hook.errors import ConfigurationError


def write_pyproject(root: Path, body: str) -> None:
    (root / "pyproject.toml").write_text(body, encoding="utf-8")


class TestDefaults:
    def test_defaults_relative_to_git_root(self, repo):
        config = load_config(repo, environ={})

        assert config.toggles == FeatureToggles()
        assert config.extensions == (".java",)
        assert config.checker_command == "checkstyle -c {config}"
        assert config.checker_config == repo / "checkstyle.xml"
        assert config.formatter_config == repo / "autoformat_intellij.xml"
        assert config.original_log == repo / ".git" / "style-hook" / "checker-log-original.txt"
        assert config.timeout is None

    def test_config_is_immutable(self):
        config = HookConfig()

        with pytest.raises(AttributeError):
            config.timeout = 3  # type: ignore[misc]


class TestPyproject:
    def test_tool_table_read(self, repo):
        write_pyproject(
            repo,
            """
[project]
name = "demo"

[tool.style-hook]
extensions = ["py", ".PYI"]
checker = "flake8 --config {config}"
checker-config = "style/setup.cfg"
formatter = "black --config {config}"
formatter-config = "style/black.toml"
skip-formatter-if-clean = true
allow-violations = true
timeout = 30
""",
        )

        config = load_config(repo, environ={})

        assert config.extensions == (".py", ".pyi")
        assert config.checker_command == "flake8 --config {config}"
        assert config.checker_config == repo / "style" / "setup.cfg"
        assert config.formatter_config == repo / "style" / "black.toml"
        assert config.toggles.skip_formatter_if_clean is True
        assert config.toggles.allow_violations is True
        assert config.toggles.checker_enabled is True
        assert config.timeout == 30.0

    def test_pyproject_without_table_uses_defaults(self, repo):
        write_pyproject(repo, '[project]\nname = "demo"\n')

        assert load_config(repo, environ={}) == HookConfig(
            checker_config=repo / "checkstyle.xml",
            formatter_config=repo / "autoformat_intellij.xml",
            log_dir=repo / ".git" / "style-hook",
        )

    def test_unknown_key_rejected(self, repo):
        write_pyproject(repo, "[tool.style-hook]\nallow-violation = true\n")

        with pytest.raises(ConfigurationError, match="allow-violation"):
            load_config(repo, environ={})

    def test_non_boolean_toggle_rejected(self, repo):
        write_pyproject(repo, '[tool.style-hook]\nenable-checker = "no"\n')

        with pytest.raises(ConfigurationError):
            load_config(repo, environ={})

    def test_invalid_toml_rejected(self, repo):
        write_pyproject(repo, "[tool.style-hook\n")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(repo, environ={})


class TestStandaloneConfigFile:
    def test_paths_relative_to_config_file(self, repo, tmp_path):
        style_dir = tmp_path / "style-repo"
        style_dir.mkdir()
        config_file = style_dir / "style-hook.toml"
        config_file.write_text(
            'checker-config = "checkstyle.xml"\nenable-formatter = false\n',
            encoding="utf-8",
        )
        write_pyproject(repo, "[tool.style-hook]\nallow-violations = true\n")

        config = load_config(repo, CliOptions(config_file=config_file), environ={})

        assert config.checker_config == style_dir / "checkstyle.xml"
        assert config.toggles.formatter_enabled is False
        # pyproject.toml is ignored when a config file is given
        assert config.toggles.allow_violations is False

    def test_missing_config_file(self, repo, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(repo, CliOptions(config_file=tmp_path / "nope.toml"), environ={})


class TestOverrides:
    def test_environment_overrides_pyproject(self, repo):
        write_pyproject(repo, "[tool.style-hook]\nallow-violations = true\n")

        config = load_config(
            repo,
            environ={
                "STYLE_HOOK_ALLOW_VIOLATIONS": "no",
                "STYLE_HOOK_FORMATTER": "0",
                "STYLE_HOOK_TIMEOUT": "12.5",
            },
        )

        assert config.toggles.allow_violations is False
        assert config.toggles.formatter_enabled is False
        assert config.timeout == 12.5

    def test_blank_environment_values_ignored(self, repo):
        config = load_config(repo, environ={"STYLE_HOOK_CHECKER": "  "})

        assert config.toggles.checker_enabled is True

    def test_blank_environment_timeout_keeps_pyproject_timeout(self, repo):
        write_pyproject(repo, "[tool.style-hook]\ntimeout = 30\n")

        config = load_config(repo, environ={"STYLE_HOOK_TIMEOUT": " "})

        assert config.timeout == 30.0

    def test_default_log_dir_from_git(self, repo, tmp_path):
        git_dir_log = tmp_path / "worktrees" / "wt" / "style-hook"

        config = load_config(repo, environ={}, default_log_dir=git_dir_log)

        assert config.original_log == git_dir_log / "checker-log-original.txt"

    def test_invalid_environment_boolean(self, repo):
        with pytest.raises(ConfigurationError, match="STYLE_HOOK_CHECKER"):
            load_config(repo, environ={"STYLE_HOOK_CHECKER": "maybe"})

    def test_command_line_overrides_environment(self, repo):
        options = parse_args(["--allow-violations", "--no-checker", "--timeout", "5"])

        config = load_config(
            repo,
            options,
            environ={"STYLE_HOOK_ALLOW_VIOLATIONS": "false", "STYLE_HOOK_TIMEOUT": "60"},
        )

        assert config.toggles.allow_violations is True
        assert config.toggles.checker_enabled is False
        assert config.timeout == 5.0


class TestParseArgs:
    def test_all_flags(self):
        options = parse_args(
            [
                "--config",
                "style.toml",
                "--no-formatter",
                "--skip-formatter-if-clean",
                "--strict-original-check",
            ]
        )

        assert options.config_file == Path("style.toml")
        assert options.toggles == {
            "formatter_enabled": False,
            "skip_formatter_if_clean": True,
            "assume_formatter_safe": False,
        }
        assert options.timeout is None

    def test_unknown_argument_warns(self, capsys):
        options = parse_args(["--frobnicate"])

        assert options == CliOptions()
        assert "Unknown argument: --frobnicate" in capsys.readouterr().out


class TestValueParsing:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_true(self, value):
        assert parse_bool(value, "X") is True

    @pytest.mark.parametrize("value", ["0", "False", "no", "off"])
    def test_false(self, value):
        assert parse_bool(value, "X") is False

    @pytest.mark.parametrize("value", ["", "none", None])
    def test_timeout_disabled(self, value):
        assert parse_timeout(value, "X") is None

    @pytest.mark.parametrize("value", ["0", "-1", "soon", True])
    def test_timeout_invalid(self, value):
        with pytest.raises(ConfigurationError):
            parse_timeout(value, "X")
