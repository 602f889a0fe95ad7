"""Configuration of the style pre-commit hook.

The configuration is assembled once at process start from, in increasing order
of precedence:

1. built-in defaults,
2. the ``[tool.style-hook]`` table of the repository's ``pyproject.toml`` or a
   standalone TOML file passed with ``--config``,
3. ``STYLE_HOOK_*`` environment variables,
4. command-line flags.

The result is an immutable HookConfig handed to the decision engine.
"""

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

# Try to import tomllib (Python 3.11+) or fall back to tomli
try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

from style_hook.decision import FeatureToggles
from style_hook.errors import ConfigurationError

TOOL_TABLE = "style-hook"

DEFAULT_EXTENSIONS = (".java",)
DEFAULT_CHECKER_COMMAND = "checkstyle -c {config}"
DEFAULT_CHECKER_CONFIG = "checkstyle.xml"
DEFAULT_FORMATTER_COMMAND = "autoformatter.sh -s {config}"
DEFAULT_FORMATTER_CONFIG = "autoformat_intellij.xml"
LOG_DIR_NAME = "style-hook"
DEFAULT_LOG_DIR = Path(".git") / LOG_DIR_NAME

# Environment variable -> FeatureToggles field
ENV_TOGGLES: dict[str, str] = {
    "STYLE_HOOK_CHECKER": "checker_enabled",
    "STYLE_HOOK_FORMATTER": "formatter_enabled",
    "STYLE_HOOK_SKIP_FORMATTER_IF_CLEAN": "skip_formatter_if_clean",
    "STYLE_HOOK_ALLOW_VIOLATIONS": "allow_violations",
    "STYLE_HOOK_ASSUME_FORMATTER_SAFE": "assume_formatter_safe",
}
ENV_TIMEOUT = "STYLE_HOOK_TIMEOUT"

# TOML key -> FeatureToggles field
TOML_TOGGLES: dict[str, str] = {
    "enable-checker": "checker_enabled",
    "enable-formatter": "formatter_enabled",
    "skip-formatter-if-clean": "skip_formatter_if_clean",
    "allow-violations": "allow_violations",
    "assume-formatter-safe": "assume_formatter_safe",
}
TOML_KEYS = set(TOML_TOGGLES) | {
    "extensions",
    "checker",
    "checker-config",
    "formatter",
    "formatter-config",
    "log-dir",
    "timeout",
}

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class HookConfig:
    """Everything the hook needs to know before it starts.

    Attributes:
        toggles: Feature switches passed to the decision engine.
        extensions: File extensions (with leading dot) the hook applies to.
        checker_command: Checker command template, ``{config}`` is substituted.
        checker_config: Checker ruleset file.
        formatter_command: Formatter command template.
        formatter_config: Formatter settings file.
        log_dir: Directory receiving the checker logs.
        timeout: Optional timeout in seconds for each tool invocation.
    """

    toggles: FeatureToggles = field(default_factory=FeatureToggles)
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    checker_command: str = DEFAULT_CHECKER_COMMAND
    checker_config: Path = Path(DEFAULT_CHECKER_CONFIG)
    formatter_command: str = DEFAULT_FORMATTER_COMMAND
    formatter_config: Path = Path(DEFAULT_FORMATTER_CONFIG)
    log_dir: Path = DEFAULT_LOG_DIR
    timeout: Optional[float] = None

    @property
    def original_log(self) -> Path:
        return self.log_dir / "checker-log-original.txt"

    @property
    def formatted_log(self) -> Path:
        return self.log_dir / "checker-log-formatted.txt"


@dataclass(frozen=True)
class CliOptions:
    """Command-line options of the hook. None means "not given"."""

    config_file: Optional[Path] = None
    toggles: Mapping[str, bool] = field(default_factory=dict)
    timeout: Optional[float] = None


def parse_bool(value: str, source: str) -> bool:
    """Parse a boolean setting such as ``"yes"`` or ``"0"``.

    Raises:
        ConfigurationError: If the value is not a recognized boolean.
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {source}: {value!r}")


def parse_timeout(value: Any, source: str) -> Optional[float]:
    """Parse a timeout in seconds; an empty value or "none" disables it."""
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none")):
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid timeout for {source}: {value!r}")
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid timeout for {source}: {value!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"Timeout for {source} must be positive, got {value!r}")
    return timeout


def normalize_extensions(extensions: Any) -> tuple[str, ...]:
    """Normalize configured extensions to lowercase with a leading dot."""
    if isinstance(extensions, str):
        extensions = [extensions]
    if not isinstance(extensions, (list, tuple)) or not extensions:
        raise ConfigurationError("'extensions' must be a non-empty list of strings")
    normalized = []
    for ext in extensions:
        if not isinstance(ext, str) or not ext.strip(".").strip():
            raise ConfigurationError(f"Invalid extension: {ext!r}")
        ext = ext.strip().lower()
        normalized.append(ext if ext.startswith(".") else f".{ext}")
    return tuple(normalized)


def read_toml_settings(path: Path) -> dict[str, Any]:
    """Read hook settings from a TOML file.

    A ``pyproject.toml`` (or any file with a ``[tool.style-hook]`` table)
    contributes that table; any other file is read as a whole.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    if "tool" in data and TOOL_TABLE in data["tool"]:
        settings: Any = data["tool"][TOOL_TABLE]
    elif path.name == "pyproject.toml":
        settings = {}
    else:
        settings = data

    if not isinstance(settings, dict):
        raise ConfigurationError(f"[tool.{TOOL_TABLE}] in {path} must be a table")
    return settings


def apply_toml_settings(config: HookConfig, settings: Mapping[str, Any], base_dir: Path) -> HookConfig:
    """Return ``config`` updated with settings read from TOML.

    Relative paths are resolved against ``base_dir``.
    """
    unknown = sorted(set(settings) - TOML_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown configuration key(s): {', '.join(unknown)}")

    toggles = {}
    for key, attr in TOML_TOGGLES.items():
        if key in settings:
            value = settings[key]
            if not isinstance(value, bool):
                raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
            toggles[attr] = value

    changes: dict[str, Any] = {}
    if toggles:
        changes["toggles"] = replace(config.toggles, **toggles)
    if "extensions" in settings:
        changes["extensions"] = normalize_extensions(settings["extensions"])
    for key, attr in (("checker", "checker_command"), ("formatter", "formatter_command")):
        if key in settings:
            if not isinstance(settings[key], str) or not settings[key].strip():
                raise ConfigurationError(f"'{key}' must be a non-empty command string")
            changes[attr] = settings[key]
    for key, attr in (
        ("checker-config", "checker_config"),
        ("formatter-config", "formatter_config"),
        ("log-dir", "log_dir"),
    ):
        if key in settings:
            if not isinstance(settings[key], str):
                raise ConfigurationError(f"'{key}' must be a path string")
            changes[attr] = base_dir / settings[key]
    if "timeout" in settings:
        changes["timeout"] = parse_timeout(settings["timeout"], "'timeout'")

    return replace(config, **changes)


def apply_environment(config: HookConfig, environ: Mapping[str, str]) -> HookConfig:
    """Return ``config`` updated with ``STYLE_HOOK_*`` environment variables."""
    toggles = {
        attr: parse_bool(environ[name], name)
        for name, attr in ENV_TOGGLES.items()
        if environ.get(name, "").strip()
    }
    changes: dict[str, Any] = {}
    if toggles:
        changes["toggles"] = replace(config.toggles, **toggles)
    if environ.get(ENV_TIMEOUT, "").strip():
        changes["timeout"] = parse_timeout(environ[ENV_TIMEOUT], ENV_TIMEOUT)
    return replace(config, **changes)


def parse_args(argv: Sequence[str]) -> CliOptions:
    """Parse the hook's command-line arguments.

    Args:
        argv: Command line arguments. Optional arguments:
            --config PATH: TOML file with a [tool.style-hook] table or bare settings
            --no-checker: Do not run the style checker
            --no-formatter: Do not run the autoformatter
            --skip-formatter-if-clean: Skip the formatter when the checker passes
            --allow-violations: Allow committing with checker violations
            --strict-original-check: Always check the original files instead of
                inferring their result from the formatted copies
            --timeout SECONDS: Timeout for each tool invocation

    Returns:
        The parsed options.
    """
    config_file: Optional[Path] = None
    toggles: dict[str, bool] = {}
    timeout: Optional[float] = None
    flags = {
        "--no-checker": ("checker_enabled", False),
        "--no-formatter": ("formatter_enabled", False),
        "--skip-formatter-if-clean": ("skip_formatter_if_clean", True),
        "--allow-violations": ("allow_violations", True),
        "--strict-original-check": ("assume_formatter_safe", False),
    }

    i = 0
    while i < len(argv):
        if argv[i] == "--config" and i + 1 < len(argv):
            config_file = Path(argv[i + 1])
            i += 2
        elif argv[i] == "--timeout" and i + 1 < len(argv):
            timeout = parse_timeout(argv[i + 1], "--timeout")
            i += 2
        elif argv[i] in flags:
            attr, value = flags[argv[i]]
            toggles[attr] = value
            i += 1
        else:
            print(f"Warning: Unknown argument: {argv[i]}")
            i += 1

    return CliOptions(config_file=config_file, toggles=toggles, timeout=timeout)


def load_config(
    git_root: Path,
    options: Optional[CliOptions] = None,
    environ: Optional[Mapping[str, str]] = None,
    default_log_dir: Optional[Path] = None,
) -> HookConfig:
    """Assemble the hook configuration for a repository.

    Args:
        git_root: Root of the repository being committed to.
        options: Parsed command-line options.
        environ: Environment to read overrides from, defaults to ``os.environ``.
        default_log_dir: Default log directory inside the git directory, as
            resolved by git. Defaults to ``<git_root>/.git/style-hook``.

    Returns:
        The immutable configuration for this run.

    Raises:
        ConfigurationError: If any source holds an invalid value.
    """
    if options is None:
        options = CliOptions()
    if environ is None:
        environ = os.environ

    config = HookConfig(
        checker_config=git_root / DEFAULT_CHECKER_CONFIG,
        formatter_config=git_root / DEFAULT_FORMATTER_CONFIG,
        log_dir=default_log_dir if default_log_dir is not None else git_root / DEFAULT_LOG_DIR,
    )

    if options.config_file is not None:
        config_file = options.config_file
        if not config_file.is_absolute():
            config_file = Path.cwd() / config_file
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        config = apply_toml_settings(config, read_toml_settings(config_file), config_file.parent)
    else:
        pyproject_path = git_root / "pyproject.toml"
        if pyproject_path.exists():
            config = apply_toml_settings(config, read_toml_settings(pyproject_path), git_root)

    config = apply_environment(config, environ)

    if options.toggles:
        config = replace(config, toggles=replace(config.toggles, **options.toggles))
    if options.timeout is not None:
        config = replace(config, timeout=options.timeout)
    return config
