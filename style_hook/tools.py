"""Invocation of the external style checker and autoformatter.

Both tools are opaque executables configured by a command template such as
``checkstyle -c {config}``: the template is split like a shell command line,
``{config}`` is replaced by the tool's configuration file and the files to
process are appended.
"""

import shlex
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from style_hook.config import HookConfig
from style_hook.decision import CheckResult
from style_hook.errors import ConfigurationError, ToolError


@dataclass(frozen=True)
class ToolResult:
    """Exit status and combined stdout/stderr of one tool invocation."""

    returncode: int
    output: str


@dataclass(frozen=True)
class CheckReport:
    """Outcome of one checker pass over a set of files."""

    result: CheckResult
    violating_files: tuple[str, ...] = ()
    log_path: Optional[Path] = None


def build_command(template: str, config_path: Path, files: Sequence[Path]) -> list[str]:
    """Build the argument list for a tool invocation.

    Args:
        template: Command template, e.g. ``"checkstyle -c {config}"``.
        config_path: Path substituted for ``{config}``.
        files: Files appended to the command.

    Returns:
        The argument list, suitable for ``subprocess.run``.
    """
    args = [part.replace("{config}", str(config_path)) for part in shlex.split(template)]
    return args + [str(f) for f in files]


def tool_executable(template: str) -> str:
    """Return the executable named by a command template."""
    parts = shlex.split(template)
    if not parts:
        raise ConfigurationError("Tool command must not be empty")
    return parts[0]


def tool_available(template: str) -> bool:
    """Check if the executable of a command template can be found.

    Returns:
        True if the executable is on PATH (or is an executable path), False otherwise.
    """
    return shutil.which(tool_executable(template)) is not None


def run_tool(args: list[str], cwd: Optional[Path] = None, timeout: Optional[float] = None) -> ToolResult:
    """Run an external tool and capture its output.

    Blocks until the tool exits, or until ``timeout`` seconds when given.

    Raises:
        ConfigurationError: If the executable cannot be found.
        ToolError: If the tool does not finish within the timeout.
    """
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise ConfigurationError(f"{args[0]} could not be found") from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(f"{args[0]} timed out after {timeout}s") from e
    return ToolResult(returncode=result.returncode, output=result.stdout or "")


class StyleChecker:
    """Runs the style checker, one file at a time, and records its output.

    Args:
        command: Command template of the checker.
        config_path: Checker ruleset.
        timeout: Optional per-invocation timeout in seconds.
    """

    name = "style checker"

    def __init__(self, command: str, config_path: Path, timeout: Optional[float] = None):
        self.command = command
        self.config_path = config_path
        self.timeout = timeout

    def check(
        self,
        root: Path,
        files: Sequence[str],
        log_path: Optional[Path] = None,
        stop_on_first: bool = False,
    ) -> CheckReport:
        """Check ``files`` (relative to ``root``) and report which ones violate.

        Args:
            root: Directory the relative paths are resolved against.
            files: Repository-relative paths to check.
            log_path: File that receives the checker output, replaced if present.
            stop_on_first: Stop at the first violating file.

        Returns:
            A CheckReport; VIOLATED if any file made the checker exit nonzero.
        """
        violating: list[str] = []
        log_chunks: list[str] = []

        for file in files:
            target = root / file
            result = run_tool(
                build_command(self.command, self.config_path, [target]),
                cwd=root,
                timeout=self.timeout,
            )
            log_chunks.append(f"File: {target}\n{result.output}\n")
            if CheckResult.from_exit_status(result.returncode).violated:
                violating.append(file)
                if stop_on_first:
                    break

        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_path.write_text("".join(log_chunks), encoding="utf-8")

        return CheckReport(
            result=CheckResult.VIOLATED if violating else CheckResult.CLEAN,
            violating_files=tuple(violating),
            log_path=log_path,
        )


class Formatter:
    """Runs the autoformatter in place on a set of files.

    The exit status is not relied upon; what the formatter did is judged by
    comparing file contents afterwards.
    """

    name = "autoformatter"

    def __init__(self, command: str, config_path: Path, timeout: Optional[float] = None):
        self.command = command
        self.config_path = config_path
        self.timeout = timeout

    def format(self, files: Sequence[Path]) -> ToolResult:
        """Format ``files`` in place."""
        return run_tool(
            build_command(self.command, self.config_path, files),
            timeout=self.timeout,
        )


def ensure_tools_available(config: HookConfig) -> None:
    """Fail before touching any file if an enabled tool cannot be found.

    Raises:
        ConfigurationError: Naming every missing tool whose feature is enabled.
    """
    missing = []
    if config.toggles.formatter_enabled and not tool_available(config.formatter_command):
        missing.append(
            f"Codestyle pre-commit validation is enabled, but the autoformatter "
            f"({tool_executable(config.formatter_command)}) could not be found. "
            f"Please fix this or disable the formatter."
        )
    if config.toggles.checker_enabled and not tool_available(config.checker_command):
        missing.append(
            f"Codestyle pre-commit validation is enabled, but the style checker "
            f"({tool_executable(config.checker_command)}) could not be found. "
            f"Please install it or disable the checker."
        )
    if missing:
        raise ConfigurationError("\n".join(missing))
