"""
Shared fixtures for style hook tests.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any

import pytest

# Add the repository root to the path for imports
REPO_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(REPO_ROOT))

from style_hook.decision import Action, CheckResult, FeatureToggles  # noqa: E402
from style_hook.engine import DecisionEngine  # noqa: E402
from style_hook.tools import CheckReport  # noqa: E402

# A file "violates" when it contains a tab (fixable by the fake formatter)
# or the marker below (not fixable).
UNFIXABLE = "BAD"


def violates(content: str) -> bool:
    return "\t" in content or UNFIXABLE in content


class FakeChecker:
    """Content-based checker that records every call."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def check(self, root, files, log_path=None, stop_on_first=False):
        self.calls.append({"root": Path(root), "files": tuple(files), "stop_on_first": stop_on_first})
        violating = []
        for file in files:
            if violates((Path(root) / file).read_text(encoding="utf-8")):
                violating.append(file)
                if stop_on_first:
                    break
        return CheckReport(
            result=CheckResult.VIOLATED if violating else CheckResult.CLEAN,
            violating_files=tuple(violating),
            log_path=log_path,
        )


class FakeFormatter:
    """Replaces tabs with four spaces, in place."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, ...]] = []

    def format(self, paths):
        self.calls.append(tuple(paths))
        for path in paths:
            content = path.read_text(encoding="utf-8")
            path.write_text(content.replace("\t", "    "), encoding="utf-8")


class FakeGit:
    def __init__(self, root: Path) -> None:
        self.root = root
        self.staged: list[str] = []

    def stage(self, path: str) -> None:
        self.staged.append(path)


class ScriptedPrompter:
    """Answers menus and confirmations from predetermined scripts."""

    def __init__(self, choices=(), confirmations=()) -> None:
        self.choices = list(choices)
        self.confirmations = list(confirmations)
        self.menus: list[list[str]] = []
        self.questions: list[str] = []

    def present_menu(self, labels):
        self.menus.append(list(labels))
        choice = self.choices.pop(0)
        return choice.label if isinstance(choice, Action) else choice

    def confirm(self, question):
        self.questions.append(question)
        return self.confirmations.pop(0)


class RecordingReporter:
    """Collects engine output instead of writing it to the console."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.violations_reported: list[tuple[str, tuple[str, ...]]] = []

    def progress(self, *lines):
        self.lines.extend(lines)

    def violations(self, header, files, log_path=None):
        self.violations_reported.append((header, tuple(files)))


class FakeDiffViewer:
    def __init__(self) -> None:
        self.calls: list[tuple[Path, Path]] = []

    def __call__(self, path_a: Path, path_b: Path) -> None:
        self.calls.append((path_a, path_b))


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


def write_files(root: Path, files: dict[str, str]) -> list[str]:
    """Write ``files`` (relative path -> content) below ``root``."""
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return list(files)


@pytest.fixture
def make_engine(repo: Path):
    """Build a DecisionEngine over fakes; returns (engine, fakes)."""

    def _make(toggles: FeatureToggles | None = None, choices=(), confirmations=()):
        fakes = {
            "git": FakeGit(repo),
            "checker": FakeChecker(),
            "formatter": FakeFormatter(),
            "prompter": ScriptedPrompter(choices, confirmations),
            "diff_viewer": FakeDiffViewer(),
            "reporter": RecordingReporter(),
        }
        engine = DecisionEngine(
            toggles=toggles or FeatureToggles(),
            git=fakes["git"],
            checker=fakes["checker"],
            formatter=fakes["formatter"],
            prompter=fakes["prompter"],
            diff_viewer=fakes["diff_viewer"],
            reporter=fakes["reporter"],
            original_log=repo / ".git" / "style-hook" / "checker-log-original.txt",
            formatted_log=repo / ".git" / "style-hook" / "checker-log-formatted.txt",
        )
        return engine, fakes

    return _make


def git(root: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=root, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An initialized, empty git repository."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    root = tmp_path / "git-repo"
    root.mkdir()
    git(root, "init", "-q")
    return root.resolve()


def commit_all(root: Path, message: str = "init") -> None:
    git(root, "add", "-A")
    git(root, "-c", "user.name=t", "-c", "user.email=t@example.com", "commit", "-qm", message)


@pytest.fixture
def worktree(git_repo: Path, tmp_path: Path) -> Path:
    """A linked worktree of ``git_repo``, whose ``.git`` is a file."""
    write_files(git_repo, {"README.md": "readme\n"})
    commit_all(git_repo)
    path = tmp_path / "wt"
    git(git_repo, "worktree", "add", "-q", str(path))
    return path.resolve()
