"""Git access for the style pre-commit hook."""

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Optional


def get_git_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the git repository.

    Returns:
        Path to the git repository root.

    Raises:
        RuntimeError: If not in a git repository.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return Path(result.stdout.strip())
    except subprocess.CalledProcessError as e:
        raise RuntimeError("Not in a git repository") from e


def list_staged_files(extensions: Sequence[str], cwd: Optional[Path] = None) -> tuple[str, ...]:
    """List added, copied and modified staged files with one of ``extensions``.

    Args:
        extensions: Lowercase extensions including the leading dot.
        cwd: Directory to run git in, usually the repository root.

    Returns:
        Repository-relative paths in git's order, without duplicates.

    Raises:
        RuntimeError: If git fails.
    """
    # -z keeps paths unquoted, including non-ASCII names
    try:
        result = subprocess.run(
            ["git", "diff", "--cached", "--name-only", "--diff-filter=ACM", "-z"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=True,
            cwd=cwd,
        )
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Failed to list staged files: {e.stderr}") from e

    suffixes = tuple(ext.lower() for ext in extensions)
    files = [
        name
        for name in result.stdout.split("\0")
        if name and name.lower().endswith(suffixes)
    ]
    return tuple(dict.fromkeys(files))


def get_git_path(name: str, cwd: Optional[Path] = None) -> Path:
    """Resolve a path inside the git directory, e.g. ``hooks``.

    Linked worktrees and submodules have a ``.git`` file rather than a
    directory, so the location is asked from git.

    Raises:
        RuntimeError: If not in a git repository.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--git-path", name],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
    except subprocess.CalledProcessError as e:
        raise RuntimeError("Not in a git repository") from e
    # Relative results are relative to the directory git ran in
    return Path(cwd or Path.cwd()) / result.stdout.strip()


def stage_file(path: Path, cwd: Optional[Path] = None) -> None:
    """Stage a file for commit.

    Raises:
        RuntimeError: If ``git add`` fails.
    """
    try:
        subprocess.run(
            ["git", "add", "--", str(path)],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Failed to stage {path}: {e.stderr}") from e


def show_diff(path_a: Path, path_b: Path) -> None:
    """Show the differences between two directories on the terminal.

    ``git diff --no-index`` exits with 1 when the trees differ, so the exit
    status is not checked.
    """
    subprocess.run(["git", "diff", "--no-index", str(path_a), str(path_b)], check=False)


class GitRepository:
    """Version control provider bound to one repository root."""

    def __init__(self, root: Path):
        self.root = root

    def git_path(self, name: str) -> Path:
        return get_git_path(name, cwd=self.root)

    def changed_files(self, extensions: Sequence[str]) -> tuple[str, ...]:
        return list_staged_files(extensions, cwd=self.root)

    def stage(self, path: str) -> None:
        stage_file(self.root / path, cwd=self.root)
