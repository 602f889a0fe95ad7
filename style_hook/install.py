"""Install the style pre-commit hook into a git repository.

Usage:
    style-hook-install [--force] [HOOK ARGUMENTS...]

Arguments other than ``--force`` are passed on to ``style-pre-commit`` every
time the hook runs, e.g. ``style-hook-install --allow-violations``.
"""

import os
import shlex
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from style_hook.git import get_git_path, get_git_root

HOOK_MARKER = "# installed by style-hook-install"

HOOK_TEMPLATE = """#!/bin/sh
{marker}
exec style-pre-commit {args}"$@"
"""


def render_hook(hook_args: Sequence[str] = ()) -> str:
    """Return the content of the pre-commit shim."""
    args = "".join(f"{shlex.quote(arg)} " for arg in hook_args)
    return HOOK_TEMPLATE.format(marker=HOOK_MARKER, args=args)


def install_hook(git_root: Path, hook_args: Sequence[str] = (), force: bool = False) -> Path:
    """Write the ``pre-commit`` hook for the repository at ``git_root``.

    The hooks directory is asked from git, so linked worktrees and submodules
    get the hook in their real git directory. A hook written by this installer
    is always replaced. Any other existing hook is kept unless ``force`` is
    set, in which case it is backed up to ``pre-commit.bak`` first.

    Returns:
        Path of the installed hook.

    Raises:
        FileNotFoundError: If ``git_root`` is not a git repository.
        FileExistsError: If a foreign hook exists and ``force`` is not set.
    """
    try:
        git_hooks_dir = get_git_path("hooks", cwd=git_root)
    except RuntimeError as e:
        raise FileNotFoundError(f"No git repository found in {git_root}") from e
    git_hooks_dir.mkdir(parents=True, exist_ok=True)

    target = git_hooks_dir / "pre-commit"
    if target.exists() and HOOK_MARKER not in target.read_text(encoding="utf-8", errors="ignore"):
        if not force:
            raise FileExistsError(f"{target} already exists, use --force to replace it")
        shutil.copy2(target, target.with_name("pre-commit.bak"))

    target.write_text(render_hook(hook_args), encoding="utf-8")

    # Make it executable (on Unix-like systems)
    if os.name != "nt":
        os.chmod(target, 0o755)
    return target


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Install the hook into the current repository.

    Returns:
        Exit code: 0 if the hook was installed, 1 otherwise.
    """
    if argv is None:
        argv = sys.argv[1:]

    force = "--force" in argv
    hook_args = [arg for arg in argv if arg != "--force"]

    try:
        git_root = get_git_root()
        target = install_hook(git_root, hook_args, force=force)
    except (RuntimeError, FileNotFoundError, FileExistsError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Git hook installed successfully!")
    print(f"   Pre-commit hook: {target}")
    print("   To skip the check, use: git commit --no-verify")
    return 0


if __name__ == "__main__":
    sys.exit(main())
