"""Scratch space the formatter works in.

The formatter never runs on the working tree: changed files are copied into a
temporary ``working-copy`` directory, formatted there, and only copied back when
the user accepts the result. The whole directory is removed when the context
manager exits, whatever the reason.
"""

import filecmp
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Optional


class ScratchWorkspace:
    """Temporary copies of the changed files for one hook run.

    Args:
        root: Repository root the relative paths belong to.
        files: Repository-relative paths of the changed files.
    """

    def __init__(self, root: Path, files: Sequence[str]):
        self.root = root
        self.files = tuple(files)
        self._tempdir: Optional[tempfile.TemporaryDirectory] = None
        self._originals_dir: Optional[Path] = None

    def __enter__(self) -> "ScratchWorkspace":
        self._tempdir = tempfile.TemporaryDirectory(prefix="style-hook-")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None
        self._originals_dir = None

    @property
    def base_dir(self) -> Path:
        if self._tempdir is None:
            raise RuntimeError("Scratch workspace is not active")
        return Path(self._tempdir.name)

    @property
    def working_copy_dir(self) -> Path:
        return self.base_dir / "working-copy"

    def original_path(self, file: str) -> Path:
        return self.root / file

    def scratch_path(self, file: str) -> Path:
        return self.working_copy_dir / file

    def copy_in(self) -> list[Path]:
        """Copy every changed file into the working copy.

        Returns:
            The scratch paths, in the order of the changed files.
        """
        copies = []
        for file in self.files:
            target = self.scratch_path(file)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.original_path(file), target)
            copies.append(target)
        return copies

    def changed_files(self) -> tuple[str, ...]:
        """Files whose scratch copy differs byte-for-byte from the original."""
        return tuple(
            file
            for file in self.files
            if not filecmp.cmp(self.original_path(file), self.scratch_path(file), shallow=False)
        )

    def originals_snapshot(self) -> Path:
        """Copy the unformatted originals next to the working copy for diffing.

        Built on first use and reused afterwards.
        """
        if self._originals_dir is None:
            originals_dir = self.base_dir / "original-files"
            for file in self.files:
                target = originals_dir / file
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(self.original_path(file), target)
            originals_dir.mkdir(exist_ok=True)
            self._originals_dir = originals_dir
        return self._originals_dir

    def apply(self, file: str) -> Path:
        """Replace the original file with its formatted copy.

        Returns:
            The path of the replaced original.
        """
        target = self.original_path(file)
        shutil.copyfile(self.scratch_path(file), target)
        return target
