"""Bankforge - Filesystem traversal helpers."""

from __future__ import annotations

import os
from pathlib import Path, PurePath


def walk_files(root: str | Path) -> list[Path]:
    """List every regular file below root.

    Depth-first over an explicit stack of pending directories, so tree
    depth never turns into call depth. Symlinked directories are not
    descended into (they could form cycles); symlinked files are listed.

    Order is unspecified. Callers that need determinism must sort.

    Args:
        root: Directory to traverse.

    Returns:
        Paths of all files found, each prefixed by root.

    Raises:
        OSError: If any directory on the way cannot be listed. Enumeration
            stops at the first such error.
    """
    stack: list[Path] = [Path(root)]
    files: list[Path] = []

    while stack:
        directory = stack.pop()
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    stack.append(Path(entry.path))
                elif entry.is_file():
                    files.append(Path(entry.path))

    return files


def relative_posix(path: Path, base: Path) -> str:
    """Path of path relative to base, with forward slashes.

    Falls back to the bare file name when path is not below base.
    """
    try:
        rel: PurePath = path.relative_to(base)
    except ValueError:
        rel = PurePath(path.name)
    return rel.as_posix()
