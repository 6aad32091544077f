"""Enumerate scannable source files under a root directory."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from secscan.errors import DirectoryNotFound
from secscan.scanner.languages import is_supported_file

# Version-control metadata is never source
_SKIP_DIRS = {".git", ".hg", ".svn"}


def select_files(root: str | Path, exclude: Iterable[str] = ()) -> list[Path]:
    """Return every supported file under ``root``, deduplicated and sorted.

    ``exclude`` names directories or files to skip wherever they appear.
    """
    root = Path(root)
    if not root.is_dir():
        raise DirectoryNotFound(f"Directory not found: {root}")

    excluded = _SKIP_DIRS | set(exclude)
    seen: set[Path] = set()
    files: list[Path] = []

    for dirpath, dirs, names in os.walk(root):
        # Prune skipped directories in-place
        dirs[:] = [d for d in dirs if d not in excluded]

        for name in names:
            if name in excluded or not is_supported_file(name):
                continue
            path = Path(dirpath) / name
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            files.append(path)

    files.sort()
    return files
