"""Filesystem helpers for moving build output between directories."""
from __future__ import annotations

import shutil
from pathlib import Path


def copy_tree_contents(src: Path, dst: Path) -> list[str]:
    """Copy everything inside ``src`` into ``dst`` and return the copied files as relative paths.

    ``dst`` is created when missing. Existing files with the same name are
    overwritten; other content already in ``dst`` is left alone.
    """

    dst.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dst / entry.name
        if entry.is_dir() and not entry.is_symlink():
            shutil.copytree(entry, target, symlinks=True, dirs_exist_ok=True)
        else:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            shutil.copy2(entry, target, follow_symlinks=False)
    return list_files(src)


def list_files(root: Path) -> list[str]:
    """Return every file below ``root`` as a sorted list of POSIX relative paths."""

    files = [
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_file() or path.is_symlink()
    ]
    return sorted(files)


__all__ = ["copy_tree_contents", "list_files"]
