"""Filesystem helpers for the staging area."""

from __future__ import annotations

import os
import shutil
import typing as typ
from pathlib import Path

from .errors import BundleError

__all__ = ["copy_entry", "iter_sorted_entries", "safe_destination_path"]


def safe_destination_path(staging_dir: Path, destination: str) -> Path:
    """Return ``destination`` resolved beneath ``staging_dir``.

    Parameters
    ----------
    staging_dir : Path
        Root directory under which staged entries must reside.
    destination : str
        Relative entry name inside the staging area.

    Returns
    -------
    Path
        Absolute destination located below ``staging_dir``.

    Raises
    ------
    BundleError
        Raised when ``destination`` resolves outside ``staging_dir``.
    """

    target = (staging_dir / destination).resolve()
    staging_root = staging_dir.resolve()
    if target == staging_root or not target.is_relative_to(staging_root):
        message = f"Destination escapes staging directory: {destination}"
        raise BundleError(message)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def copy_entry(source: Path, destination: Path) -> Path:
    """Copy a file or directory tree, dereferencing every symbolic link.

    Modification times are preserved at copy time. An existing destination
    directory is merged into, and existing files are overwritten.

    Raises
    ------
    BundleError
        Raised when ``source`` cannot be copied, for example because it
        contains a dangling symbolic link.
    """

    try:
        if source.is_dir():
            shutil.copytree(
                source, destination, symlinks=False, dirs_exist_ok=True
            )
        else:
            shutil.copy2(source, destination, follow_symlinks=True)
    except OSError as exc:
        message = f"Failed to copy {source} -> {destination}: {exc}"
        raise BundleError(message) from exc
    return destination


def iter_sorted_entries(root: Path) -> typ.Iterator[tuple[str, Path]]:
    """Yield ``(relative_posix_path, path)`` for everything below ``root``.

    Entries are ordered lexicographically by their relative POSIX path, so a
    directory always precedes its contents. ``root`` itself is not yielded and
    symbolic links are never followed.

    Examples
    --------
    >>> [rel for rel, _ in iter_sorted_entries(Path("stage"))]  # doctest: +SKIP
    ['playbook.yml', 'roles', 'roles/common', 'roles/common/tasks']
    """

    entries: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        current = Path(dirpath)
        for name in (*dirnames, *filenames):
            path = current / name
            entries.append((path.relative_to(root).as_posix(), path))
    entries.sort(key=lambda entry: entry[0])
    yield from entries
