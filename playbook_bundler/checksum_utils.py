"""Checksum helpers for finished bundles."""

from __future__ import annotations

import hashlib
from pathlib import Path

__all__ = ["checksum_path_for", "write_checksum"]


def checksum_path_for(path: Path, algorithm: str = "sha256") -> Path:
    """Return the sidecar path used for ``path``'s checksum."""
    return path.with_name(f"{path.name}.{algorithm}")


def write_checksum(path: Path, algorithm: str = "sha256") -> str:
    """Write the checksum sidecar for ``path`` using ``algorithm``.

    Parameters
    ----------
    path:
        Path to the file whose contents should be hashed.
    algorithm:
        Hashing algorithm name supported by :mod:`hashlib` (for example
        ``"sha256"``).

    Returns
    -------
    str
        Hex digest generated for ``path`` using ``algorithm``.
    """

    hasher = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            hasher.update(chunk)
    digest = hasher.hexdigest()
    checksum_path_for(path, algorithm).write_text(
        f"{digest}  {path.name}\n", encoding="utf-8"
    )
    return digest
