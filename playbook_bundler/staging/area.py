"""Ephemeral staging directory owned by a single bundle build."""

from __future__ import annotations

import shutil
import tempfile
import types
from pathlib import Path

from ..errors import BundleError

__all__ = ["STAGING_PREFIX", "StagingArea"]

STAGING_PREFIX = "bundle-playbook."


class StagingArea:
    """Scoped owner of a uniquely named, private working directory.

    Use it as a context manager so the directory is removed on every exit
    path, including exceptions and ``KeyboardInterrupt``::

        with StagingArea() as staging_dir:
            (staging_dir / "playbook.yml").write_text("...")

    Parameters
    ----------
    parent : Path | None, optional
        Directory under which the staging area is created. Defaults to the
        system temporary directory.
    """

    def __init__(self, parent: Path | None = None) -> None:
        self._parent = parent
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        """Return the acquired staging directory."""
        if self._path is None:
            message = "Staging area has not been acquired"
            raise BundleError(message)
        return self._path

    @property
    def acquired(self) -> bool:
        return self._path is not None

    def acquire(self) -> Path:
        """Create the staging directory and return its path.

        ``tempfile.mkdtemp`` creates the directory with mode ``0700`` and a
        random suffix, so concurrent builds never share a directory.
        """
        if self._path is not None:
            message = f"Staging area already acquired at {self._path}"
            raise BundleError(message)
        self._path = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self._parent))
        return self._path

    def release(self) -> None:
        """Remove the staging directory and everything below it."""
        if self._path is None:
            return
        path, self._path = self._path, None
        if path.exists():
            shutil.rmtree(path)

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.release()
