"""Resolve external Galaxy roles into the staging area.

The resolver is an opaque collaborator. :class:`GalaxyResolver` shells out to
``ansible-galaxy`` through :mod:`plumbum`; tests substitute any object that
satisfies :class:`DependencyResolver`.
"""

from __future__ import annotations

import dataclasses
import sys
import typing as typ
from pathlib import Path

from plumbum import local
from plumbum.commands import CommandNotFound

from ..errors import DependencyResolutionError
from ..layout import INSTALL_METADATA_NAME, REQUIREMENTS_NAME, ROLES_DIR_NAME

__all__ = [
    "DependencyResolver",
    "GalaxyResolver",
    "ResolutionOutcome",
    "materialize_dependencies",
    "strip_install_metadata",
]

# Shell convention for "command not found".
COMMAND_NOT_FOUND_STATUS = 127


@dataclasses.dataclass(frozen=True, slots=True)
class ResolutionOutcome:
    """Result of one resolver invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class DependencyResolver(typ.Protocol):
    """Install the roles listed in ``descriptor`` below ``target_dir``."""

    def resolve(self, descriptor: Path, target_dir: Path) -> ResolutionOutcome:
        """Run the resolver and report its overall exit status."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GalaxyResolver:
    """Run ``ansible-galaxy install`` as the dependency resolver.

    Individual role failures are ignored (``--ignore-errors``); only the
    overall exit status decides success.

    Parameters
    ----------
    executable : str
        Name or path of the ``ansible-galaxy`` executable.
    """

    executable: str = "ansible-galaxy"

    def command_args(self, descriptor: Path, target_dir: Path) -> list[str]:
        return [
            "install",
            "--ignore-errors",
            "-r",
            str(descriptor),
            "-p",
            str(target_dir),
        ]

    def resolve(self, descriptor: Path, target_dir: Path) -> ResolutionOutcome:
        args = self.command_args(descriptor, target_dir)
        print("→", self.executable, " ".join(args))
        try:
            command = local[self.executable][tuple(args)]
            returncode, stdout, stderr = command.run(retcode=None)
        except (CommandNotFound, FileNotFoundError):
            return ResolutionOutcome(
                COMMAND_NOT_FOUND_STATUS,
                stderr=f"{self.executable}: command not found",
            )
        if stdout:
            print(stdout, end="" if stdout.endswith("\n") else "\n")
        if returncode == 0 and stderr:
            # Per-role failures only surface here under --ignore-errors.
            print(stderr, end="" if stderr.endswith("\n") else "\n", file=sys.stderr)
        return ResolutionOutcome(int(returncode), stdout, stderr)


def strip_install_metadata(roles_dir: Path) -> list[Path]:
    """Delete every resolver install-metadata file below ``roles_dir``.

    Returns
    -------
    list[Path]
        Removed files in sorted order.
    """

    if not roles_dir.is_dir():
        return []
    removed: list[Path] = []
    for path in sorted(roles_dir.rglob(INSTALL_METADATA_NAME)):
        if path.is_file() or path.is_symlink():
            path.unlink()
            removed.append(path)
    return removed


def materialize_dependencies(
    staging_dir: Path, resolver: DependencyResolver
) -> list[Path]:
    """Install external roles when the staging area holds a descriptor.

    Parameters
    ----------
    staging_dir : Path
        Staging directory populated by the content assembler.
    resolver : DependencyResolver
        Resolver used to install the roles.

    Returns
    -------
    list[Path]
        Install-metadata files removed after resolution. Empty when there is
        nothing to resolve.

    Raises
    ------
    DependencyResolutionError
        Raised when the resolver exits with a non-zero status.
    """

    descriptor = staging_dir / REQUIREMENTS_NAME
    if not descriptor.is_file():
        return []

    roles_dir = staging_dir / ROLES_DIR_NAME
    roles_dir.mkdir(exist_ok=True)
    outcome = resolver.resolve(descriptor, roles_dir)
    if not outcome.ok:
        detail = outcome.stderr.strip()
        message = f"Role dependency resolution failed (exit {outcome.returncode})"
        if detail:
            message = f"{message}: {detail}"
        raise DependencyResolutionError(message, outcome.returncode)

    removed = strip_install_metadata(roles_dir)
    if removed:
        print(f"Removed {len(removed)} install metadata file(s) from '{ROLES_DIR_NAME}'")
    return removed
