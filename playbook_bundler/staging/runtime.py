"""Runtime requirement manifest and entrypoint installation."""

from __future__ import annotations

import stat
import typing as typ
from pathlib import Path

from ..fs_utils import copy_entry
from ..layout import ENTRYPOINT_NAME, RUNTIME_REQUIREMENTS_NAME

if typ.TYPE_CHECKING:
    from ..assets import RuntimeAssets

__all__ = [
    "RUNTIME_PACKAGE",
    "compose_runtime_requirements",
    "install_entrypoint",
    "write_runtime_requirements",
]

RUNTIME_PACKAGE = "ansible"


def compose_runtime_requirements(
    ansible_version: str | None, python_packages: typ.Iterable[str] = ()
) -> list[str]:
    """Return the runtime requirement lines, Ansible first.

    Without a version Ansible stays unpinned and is resolved on the target
    machine at install time. Package specifiers are passed through verbatim.

    Examples
    --------
    >>> compose_runtime_requirements("2.14.1", ["boto==1.2.0"])
    ['ansible==2.14.1', 'boto==1.2.0']
    >>> compose_runtime_requirements(None)
    ['ansible']
    """

    runtime = (
        f"{RUNTIME_PACKAGE}=={ansible_version}" if ansible_version else RUNTIME_PACKAGE
    )
    return [runtime, *python_packages]


def write_runtime_requirements(
    staging_dir: Path,
    ansible_version: str | None,
    python_packages: typ.Iterable[str] = (),
) -> Path:
    """Write ``requirements.txt`` into ``staging_dir`` and return its path."""

    lines = compose_runtime_requirements(ansible_version, python_packages)
    manifest = staging_dir / RUNTIME_REQUIREMENTS_NAME
    manifest.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    print(f"Wrote '{RUNTIME_REQUIREMENTS_NAME}' ({len(lines)} requirement(s))")
    return manifest


def install_entrypoint(staging_dir: Path, assets: RuntimeAssets) -> Path:
    """Copy the runtime entrypoint and make it executable by owner and group."""

    destination = copy_entry(assets.entrypoint, staging_dir / ENTRYPOINT_NAME)
    mode = destination.stat().st_mode
    destination.chmod(stat.S_IMODE(mode) | stat.S_IXUSR | stat.S_IXGRP)
    print(f"Installed entrypoint '{ENTRYPOINT_NAME}'")
    return destination
