"""Copy the playbook and its local inputs into the staging area."""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from ..fs_utils import copy_entry, safe_destination_path
from ..layout import (
    ANSIBLE_CONFIG_NAME,
    PLAYBOOK_NAME,
    REQUIREMENTS_NAME,
    ROLES_DIR_NAME,
    VARS_NAME,
)

if typ.TYPE_CHECKING:
    from ..assets import RuntimeAssets
    from ..config import BuildConfig

__all__ = ["StagedEntry", "assemble_content", "plan_content"]


@dataclasses.dataclass(frozen=True, slots=True)
class StagedEntry:
    """A source path and the name it takes inside the staging area."""

    source: Path
    destination: str


def plan_content(config: BuildConfig, assets: RuntimeAssets) -> list[StagedEntry]:
    """Return the entries to stage for ``config`` in copy order.

    Examples
    --------
    >>> [entry.destination for entry in plan_content(config, assets)]  # doctest: +SKIP
    ['playbook.yml', 'roles', 'requirements.yml', 'files', 'ansible.cfg']
    """

    entries = [StagedEntry(config.playbook_file, PLAYBOOK_NAME)]
    if config.roles_dir.is_dir():
        entries.append(StagedEntry(config.roles_dir, ROLES_DIR_NAME))
    if config.requirements_file is not None:
        entries.append(StagedEntry(config.requirements_file, REQUIREMENTS_NAME))
    if config.vars_file is not None:
        entries.append(StagedEntry(config.vars_file, VARS_NAME))
    entries.extend(StagedEntry(dep, dep.name) for dep in config.extra_deps)
    entries.append(StagedEntry(assets.ansible_config, ANSIBLE_CONFIG_NAME))
    return entries


def assemble_content(
    config: BuildConfig, staging_dir: Path, assets: RuntimeAssets
) -> list[Path]:
    """Copy every bundle input into ``staging_dir``.

    Parameters
    ----------
    config : BuildConfig
        Resolved build configuration.
    staging_dir : Path
        Acquired staging directory.
    assets : RuntimeAssets
        Supplies the fixed ``ansible.cfg``.

    Returns
    -------
    list[Path]
        Staged destinations in copy order.

    Raises
    ------
    BundleError
        Raised when an input cannot be copied or a destination would escape
        the staging directory.
    """

    staged: list[Path] = []
    for entry in plan_content(config, assets):
        destination = safe_destination_path(staging_dir, entry.destination)
        copy_entry(entry.source, destination)
        print(f"Staged '{entry.source}' -> '{entry.destination}'")
        staged.append(destination)
    return staged
