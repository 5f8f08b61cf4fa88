"""Build configuration model and resolver for the bundle pipeline.

This module turns raw option values into an immutable :class:`BuildConfig`.
All defaults are resolved here, exactly once, and every referenced path is
checked for readability before any staging work begins.

Usage
-----
Resolve a configuration for a playbook with an explicit variables file::

    from pathlib import Path
    from playbook_bundler.config import resolve_build_config

    config = resolve_build_config(
        Path("deploy/site.yml"), vars_file=Path("deploy/prod.yml")
    )
    print(f"Bundle will be written to {config.output}")
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ
from pathlib import Path

from .errors import ConfigurationError
from .layout import REQUIREMENTS_NAME, RESERVED_STAGING_NAMES

__all__ = [
    "BUNDLE_SUFFIX",
    "BuildConfig",
    "default_output_path",
    "resolve_build_config",
]

BUNDLE_SUFFIX = ".run"


@dataclasses.dataclass(frozen=True, slots=True)
class BuildConfig:
    """Concrete configuration produced by :func:`resolve_build_config`.

    Parameters
    ----------
    playbook_dir : Path
        Absolute directory containing the playbook. Local roles are looked up
        beneath it.
    playbook_file : Path
        Absolute path to the playbook.
    output : Path
        Absolute path of the bundle that will be written.
    requirements_file : Path | None, optional
        Galaxy requirements descriptor, when the playbook has external roles.
    vars_file : Path | None, optional
        Variables file passed to the playbook at runtime.
    extra_deps : tuple[Path, ...], optional
        Additional files or directories copied next to the playbook.
    ansible_version : str | None, optional
        Exact Ansible version pinned in the runtime requirements.
    python_packages : tuple[str, ...], optional
        Extra runtime requirement specifiers, kept verbatim and in order.
    checksum : bool, default=False
        When ``True`` a ``.sha256`` sidecar is written next to the bundle.

    Examples
    --------
    >>> config = BuildConfig(  # doctest: +SKIP
    ...     playbook_dir=Path("/srv/deploy"),
    ...     playbook_file=Path("/srv/deploy/site.yml"),
    ...     output=Path("/srv/deploy/site.run"),
    ... )
    >>> config.has_requirements  # doctest: +SKIP
    False
    """

    playbook_dir: Path
    playbook_file: Path
    output: Path
    requirements_file: Path | None = None
    vars_file: Path | None = None
    extra_deps: tuple[Path, ...] = ()
    ansible_version: str | None = None
    python_packages: tuple[str, ...] = ()
    checksum: bool = False

    @property
    def has_requirements(self) -> bool:
        """Return ``True`` when external roles must be resolved."""
        return self.requirements_file is not None

    @property
    def roles_dir(self) -> Path:
        """Local roles directory colocated with the playbook."""
        return self.playbook_dir / "roles"


def default_output_path(playbook_file: Path) -> Path:
    """Return the bundle path derived from ``playbook_file``.

    Examples
    --------
    >>> default_output_path(Path("/a/b/site.yml")).as_posix()
    '/a/b/site.run'
    """

    return playbook_file.parent / f"{playbook_file.stem}{BUNDLE_SUFFIX}"


def resolve_build_config(
    playbook_file: Path | None,
    *,
    requirements_file: Path | None = None,
    vars_file: Path | None = None,
    extra_deps: typ.Iterable[Path] = (),
    ansible_version: str | None = None,
    python_packages: typ.Iterable[str] = (),
    output: Path | None = None,
    checksum: bool = False,
) -> BuildConfig:
    """Validate raw option values and return a :class:`BuildConfig`.

    Parameters
    ----------
    playbook_file : Path | None
        Playbook to bundle. Mandatory.
    requirements_file : Path | None, optional
        Explicit requirements descriptor. Defaults to ``requirements.yml``
        beside the playbook when that file exists.
    vars_file : Path | None, optional
        Variables file to bundle.
    extra_deps : Iterable[Path], optional
        Extra files or directories to bundle, in order.
    ansible_version : str | None, optional
        Ansible version to pin at runtime.
    python_packages : Iterable[str], optional
        Extra runtime requirement specifiers.
    output : Path | None, optional
        Bundle destination. Defaults to :func:`default_output_path`.
    checksum : bool, default=False
        Request a checksum sidecar for the bundle.

    Returns
    -------
    BuildConfig
        Fully resolved configuration with absolute paths.

    Raises
    ------
    ConfigurationError
        Raised when a mandatory or declared path is missing or unreadable, or
        when two extra dependencies would occupy the same bundle entry.
    """

    if playbook_file is None:
        message = "A playbook file is required (--playbook-file)."
        raise ConfigurationError(message)
    playbook = _require_readable(Path(playbook_file), "Playbook file")
    if not playbook.is_file():
        message = f"Playbook file is not a regular file: {playbook}"
        raise ConfigurationError(message)
    playbook_dir = playbook.parent

    requirements = _resolve_requirements(playbook_dir, requirements_file)
    variables = (
        _require_readable(Path(vars_file), "Variables file")
        if vars_file is not None
        else None
    )
    deps = tuple(
        _require_readable(Path(dep), "Extra dependency") for dep in extra_deps
    )
    _validate_extra_dep_names(deps)

    destination = (
        Path(output).absolute() if output is not None else default_output_path(playbook)
    )

    return BuildConfig(
        playbook_dir=playbook_dir,
        playbook_file=playbook,
        output=destination,
        requirements_file=requirements,
        vars_file=variables,
        extra_deps=deps,
        ansible_version=ansible_version or None,
        python_packages=tuple(python_packages),
        checksum=checksum,
    )


def _require_readable(path: Path, label: str) -> Path:
    """Return ``path`` made absolute, or raise when it cannot be read."""

    absolute = path.absolute()
    if not absolute.exists():
        message = f"{label} not found: {absolute}"
        raise ConfigurationError(message)
    if not os.access(absolute, os.R_OK):
        message = f"{label} is not readable: {absolute}"
        raise ConfigurationError(message)
    return absolute


def _resolve_requirements(
    playbook_dir: Path, requirements_file: Path | None
) -> Path | None:
    if requirements_file is not None:
        return _require_readable(Path(requirements_file), "Requirements file")
    candidate = playbook_dir / REQUIREMENTS_NAME
    if candidate.is_file() and os.access(candidate, os.R_OK):
        return candidate
    return None


def _validate_extra_dep_names(deps: tuple[Path, ...]) -> None:
    """Ensure every extra dependency maps to its own bundle entry."""

    seen: dict[str, Path] = {}
    for dep in deps:
        name = dep.name
        if name in RESERVED_STAGING_NAMES:
            message = (
                f"Extra dependency {dep} would overwrite the reserved bundle "
                f"entry '{name}'"
            )
            raise ConfigurationError(message)
        if previous := seen.get(name):
            message = (
                "Extra dependency name collision: "
                f"'{name}' would bundle both {previous} and {dep}"
            )
            raise ConfigurationError(message)
        seen[name] = dep
