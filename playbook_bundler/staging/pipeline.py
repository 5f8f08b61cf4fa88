"""Sequential bundle build pipeline."""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from .. import __version__
from ..checksum_utils import checksum_path_for, write_checksum
from ..packager import package_bundle
from .area import StagingArea
from .assembly import assemble_content
from .dependencies import materialize_dependencies
from .runtime import install_entrypoint, write_runtime_requirements

if typ.TYPE_CHECKING:
    from ..assets import RuntimeAssets
    from ..config import BuildConfig
    from .dependencies import DependencyResolver

__all__ = ["BuildResult", "build_bundle"]


@dataclasses.dataclass(slots=True)
class BuildResult:
    """Outcome of :func:`build_bundle`."""

    output: Path
    uncompress_skip: int
    staged_entries: list[Path]
    removed_metadata: list[Path]
    checksum: str | None = None


def build_bundle(
    config: BuildConfig,
    *,
    resolver: DependencyResolver,
    assets: RuntimeAssets,
    version: str = __version__,
    epoch: int | None = None,
    staging_parent: Path | None = None,
) -> BuildResult:
    """Build the bundle described by ``config``.

    Parameters
    ----------
    config : BuildConfig
        Resolved configuration from
        :func:`~playbook_bundler.config.resolve_build_config`.
    resolver : DependencyResolver
        Resolver used when the playbook declares external roles.
    assets : RuntimeAssets
        Header template, entrypoint and ``ansible.cfg`` to bundle.
    version : str, optional
        Version embedded in the bundle header.
    epoch : int | None, optional
        Reference timestamp; see :func:`~playbook_bundler.packager.package_bundle`.
    staging_parent : Path | None, optional
        Directory in which the staging area is created.

    Returns
    -------
    BuildResult
        Summary describing the written bundle.

    Raises
    ------
    DependencyResolutionError
        Raised when external roles cannot be installed.
    BundleError
        Raised when any other stage fails.

    Notes
    -----
    The staging area is removed on every exit path. The output path is only
    written by the final packaging stage, so a failure leaves no bundle.
    """

    with StagingArea(staging_parent) as staging_dir:
        staged = assemble_content(config, staging_dir, assets)
        removed = materialize_dependencies(staging_dir, resolver)
        write_runtime_requirements(
            staging_dir, config.ansible_version, config.python_packages
        )
        install_entrypoint(staging_dir, assets)
        bundle = package_bundle(
            staging_dir, config.output, assets, version=version, epoch=epoch
        )

    digest: str | None = None
    if config.checksum:
        digest = write_checksum(bundle.path)
    else:
        # Drop a sidecar left behind by an earlier checksummed build.
        checksum_path_for(bundle.path).unlink(missing_ok=True)
    return BuildResult(
        output=bundle.path,
        uncompress_skip=bundle.uncompress_skip,
        staged_entries=staged,
        removed_metadata=removed,
        checksum=digest,
    )
