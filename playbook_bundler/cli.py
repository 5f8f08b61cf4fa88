"""Command-line entry point for building playbook bundles.

Examples
--------
Bundle a playbook together with its variables and an extra templates folder::

    bundle-playbook -f deploy/site.yml -v deploy/prod.yml -d deploy/templates \
        --ansible-version 2.14.1 --python-package boto3

Every option can also be supplied through a ``BUNDLE_PLAYBOOK_<OPTION>``
environment variable, for example ``BUNDLE_PLAYBOOK_OUTPUT=/tmp/site.run``.
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from . import __version__
from .assets import RuntimeAssets
from .config import resolve_build_config
from .errors import BundleError
from .staging import GalaxyResolver, build_bundle

__all__ = ["app", "bundle", "main"]

ENV_PREFIX = "BUNDLE_PLAYBOOK_"

app = App(
    name="bundle-playbook",
    help="Bundle an Ansible playbook into a reproducible self-extracting file.",
    version=__version__,
    config=cyclopts.config.Env(ENV_PREFIX, command=False),
)


@app.default
def bundle(
    *,
    playbook_file: typ.Annotated[
        Path | None, Parameter(name=["--playbook-file", "-f"])
    ] = None,
    requirements_file: typ.Annotated[
        Path | None, Parameter(name=["--requirements-file", "-r"])
    ] = None,
    vars_file: typ.Annotated[Path | None, Parameter(name=["--vars-file", "-v"])] = None,
    extra_deps: typ.Annotated[
        list[Path] | None, Parameter(name=["--extra-deps", "-d"])
    ] = None,
    ansible_version: typ.Annotated[
        str | None, Parameter(name="--ansible-version")
    ] = None,
    python_package: typ.Annotated[
        list[str] | None, Parameter(name="--python-package")
    ] = None,
    output: typ.Annotated[Path | None, Parameter(name=["--output", "-o"])] = None,
    checksum: bool = False,
    galaxy_executable: str = "ansible-galaxy",
) -> int:
    """Build a self-extracting bundle for a playbook.

    Parameters
    ----------
    playbook_file : Path
        Playbook to bundle. Required.
    requirements_file : Path | None
        Galaxy requirements file. Defaults to ``requirements.yml`` beside the
        playbook when present.
    vars_file : Path | None
        Variables file passed to the playbook at runtime.
    extra_deps : list[Path] | None
        Extra file or directory to bundle. Repeatable.
    ansible_version : str | None
        Ansible version to install on the target. Latest when omitted.
    python_package : list[str] | None
        Extra Python requirement to install on the target. Repeatable.
    output : Path | None
        Bundle path. Defaults to ``<playbook_dir>/<playbook_name>.run``.
    checksum : bool
        Also write a ``.sha256`` file next to the bundle.
    galaxy_executable : str
        ``ansible-galaxy`` executable used to install external roles.

    Returns
    -------
    int
        ``0`` on success, ``1`` when the build fails.
    """
    try:
        config = resolve_build_config(
            playbook_file,
            requirements_file=requirements_file,
            vars_file=vars_file,
            extra_deps=extra_deps or (),
            ansible_version=ansible_version,
            python_packages=python_package or (),
            output=output,
            checksum=checksum,
        )
        result = build_bundle(
            config,
            resolver=GalaxyResolver(galaxy_executable),
            assets=RuntimeAssets.bundled().verify(),
        )
    except BundleError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Bundle written to '{result.output}'.")
    if result.checksum is not None:
        print(f"sha256: {result.checksum}")
    return 0


def main(tokens: typ.Sequence[str] | None = None) -> int:
    """Parse ``tokens`` (defaults to ``sys.argv[1:]``) and run the build."""
    result = app(tokens)
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    raise SystemExit(main())
