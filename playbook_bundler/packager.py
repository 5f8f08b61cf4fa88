"""Write the self-extracting bundle file.

A bundle is a shell header followed by the raw bytes of a gzip-compressed tar
archive of the staging area. The header's ``UNCOMPRESS_SKIP`` value is the
1-based line number on which the archive starts, so the header can hand the
payload to ``tail -n +UNCOMPRESS_SKIP "$0" | tar -xz``.

The output is reproducible: every staged entry is stamped with one reference
timestamp, archive members are added in lexicographic order with neutral
ownership, and the gzip stream carries neither a filename nor a timestamp.
"""

from __future__ import annotations

import dataclasses
import functools
import gzip
import os
import re
import tarfile
import tempfile
import typing as typ
from pathlib import Path

from .environment import resolve_source_date_epoch
from .errors import BundleError
from .fs_utils import iter_sorted_entries

if typ.TYPE_CHECKING:
    from .assets import RuntimeAssets

__all__ = [
    "BUNDLE_MODE",
    "PackagedBundle",
    "SKIP_TOKEN",
    "VERSION_TOKEN",
    "count_lines",
    "normalise_timestamps",
    "package_bundle",
    "render_header",
    "write_archive",
]

SKIP_TOKEN = "@UNCOMPRESS_SKIP@"
VERSION_TOKEN = "@VERSION@"
BUNDLE_MODE = 0o755

_TOKEN_PATTERN = re.compile(r"@(UNCOMPRESS_SKIP|VERSION)@")


@dataclasses.dataclass(frozen=True, slots=True)
class PackagedBundle:
    """Summary of a written bundle."""

    path: Path
    uncompress_skip: int
    members: int


def render_header(template: str, *, skip: int, version: str) -> str:
    """Substitute the header tokens in a single pass.

    Replacement values are never rescanned, so a version string that happens
    to contain a token is inserted literally.

    Raises
    ------
    BundleError
        Raised when the substitution would change the header's line count.

    Examples
    --------
    >>> render_header("SKIP=@UNCOMPRESS_SKIP@ V=@VERSION@\\n", skip=3, version="1.0")
    'SKIP=3 V=1.0\\n'
    """

    values = {"UNCOMPRESS_SKIP": str(skip), "VERSION": version}
    rendered = _TOKEN_PATTERN.sub(lambda match: values[match.group(1)], template)
    if rendered.count("\n") != template.count("\n"):
        message = f"Header substitution changed the line count (version={version!r})"
        raise BundleError(message)
    return rendered


def count_lines(handle: typ.BinaryIO) -> int:
    """Return the number of newline-terminated lines in ``handle``."""

    handle.seek(0)
    return sum(chunk.count(b"\n") for chunk in iter(lambda: handle.read(65536), b""))


def normalise_timestamps(root: Path, epoch: int) -> int:
    """Set access and modification times below ``root`` to ``epoch``.

    Symbolic links are stamped themselves rather than their targets where the
    platform allows it. Returns the number of entries touched, ``root``
    included.
    """

    times = (epoch, epoch)
    touched = 0
    for _, path in iter_sorted_entries(root):
        if path.is_symlink():
            if os.utime not in os.supports_follow_symlinks:
                continue
            os.utime(path, times, follow_symlinks=False)
        else:
            os.utime(path, times)
        touched += 1
    os.utime(root, times)
    return touched + 1


def _normalise_member(info: tarfile.TarInfo, *, epoch: int) -> tarfile.TarInfo:
    info.mtime = epoch
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


def write_archive(handle: typ.BinaryIO, staging_dir: Path, epoch: int) -> int:
    """Append a gzip-compressed tar of ``staging_dir`` at ``handle``'s position.

    Members are named relative to ``staging_dir``. Returns the member count.
    """

    normalise = functools.partial(_normalise_member, epoch=epoch)
    members = 0
    with gzip.GzipFile(filename="", mode="wb", fileobj=handle, mtime=0) as stream:
        with tarfile.open(fileobj=stream, mode="w", format=tarfile.GNU_FORMAT) as tar:
            for relative, path in iter_sorted_entries(staging_dir):
                tar.add(path, arcname=relative, recursive=False, filter=normalise)
                members += 1
    return members


def _load_template(path: Path) -> str:
    template = path.read_text(encoding="utf-8")
    if SKIP_TOKEN not in template:
        message = f"Header template {path} does not contain {SKIP_TOKEN}"
        raise BundleError(message)
    if not template.endswith("\n"):
        message = f"Header template {path} must end with a newline"
        raise BundleError(message)
    return template


def package_bundle(
    staging_dir: Path,
    output: Path,
    assets: RuntimeAssets,
    *,
    version: str,
    epoch: int | None = None,
) -> PackagedBundle:
    """Write the bundle for ``staging_dir`` to ``output``.

    Parameters
    ----------
    staging_dir : Path
        Fully populated staging directory.
    output : Path
        Destination of the bundle. Replaced atomically once complete.
    assets : RuntimeAssets
        Supplies the header template.
    version : str
        Version string embedded in the header.
    epoch : int | None, optional
        Reference timestamp for every entry. Defaults to
        :func:`~playbook_bundler.environment.resolve_source_date_epoch`.

    Returns
    -------
    PackagedBundle
        Path, computed ``UNCOMPRESS_SKIP`` and archive member count.

    Raises
    ------
    BundleError
        Raised when the header template is malformed or substitution would
        alter its line count. No file is left at ``output`` on failure.
    """

    reference = resolve_source_date_epoch() if epoch is None else epoch
    template = _load_template(assets.header_template)

    output.parent.mkdir(parents=True, exist_ok=True)
    fd, partial_name = tempfile.mkstemp(
        prefix=f".{output.name}.", suffix=".partial", dir=output.parent
    )
    partial = Path(partial_name)
    try:
        with os.fdopen(fd, "w+b") as handle:
            handle.write(template.encode("utf-8"))
            # Measured before substitution; render_header preserves line count.
            skip = count_lines(handle) + 1
            header = render_header(template, skip=skip, version=version)
            handle.seek(0)
            handle.write(header.encode("utf-8"))
            handle.truncate()

            normalise_timestamps(staging_dir, reference)
            members = write_archive(handle, staging_dir, reference)
        partial.chmod(BUNDLE_MODE)
        os.replace(partial, output)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise

    print(f"Wrote bundle '{output}' ({members} entries, UNCOMPRESS_SKIP={skip})")
    return PackagedBundle(path=output, uncompress_skip=skip, members=members)
