"""Shared helpers for the bundle test suites."""

from __future__ import annotations

import dataclasses
import io
import re
import tarfile
import time
from pathlib import Path

from playbook_bundler.staging import ResolutionOutcome

__all__ = [
    "FakeResolver",
    "bundle_payload",
    "bundle_skip",
    "read_member",
    "write_galaxy_script",
    "write_playbook_project",
]

_SKIP_PATTERN = re.compile(rb"^UNCOMPRESS_SKIP=(\d+)$", re.MULTILINE)


@dataclasses.dataclass
class FakeResolver:
    """Stand-in resolver that installs canned roles with volatile metadata.

    Parameters
    ----------
    returncode : int
        Exit status reported to the materializer.
    roles : tuple[str, ...]
        Role names written below the install target on success.
    """

    returncode: int = 0
    roles: tuple[str, ...] = ("geerlingguy.docker",)
    calls: list[tuple[Path, Path]] = dataclasses.field(default_factory=list)

    def resolve(self, descriptor: Path, target_dir: Path) -> ResolutionOutcome:
        self.calls.append((descriptor, target_dir))
        if self.returncode != 0:
            return ResolutionOutcome(self.returncode, stderr="role not found")
        for role in self.roles:
            role_dir = target_dir / role
            (role_dir / "tasks").mkdir(parents=True, exist_ok=True)
            (role_dir / "tasks" / "main.yml").write_text(
                f"- name: {role}\n  debug: msg=hello\n", encoding="utf-8"
            )
            (role_dir / "meta").mkdir(exist_ok=True)
            (role_dir / "meta" / ".galaxy_install_info").write_text(
                f"install_date: {time.time_ns()}\nversion: 1.0.0\n",
                encoding="utf-8",
            )
        return ResolutionOutcome(0)


def write_playbook_project(root: Path, *, requirements: bool = False) -> Path:
    """Populate ``root`` with a small playbook project and return the playbook.

    Parameters
    ----------
    root : Path
        Directory that will hold ``site.yml`` and its ``roles`` directory.
    requirements : bool
        When ``True`` also write a ``requirements.yml`` beside the playbook.
    """
    root.mkdir(parents=True, exist_ok=True)
    playbook = root / "site.yml"
    playbook.write_text(
        "- hosts: all\n  roles:\n    - common\n", encoding="utf-8"
    )
    tasks = root / "roles" / "common" / "tasks"
    tasks.mkdir(parents=True)
    (tasks / "main.yml").write_text(
        "- name: ping\n  ping:\n", encoding="utf-8"
    )
    files = root / "files"
    files.mkdir()
    (files / "motd").write_text("welcome\n", encoding="utf-8")
    (root / "prod.yml").write_text("env: prod\n", encoding="utf-8")
    if requirements:
        (root / "requirements.yml").write_text(
            "- src: geerlingguy.docker\n", encoding="utf-8"
        )
    return playbook


def write_galaxy_script(path: Path, body: str) -> Path:
    """Write an executable shell script standing in for ``ansible-galaxy``.

    The script receives ``install --ignore-errors -r DESCRIPTOR -p TARGET``,
    so the install target is ``$6``.
    """
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def bundle_skip(data: bytes) -> int:
    """Return the ``UNCOMPRESS_SKIP`` value embedded in a bundle."""
    match = _SKIP_PATTERN.search(data)
    if match is None:
        message = "Bundle header does not define UNCOMPRESS_SKIP"
        raise AssertionError(message)
    return int(match.group(1))


def bundle_payload(data: bytes) -> bytes:
    """Return the bytes starting on line ``UNCOMPRESS_SKIP`` of a bundle."""
    skip = bundle_skip(data)
    return data.split(b"\n", skip - 1)[-1]


def read_member(data: bytes, name: str) -> bytes:
    """Return the contents of archive member ``name`` from a bundle."""
    with tarfile.open(fileobj=io.BytesIO(bundle_payload(data)), mode="r:gz") as tar:
        extracted = tar.extractfile(name)
        if extracted is None:
            message = f"Archive member {name} is not a regular file"
            raise AssertionError(message)
        return extracted.read()
