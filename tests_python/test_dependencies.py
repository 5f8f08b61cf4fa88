"""Tests for resolving external roles into the staging area."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from bundle_test_helpers import FakeResolver, write_galaxy_script

from playbook_bundler.errors import DependencyResolutionError
from playbook_bundler.staging import (
    GalaxyResolver,
    materialize_dependencies,
    strip_install_metadata,
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="requires a POSIX shell")


@pytest.fixture
def staging(tmp_path: Path) -> Path:
    """Return a staging directory holding a requirements descriptor."""

    root = tmp_path / "stage"
    root.mkdir()
    (root / "requirements.yml").write_text(
        "- src: geerlingguy.docker\n", encoding="utf-8"
    )
    return root


def test_materialize_skips_without_descriptor(tmp_path: Path) -> None:
    """No descriptor means the resolver is never invoked."""

    resolver = FakeResolver()

    removed = materialize_dependencies(tmp_path, resolver)

    assert removed == []
    assert resolver.calls == [], "Resolver should not run without requirements.yml"
    assert not (tmp_path / "roles").exists()


def test_materialize_installs_into_roles(staging: Path) -> None:
    """The resolver receives the staged descriptor and the roles directory."""

    resolver = FakeResolver(roles=("acme.web", "acme.db"))

    materialize_dependencies(staging, resolver)

    assert resolver.calls == [(staging / "requirements.yml", staging / "roles")]
    assert (staging / "roles" / "acme.web" / "tasks" / "main.yml").is_file()
    assert (staging / "roles" / "acme.db" / "tasks" / "main.yml").is_file()


def test_materialize_strips_install_metadata(staging: Path) -> None:
    """No per-role install metadata survives a successful resolution."""

    resolver = FakeResolver(roles=("acme.web", "acme.db"))

    removed = materialize_dependencies(staging, resolver)

    assert [path.relative_to(staging).as_posix() for path in removed] == [
        "roles/acme.db/meta/.galaxy_install_info",
        "roles/acme.web/meta/.galaxy_install_info",
    ]
    assert list(staging.rglob(".galaxy_install_info")) == [], (
        "Install metadata must be removed from the staging area"
    )
    assert (staging / "roles" / "acme.web" / "meta").is_dir(), (
        "Only the metadata file is removed, not its directory"
    )


def test_materialize_failure_raises(staging: Path) -> None:
    """A non-zero resolver exit aborts with the status and its stderr."""

    with pytest.raises(DependencyResolutionError) as exc:
        materialize_dependencies(staging, FakeResolver(returncode=4))

    assert exc.value.returncode == 4
    assert "exit 4" in str(exc.value)
    assert "role not found" in str(exc.value)


def test_strip_install_metadata_handles_missing_directory(tmp_path: Path) -> None:
    """Stripping a directory that does not exist is a no-op."""

    assert strip_install_metadata(tmp_path / "roles") == []


def test_galaxy_command_arguments() -> None:
    """Individual role errors are ignored; the install target is explicit."""

    resolver = GalaxyResolver()

    assert resolver.command_args(Path("/s/requirements.yml"), Path("/s/roles")) == [
        "install",
        "--ignore-errors",
        "-r",
        "/s/requirements.yml",
        "-p",
        "/s/roles",
    ]


@posix_only
def test_galaxy_resolver_runs_executable(staging: Path, tmp_path: Path) -> None:
    """The production adapter runs the executable and reports success."""

    script = write_galaxy_script(
        tmp_path / "ansible-galaxy",
        'mkdir -p "$6/acme.web/meta"\n'
        'date > "$6/acme.web/meta/.galaxy_install_info"\n'
        'echo "- acme.web was installed successfully"',
    )

    removed = materialize_dependencies(staging, GalaxyResolver(str(script)))

    assert (staging / "roles" / "acme.web" / "meta").is_dir()
    assert len(removed) == 1, "The installed role's metadata should be stripped"


@posix_only
def test_galaxy_resolver_reports_failure(staging: Path, tmp_path: Path) -> None:
    """A failing executable surfaces as a resolution error."""

    script = write_galaxy_script(
        tmp_path / "ansible-galaxy", 'echo "ERROR! no such role" >&2\nexit 3'
    )

    outcome = GalaxyResolver(str(script)).resolve(
        staging / "requirements.yml", staging / "roles"
    )

    assert outcome.ok is False
    assert outcome.returncode == 3
    assert "no such role" in outcome.stderr


def test_galaxy_resolver_missing_executable(staging: Path) -> None:
    """A resolver that cannot be found is fatal, not ignored."""

    resolver = GalaxyResolver("bundle-playbook-missing-galaxy")

    with pytest.raises(DependencyResolutionError, match="command not found"):
        materialize_dependencies(staging, resolver)


@posix_only
def test_galaxy_resolver_echoes_warnings_on_success(
    staging: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Skipped roles are reported even when the overall install succeeds."""

    script = write_galaxy_script(
        tmp_path / "ansible-galaxy",
        'echo "- acme.web was installed successfully"\n'
        'echo "ERROR! - acme.db could not be found, skipping" >&2\n'
        "exit 0",
    )

    outcome = GalaxyResolver(str(script)).resolve(
        staging / "requirements.yml", staging / "roles"
    )

    captured = capsys.readouterr()
    assert outcome.ok is True
    assert "acme.db could not be found" in captured.err, (
        "Per-role failures must reach stderr"
    )
    assert "acme.web was installed" in captured.out
