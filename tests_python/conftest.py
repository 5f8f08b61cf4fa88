"""Shared fixtures for the bundle builder test suite."""

from __future__ import annotations

import importlib
from pathlib import Path

import pytest
from bundle_test_helpers import FakeResolver, write_playbook_project


@pytest.fixture(scope="session")
def bundler() -> object:
    """Expose the top-level package for API boundary assertions."""

    return importlib.import_module("playbook_bundler")


@pytest.fixture(autouse=True)
def _clear_source_date_epoch(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a ``SOURCE_DATE_EPOCH`` from the host out of the tests."""

    monkeypatch.delenv("SOURCE_DATE_EPOCH", raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a playbook project without external roles; return the playbook."""

    return write_playbook_project(tmp_path / "project")


@pytest.fixture
def project_with_requirements(tmp_path: Path) -> Path:
    """Create a playbook project declaring Galaxy roles; return the playbook."""

    return write_playbook_project(tmp_path / "project", requirements=True)


@pytest.fixture
def staging_parent(tmp_path: Path) -> Path:
    """Directory under which test builds create their staging areas."""

    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def assets(bundler: object) -> object:
    """Return the runtime assets shipped with the package."""

    return bundler.RuntimeAssets.bundled().verify()


@pytest.fixture
def resolver() -> FakeResolver:
    """Return a resolver that installs one role successfully."""

    return FakeResolver()
