"""Staging pipeline package assembling bundle contents."""

from .area import StagingArea
from .assembly import StagedEntry, assemble_content, plan_content
from .dependencies import (
    DependencyResolver,
    GalaxyResolver,
    ResolutionOutcome,
    materialize_dependencies,
    strip_install_metadata,
)
from .pipeline import BuildResult, build_bundle
from .runtime import (
    compose_runtime_requirements,
    install_entrypoint,
    write_runtime_requirements,
)

__all__ = [
    "BuildResult",
    "DependencyResolver",
    "GalaxyResolver",
    "ResolutionOutcome",
    "StagedEntry",
    "StagingArea",
    "assemble_content",
    "build_bundle",
    "compose_runtime_requirements",
    "install_entrypoint",
    "materialize_dependencies",
    "plan_content",
    "strip_install_metadata",
    "write_runtime_requirements",
]
