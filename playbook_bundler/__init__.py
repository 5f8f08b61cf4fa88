"""Build self-extracting, reproducible bundles of Ansible playbooks."""

__version__ = "0.1.0"

from .assets import RuntimeAssets
from .config import BuildConfig, default_output_path, resolve_build_config
from .errors import BundleError, ConfigurationError, DependencyResolutionError
from .staging import (
    BuildResult,
    DependencyResolver,
    GalaxyResolver,
    ResolutionOutcome,
    StagingArea,
    build_bundle,
)

__all__ = [
    "BuildConfig",
    "BuildResult",
    "BundleError",
    "ConfigurationError",
    "DependencyResolutionError",
    "DependencyResolver",
    "GalaxyResolver",
    "ResolutionOutcome",
    "RuntimeAssets",
    "StagingArea",
    "__version__",
    "build_bundle",
    "default_output_path",
    "resolve_build_config",
]
