"""Exception types raised by the bundle build pipeline."""

from __future__ import annotations

__all__ = ["BundleError", "ConfigurationError", "DependencyResolutionError"]


class BundleError(RuntimeError):
    """Raised when a bundle cannot be built."""


class ConfigurationError(BundleError):
    """Raised when build inputs are missing, unreadable or inconsistent."""


class DependencyResolutionError(BundleError):
    """Raised when the external role resolver exits unsuccessfully.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    returncode : int
        Exit status reported by the resolver.
    """

    def __init__(self, message: str, returncode: int) -> None:
        super().__init__(message)
        self.returncode = returncode
