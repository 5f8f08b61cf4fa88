"""Environment helpers shared by the bundle toolchain."""

from __future__ import annotations

import os

from .errors import ConfigurationError

__all__ = ["DEFAULT_EPOCH", "resolve_source_date_epoch"]

# 1980-01-01T00:00:00Z, the earliest timestamp every archive format accepts.
DEFAULT_EPOCH = 315532800


def resolve_source_date_epoch(default: int = DEFAULT_EPOCH) -> int:
    """Return the reference timestamp applied to every archived entry.

    Parameters
    ----------
    default:
        Timestamp used when ``SOURCE_DATE_EPOCH`` is unset or empty.

    Raises
    ------
    ConfigurationError
        Raised when ``SOURCE_DATE_EPOCH`` is not a non-negative integer.
    """
    value = os.environ.get("SOURCE_DATE_EPOCH", "").strip()
    if not value:
        return default
    try:
        epoch = int(value)
    except ValueError as exc:
        message = f"SOURCE_DATE_EPOCH must be an integer, got {value!r}"
        raise ConfigurationError(message) from exc
    if epoch < 0:
        message = f"SOURCE_DATE_EPOCH must not be negative, got {epoch}"
        raise ConfigurationError(message)
    return epoch
