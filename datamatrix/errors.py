"""Error taxonomy for the data matrix."""
from __future__ import annotations


class DataMatrixError(Exception):
    """Base class for all data matrix errors."""


class ConfigurationError(DataMatrixError, ValueError):
    """Bad role, weight, scale or conversion setup."""


class UnsupportedFormatError(DataMatrixError, TypeError):
    """No codec is registered for a storage kind or conversion selector."""


class OutOfRangeError(DataMatrixError, IndexError):
    """Exemplar index outside [0, exemplar_count)."""


class DegenerateDistributionError(DataMatrixError, ValueError):
    """Weighted draw attempted when every weight is zero."""


class UninitializedError(DataMatrixError, RuntimeError):
    """Operation invoked before an array is attached (or a sampler is built)."""


__all__ = [
    "DataMatrixError",
    "ConfigurationError",
    "UnsupportedFormatError",
    "OutOfRangeError",
    "DegenerateDistributionError",
    "UninitializedError",
]
