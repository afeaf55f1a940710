"""
Error taxonomy of the Morlet CWT core.

Every error is raised synchronously by the operation that detects it; no
operation returns partial results.
"""


class CWTError(Exception):
    """Base error for all wavelet-transform failures."""


class InvalidRangeError(CWTError, ValueError):
    """Raised when period bounds (or a period band) are not 0 < lower < upper."""


class DegenerateGridError(CWTError, ValueError):
    """Raised when a scale grid cannot hold at least one scale."""


class NonFiniteInputError(CWTError, ValueError):
    """Raised when a series contains NaN or infinite samples."""


class EmptyBandError(CWTError, ValueError):
    """Raised when a reconstruction band selects no scale of the grid."""


class ShapeMismatchError(CWTError, ValueError):
    """Raised when grid, series and coefficient dimensions disagree."""
