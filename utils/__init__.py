"""
Utility modules for the rocket tracker.

This package contains the fixed-size matrix engine and the helpers used
throughout the tracker, including logging, math operations, sample
history and telemetry recording.
"""

from utils.logger import setup_logger, get_logger
from utils.math_helpers import approx_equal, clamp, rotate_vector
from utils.matrix import Matrix, Vector, DimensionError, SingularMatrixError

__all__ = [
    "setup_logger",
    "get_logger",
    "approx_equal",
    "clamp",
    "rotate_vector",
    "Matrix",
    "Vector",
    "DimensionError",
    "SingularMatrixError",
]
