"""
Mathematical helper functions for rocket state estimation.

Provides common mathematical operations used throughout the system:
- Approximate comparison, clamping and interpolation
- Quaternion products and frame rotation

Quaternions are ordered [w, x, y, z]. Orientation quaternions reported
by the IMU rotate vectors from the rocket frame into the world frame.

All vector functions accept numpy arrays or anything convertible to one
(including utils.matrix.Vector) and return numpy arrays.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray


# Type aliases for clarity
Vector3 = NDArray[np.float64]  # 3D vector [x, y, z]
Quaternion = NDArray[np.float64]  # [w, x, y, z]


def approx_equal(a: float, b: float, tolerance: float = 1e-6) -> bool:
    """
    Check whether two numbers differ by at most tolerance.

    Example:
        >>> approx_equal(0.1 + 0.2, 0.3)
        True
    """
    return abs(a - b) <= tolerance


def clamp(value: float, min_value: float, max_value: float) -> float:
    """
    Clamp a value to a specified range.

    Args:
        value: Value to clamp
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Value clamped to [min_value, max_value]

    Example:
        >>> clamp(15, 0, 10)
        10
        >>> clamp(-5, 0, 10)
        0
    """
    return max(min_value, min(value, max_value))


def lerp(a: float, b: float, t: float) -> float:
    """
    Linear interpolation between two values.

    Args:
        a: Start value
        b: End value
        t: Interpolation factor (0 = a, 1 = b)

    Returns:
        Interpolated value
    """
    return a + (b - a) * clamp(t, 0.0, 1.0)


# =============================================================================
# Quaternion Operations
# =============================================================================


def quaternion_conjugate(quat: ArrayLike) -> Quaternion:
    """Return the conjugate [w, -x, -y, -z]."""
    w, x, y, z = np.asarray(quat, dtype=np.float64)
    return np.array([w, -x, -y, -z])


def quaternion_multiply(q1: ArrayLike, q2: ArrayLike) -> Quaternion:
    """
    Hamilton product q1 * q2.

    Args:
        q1: Left quaternion [w, x, y, z]
        q2: Right quaternion [w, x, y, z]

    Returns:
        Product quaternion [w, x, y, z]
    """
    w1, x1, y1, z1 = np.asarray(q1, dtype=np.float64)
    w2, x2, y2, z2 = np.asarray(q2, dtype=np.float64)

    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ])


def rotate_vector(quat: ArrayLike, vector: ArrayLike) -> Vector3:
    """
    Rotate a 3D vector by a unit quaternion.

    Computes the sandwich product q * [0, v] * q^-1. For a unit
    quaternion the inverse is the conjugate.

    Args:
        quat: Unit quaternion [w, x, y, z]
        vector: Vector [x, y, z] in the source frame

    Returns:
        Vector expressed in the rotated frame

    Example:
        >>> half = np.sqrt(0.5)
        >>> rotate_vector([half, half, 0, 0], [0, 0, 1])  # 90 deg about x
        array([ 0., -1.,  0.])
    """
    pure = np.concatenate(([0.0], np.asarray(vector, dtype=np.float64)))
    rotated = quaternion_multiply(quaternion_multiply(quat, pure), quaternion_conjugate(quat))
    return rotated[1:]
