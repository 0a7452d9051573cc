"""
Fixed-dimension matrix and vector types for flight state estimation.

Matrices are small (at most 4x4), dense and single-precision. Their shape
is fixed when they are created and every operation checks shapes at
runtime, so a mismatched product fails immediately instead of
broadcasting. Arithmetic always returns new instances.

Usage:
    from utils.matrix import make_matrix2x2, invert2x2_unchecked

    m = make_matrix2x2(1, 11,
                       -7, 25)
    m_inv = invert2x2_unchecked(m)
"""

import numbers
import operator
from typing import Iterable, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray


# Largest supported row/column count
MAX_DIM = 4

# Storage precision. Process noise dominates float32 epsilon.
DTYPE = np.float32

Scalar = Union[int, float, np.floating]


class DimensionError(ValueError):
    """Raised when operand shapes are incompatible."""


class SingularMatrixError(ArithmeticError):
    """Raised by checked inversion when the determinant is zero."""


def _check_dim(value: int, name: str) -> int:
    value = operator.index(value)
    if not 1 <= value <= MAX_DIM:
        raise DimensionError(f"{name} must be in [1, {MAX_DIM}], got {value}")
    return value


def _check_index(index: int, bound: int, axis: str) -> int:
    index = operator.index(index)
    if not 0 <= index < bound:
        raise IndexError(f"{axis} index {index} out of range for size {bound}")
    return index


class Matrix:
    """
    Dense R x C matrix of single-precision reals.

    Elements are stored row-major. The shape never changes after
    construction; ``fill`` and item assignment mutate values only.

    Args:
        rows: Number of rows (1 to MAX_DIM)
        cols: Number of columns (1 to MAX_DIM)
        fill: Initial value of every element

    Example:
        >>> m = Matrix(2, 3)
        >>> m[0, 2] = 5.0
        >>> m.transpose().shape
        (3, 2)
    """

    __slots__ = ("_data",)

    # numpy scalars on the left defer to __rmul__ instead of going through __array__
    __array_ufunc__ = None

    def __init__(self, rows: int, cols: int, fill: Scalar = 0.0):
        rows = _check_dim(rows, "rows")
        cols = _check_dim(cols, "cols")
        self._data: NDArray[np.float32] = np.full((rows, cols), fill, dtype=DTYPE)

    # ==========================================================================
    # Construction helpers
    # ==========================================================================

    @classmethod
    def _wrap(cls, data: NDArray) -> "Matrix":
        """Build the right type around an already-shaped array."""
        rows, cols = data.shape
        result = Vector(rows) if cols == 1 else Matrix(rows, cols)
        result._data[...] = data
        return result

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Scalar]]) -> "Matrix":
        """
        Build a matrix from explicit row values.

        Args:
            rows: Sequence of equal-length rows

        Returns:
            New matrix holding the given values

        Raises:
            DimensionError: If rows are ragged or the shape is unsupported
        """
        row_list = [list(row) for row in rows]
        if not row_list or any(len(row) != len(row_list[0]) for row in row_list):
            raise DimensionError("Rows must be non-empty and of equal length")

        result = Matrix(len(row_list), len(row_list[0]))
        result._data[...] = row_list
        return result

    # ==========================================================================
    # Shape and element access
    # ==========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        """(rows, cols) of the matrix."""
        return self._data.shape

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    def fill(self, value: Scalar) -> None:
        """Set every element to value."""
        self._data.fill(value)

    def _element(self, key) -> Tuple[int, int]:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError("Matrix elements are addressed as m[row, col]")
        row = _check_index(key[0], self.rows, "row")
        col = _check_index(key[1], self.cols, "column")
        return row, col

    def __getitem__(self, key) -> float:
        return float(self._data[self._element(key)])

    def __setitem__(self, key, value: Scalar) -> None:
        self._data[self._element(key)] = value

    # ==========================================================================
    # Arithmetic
    # ==========================================================================

    def _require_same_shape(self, other: "Matrix", op: str) -> None:
        if not isinstance(other, Matrix):
            raise TypeError(f"Cannot {op} Matrix and {type(other).__name__}")
        if self.shape != other.shape:
            raise DimensionError(f"Cannot {op} {self.shape} and {other.shape}")

    def __add__(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "add")
        return Matrix._wrap(self._data + other._data)

    def __sub__(self, other: "Matrix") -> "Matrix":
        self._require_same_shape(other, "subtract")
        return Matrix._wrap(self._data - other._data)

    def __mul__(self, other: Union["Matrix", Scalar]) -> "Matrix":
        if isinstance(other, Matrix):
            if self.cols != other.rows:
                raise DimensionError(
                    f"Cannot multiply {self.shape} by {other.shape}"
                )
            return Matrix._wrap(self._data @ other._data)
        if isinstance(other, numbers.Real):
            return Matrix._wrap(self._data * DTYPE(other))
        return NotImplemented

    def __rmul__(self, other: Scalar) -> "Matrix":
        if isinstance(other, numbers.Real):
            return Matrix._wrap(self._data * DTYPE(other))
        return NotImplemented

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return self * other

    def transpose(self) -> "Matrix":
        """Return the C x R transpose."""
        return Matrix._wrap(self._data.T)

    # ==========================================================================
    # Comparison and conversion
    # ==========================================================================

    def __eq__(self, other: object) -> bool:
        # Exact comparison; callers needing tolerance compare explicitly
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None  # mutable

    def copy(self) -> "Matrix":
        return Matrix._wrap(self._data)

    def to_array(self) -> NDArray[np.float32]:
        """Copy of the elements as a 2D numpy array."""
        return self._data.copy()

    def view(self) -> NDArray[np.float32]:
        """
        Read-only numpy view over the element storage.

        The view reflects later mutations of this matrix. It is meant to be
        borrowed for a single read and must not be kept.
        """
        view = self._data.view()
        view.flags.writeable = False
        return view

    def __array__(self, dtype=None, copy=None):
        return np.array(self._data, dtype=dtype)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data.tolist()})"


class Vector(Matrix):
    """
    N x 1 matrix indexable by a single coordinate.

    Args:
        size: Number of elements (1 to MAX_DIM)
        fill: Initial value of every element
    """

    __slots__ = ()

    def __init__(self, size: int, fill: Scalar = 0.0):
        super().__init__(size, 1, fill)

    @classmethod
    def from_values(cls, values: Iterable[Scalar]) -> "Vector":
        """Build a vector from its elements in order."""
        value_list = list(values)
        result = Vector(len(value_list))
        result._data[:, 0] = value_list
        return result

    def _element(self, key) -> Tuple[int, int]:
        if isinstance(key, tuple):
            return super()._element(key)
        return _check_index(key, self.rows, "vector"), 0

    def __len__(self) -> int:
        return self.rows

    def __iter__(self):
        return iter(float(value) for value in self._data[:, 0])

    def to_array(self) -> NDArray[np.float32]:
        """Copy of the elements as a flat numpy array."""
        return self._data[:, 0].copy()

    def view(self) -> NDArray[np.float32]:
        """Read-only flat numpy view over the element storage."""
        view = self._data[:, 0]
        view.flags.writeable = False
        return view

    def __array__(self, dtype=None, copy=None):
        return np.array(self._data[:, 0], dtype=dtype)

    def __repr__(self) -> str:
        return f"Vector({self._data[:, 0].tolist()})"


# =============================================================================
# Convenience constructors
# =============================================================================


def make_vector2(x0: Scalar, x1: Scalar) -> Vector:
    return Vector.from_values((x0, x1))


def make_vector3(x0: Scalar, x1: Scalar, x2: Scalar) -> Vector:
    return Vector.from_values((x0, x1, x2))


def make_vector4(x0: Scalar, x1: Scalar, x2: Scalar, x3: Scalar) -> Vector:
    return Vector.from_values((x0, x1, x2, x3))


def make_matrix2x2(
    m00: Scalar, m01: Scalar,
    m10: Scalar, m11: Scalar,
) -> Matrix:
    """Build a 2x2 matrix from row-major literal components."""
    return Matrix.from_rows([[m00, m01], [m10, m11]])


def make_matrix3x3(
    m00: Scalar, m01: Scalar, m02: Scalar,
    m10: Scalar, m11: Scalar, m12: Scalar,
    m20: Scalar, m21: Scalar, m22: Scalar,
) -> Matrix:
    """Build a 3x3 matrix from row-major literal components."""
    return Matrix.from_rows([[m00, m01, m02], [m10, m11, m12], [m20, m21, m22]])


def identity(size: int) -> Matrix:
    """Return the size x size identity matrix."""
    return Matrix._wrap(np.eye(_check_dim(size, "size"), dtype=DTYPE))


# =============================================================================
# 2x2 Inversion
# =============================================================================


def _determinant2x2(m: Matrix) -> np.float32:
    if m.shape != (2, 2):
        raise DimensionError(f"Expected a 2x2 matrix, got {m.shape}")
    d = m._data
    return d[0, 0] * d[1, 1] - d[0, 1] * d[1, 0]


def invert2x2_unchecked(m: Matrix) -> Matrix:
    """
    Invert a 2x2 matrix in closed form without a singularity check.

    The caller guarantees the matrix is non-singular. A zero or
    near-zero determinant silently produces inf/NaN elements rather
    than raising.

    Args:
        m: 2x2 matrix

    Returns:
        1/det(m) * [[m11, -m01], [-m10, m00]]
    """
    det = _determinant2x2(m)
    d = m._data
    adjugate = np.array([[d[1, 1], -d[0, 1]], [-d[1, 0], d[0, 0]]], dtype=DTYPE)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return Matrix._wrap(adjugate * (DTYPE(1.0) / det))


def invert2x2(m: Matrix) -> Matrix:
    """
    Invert a 2x2 matrix, rejecting singular input.

    Raises:
        SingularMatrixError: If the determinant is zero or not finite
    """
    det = _determinant2x2(m)
    if det == 0 or not np.isfinite(det):
        raise SingularMatrixError(f"Matrix is singular (det={float(det)})")
    return invert2x2_unchecked(m)
