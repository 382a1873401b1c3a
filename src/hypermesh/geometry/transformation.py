"""
Transformation Algebra
======================
Linear, affine and projective transformations of arbitrary dimension.

Points are row vectors and are multiplied from the left, so composing with
``a @ b`` yields a transformation that applies ``a`` first and ``b`` second:

    (a @ b).apply(v) == b.apply(a.apply(v))

Scale, rotation and translation do not commute; callers must compose them in
exactly the order their algorithm prescribes.
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np

from hypermesh.config import HOMOGENEOUS_EPSILON

if TYPE_CHECKING:
    import numpy.typing as npt


def _as_points(points: npt.ArrayLike, depth: int) -> tuple[npt.NDArray[np.float64], bool]:
    """Return points as an ``(n, depth)`` array and whether a single point was given."""
    array = np.asarray(points, dtype=np.float64)
    single = array.ndim == 1
    array = np.atleast_2d(array)
    if array.shape[-1] != depth:
        raise ValueError(f"Expected points with {depth} coordinates, got shape {array.shape}.")
    return array, single


def _safe_divisor(values: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Clamp divisors that are (nearly) zero to +/- HOMOGENEOUS_EPSILON, keeping their sign."""
    small = np.abs(values) < HOMOGENEOUS_EPSILON
    if not small.any():
        return values
    clamped = values.copy()
    clamped[small] = np.where(clamped[small] < 0.0, -HOMOGENEOUS_EPSILON, HOMOGENEOUS_EPSILON)
    return clamped


def _check_square(matrix: npt.NDArray[np.float64]) -> None:
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Transformation matrix must be square, got shape {matrix.shape}.")


class Linear:
    """
    A linear transformation, stored as a ``d x d`` matrix.
    """
    def __init__(self, matrix: npt.ArrayLike) -> None:
        self.matrix: npt.NDArray[np.float64] = np.array(matrix, dtype=np.float64)
        _check_square(self.matrix)

    @classmethod
    def identity(cls, depth: int) -> Linear:
        return cls(np.eye(depth))

    @property
    def depth(self) -> int:
        """Number of dimensions the transformation operates on."""
        return self.matrix.shape[0]

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Transform a single point ``(d,)`` or a stack of points ``(n, d)``.
        """
        array, single = _as_points(points, self.depth)
        result = array @ self.matrix
        return result[0] if single else result

    def __matmul__(self, other: Linear) -> Linear:
        if not isinstance(other, Linear):
            return NotImplemented
        return Linear(self.matrix @ other.matrix)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Linear):
            return NotImplemented
        return np.array_equal(self.matrix, other.matrix)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(depth={self.depth})"


class Affine:
    """
    An affine transformation, stored as a ``(d+1) x (d+1)`` homogeneous matrix.

    Translations live in the last row; the last column carries the homogeneous
    scale that the output is divided by.
    """
    def __init__(self, matrix: npt.ArrayLike) -> None:
        self.matrix: npt.NDArray[np.float64] = np.array(matrix, dtype=np.float64)
        _check_square(self.matrix)
        if self.matrix.shape[0] < 2:
            raise ValueError("An affine transformation needs at least one dimension.")

    @property
    def depth(self) -> int:
        """Number of dimensions the transformation operates on."""
        return self.matrix.shape[0] - 1

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------
    @classmethod
    def identity(cls, depth: int) -> Affine:
        return cls(np.eye(depth + 1))

    @classmethod
    def from_linear(cls, linear: Linear) -> Affine:
        """Embed a linear transformation; the extra row and column are those of the identity."""
        matrix = np.eye(linear.depth + 1)
        matrix[:-1, :-1] = linear.matrix
        return cls(matrix)

    @classmethod
    def scale(cls, depth: int, factor: float) -> Affine:
        """
        Uniform scale.

        The factor goes into the homogeneous entry as ``1/factor``; the
        normalisation in ``apply`` turns it into a multiplication.
        """
        if factor == 0:
            raise ValueError("Scale factor must be nonzero.")
        matrix = np.eye(depth + 1)
        matrix[depth, depth] = 1.0 / factor
        return cls(matrix)

    @classmethod
    def rotation(cls, depth: int, angle: float, axis1: int, axis2: int) -> Affine:
        """
        Rotation by ``angle`` in the plane spanned by ``axis1`` and ``axis2``.

        The matrix is transposed when ``axis1 + axis2 + depth + 1`` is odd so
        that the sense of rotation is consistent across axis pairs.
        """
        if not (0 <= axis1 < depth and 0 <= axis2 < depth):
            raise ValueError(f"Rotation axes ({axis1}, {axis2}) out of range for depth {depth}.")
        if axis1 == axis2:
            raise ValueError(f"Rotation axes must differ, got {axis1} twice.")

        cos_a = math.cos(angle)
        sin_a = math.sin(angle)

        matrix = np.eye(depth + 1)
        matrix[axis1, axis1] = cos_a
        matrix[axis1, axis2] = -sin_a
        matrix[axis2, axis2] = cos_a
        matrix[axis2, axis1] = sin_a

        if (axis1 + axis2 + depth + 1) % 2 == 1:
            matrix = matrix.T
        return cls(matrix)

    @classmethod
    def translation(cls, vector: npt.ArrayLike) -> Affine:
        """Translation by ``vector``, written into the last row."""
        offset = np.asarray(vector, dtype=np.float64)
        if offset.ndim != 1:
            raise ValueError(f"Translation expects a vector, got shape {offset.shape}.")
        depth = offset.shape[0]
        matrix = np.eye(depth + 1)
        matrix[depth, :depth] = offset
        return cls(matrix)

    # ------------------------------------------------------------------
    # Application and composition
    # ------------------------------------------------------------------
    def _homogeneous(self, array: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        ones = np.ones((array.shape[0], 1), dtype=np.float64)
        return np.hstack([array, ones]) @ self.matrix

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """
        Transform a single point ``(d,)`` or a stack of points ``(n, d)``.

        A constant 1 is appended, the row is multiplied by the matrix and the
        result is divided by the resulting homogeneous coordinate.
        """
        array, single = _as_points(points, self.depth)
        transformed = self._homogeneous(array)
        w = _safe_divisor(transformed[:, -1:])
        result = transformed[:, :-1] / w
        return result[0] if single else result

    def __matmul__(self, other: Affine | Linear) -> Affine:
        if isinstance(other, Linear):
            other = Affine.from_linear(other)
        if not isinstance(other, Affine):
            return NotImplemented
        if other.depth != self.depth:
            raise ValueError(f"Cannot compose depth {self.depth} with depth {other.depth}.")
        cls = Projective if isinstance(self, Projective) or isinstance(other, Projective) else Affine
        return cls(self.matrix @ other.matrix)

    def __rmatmul__(self, other: Linear) -> Affine:
        if isinstance(other, Linear):
            return Affine.from_linear(other) @ self
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Affine):
            return NotImplemented
        return type(self) is type(other) and np.array_equal(self.matrix, other.matrix)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(depth={self.depth})"


class Projective(Affine):
    """
    A projective transformation that drops one dimension.

    The point is transformed like an affine point, then every remaining
    coordinate is divided by the last transformed coordinate, which is dropped.
    Chaining these is how the renderers get from arbitrary dimension down to 2D.
    """
    @classmethod
    def from_affine(cls, affine: Affine) -> Projective:
        return cls(affine.matrix)

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        array, single = _as_points(points, self.depth)
        transformed = super().apply(array)
        depth_coordinate = _safe_divisor(transformed[:, -1:])
        result = transformed[:, :-1] / depth_coordinate
        return result[0] if single else result
