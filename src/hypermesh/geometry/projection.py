"""
Perspective Projections
=======================
Builds the chain of one-dimension-reducing projections a renderer uses to get
from the render depth of a model down to the plane.

Every projection in a chain is a ``Projective`` transformation: a look-at
transformation that moves the camera to the origin and points it along the
last axis, followed by a perspective scale. Applying it divides by the depth
coordinate and drops it.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np

from hypermesh.config import CAMERA_DISTANCE, DEFAULT_EYE_ANGLE, HOMOGENEOUS_EPSILON
from hypermesh.geometry.transformation import Affine, Linear, Projective

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def _orthonormal_basis(
    direction: npt.NDArray[np.float64],
    orthogonals: Sequence[npt.ArrayLike],
) -> npt.NDArray[np.float64]:
    """
    Complete ``direction`` to an orthonormal basis with Gram-Schmidt.

    The returned matrix has the basis vectors as columns, ``direction`` being
    the last one. The ``orthogonals`` hint at the orientation of the remaining
    axes; unit vectors fill in whatever they leave undetermined.
    """
    depth = direction.shape[0]
    candidates = [np.asarray(v, dtype=np.float64) for v in orthogonals]
    candidates.extend(np.eye(depth))

    basis: list[npt.NDArray[np.float64]] = [direction / np.linalg.norm(direction)]
    for candidate in candidates:
        if len(basis) == depth:
            break
        v = candidate - sum(np.dot(candidate, b) * b for b in basis)
        norm = np.linalg.norm(v)
        if norm > HOMOGENEOUS_EPSILON:
            basis.append(v / norm)

    # basis[0] is the viewing direction; it becomes the last column
    return np.column_stack(basis[1:] + basis[:1])


def look_at(
    from_point: npt.ArrayLike,
    to_point: npt.ArrayLike,
    orthogonals: Optional[Sequence[npt.ArrayLike]] = None,
) -> Affine:
    """
    Camera transformation looking from ``from_point`` towards ``to_point``.

    Args:
        from_point: Camera position.
        to_point: Point the camera looks at.
        orthogonals: Optional "up" vectors used to orient the other axes.

    Raises:
        ValueError: If both points coincide.

    Returns:
        An affine transformation after which the camera sits at the origin and
        looks along the positive last axis.
    """
    eye = np.asarray(from_point, dtype=np.float64)
    target = np.asarray(to_point, dtype=np.float64)
    direction = target - eye
    if np.linalg.norm(direction) < HOMOGENEOUS_EPSILON:
        raise ValueError("Camera position and target must differ.")

    basis = _orthonormal_basis(direction, orthogonals or [])
    return Affine.translation(-eye) @ Linear(basis)


def perspective(
    from_point: npt.ArrayLike,
    to_point: npt.ArrayLike,
    eye_angle: float = DEFAULT_EYE_ANGLE,
    orthogonals: Optional[Sequence[npt.ArrayLike]] = None,
) -> Projective:
    """
    Perspective projection from ``d`` to ``d-1`` dimensions.

    Args:
        from_point: Camera position.
        to_point: Point the camera looks at.
        eye_angle: Field of view in radians.
        orthogonals: Optional "up" vectors used to orient the image plane.
    """
    if not 0.0 < eye_angle < math.pi:
        raise ValueError(f"Eye angle must lie in (0, pi), got {eye_angle}.")

    camera = look_at(from_point, to_point, orthogonals)
    depth = camera.depth
    zoom = np.ones(depth)
    zoom[:-1] = 1.0 / math.tan(eye_angle / 2.0)
    return Projective.from_affine(camera @ Linear(np.diag(zoom)))


class ProjectionChain:
    """
    A sequence of projections, each dropping one dimension.

    Projections are applied in render-depth-descending order, so the first
    projection must accept points of the chain's input depth and every
    following one the output of its predecessor.
    """
    def __init__(self, projections: Iterable[Projective]) -> None:
        self.projections: list[Projective] = list(projections)
        for previous, current in zip(self.projections, self.projections[1:]):
            if current.depth != previous.depth - 1:
                raise ValueError(
                    f"Projection for depth {current.depth} can't follow one for depth {previous.depth}."
                )

    @classmethod
    def default(
        cls,
        depth: int,
        distance: float = CAMERA_DISTANCE,
        eye_angle: float = DEFAULT_EYE_ANGLE,
    ) -> ProjectionChain:
        """
        Chain from ``depth`` dimensions down to 2, with every camera placed on
        the negative last axis at ``distance`` looking at the origin.
        """
        projections = []
        for d in range(depth, 2, -1):
            from_point = np.zeros(d)
            from_point[-1] = -distance
            projections.append(perspective(from_point, np.zeros(d), eye_angle))
        logger.debug(f"Built projection chain with {len(projections)} step(s) for depth {depth}.")
        return cls(projections)

    @property
    def input_depth(self) -> Optional[int]:
        return self.projections[0].depth if self.projections else None

    @property
    def output_depth(self) -> Optional[int]:
        return self.projections[-1].depth - 1 if self.projections else None

    def __len__(self) -> int:
        return len(self.projections)

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Project a point or a stack of points through every step of the chain."""
        result = np.asarray(points, dtype=np.float64)
        for projection in self.projections:
            result = projection.apply(result)
        return result

    def project_face(self, face: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Project all vertices of a face; the vertex order is preserved."""
        return self.apply(np.atleast_2d(np.asarray(face, dtype=np.float64)))
