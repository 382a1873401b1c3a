"""
Basic Primitives
================
Meshes for basic geometric primitives and the face-sequence contract shared by
every model.

A primitive is a pair of a ``Parameters`` reference and a generator strategy
that knows how to produce the faces. ``Polytope`` attaches the descriptor
metadata and the iteration contract to such a pair; ``Adapt`` re-embeds any
model in a vector space of different dimension.

Classes:
    GeometricObject: Base class of the face-sequence contract.
    CubeGenerator: Face generator for hypercubes.
    Polytope: A model backed by a generator.
    Adapt: A model re-embedded in a different render depth.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Iterator, TYPE_CHECKING

import numpy as np

from hypermesh.model.descriptors import CoordinateFormat, Dimensions, PrimitiveDescriptor
from hypermesh.model.parameters import ParameterFlags, Parameters

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

MaskVertex = tuple[bool, ...]
MaskFace = tuple[MaskVertex, MaskVertex, MaskVertex, MaskVertex]

CUBE = PrimitiveDescriptor(
    id="cube",
    face_vertices=4,
    dimensions=Dimensions(model_minimum=2, model_maximum=0, render_follows_model=True),
    coordinate_format=CoordinateFormat.CARTESIAN,
    used_parameters=ParameterFlags(radius=True),
)


# ------------------------------------------------------------------------------
# Hypercube masks
# ------------------------------------------------------------------------------
def cube_face_count(depth: int) -> int:
    """
    Number of 2D surfaces of a hypercube.

    The closed formula for this is ``2^(n-3) * (n-1) * n``, n being the depth
    of the cube; it also gives 1 for a square.
    """
    if depth <= 1:
        return 0
    if depth == 2:
        return 1
    return 2 ** (depth - 3) * (depth - 1) * depth


@lru_cache(maxsize=None)
def cube_mask_faces(depth: int) -> tuple[MaskFace, ...]:
    """
    Faces of a hypercube as corners of the unit cube.

    Starting from the square, every additional axis extends the mesh: each
    edge of each face is swept along the new axis into a side face, and each
    face is copied to the far side of the new axis. Shared edges produce equal
    side faces, which the set collapses.

    Args:
        depth: Depth of the cube, e.g. 3 for a regular cube.

    Returns:
        The faces, each vertex a tuple of ``depth`` booleans, sorted.
    """
    if depth <= 1:
        return ()

    def vertex(*bits: bool) -> MaskVertex:
        return bits + (False,) * (depth - 2)

    faces: set[MaskFace] = {
        (vertex(False, False), vertex(False, True), vertex(True, True), vertex(True, False))
    }

    for axis in range(2, depth):
        new_faces: set[MaskFace] = set()

        for face in faces:
            for j in range(4):
                la = face[j]
                lb = face[(j + 1) % 4]

                ma, mb = (la, lb) if la < lb else (lb, la)

                # The two swept vertices only differ from ma and mb by the new
                # axis, so the smallest vertex stays first.
                new_faces.add((ma, mb, _set_axis(mb, axis), _set_axis(ma, axis)))

            # Moving the face along the new axis flips its normal, so the
            # winding order is reversed.
            lifted = tuple(_set_axis(v, axis) for v in reversed(face))
            new_faces.add(lifted)

        faces |= new_faces

    result = tuple(sorted(faces))
    if len(result) != cube_face_count(depth):
        raise RuntimeError(
            f"Hypercube generator produced {len(result)} faces for depth {depth}, "
            f"expected {cube_face_count(depth)}."
        )
    return result


def _set_axis(vertex: MaskVertex, axis: int) -> MaskVertex:
    return vertex[:axis] + (True,) + vertex[axis + 1:]


class CubeGenerator:
    """
    Face generator for the hypercube of a given depth.

    The ``radius`` parameter is used as the edge length: every coordinate is
    either ``+radius/2`` or ``-radius/2``.
    """
    descriptor = CUBE

    def __init__(self, depth: int) -> None:
        if depth < 1:
            raise ValueError(f"Cube depth must be positive, got {depth}.")
        self.depth = depth
        self.render_depth = depth

    def size(self) -> int:
        return cube_face_count(self.depth)

    def faces(self, parameters: Parameters) -> npt.NDArray[np.float64]:
        """
        Generate the mesh.

        Returns:
            Array of shape ``(faces, 4, depth)``.
        """
        masks = np.array(cube_mask_faces(self.depth), dtype=bool).reshape(-1, 4, self.depth)
        half = parameters.radius * 0.5
        return np.where(masks, half, -half)


# ------------------------------------------------------------------------------
# Face-sequence contract
# ------------------------------------------------------------------------------
class GeometricObject(ABC):
    """
    Abstract base class for anything that produces a mesh.

    Every model is a finite, restartable sequence of faces; each face is an
    array of shape ``(face_vertices, render_depth)``.
    """
    def __init__(
        self,
        parameters: Parameters,
        descriptor: PrimitiveDescriptor,
        depth: int,
        render_depth: int,
    ) -> None:
        self.parameters = parameters
        self.descriptor = descriptor
        self.depth = depth
        self.render_depth = render_depth

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.label!r})"

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def label(self) -> str:
        return self.descriptor.label(self.depth, self.render_depth)

    @property
    def face_vertices(self) -> int:
        return self.descriptor.face_vertices

    @property
    def format(self) -> CoordinateFormat:
        return self.descriptor.coordinate_format

    @property
    def used_parameters(self) -> ParameterFlags:
        return self.descriptor.used_parameters

    @abstractmethod
    def size(self) -> int:
        """Number of faces the model produces."""
        pass

    @abstractmethod
    def begin(self) -> Iterator[npt.NDArray[np.float64]]:
        """A fresh iterator over the faces."""
        pass

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[npt.NDArray[np.float64]]:
        return self.begin()

    def vertex_count(self) -> int:
        return self.size() * self.face_vertices

    def faces(self) -> npt.NDArray[np.float64]:
        """All faces at once, shape ``(size, face_vertices, render_depth)``."""
        collected = list(self)
        if not collected:
            return np.empty((0, self.face_vertices, self.render_depth), dtype=np.float64)
        return np.stack(collected)


class Polytope(GeometricObject):
    """
    A model whose faces are computed up front by a generator.

    The mesh is regenerated every time ``begin()`` is called and kept until
    the next call.
    """
    def __init__(self, parameters: Parameters, generator: CubeGenerator) -> None:
        super().__init__(
            parameters=parameters,
            descriptor=generator.descriptor,
            depth=generator.depth,
            render_depth=generator.render_depth,
        )
        self.generator = generator
        self._faces: npt.NDArray[np.float64] = np.empty((0, self.face_vertices, self.render_depth))

        if self.vertex_count() > parameters.vertex_limit:
            logger.warning(
                f"{self.label} has {self.vertex_count()} vertices, "
                f"exceeding the vertex limit of {parameters.vertex_limit}."
            )

    def size(self) -> int:
        return self.generator.size()

    def calculate_object(self) -> None:
        """(Re)generate the mesh."""
        self._faces = self.generator.faces(self.parameters)
        logger.debug(f"Generated {len(self._faces)} faces for {self.label}.")

    def begin(self) -> Iterator[npt.NDArray[np.float64]]:
        self.calculate_object()
        return iter(self._faces)


class Adapt(GeometricObject):
    """
    Re-embeds a model in a vector space of a different render depth.

    Coordinates both spaces have in common are copied; any additional
    coordinates are zero, any surplus coordinates of the source are dropped.
    """
    def __init__(self, model: GeometricObject, render_depth: int) -> None:
        if render_depth < 1:
            raise ValueError(f"Render depth must be positive, got {render_depth}.")
        super().__init__(
            parameters=model.parameters,
            descriptor=model.descriptor,
            depth=model.depth,
            render_depth=render_depth,
        )
        self.model = model

    def size(self) -> int:
        return self.model.size()

    def _adapt(self, face: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        adapted = np.zeros((self.face_vertices, self.render_depth), dtype=np.float64)
        rows = min(face.shape[0], self.face_vertices)
        cols = min(face.shape[1], self.render_depth)
        adapted[:rows, :cols] = face[:rows, :cols]
        return adapted

    def begin(self) -> Iterator[npt.NDArray[np.float64]]:
        return (self._adapt(face) for face in self.model.begin())


def cube(parameters: Parameters, depth: int) -> Polytope:
    """The hypercube of the given depth, e.g. 4 for a tesseract."""
    return Polytope(parameters, CubeGenerator(depth))


def extended_cube(parameters: Parameters, render_depth: int) -> GeometricObject:
    """A square embedded in ``render_depth`` dimensions."""
    square = cube(parameters, 2)
    if render_depth == square.render_depth:
        return square
    return Adapt(square, render_depth)
