"""
Iterated Function Systems
=========================
Fractals defined by repeatedly applying a finite set of affine
transformations to a base primitive.

The faces are never stored: an ``IFSIterator`` walks every combination of
"which function was applied at each iteration level" with an odometer and
transforms the base primitive's faces on the fly.

Classes:
    IFS: A model composed of a base primitive and a list of functions.
    IFSIterator: Cursor over the faces of an IFS.
    RandomAffine: An affine transformation drawn from a seeded PRNG.

Builders:
    sierpinski_gasket, sierpinski_carpet, random_affine_ifs
"""
from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np

from hypermesh.geometry.polytope import GeometricObject, cube, extended_cube
from hypermesh.geometry.transformation import Affine
from hypermesh.model.descriptors import CoordinateFormat, Dimensions, PrimitiveDescriptor
from hypermesh.model.parameters import ParameterFlags, Parameters

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

BaseFactory = Callable[[], GeometricObject]

SIERPINSKI_GASKET = PrimitiveDescriptor(
    id="sierpinski-gasket",
    face_vertices=4,
    dimensions=Dimensions(model_minimum=2, model_maximum=0, render_follows_model=True),
    coordinate_format=CoordinateFormat.CARTESIAN,
    used_parameters=ParameterFlags(radius=True, iterations=True),
)

SIERPINSKI_CARPET = PrimitiveDescriptor(
    id="sierpinski-carpet",
    face_vertices=4,
    dimensions=Dimensions(model_minimum=2, model_maximum=3, render_follows_model=True),
    coordinate_format=CoordinateFormat.CARTESIAN,
    used_parameters=ParameterFlags(radius=True, iterations=True),
)

RANDOM_AFFINE_IFS = PrimitiveDescriptor(
    id="random-affine-ifs",
    face_vertices=4,
    dimensions=Dimensions(model_minimum=2, model_maximum=0, render_follows_model=True),
    coordinate_format=CoordinateFormat.CARTESIAN,
    used_parameters=ParameterFlags(
        radius=True,
        iterations=True,
        functions=True,
        seed=True,
        pre_rotate=True,
        post_rotate=True,
    ),
)


class IFSIterator:
    """
    Cursor over the faces of an iterated function system.

    State:
        base: The base primitive, constructed for this iterator alone.
        iteration: The odometer; one slot per iteration level, each an index
            into the functions. Slot 0 is the most significant.
        base_position: Index of the current face of the base primitive.

    For each odometer setting all base faces are produced before the odometer
    is incremented, least significant slot first.
    """
    def __init__(
        self,
        base_factory: BaseFactory,
        functions: Sequence[Affine],
        iterations: int,
    ) -> None:
        self._base_factory = base_factory
        self.functions: tuple[Affine, ...] = tuple(functions)
        self.iteration: list[int] = [0] * iterations
        self.base_position = 0
        self._rolled_over = False
        self.calculate_base()

    @classmethod
    def begin(cls, base_factory: BaseFactory, functions: Sequence[Affine], iterations: int) -> IFSIterator:
        return cls(base_factory, functions, iterations)

    @classmethod
    def end(cls, base_factory: BaseFactory, functions: Sequence[Affine], iterations: int) -> IFSIterator:
        it = cls(base_factory, functions, iterations)
        if it.iteration:
            it.iteration[0] = len(it.functions)
        it._rolled_over = True
        return it

    def calculate_base(self) -> None:
        """Construct the base primitive and generate its mesh."""
        self.base = self._base_factory()
        self._base_faces: list[npt.NDArray[np.float64]] = list(self.base)

    def is_end(self) -> bool:
        if not self._base_faces:
            return True
        if self.iteration and not self.functions:
            return True
        return self._rolled_over

    def current(self) -> npt.NDArray[np.float64]:
        """
        The current face: the base face transformed by the function of every
        odometer slot, slot 0 first.
        """
        if self.is_end():
            raise IndexError("IFS iterator is past the end.")
        face = self._base_faces[self.base_position]
        for index in self.iteration:
            face = self.functions[index].apply(face)
        return face

    def advance(self) -> None:
        if self.is_end():
            return

        self.base_position += 1
        if self.base_position < len(self._base_faces):
            return

        self.base_position = 0
        for slot in range(len(self.iteration) - 1, -1, -1):
            self.iteration[slot] += 1
            if self.iteration[slot] < len(self.functions):
                return
            if slot > 0:
                self.iteration[slot] = 0

        # The carry ran off the most significant slot (or there are no slots)
        self._rolled_over = True

    def __iter__(self) -> IFSIterator:
        return self

    def __next__(self) -> npt.NDArray[np.float64]:
        if self.is_end():
            raise StopIteration
        face = self.current()
        self.advance()
        return face

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IFSIterator):
            return NotImplemented
        return (self.is_end() and other.is_end()) or (
            self.iteration == other.iteration and self.base_position == other.base_position
        )

    def __copy__(self) -> IFSIterator:
        # The copy gets its own base primitive; the mesh is generated again.
        it = IFSIterator(self._base_factory, self.functions, len(self.iteration))
        it.iteration = list(self.iteration)
        it.base_position = self.base_position
        it._rolled_over = self._rolled_over
        return it

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(iteration={self.iteration}, base_position={self.base_position})"


class IFS(GeometricObject):
    """
    An iterated function system over a base primitive.

    The number of faces is the number of base faces times
    ``len(functions) ** iterations``. If that would exceed the vertex limit of
    the parameters, the number of iterations is reduced.
    """
    def __init__(
        self,
        parameters: Parameters,
        descriptor: PrimitiveDescriptor,
        depth: int,
        base_factory: BaseFactory,
        functions: Iterable[Affine] = (),
        render_depth: Optional[int] = None,
    ) -> None:
        super().__init__(
            parameters=parameters,
            descriptor=descriptor,
            depth=depth,
            render_depth=depth if render_depth is None else render_depth,
        )
        self.base_factory = base_factory
        self.functions: list[Affine] = list(functions)
        self.iterations = parameters.iterations
        self._base_size = base_factory().size()
        self.calculate_object()

    def calculate_object(self) -> None:
        """Validate the functions and apply the vertex limit."""
        for function in self.functions:
            if function.depth != self.render_depth:
                raise ValueError(
                    f"Function of depth {function.depth} can't act on {self.label}."
                )

        self.iterations = self.parameters.iterations
        limit = self.parameters.vertex_limit
        while self.iterations > 0 and self.vertex_count() > limit:
            self.iterations -= 1
        if self.iterations != self.parameters.iterations:
            logger.warning(
                f"{self.label}: reduced iterations from {self.parameters.iterations} "
                f"to {self.iterations} to stay within the vertex limit of {limit}."
            )
        logger.debug(
            f"{self.label}: {len(self.functions)} function(s), "
            f"{self.iterations} iteration(s), {self.size()} face(s)."
        )

    def size(self) -> int:
        return self._base_size * len(self.functions) ** self.iterations

    def begin(self) -> IFSIterator:
        return IFSIterator.begin(self.base_factory, self.functions, self.iterations)

    def end(self) -> IFSIterator:
        return IFSIterator.end(self.base_factory, self.functions, self.iterations)


# ------------------------------------------------------------------------------
# Sierpinski
# ------------------------------------------------------------------------------
def sierpinski_gasket(parameters: Parameters, depth: int) -> IFS:
    """
    The Sierpinski gasket generalised to ``depth`` dimensions.

    Uses ``2^(depth-1) + 1`` functions, each halving the cube and moving it
    into one of the corners selected by the bits of the function's index.
    """
    if depth < 2:
        raise ValueError(f"Sierpinski gasket needs a depth of at least 2, got {depth}.")

    n_functions = (1 << (depth - 1)) + 1
    translations = np.zeros((n_functions, depth), dtype=np.float64)

    translations[0, 0] = 0.25
    for i in range(1, n_functions):
        translations[i, 0] = -0.25
        for j in range(1, depth):
            translations[i, j] = -0.25 if (i - 1) & (1 << (j - 1)) else 0.25

    functions = [Affine.scale(depth, 0.5) @ Affine.translation(t) for t in translations]

    return IFS(
        parameters=parameters,
        descriptor=SIERPINSKI_GASKET,
        depth=depth,
        base_factory=lambda: cube(parameters, depth),
        functions=functions,
    )


_THIRD = 1.0 / 3.0

# Offsets of the eight outer squares of a carpet, row by row
_CARPET_2D = [
    (-_THIRD, -_THIRD),
    (-_THIRD, 0.0),
    (-_THIRD, _THIRD),
    (_THIRD, -_THIRD),
    (_THIRD, 0.0),
    (_THIRD, _THIRD),
    (0.0, -_THIRD),
    (0.0, _THIRD),
]

# Menger sponge: the carpet on both outer layers, plus the four edge cubes of the middle layer
_CARPET_3D = (
    [(x, y, -_THIRD) for x, y in _CARPET_2D]
    + [(x, y, _THIRD) for x, y in _CARPET_2D]
    + [
        (_THIRD, _THIRD, 0.0),
        (-_THIRD, _THIRD, 0.0),
        (_THIRD, -_THIRD, 0.0),
        (-_THIRD, -_THIRD, 0.0),
    ]
)


def sierpinski_carpet(parameters: Parameters, depth: int) -> IFS:
    """
    The Sierpinski carpet (depth 2) or the Menger sponge (depth 3).
    """
    match depth:
        case 2:
            translations = _CARPET_2D
        case 3:
            translations = _CARPET_3D
        case _:
            raise ValueError(f"Sierpinski carpet is only defined for depth 2 or 3, got {depth}.")

    functions = [Affine.scale(depth, _THIRD) @ Affine.translation(t) for t in translations]

    return IFS(
        parameters=parameters,
        descriptor=SIERPINSKI_CARPET,
        depth=depth,
        base_factory=lambda: cube(parameters, depth),
        functions=functions,
    )


# ------------------------------------------------------------------------------
# Random affine IFS
# ------------------------------------------------------------------------------
def _next_word(prng: np.random.RandomState) -> int:
    """Next raw 32-bit output of the Mersenne Twister."""
    return int(prng.randint(0, 2**32, dtype=np.uint32))


def _rotation_axes(prng: np.random.RandomState, a1: int, a2: int, depth: int) -> tuple[int, int]:
    """Order two drawn axes; if they coincide, pick a distinct pair deterministically."""
    if a1 > a2:
        return a2, a1
    if a1 == a2:
        if a1 == 0:
            a2 = _next_word(prng) % max(depth - 1, 1) + 1
        else:
            a1 -= 1
    return a1, a2


class RandomAffine(Affine):
    """
    A random affine transformation: scale, optional rotation, translation and
    another optional rotation, all drawn from a PRNG seeded with ``seed``.

    Draw order (each a raw 32-bit word ``w``):
        scale ``(w % 6000) / 10000 + 0.2``, angle ``(w % 10000) / 10000 * pi``,
        two axes ``w % depth``, another angle, two more axes, any extra draws
        needed to separate equal axes, then one ``(w % 10000) / 5000 - 1`` per
        translation coordinate.
    """
    def __init__(self, parameters: Parameters, seed: int, depth: int) -> None:
        self.parameters = parameters
        self.seed = seed
        super().__init__(self._build_matrix(depth))

    def _build_matrix(self, depth: int) -> npt.NDArray[np.float64]:
        prng = np.random.RandomState(self.seed & 0xFFFFFFFF)

        s = (_next_word(prng) % 6000) / 10000 + 0.2
        r1 = (_next_word(prng) % 10000) / 10000 * math.pi
        a1 = _next_word(prng) % depth
        a2 = _next_word(prng) % depth
        r2 = (_next_word(prng) % 10000) / 10000 * math.pi
        a4 = _next_word(prng) % depth
        a5 = _next_word(prng) % depth

        a1, a2 = _rotation_axes(prng, a1, a2, depth)
        a4, a5 = _rotation_axes(prng, a4, a5, depth)

        translation = np.array(
            [(_next_word(prng) % 10000) / 5000 - 1 for _ in range(depth)],
            dtype=np.float64,
        )

        pre = Affine.rotation(depth, r1, a1, a2) if self.parameters.pre_rotate else Affine.identity(depth)
        post = Affine.rotation(depth, r2, a4, a5) if self.parameters.post_rotate else Affine.identity(depth)

        return (Affine.scale(depth, s) @ pre @ Affine.translation(translation) @ post).matrix


def random_affine_ifs(parameters: Parameters, depth: int) -> IFS:
    """
    An IFS of ``parameters.functions`` random affine transformations over a
    square embedded in ``depth`` dimensions.

    A master PRNG seeded with ``parameters.seed`` draws one seed per function,
    so equal parameters always reproduce the same functions.
    """
    if depth < 2:
        raise ValueError(f"Random affine IFS needs a depth of at least 2, got {depth}.")

    prng = np.random.RandomState(parameters.seed & 0xFFFFFFFF)
    functions = [
        RandomAffine(parameters, _next_word(prng), depth)
        for _ in range(parameters.functions)
    ]

    return IFS(
        parameters=parameters,
        descriptor=RANDOM_AFFINE_IFS,
        depth=depth,
        base_factory=lambda: extended_cube(parameters, depth),
        functions=functions,
    )
