"""
Geometry Model Factory
======================
Lets a front end enumerate and build models without knowing which ids belong
to which generators, or which dimensions each of them supports.

Why is this file needed?
------------------------
1. Discovery: ``dispatch`` walks the grid of (model depth, render depth)
   pairs, largest first, and calls a visitor for every pair a primitive
   supports; menus of legal shapes are built from that.
2. Construction: ``build`` turns an id and a pair of depths into a model,
   re-embedding it when the requested render depth is larger than the
   primitive's own.

Adding a new primitive only requires registering its descriptor and builder.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from hypermesh.config import MAX_MODEL_DEPTH, MAX_RENDER_DEPTH, MODEL_DEPTH_FLOOR, RENDER_DEPTH_FLOOR
from hypermesh.geometry.ifs import (
    RANDOM_AFFINE_IFS, SIERPINSKI_CARPET, SIERPINSKI_GASKET,
    random_affine_ifs, sierpinski_carpet, sierpinski_gasket,
)
from hypermesh.geometry.polytope import CUBE, Adapt, GeometricObject, cube
from hypermesh.model.descriptors import PrimitiveDescriptor
from hypermesh.model.parameters import Parameters

logger = logging.getLogger(__name__)


class Visitor(Protocol):
    def __call__(self, model_depth: int, render_depth: int) -> bool: ...


Builder = Callable[[Parameters, int], GeometricObject]


# ------------------------------------------------------------------------------
# Dispatcher
# ------------------------------------------------------------------------------
def dispatch(
    descriptor: PrimitiveDescriptor,
    model_dims: int,
    render_dims: int,
    visitor: Visitor,
    model_depth: int = MAX_MODEL_DEPTH,
    render_depth: int = MAX_RENDER_DEPTH,
) -> bool:
    """
    Visit every admissible (model depth, render depth) pair of a primitive.

    The search starts at ``(model_depth, render_depth)`` and descends, render
    depth first. A pair is visited if it lies within the descriptor's bounds
    and matches the requested target; 0 for ``model_dims`` or ``render_dims``
    means any depth is acceptable.

    Args:
        descriptor: The primitive whose bounds apply.
        model_dims: Requested model depth, or 0 for any.
        render_dims: Requested render depth, or 0 for any.
        visitor: Called once per admissible pair; returns whether it handled it.
        model_depth: Model depth the search starts from.
        render_depth: Render depth the search starts from.

    Returns:
        True if the visitor handled any pair, otherwise whether the search was
        unconstrained in the dimension that ended it.
    """
    bounds = descriptor.dimensions
    memo: dict[tuple[int, int], bool] = {}

    def visit(m: int, r: int) -> bool:
        return bool(visitor(m, r))

    def search(m: int, r: int) -> bool:
        key = (m, r)
        if key not in memo:
            memo[key] = step(m, r)
        return memo[key]

    def step(m: int, r: int) -> bool:
        if m <= MODEL_DEPTH_FLOOR:
            return model_dims == 0
        if r <= RENDER_DEPTH_FLOOR:
            return render_dims == 0

        if m < bounds.model_minimum:
            return model_dims == 0
        if bounds.model_maximum > 0 and m > bounds.model_maximum:
            return search(m - 1, r)

        if r < bounds.render_floor(m):
            if r >= bounds.render_minimum:
                # Too small for this model depth only; smaller models may fit
                return search(m - 1, r)
            return render_dims == 0
        if bounds.render_maximum > 0 and r > bounds.render_maximum:
            return search(m, r - 1)

        if render_dims == 0 or r == render_dims:
            if model_dims == 0:
                handled = visit(m, r)
                if render_dims == 0:
                    handled = search(m, r - 1) or handled
                return search(m - 1, r) or handled
            if m == model_dims:
                handled = visit(m, r)
                return search(m, r - 1) or handled
            if m < model_dims:
                return model_dims == 0
            return search(m - 1, r)

        if r < render_dims:
            return render_dims == 0
        return search(m, r - 1)

    return search(model_depth, render_depth)


@dataclass
class EchoVisitor:
    """Visitor that records a label such as ``3-cube@4`` for every pair."""
    descriptor: PrimitiveDescriptor
    lines: list[str] = field(default_factory=list)

    def __call__(self, model_depth: int, render_depth: int) -> bool:
        self.lines.append(self.descriptor.label(model_depth, render_depth))
        return True


# ------------------------------------------------------------------------------
# Registry
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class RegisteredModel:
    descriptor: PrimitiveDescriptor
    builder: Builder


_REGISTRY: dict[str, RegisteredModel] = {}


def register_model(descriptor: PrimitiveDescriptor, builder: Builder) -> Builder:
    """Register a builder under the id of its descriptor."""
    if descriptor.id in _REGISTRY:
        raise ValueError(f"A model with id '{descriptor.id}' is already registered.")
    _REGISTRY[descriptor.id] = RegisteredModel(descriptor=descriptor, builder=builder)
    return builder


def register(descriptor: PrimitiveDescriptor) -> Callable[[Builder], Builder]:
    """Decorator form of ``register_model``."""
    def decorator(builder: Builder) -> Builder:
        return register_model(descriptor, builder)
    return decorator


def get_model(model_id: str) -> RegisteredModel:
    entry = _REGISTRY.get(model_id)
    if not entry:
        raise KeyError(f"No model registered for id '{model_id}'")
    return entry


def list_models() -> list[str]:
    return list(_REGISTRY.keys())


register_model(CUBE, cube)
register_model(SIERPINSKI_GASKET, sierpinski_gasket)
register_model(SIERPINSKI_CARPET, sierpinski_carpet)
register_model(RANDOM_AFFINE_IFS, random_affine_ifs)


# ------------------------------------------------------------------------------
# Queries & construction
# ------------------------------------------------------------------------------
def legal_depths(model_id: str, model_dims: int = 0, render_dims: int = 0) -> list[tuple[int, int]]:
    """All (model depth, render depth) pairs a registered model supports, largest first."""
    pairs: list[tuple[int, int]] = []

    def collect(model_depth: int, render_depth: int) -> bool:
        pairs.append((model_depth, render_depth))
        return True

    dispatch(get_model(model_id).descriptor, model_dims, render_dims, collect)
    return pairs


def echo(model_id: str, model_dims: int = 0, render_dims: int = 0) -> list[str]:
    """Labels of every legal instance of a registered model."""
    visitor = EchoVisitor(get_model(model_id).descriptor)
    dispatch(visitor.descriptor, model_dims, render_dims, visitor)
    return visitor.lines


def build(
    model_id: str,
    parameters: Parameters,
    model_depth: int,
    render_depth: int = 0,
) -> GeometricObject:
    """
    Build a registered model.

    Args:
        model_id: Id of the model, e.g. ``"cube"``.
        parameters: Parameters to construct it with.
        model_depth: Model depth of the instance.
        render_depth: Render depth of the instance; 0 uses the model depth.

    Raises:
        KeyError: If no model is registered under ``model_id``.
        ValueError: If the model does not support the requested depths.
    """
    entry = get_model(model_id)
    render_depth = render_depth or model_depth

    found: list[tuple[int, int]] = []

    def accept(m: int, r: int) -> bool:
        found.append((m, r))
        return True

    dispatch(entry.descriptor, model_depth, render_depth, accept, model_depth, render_depth)
    if (model_depth, render_depth) not in found:
        raise ValueError(
            f"Model '{model_id}' is not available with model depth {model_depth} "
            f"and render depth {render_depth}."
        )

    logger.info(f"Building {entry.descriptor.label(model_depth, render_depth)}.")
    model = entry.builder(parameters, model_depth)
    if model.render_depth != render_depth:
        model = Adapt(model, render_depth)
    return model
