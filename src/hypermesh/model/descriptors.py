"""Primitive descriptors: static metadata about a shape family."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from hypermesh.model.parameters import ParameterFlags


class CoordinateFormat(StrEnum):
    """Coordinate format of the vectors a primitive produces."""
    CARTESIAN = "cartesian"
    POLAR = "polar"
    RGB = "RGB"


@dataclass(frozen=True)
class Dimensions:
    """
    Dimensional constraints of a primitive.

    A maximum of 0 means that there is no upper bound. When
    ``render_follows_model`` is set, the render depth must also be at least
    the model depth, since an n-cube can't be rendered in fewer than n
    dimensions.
    """
    model_minimum: int = 2
    model_maximum: int = 0
    render_minimum: int = 2
    render_maximum: int = 0
    render_follows_model: bool = False

    def __post_init__(self) -> None:
        if self.model_maximum and self.model_maximum < self.model_minimum:
            raise ValueError(
                f"Model maximum {self.model_maximum} is below the minimum {self.model_minimum}."
            )
        if self.render_maximum and self.render_maximum < self.render_minimum:
            raise ValueError(
                f"Render maximum {self.render_maximum} is below the minimum {self.render_minimum}."
            )

    def render_floor(self, model_depth: int) -> int:
        """Smallest legal render depth for a model of the given depth."""
        if self.render_follows_model:
            return max(self.render_minimum, model_depth)
        return self.render_minimum

    def admits(self, model_depth: int, render_depth: int) -> bool:
        """Whether the pair lies within these bounds."""
        if model_depth < self.model_minimum:
            return False
        if self.model_maximum and model_depth > self.model_maximum:
            return False
        if render_depth < self.render_floor(model_depth):
            return False
        if self.render_maximum and render_depth > self.render_maximum:
            return False
        return True


@dataclass(frozen=True)
class PrimitiveDescriptor:
    """
    Constant description of a primitive kind, defined once per kind.
    """
    id: str
    face_vertices: int
    dimensions: Dimensions = field(default_factory=Dimensions)
    coordinate_format: CoordinateFormat = CoordinateFormat.CARTESIAN
    used_parameters: ParameterFlags = field(default_factory=ParameterFlags)

    def label(self, model_depth: int, render_depth: int) -> str:
        """Human readable name of an instance, e.g. ``4-cube@4``."""
        return f"{model_depth}-{self.id}@{render_depth}"
