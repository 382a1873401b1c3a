"""
Geometry Parameters
===================
The configuration record shared by every shape-creating generator.

Classes:
    Parameters: Values used when creating a mesh.
    ParameterFlags: Which of those values a primitive actually uses.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass, field, fields, asdict, replace as dataclass_replace
from typing import Any, Mapping

Colour = tuple[float, float, float]

DEFAULT_COLOUR_MAP: tuple[Colour, ...] = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
)


@dataclass(frozen=True)
class Parameters:
    """
    Geometry parameters.

    One instance is shared by reference between all generators of a mesh
    generation pass; it is immutable for the lifetime of that pass.
    """
    # Radius of the object; cubes use it as the edge length.
    radius: float = 1.0
    # Secondary radius for primitives that need two (tori and friends).
    radius2: float = 0.5
    # Additional shape constant used by some parametric formulae.
    constant: float = 0.9
    # Smoothness of round surfaces.
    precision: float = 3.0
    # Target fidelity of iterated function systems.
    iterations: int = 4
    # Number of functions of random iterated function systems.
    functions: int = 3
    # Seed for every PRNG involved in creating a mesh.
    seed: int = 0
    # Random IFS: allow a rotation before the random translation.
    pre_rotate: bool = True
    # Random IFS: allow a rotation after the random translation.
    post_rotate: bool = False
    # Distinct nonzero flame variation coefficients.
    flame_coefficients: int = 3
    # Upper bound on the number of vertices a model should produce.
    vertex_limit: int = 1_000_000
    colour_map: tuple[Colour, ...] = field(default=DEFAULT_COLOUR_MAP)

    def __post_init__(self) -> None:
        for name in ("iterations", "functions", "seed", "flame_coefficients", "vertex_limit"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Integral) or value < 0:
                raise ValueError(f"Parameter '{name}' must be a non-negative integer, got {value!r}.")
        # Normalise the colour map so lists coming from JSON still hash and compare
        object.__setattr__(
            self,
            "colour_map",
            tuple(tuple(float(c) for c in colour) for colour in self.colour_map),
        )
        if not self.colour_map:
            raise ValueError("Colour map must contain at least one colour.")
        for colour in self.colour_map:
            if len(colour) != 3:
                raise ValueError(f"Colour map entries must be RGB triples, got {colour!r}.")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Parameters:
        """
        Create parameters from a plain mapping, e.g. a parsed JSON document.

        Args:
            data: Field names mapped to values; missing fields keep their defaults.

        Raises:
            ValueError: If the mapping contains unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["colour_map"] = [list(colour) for colour in self.colour_map]
        return data

    def replace(self, **changes: Any) -> Parameters:
        """Return a copy with the given fields changed."""
        return dataclass_replace(self, **changes)


@dataclass(frozen=True)
class ParameterFlags:
    """
    Flags for geometry parameters.

    Used when specifying which parameters a model uses, so that a front end
    only offers the relevant controls.
    """
    radius: bool = False
    radius2: bool = False
    constant: bool = False
    precision: bool = False
    iterations: bool = False
    functions: bool = False
    seed: bool = False
    pre_rotate: bool = False
    post_rotate: bool = False
    flame_coefficients: bool = False

    def names(self) -> list[str]:
        """Names of the enabled parameters, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name)]
