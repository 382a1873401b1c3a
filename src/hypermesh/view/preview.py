"""
Mesh Preview
============
Quick matplotlib preview of a model: every face is projected to the plane
through a projection chain and drawn as a polygon.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import PolyCollection

from hypermesh.geometry.projection import ProjectionChain

if TYPE_CHECKING:
    import numpy.typing as npt
    from matplotlib.axes import Axes
    from hypermesh.geometry.polytope import GeometricObject

logger = logging.getLogger(__name__)


def project_model(
    model: GeometricObject,
    chain: Optional[ProjectionChain] = None,
) -> npt.NDArray[np.float64]:
    """
    Project all faces of a model to 2D.

    Args:
        model: Any model honouring the face-sequence contract.
        chain: Projections down to the plane; defaults to
            ``ProjectionChain.default(model.render_depth)``.

    Returns:
        Array of shape ``(faces, face_vertices, 2)``.
    """
    if model.render_depth < 2:
        raise ValueError(f"Can't project a model with render depth {model.render_depth} to the plane.")
    if chain is None:
        chain = ProjectionChain.default(model.render_depth)
    if chain.projections and chain.input_depth != model.render_depth:
        raise ValueError(
            f"Projection chain expects depth {chain.input_depth}, model has {model.render_depth}."
        )

    projected = [chain.project_face(face) for face in model]
    if not projected:
        return np.empty((0, model.face_vertices, 2), dtype=np.float64)
    return np.stack(projected)


def plot_model(
    model: GeometricObject,
    chain: Optional[ProjectionChain] = None,
    ax: Optional[Axes] = None,
    show: bool = True,
) -> Axes:
    """
    Plot the projected faces of a model.

    Faces are coloured by cycling through ``parameters.colour_map``.
    """
    polygons = project_model(model, chain)
    logger.info(f"Plotting {len(polygons)} faces of {model.label}.")

    if ax is None:
        plt.rcParams["figure.constrained_layout.use"] = True
        fig = plt.figure(figsize=(7, 7))
        ax = fig.add_subplot()

    colours = model.parameters.colour_map
    face_colours = [colours[i % len(colours)] for i in range(len(polygons))]
    collection = PolyCollection(
        polygons,
        facecolors=face_colours,
        edgecolors="black",
        linewidths=0.3,
        alpha=0.6,
    )
    ax.add_collection(collection)
    ax.autoscale_view()
    ax.set_aspect("equal")
    ax.set_title(model.label)

    if show:
        plt.show()
    return ax
