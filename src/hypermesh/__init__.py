"""
hypermesh
=========
Meshes of arbitrary-dimensional primitives (hypercubes, Sierpinski fractals,
random affine iterated function systems) exposed as lazy sequences of faces.
"""
from hypermesh.model.parameters import Parameters, ParameterFlags
from hypermesh.model.descriptors import CoordinateFormat, Dimensions, PrimitiveDescriptor
from hypermesh.geometry.transformation import Linear, Affine, Projective
from hypermesh.geometry.projection import ProjectionChain, look_at, perspective
from hypermesh.geometry.polytope import Adapt, Polytope, cube, cube_face_count, extended_cube
from hypermesh.geometry.ifs import IFS, RandomAffine, random_affine_ifs, sierpinski_carpet, sierpinski_gasket
from hypermesh.controller.factory import build, dispatch, legal_depths, list_models

__all__ = [
    "Parameters",
    "ParameterFlags",
    "CoordinateFormat",
    "Dimensions",
    "PrimitiveDescriptor",
    "Linear",
    "Affine",
    "Projective",
    "ProjectionChain",
    "look_at",
    "perspective",
    "Adapt",
    "Polytope",
    "cube",
    "cube_face_count",
    "extended_cube",
    "IFS",
    "RandomAffine",
    "random_affine_ifs",
    "sierpinski_carpet",
    "sierpinski_gasket",
    "build",
    "dispatch",
    "legal_depths",
    "list_models",
]
