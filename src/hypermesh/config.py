"""
Configuration & Global Constants
================================
This module serves as the central registry for the numeric constants shared by
the generators, the dispatcher and the projection chain.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (depth ceilings, tolerances, camera
   placement) from being scattered throughout the code.
2. Consistency: The dispatcher, the factory and the command line all agree on
   the largest dimensionality they will search.

Exports:
    MAX_MODEL_DEPTH (int): Largest model depth the dispatcher starts from.
    MAX_RENDER_DEPTH (int): Largest render depth the dispatcher starts from.
    MODEL_DEPTH_FLOOR (int): Model depth at which the dispatcher recursion stops.
    RENDER_DEPTH_FLOOR (int): Render depth at which the dispatcher recursion stops.
    HOMOGENEOUS_EPSILON (float): Smallest magnitude accepted as a divisor.
    CAMERA_DISTANCE (float): Default camera distance of the projection chain.
    DEFAULT_EYE_ANGLE (float): Default field of view of the projection chain.
"""
import math

# Dimension search
MAX_MODEL_DEPTH: int = 7
MAX_RENDER_DEPTH: int = 7
MODEL_DEPTH_FLOOR: int = 1
RENDER_DEPTH_FLOOR: int = 1

# Numerics
HOMOGENEOUS_EPSILON: float = 1e-12

# Projection
CAMERA_DISTANCE: float = 3.0
DEFAULT_EYE_ANGLE: float = math.pi / 4
