"""
The GEOMETRY layer generates meshes and transforms them.
This module should be pure Python/NumPy and should NOT import matplotlib.
"""
