"""
The MODEL layer contains pure data structures.
It has NO knowledge of mesh generation, transformations or plotting.
It deals with Parameters and Primitive Descriptors.
"""
