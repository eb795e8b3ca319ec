"""Geometry module for surface primitives.

This module provides the primitives a scene can contain:

Components:
    hit: Hit record and the Surface protocol
    sphere: Sphere primitive (quadratic root selection)
    plane: Infinite one-sided plane with a position-dependent material
    box: Axis-aligned box (slab method)
    triangle: Placeholder for triangle meshes (not implemented)

Every primitive follows the pattern:
    hit = surface.intersect(ray)   # Hit or None

The Taichi integrator re-implements the same routines as Taichi functions
(see core.integrator) so both backends evaluate the same model.
"""

from phong_tracer.geometry.box import BoundingBox, slab_intersect
from phong_tracer.geometry.hit import Hit, Surface, make_hit
from phong_tracer.geometry.plane import PLANE_EPSILON, Plane, plane_uv
from phong_tracer.geometry.sphere import Sphere, solve_sphere_roots, sphere_uv
from phong_tracer.geometry.triangle import Triangle

__all__ = [
    "Hit",
    "Surface",
    "make_hit",
    "Sphere",
    "solve_sphere_roots",
    "sphere_uv",
    "Plane",
    "PLANE_EPSILON",
    "plane_uv",
    "BoundingBox",
    "slab_intersect",
    "Triangle",
]
