"""Phong ray caster with an optional Taichi-accelerated backend.

This package renders a raster by casting one primary ray per pixel through an
image plane and evaluating Phong local illumination at the nearest hit, with
hard shadows from point lights.

Subpackages:
    core: Vector/color math, rays, shading, the render driver and the
        Taichi integrator
    geometry: Surface primitives and their intersection routines
    materials: Color samplers, Phong materials and texture loading
    scene: The immutable scene value, intersection queries and scene configs
    camera: Image-plane ray generation
    preview: Frame buffer export utilities
"""

__version__ = "0.1.0"
