"""Core rendering module.

This module contains the fundamental building blocks of the renderer:

Components:
    vector: Vector3 and Color value types, lerp, 8-bit quantization
    ray: Ray with a direction normalized at construction
    errors: DegenerateGeometry, InvalidSampler and the other error kinds
    shading: Phong local illumination with hard shadows (host path)
    render: RenderDriver, pixel sinks and per-pixel diagnostics
    integrator: Taichi kernel shading all pixels in parallel

The host path evaluates one pixel at a time in plain Python and raises
exceptions for degenerate input; the Taichi integrator evaluates the same
model for a whole frame and reports failures through a per-pixel mask.
"""

from .errors import (
    DegenerateGeometry,
    InvalidSampler,
    RenderError,
    SceneValidationError,
    UnsupportedOnDevice,
)
from .ray import Ray
from .vector import Color, DiscreteColor, Vector3, lerp

# Note: shading, render and integrator are NOT imported here to avoid circular
# imports (they depend on the scene package, which depends on this one).
# Import them directly, e.g. from phong_tracer.core.render import RenderDriver

__all__ = [
    "Vector3",
    "Color",
    "DiscreteColor",
    "lerp",
    "Ray",
    "RenderError",
    "DegenerateGeometry",
    "InvalidSampler",
    "SceneValidationError",
    "UnsupportedOnDevice",
]
