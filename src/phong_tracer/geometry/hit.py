"""Hit records and the surface interface.

Every primitive implements ``intersect(ray) -> Hit | None``. ``None`` means
the ray misses; it is a normal result, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Color, Vector3
from phong_tracer.materials.phong import Material


@runtime_checkable
class Surface(Protocol):
    """A primitive that can be intersected by a ray."""

    def intersect(self, ray: Ray) -> Hit | None: ...


@dataclass(frozen=True, eq=False)
class Hit:
    """Record of a ray-surface intersection.

    Attributes:
        distance: Distance from the ray origin to the hit point (>= 0).
        point: The hit point in world space.
        normal: Unit surface normal at the hit point.
        ambient: Ambient reflectance sampled at the hit.
        diffuse: Diffuse reflectance sampled at the hit.
        specular: Specular reflectance sampled at the hit.
        shininess: Specular exponent of the hit material.
        surface: The primitive that was hit.
    """

    distance: float
    point: Vector3
    normal: Vector3
    ambient: Color
    diffuse: Color
    specular: Color
    shininess: float
    surface: Surface


def make_hit(
    ray: Ray,
    distance: float,
    normal: Vector3,
    material: Material,
    u: float,
    v: float,
    surface: Surface,
    point: Vector3 | None = None,
) -> Hit:
    """Build a Hit by sampling ``material`` at (u, v).

    Args:
        ray: The ray that produced the hit.
        distance: Distance along the ray.
        normal: Unit surface normal.
        material: Material to sample.
        u: Horizontal texture coordinate.
        v: Vertical texture coordinate.
        surface: The primitive that was hit.
        point: The hit point, if already computed.

    Returns:
        A new Hit.
    """
    return Hit(
        distance=distance,
        point=ray.at(distance) if point is None else point,
        normal=normal,
        ambient=material.ambient.evaluate(u, v),
        diffuse=material.diffuse.evaluate(u, v),
        specular=material.specular.evaluate(u, v),
        shininess=material.shininess,
        surface=surface,
    )
