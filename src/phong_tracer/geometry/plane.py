"""Infinite one-sided plane primitive.

The plane is visible only from the side its normal points to. A ray hits it
when it travels against the normal (``-n . d > PLANE_EPSILON``) and the
crossing lies at a non-negative distance.

The material is not fixed: the plane evaluates a material function at each
hit position, which is how the checkerboard floor of the demo scene is
expressed. Texture coordinates are the fractional parts of the hit's x and z
coordinates, tiling a texture once per world unit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3
from phong_tracer.geometry.hit import Hit, make_hit
from phong_tracer.materials.phong import CheckerboardMaterial, MaterialFunction

# Rays closer to parallel than this (or hitting the back face) miss
PLANE_EPSILON = 1e-6


def plane_uv(point: Vector3) -> tuple[float, float]:
    """Texture coordinates for a hit at ``point``."""
    return point.x - math.floor(point.x), point.z - math.floor(point.z)


@dataclass(frozen=True, eq=False)
class Plane:
    """An infinite plane through ``point`` facing ``normal``.

    Attributes:
        point: Any point on the plane.
        normal: The outward normal. Normalized on construction.
        material: Function from hit position to Material. Defaults to a
            black-and-white checkerboard with 10-unit cells.

    Raises:
        DegenerateGeometry: If ``normal`` has zero or non-finite length.
    """

    point: Vector3
    normal: Vector3
    material: MaterialFunction = field(default_factory=CheckerboardMaterial)

    def __post_init__(self) -> None:
        object.__setattr__(self, "normal", self.normal.normalize())

    def intersect(self, ray: Ray) -> Hit | None:
        """Intersect the plane with a ray.

        Args:
            ray: The ray to test.

        Returns:
            The hit on the front face, or None for parallel rays, back-face
            hits and crossings behind the origin.
        """
        inward = -self.normal
        denom = inward.dot(ray.direction)
        if denom <= PLANE_EPSILON:
            return None

        t = (self.point - ray.origin).dot(inward) / denom
        if t < 0.0:
            return None

        hit_point = ray.at(t)
        u, v = plane_uv(hit_point)
        return make_hit(
            ray, t, self.normal, self.material(hit_point), u, v, self, point=hit_point
        )
