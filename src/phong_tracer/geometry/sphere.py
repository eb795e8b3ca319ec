"""Sphere primitive with ray-sphere intersection.

The intersection solves ``a*t^2 + b*t + c = 0`` with

    a = d . d
    b = 2 * (o - center) . d
    c = (o - center) . (o - center) - radius^2

and keeps the smaller non-negative root. A ray whose roots are both
negative (sphere entirely behind the origin) misses.

Texture coordinates come from the unit outward normal ``n``:

    u = atan2(n.x, n.z) / (2*pi) + 0.5
    v = 0.5 * n.y + 0.5

Example:
    >>> from phong_tracer.core.ray import Ray
    >>> from phong_tracer.core.vector import Color, Vector3
    >>> from phong_tracer.materials.phong import default_material
    >>> sphere = Sphere(Vector3(0, 0, 50), 20.0, default_material(Color.WHITE))
    >>> sphere.intersect(Ray(Vector3(0, 0, -1), Vector3(0, 0, 1))).distance
    31.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3
from phong_tracer.geometry.hit import Hit, make_hit
from phong_tracer.materials.phong import Material


def solve_sphere_roots(ray: Ray, center: Vector3, radius: float) -> tuple[float, float] | None:
    """Return both ray parameters where the ray meets the sphere.

    Args:
        ray: The ray to test.
        center: Sphere center.
        radius: Sphere radius.

    Returns:
        ``(t_near, t_far)`` with ``t_near <= t_far``, or None if the
        discriminant is negative.
    """
    ray_to_center = ray.origin - center
    a = ray.direction.dot(ray.direction)
    b = 2.0 * ray_to_center.dot(ray.direction)
    c = ray_to_center.dot(ray_to_center) - radius * radius

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0.0:
        return None

    sqrt_d = math.sqrt(discriminant)
    return (-b - sqrt_d) / (2.0 * a), (-b + sqrt_d) / (2.0 * a)


def sphere_uv(normal: Vector3) -> tuple[float, float]:
    """Spherical texture coordinates for a unit outward normal."""
    u = math.atan2(normal.x, normal.z) / (2.0 * math.pi) + 0.5
    v = 0.5 * normal.y + 0.5
    return u, v


@dataclass(frozen=True, eq=False)
class Sphere:
    """A sphere defined by center, radius and material.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive for rendering).
        material: The Phong material of the whole surface.
    """

    center: Vector3
    radius: float
    material: Material

    def intersect(self, ray: Ray) -> Hit | None:
        """Intersect the sphere with a ray.

        Args:
            ray: The ray to test.

        Returns:
            The nearest hit at a non-negative distance, or None.
        """
        roots = solve_sphere_roots(ray, self.center, self.radius)
        if roots is None:
            return None

        t_near, t_far = roots
        if t_near >= 0.0:
            t = t_near
        elif t_far >= 0.0:
            t = t_far
        else:
            return None

        point = ray.at(t)
        normal = (point - self.center).normalize()
        u, v = sphere_uv(normal)
        return make_hit(ray, t, normal, self.material, u, v, self, point=point)
