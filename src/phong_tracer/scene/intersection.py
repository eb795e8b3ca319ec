"""Scene-level intersection queries.

``nearest_hit`` returns the closest hit over an ordered list of surfaces and
``in_shadow`` answers whether a point can see a light. Both scan every
surface; there is no acceleration structure.

Example:
    >>> from phong_tracer.scene.intersection import nearest_hit, in_shadow
    >>> hit = nearest_hit(scene.geometry, ray)
    >>> if hit is not None:
    ...     blocked = in_shadow(scene.geometry, hit.point, light, hit.surface)
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3
from phong_tracer.geometry.hit import Hit, Surface
from phong_tracer.scene.scene import PointLight


def nearest_hit(
    geometry: Sequence[Surface],
    ray: Ray,
    exclude: Surface | None = None,
) -> Hit | None:
    """Find the closest intersection of a ray with the scene.

    Surfaces are tested in order; on equal distances the earlier surface
    wins.

    Args:
        geometry: The surfaces to test.
        ray: The ray to trace.
        exclude: A surface to skip, typically the one the ray starts on.

    Returns:
        The hit with the smallest non-negative distance, or None.
    """
    closest = None
    closest_distance = math.inf

    for surface in geometry:
        if surface is exclude:
            continue
        hit = surface.intersect(ray)
        if hit is not None and 0.0 <= hit.distance < closest_distance:
            closest = hit
            closest_distance = hit.distance

    return closest


def hit_distance(hit: Hit | None) -> float:
    """Distance of a hit, with +inf standing in for a miss."""
    return math.inf if hit is None else hit.distance


def in_shadow(
    geometry: Sequence[Surface],
    point: Vector3,
    light: PointLight,
    excluding: Surface | None = None,
) -> bool:
    """Test whether something blocks the segment from ``point`` to a light.

    Args:
        geometry: The surfaces that may occlude.
        point: The surface point being lit.
        light: The light to test.
        excluding: The surface ``point`` lies on; skipped to avoid
            self-shadowing.

    Returns:
        True if a surface is hit strictly closer than the light.

    Raises:
        DegenerateGeometry: If the light sits exactly at ``point``.
    """
    point_to_light = light.location - point
    shadow_ray = Ray(point, point_to_light)
    blocker = nearest_hit(geometry, shadow_ray, exclude=excluding)
    return hit_distance(blocker) < point_to_light.magnitude()
