"""Axis-aligned bounding box primitive.

Intersection uses the slab method: for each axis the ray's entry and exit
parameters are computed and the running ``[t_min, t_max]`` interval is
narrowed. The ray misses if the interval becomes empty or if the entry point
lies behind the origin (rays starting inside the box miss).

The surface normal is that of the face whose slab last raised ``t_min``,
pointing back toward the ray. Texture coordinates are always (0, 0), so
image samplers on boxes show a single texel.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3
from phong_tracer.geometry.hit import Hit, make_hit
from phong_tracer.materials.phong import Material

# Direction components smaller than this are treated as parallel to a slab
PARALLEL_EPSILON = 1e-12

_AXES = (
    Vector3(1.0, 0.0, 0.0),
    Vector3(0.0, 1.0, 0.0),
    Vector3(0.0, 0.0, 1.0),
)


def slab_intersect(
    origin: Vector3, direction: Vector3, vmin: Vector3, vmax: Vector3
) -> tuple[float, Vector3] | None:
    """Run the slab test against an axis-aligned box.

    Bounds may be given in either order per axis.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        vmin: One box corner.
        vmax: The opposite box corner.

    Returns:
        ``(t_entry, face_normal)`` for a hit with ``t_entry >= 0``, else None.
    """
    t_min = -math.inf
    t_max = math.inf
    normal = None

    for o, d, lo, hi, axis in zip(origin, direction, vmin, vmax, _AXES):
        lo, hi = min(lo, hi), max(lo, hi)
        if abs(d) < PARALLEL_EPSILON:
            if o < lo or o > hi:
                return None
            continue

        t0 = (lo - o) / d
        t1 = (hi - o) / d
        if t0 > t1:
            t0, t1 = t1, t0

        if t0 > t_min:
            t_min = t0
            normal = axis * (-1.0 if d > 0.0 else 1.0)
        if t1 < t_max:
            t_max = t1
        if t_min > t_max:
            return None

    if normal is None or t_min < 0.0:
        return None
    return t_min, normal


@dataclass(frozen=True, eq=False)
class BoundingBox:
    """An axis-aligned box spanning ``vmin`` to ``vmax``.

    Attributes:
        vmin: Minimum corner.
        vmax: Maximum corner.
        material: The Phong material of every face.
    """

    vmin: Vector3
    vmax: Vector3
    material: Material

    def intersect(self, ray: Ray) -> Hit | None:
        """Intersect the box with a ray.

        Args:
            ray: The ray to test.

        Returns:
            The entry hit, or None.
        """
        result = slab_intersect(ray.origin, ray.direction, self.vmin, self.vmax)
        if result is None:
            return None

        t, normal = result
        return make_hit(ray, t, normal, self.material, 0.0, 0.0, self)
