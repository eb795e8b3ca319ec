"""Ray data structure for the host rendering path.

A ray's direction is normalized once, when the ray is built, so every
intersection routine can treat the ray parameter ``t`` as a true distance
from the origin.

Example:
    >>> from phong_tracer.core.ray import Ray
    >>> from phong_tracer.core.vector import Vector3
    >>> ray = Ray(Vector3(0, 0, -1), Vector3(0, 0, 10))
    >>> ray.direction
    Vector3(x=0.0, y=0.0, z=1.0)
    >>> ray.at(5.0)
    Vector3(x=0.0, y=0.0, z=4.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from phong_tracer.core.vector import Vector3


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Any non-zero vector may be
            passed in; it is stored normalized.

    Raises:
        DegenerateGeometry: If ``direction`` has zero length.
    """

    origin: Vector3
    direction: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", self.direction.normalize())

    def at(self, t: float) -> Vector3:
        """Return the point ``origin + direction * t``."""
        return self.origin + self.direction * t
