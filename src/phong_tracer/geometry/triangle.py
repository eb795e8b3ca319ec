"""Triangle primitive placeholder.

Triangle meshes are not supported. The class exists so scenes can name the
type; intersecting one raises ``NotImplementedError`` and scene validation
rejects it up front.
"""

from __future__ import annotations

from dataclasses import dataclass

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3
from phong_tracer.geometry.hit import Hit
from phong_tracer.materials.phong import Material


@dataclass(frozen=True, eq=False)
class Triangle:
    """A triangle with vertices ``a``, ``b``, ``c``."""

    a: Vector3
    b: Vector3
    c: Vector3
    material: Material

    def intersect(self, ray: Ray) -> Hit | None:
        raise NotImplementedError("Triangle intersection is not implemented")
