"""Phong materials and position-dependent material policies.

A ``Material`` bundles the three Phong color terms (ambient, diffuse,
specular) as samplers plus a shininess exponent.

Planes do not carry a single material. They are given a *material function*
mapping a world-space hit position to a ``Material``. Two picklable,
inspectable policies are provided so that the Taichi backend can pack them:

- ``UniformMaterial``: the same material everywhere.
- ``CheckerboardMaterial``: alternates two materials on square cells in the
  XZ plane.

Any other ``Callable[[Vector3], Material]`` works on the Python backend.

Example:
    >>> from phong_tracer.core.vector import Color, Vector3
    >>> floor = CheckerboardMaterial()
    >>> floor(Vector3(5.0, 0.0, 15.0)).ambient.evaluate(0, 0)
    Color(r=1.0, g=1.0, b=1.0)
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field

from phong_tracer.core.vector import Color, Vector3
from phong_tracer.materials.sampler import ConstantSampler, Sampler

# Shininess used by default_material
DEFAULT_SHININESS = 50.0

# Specular tint used by default_material
DEFAULT_SPECULAR = Color(0.5, 0.5, 0.5)

# Edge length of one checkerboard cell in world units
DEFAULT_CELL_SIZE = 10.0


@dataclass(frozen=True)
class Material:
    """Phong material parameters.

    Attributes:
        ambient: Sampler for the ambient reflectance.
        diffuse: Sampler for the diffuse (Lambertian) reflectance.
        specular: Sampler for the specular reflectance.
        shininess: Specular exponent (non-negative).
    """

    ambient: Sampler
    diffuse: Sampler
    specular: Sampler
    shininess: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.shininess) or self.shininess < 0.0:
            raise ValueError(f"Shininess must be a non-negative number, got {self.shininess}")


def default_material(surface: Color | Sampler) -> Material:
    """Build the standard material used by the demo scene.

    The given color (or sampler) drives both the ambient and diffuse terms;
    the specular term is a fixed mid grey with shininess 50.

    Args:
        surface: A color or a sampler for the ambient and diffuse terms.

    Returns:
        A new Material.
    """
    sampler = ConstantSampler(surface) if isinstance(surface, Color) else surface
    return Material(
        ambient=sampler,
        diffuse=sampler,
        specular=ConstantSampler(DEFAULT_SPECULAR),
        shininess=DEFAULT_SHININESS,
    )


# Maps a world-space position to the material at that position
MaterialFunction = Callable[[Vector3], Material]


@dataclass(frozen=True)
class UniformMaterial:
    """Material function returning one material everywhere."""

    material: Material

    def __call__(self, position: Vector3) -> Material:
        return self.material


@dataclass(frozen=True)
class CheckerboardMaterial:
    """Material function alternating two materials on an XZ grid.

    The cell containing ``position`` is ``(floor(x / cell_size),
    floor(z / cell_size))``; cells whose index sum is odd use ``odd`` and the
    rest use ``even``.

    Attributes:
        even: Material for cells with an even index sum. Black by default.
        odd: Material for cells with an odd index sum. White by default.
        cell_size: Edge length of a cell (positive).
    """

    even: Material = field(default_factory=lambda: default_material(Color.BLACK))
    odd: Material = field(default_factory=lambda: default_material(Color.WHITE))
    cell_size: float = DEFAULT_CELL_SIZE

    def __post_init__(self) -> None:
        if not self.cell_size > 0.0:
            raise ValueError(f"Cell size must be positive, got {self.cell_size}")

    def parity(self, position: Vector3) -> int:
        """Return 1 for odd cells and 0 for even cells."""
        cx = math.floor(position.x / self.cell_size)
        cz = math.floor(position.z / self.cell_size)
        return (cx + cz) % 2

    def __call__(self, position: Vector3) -> Material:
        return self.odd if self.parity(position) else self.even
