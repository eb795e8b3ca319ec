"""Color samplers: functions from texture coordinates to a color.

Two samplers are provided:

- ``ConstantSampler`` returns the same color everywhere.
- ``ImageSampler`` looks up a decoded texel grid with nearest-texel
  addressing. The ``u`` coordinate selects the grid's x axis and ``v`` its
  y axis; coordinates outside [0, 1] are clamped to the border texel.

The texel grid is a NumPy array of shape ``(width, height, 3)`` indexed as
``texels[x, y]`` with ``y`` pointing up, which is the layout produced by
:func:`phong_tracer.materials.texture_loader.load_texture`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

from phong_tracer.core.errors import InvalidSampler
from phong_tracer.core.vector import Color


@runtime_checkable
class Sampler(Protocol):
    """Anything that can be evaluated at texture coordinates."""

    def evaluate(self, u: float, v: float) -> Color: ...


@dataclass(frozen=True)
class ConstantSampler:
    """A sampler returning a single color regardless of (u, v)."""

    color: Color

    def evaluate(self, u: float, v: float) -> Color:
        return self.color


def texel_index(coordinate: float, size: int) -> int:
    """Map a texture coordinate to the nearest texel index along one axis.

    The coordinate is clamped to [0, 1] and scaled to ``[0, size - 1]``
    before rounding half up.

    Args:
        coordinate: The ``u`` or ``v`` coordinate.
        size: Number of texels along the axis.

    Returns:
        An index in ``range(size)``. Non-finite coordinates map to 0.
    """
    if not math.isfinite(coordinate):
        return 0
    clamped = min(max(coordinate, 0.0), 1.0)
    return min(size - 1, int(math.floor(clamped * (size - 1) + 0.5)))


@dataclass(frozen=True, eq=False)
class ImageSampler:
    """A sampler backed by a decoded texel grid.

    Attributes:
        texels: Float array of shape (width, height, 3) with linear RGB
            values, indexed ``texels[x, y]``.
        name: Optional identifier, typically the source path. Used by scene
            serialization.

    Raises:
        InvalidSampler: If the grid is empty or not an RGB grid.
    """

    texels: npt.NDArray[np.float32]
    name: str | None = field(default=None)

    def __post_init__(self) -> None:
        texels = np.array(self.texels, dtype=np.float32)
        if texels.ndim != 3 or texels.shape[2] != 3:
            raise InvalidSampler(
                f"Texel grid must have shape (width, height, 3), got {texels.shape}"
            )
        if texels.shape[0] == 0 or texels.shape[1] == 0:
            raise InvalidSampler("Texel grid is empty")
        texels.setflags(write=False)
        object.__setattr__(self, "texels", texels)

    @property
    def width(self) -> int:
        """Number of texels along u."""
        return int(self.texels.shape[0])

    @property
    def height(self) -> int:
        """Number of texels along v."""
        return int(self.texels.shape[1])

    def evaluate(self, u: float, v: float) -> Color:
        x = texel_index(u, self.width)
        y = texel_index(v, self.height)
        r, g, b = self.texels[x, y]
        return Color(float(r), float(g), float(b))
