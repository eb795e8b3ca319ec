"""Immutable vector and color value types.

This module provides the host-side math kernel used by the Python rendering
path: a 3D ``Vector3`` for positions and directions, an RGB ``Color`` kept
unclamped until it is quantized, and ``lerp`` for linear interpolation.

Example:
    >>> from phong_tracer.core.vector import Vector3, Color, lerp
    >>> Vector3(3.0, 4.0, 0.0).normalize()
    Vector3(x=0.6, y=0.8, z=0.0)
    >>> lerp(Vector3(0, 0, 0), Vector3(2, 2, 2), 0.5)
    Vector3(x=1.0, y=1.0, z=1.0)
    >>> Color(2.0, -0.5, 0.5).to_discrete()
    DiscreteColor(r=255, g=0, b=128)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, NamedTuple

from phong_tracer.core.errors import DegenerateGeometry


@dataclass(frozen=True)
class Vector3:
    """A 3D vector with value semantics.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
    """

    x: float
    y: float
    z: float

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vector3) -> float:
        """Return the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Return the cross product ``self x other``."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector."""
        return math.sqrt(self.dot(self))

    def normalize(self) -> Vector3:
        """Return a unit vector pointing in the same direction.

        Raises:
            DegenerateGeometry: If the vector has zero (or non-finite) length.
        """
        length = self.magnitude()
        if length == 0.0 or not math.isfinite(length):
            raise DegenerateGeometry(f"Cannot normalize {self!r} (length {length})")
        return Vector3(self.x / length, self.y / length, self.z / length)

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the components as a plain tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def of(cls, values) -> Vector3:
        """Build a vector from any 3-item sequence."""
        x, y, z = values
        return cls(float(x), float(y), float(z))


def lerp(a: Vector3, b: Vector3, t: float) -> Vector3:
    """Linearly interpolate between two vectors.

    Args:
        a: Value at ``t == 0``.
        b: Value at ``t == 1``.
        t: Interpolation parameter.

    Returns:
        ``a * (1 - t) + b * t``.
    """
    return a * (1.0 - t) + b * t


class DiscreteColor(NamedTuple):
    """An 8-bit RGB triple as handed to a pixel sink."""

    r: int
    g: int
    b: int


def _quantize(channel: float) -> int:
    if math.isnan(channel):
        return 0
    scaled = channel * 255.0
    if scaled >= 255.0:
        return 255
    if scaled <= 0.0:
        return 0
    return min(255, int(math.floor(scaled + 0.5)))


@dataclass(frozen=True)
class Color:
    """A linear RGB color.

    Channels are nominally in [0, 1] but are not clamped until
    :meth:`to_discrete` is called, so lighting terms can be summed freely.

    Attributes:
        r: Red channel.
        g: Green channel.
        b: Blue channel.
    """

    r: float
    g: float
    b: float

    BLACK: ClassVar[Color]
    WHITE: ClassVar[Color]

    def __add__(self, other: Color) -> Color:
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, other: Color | float) -> Color:
        """Hadamard product with another color, or scale by a number."""
        if isinstance(other, Color):
            return Color(self.r * other.r, self.g * other.g, self.b * other.b)
        return self.scale(other)

    def __rmul__(self, scalar: float) -> Color:
        return self.scale(scalar)

    def scale(self, factor: float) -> Color:
        """Return the color with every channel multiplied by ``factor``."""
        return Color(self.r * factor, self.g * factor, self.b * factor)

    def is_finite(self) -> bool:
        """Whether every channel is a finite number."""
        return math.isfinite(self.r) and math.isfinite(self.g) and math.isfinite(self.b)

    def to_discrete(self) -> DiscreteColor:
        """Quantize to 8-bit channels.

        Each channel is scaled by 255, rounded half up and clamped to
        [0, 255]. NaN channels map to 0.
        """
        return DiscreteColor(_quantize(self.r), _quantize(self.g), _quantize(self.b))

    def to_tuple(self) -> tuple[float, float, float]:
        """Return the channels as a plain tuple."""
        return (self.r, self.g, self.b)

    @classmethod
    def of(cls, values) -> Color:
        """Build a color from any 3-item sequence."""
        r, g, b = values
        return cls(float(r), float(g), float(b))


Color.BLACK = Color(0.0, 0.0, 0.0)
Color.WHITE = Color(1.0, 1.0, 1.0)
