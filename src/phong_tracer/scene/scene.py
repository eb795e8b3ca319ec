"""The immutable scene value consumed by the renderer.

A ``Scene`` is built once (by hand, from a config dict, or by the demo
builder) and then passed explicitly to every stage of the renderer. Nothing
in the renderer mutates it.

``validate_scene`` checks the invariants the renderer relies on. It runs once
per render pass, before the first pixel, so per-pixel code can assume
positive radii, finite positions and a non-degenerate image plane. Plane
normals are unit length by construction (see ``Plane``).

Example:
    >>> from phong_tracer.core.vector import Color, Vector3
    >>> from phong_tracer.geometry import Plane
    >>> scene = Scene(
    ...     image_plane=ImagePlane.default(),
    ...     camera_origin=Vector3(0, 0, -1),
    ...     ambient=Color(0.2, 0.2, 0.2),
    ...     lights=[],
    ...     geometry=[Plane(Vector3(0, -30, 0), Vector3(0, 1, 0))],
    ... )
    >>> validate_scene(scene, 256, 192)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from phong_tracer.core.errors import DegenerateGeometry, SceneValidationError
from phong_tracer.core.vector import Color, Vector3
from phong_tracer.geometry.box import BoundingBox
from phong_tracer.geometry.hit import Surface
from phong_tracer.geometry.plane import Plane
from phong_tracer.geometry.sphere import Sphere
from phong_tracer.geometry.triangle import Triangle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImagePlane:
    """The virtual rectangle primary rays pass through.

    The raster's top edge runs from ``corner00`` to ``corner10`` and its
    bottom edge from ``corner01`` to ``corner11``.

    Attributes:
        corner00: Point under raster pixel (0, 0).
        corner10: Point under the far end of the top row.
        corner01: Point under the far end of the left column.
        corner11: Point under the opposite corner.
    """

    corner00: Vector3
    corner10: Vector3
    corner01: Vector3
    corner11: Vector3

    @classmethod
    def default(cls) -> ImagePlane:
        """A 2 x 1.5 plane at z = 0, for a camera at (0, 0, -1)."""
        return cls(
            corner00=Vector3(1.0, 0.75, 0.0),
            corner10=Vector3(-1.0, 0.75, 0.0),
            corner01=Vector3(1.0, -0.75, 0.0),
            corner11=Vector3(-1.0, -0.75, 0.0),
        )

    def corners(self) -> tuple[Vector3, Vector3, Vector3, Vector3]:
        """Return the corners in (00, 10, 01, 11) order."""
        return (self.corner00, self.corner10, self.corner01, self.corner11)


@dataclass(frozen=True)
class PointLight:
    """A point light source.

    Attributes:
        location: Position of the light.
        diffuse: Diffuse intensity.
        specular: Specular intensity.
    """

    location: Vector3
    diffuse: Color
    specular: Color


@dataclass(frozen=True)
class Scene:
    """Everything the renderer needs for one render pass.

    Attributes:
        image_plane: The image plane primary rays pass through.
        camera_origin: The eye point.
        ambient: Global ambient light color.
        lights: Point lights, evaluated in order.
        geometry: Surfaces, scanned in order by intersection queries.
        background: Color of pixels whose primary ray hits nothing.
    """

    image_plane: ImagePlane
    camera_origin: Vector3
    ambient: Color
    lights: tuple[PointLight, ...] = ()
    geometry: tuple[Surface, ...] = ()
    background: Color = field(default=Color.BLACK)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lights", tuple(self.lights))
        object.__setattr__(self, "geometry", tuple(self.geometry))


def _check_finite(name: str, values) -> None:
    if not all(math.isfinite(c) for c in values):
        raise DegenerateGeometry(f"{name} has non-finite components: {tuple(values)}")


def validate_scene(scene: Scene, width: int, height: int) -> None:
    """Check a scene and raster size before rendering.

    Args:
        scene: The scene to check.
        width: Raster width in pixels.
        height: Raster height in pixels.

    Raises:
        SceneValidationError: For a non-positive raster size, unsupported
            primitives or lights of the wrong type.
        DegenerateGeometry: For non-positive sphere radii, non-finite
            positions, or a degenerate image plane.
    """
    if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
        raise SceneValidationError(f"Raster size must be positive integers, got {width}x{height}")

    for name, corner in zip(("corner00", "corner10", "corner01", "corner11"), scene.image_plane.corners()):
        _check_finite(f"Image plane {name}", corner)
    _check_finite("Camera origin", scene.camera_origin)

    plane = scene.image_plane
    across = plane.corner10 - plane.corner00
    down = plane.corner01 - plane.corner00
    if across.magnitude() == 0.0 or down.magnitude() == 0.0 or across.cross(down).magnitude() == 0.0:
        raise DegenerateGeometry("Image plane corners do not span a rectangle")

    for index, light in enumerate(scene.lights):
        if not isinstance(light, PointLight):
            raise SceneValidationError(f"Light {index} is not a PointLight: {light!r}")
        _check_finite(f"Light {index} location", light.location)

    for index, surface in enumerate(scene.geometry):
        if isinstance(surface, Sphere):
            _check_finite(f"Sphere {index} center", surface.center)
            if not (math.isfinite(surface.radius) and surface.radius > 0.0):
                raise DegenerateGeometry(f"Sphere {index} has non-positive radius {surface.radius}")
        elif isinstance(surface, Plane):
            _check_finite(f"Plane {index} point", surface.point)
        elif isinstance(surface, BoundingBox):
            _check_finite(f"Box {index} vmin", surface.vmin)
            _check_finite(f"Box {index} vmax", surface.vmax)
        elif isinstance(surface, Triangle):
            raise SceneValidationError(f"Surface {index}: triangles are not supported")
        elif not isinstance(surface, Surface):
            raise SceneValidationError(f"Surface {index} has no intersect(): {surface!r}")

    logger.debug(
        "Validated scene: %d surfaces, %d lights, %dx%d raster",
        len(scene.geometry),
        len(scene.lights),
        width,
        height,
    )
