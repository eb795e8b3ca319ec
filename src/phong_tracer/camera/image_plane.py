"""Primary ray generation through a four-corner image plane.

For raster pixel (x, y) of a W x H image:

    alpha = x / W,  beta = y / H
    top    = lerp(corner00, corner10, alpha)
    bottom = lerp(corner01, corner11, alpha)
    P      = lerp(top, bottom, beta)

The primary ray starts at P and points away from the camera origin,
``P - camera_origin``. Rays are sampled at the pixel's corner, not its
center; there is no jitter.

Example:
    >>> from phong_tracer.camera.image_plane import CameraRayGenerator
    >>> camera = CameraRayGenerator(scene.image_plane, scene.camera_origin, 256, 192)
    >>> ray = camera.primary_ray(128, 96)
"""

from __future__ import annotations

from dataclasses import dataclass

from phong_tracer.core.errors import SceneValidationError
from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Vector3, lerp
from phong_tracer.scene.scene import ImagePlane, Scene


@dataclass(frozen=True)
class CameraRayGenerator:
    """Maps raster pixels to primary rays.

    Attributes:
        image_plane: The image plane corners.
        camera_origin: The eye point.
        width: Raster width in pixels.
        height: Raster height in pixels.
    """

    image_plane: ImagePlane
    camera_origin: Vector3
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise SceneValidationError(
                f"Raster size must be positive, got {self.width}x{self.height}"
            )

    @classmethod
    def for_scene(cls, scene: Scene, width: int, height: int) -> CameraRayGenerator:
        """Build a generator from a scene's image plane and camera."""
        return cls(scene.image_plane, scene.camera_origin, width, height)

    def image_plane_point(self, x: float, y: float) -> Vector3:
        """Return the image-plane point under raster position (x, y)."""
        alpha = x / self.width
        beta = y / self.height
        plane = self.image_plane
        top = lerp(plane.corner00, plane.corner10, alpha)
        bottom = lerp(plane.corner01, plane.corner11, alpha)
        return lerp(top, bottom, beta)

    def primary_ray(self, x: int, y: int) -> Ray:
        """Generate the primary ray for pixel (x, y).

        Raises:
            DegenerateGeometry: If the image-plane point coincides with the
                camera origin.
        """
        point = self.image_plane_point(x, y)
        return Ray(point, point - self.camera_origin)
