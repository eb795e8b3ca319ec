"""Camera module for primary ray generation.

Components:
    image_plane: CameraRayGenerator, bilinear interpolation over the four
        corners of the scene's image plane

Example:
    >>> from phong_tracer.camera import CameraRayGenerator
    >>> camera = CameraRayGenerator.for_scene(scene, 256, 192)
    >>> ray = camera.primary_ray(0, 0)
"""

from phong_tracer.camera.image_plane import CameraRayGenerator

__all__ = ["CameraRayGenerator"]
