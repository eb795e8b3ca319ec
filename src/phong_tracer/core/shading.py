"""Phong local illumination for the host rendering path.

For the nearest hit of a primary ray:

    color = ambient + sum(diffuse_i) + sum(specular_i)

    ambient    = hit.ambient * scene.ambient
    diffuse_i  = hit.diffuse * light.diffuse * (n . l)
    specular_i = hit.specular * light.specular * (-(v . r)) ** shininess

where ``l`` points from the hit to the light, ``r = 2 (n . l) n - l`` is
the mirrored light direction and ``v`` points from the camera to the hit.
A light contributes nothing when it is behind the surface (``n . l < 0``)
or occluded; the specular term alone is dropped when ``-(v . r) < 0``.
The result is not clamped.
"""

from __future__ import annotations

from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Color
from phong_tracer.geometry.hit import Hit
from phong_tracer.scene.intersection import in_shadow, nearest_hit
from phong_tracer.scene.scene import Scene


def shade_hit(scene: Scene, hit: Hit) -> Color:
    """Evaluate Phong lighting at a hit.

    Args:
        scene: The scene providing lights, ambient light and occluders.
        hit: The surface hit to shade.

    Returns:
        The unclamped color at the hit.

    Raises:
        DegenerateGeometry: If a light coincides with the hit point or the
            hit point coincides with the camera origin.
    """
    ambient = hit.ambient * scene.ambient
    diffuse = Color.BLACK
    specular = Color.BLACK

    for light in scene.lights:
        light_direction = (light.location - hit.point).normalize()
        alignment = hit.normal.dot(light_direction)

        if alignment < 0.0:
            continue
        if in_shadow(scene.geometry, hit.point, light, hit.surface):
            continue

        diffuse = diffuse + hit.diffuse * light.diffuse * alignment

        reflection = hit.normal * (2.0 * alignment) - light_direction
        view = (hit.point - scene.camera_origin).normalize()
        view_alignment = -view.dot(reflection)
        if view_alignment < 0.0:
            continue

        specular = specular + hit.specular * light.specular * (view_alignment**hit.shininess)

    return ambient + diffuse + specular


def shade(scene: Scene, ray: Ray) -> Color:
    """Trace a primary ray and shade what it hits.

    Args:
        scene: The scene to render.
        ray: The primary ray.

    Returns:
        The unclamped color, or ``scene.background`` if the ray misses.
    """
    hit = nearest_hit(scene.geometry, ray)
    if hit is None:
        return scene.background
    return shade_hit(scene, hit)
