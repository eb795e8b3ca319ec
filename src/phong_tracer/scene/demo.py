"""Demo scene: a checkerboard floor, a cyan sphere and a field of random spheres.

The scene uses the default image plane (a 2 x 1.5 window at z = 0) seen from
``(0, 0, -1)``, an ambient level of 0.2 and one point light above and to the
right of the camera.

Random spheres are drawn from a seeded NumPy generator, so the same seed
always produces the same scene:

- center x in [-100, 100), y in [-70, 70), z between 50 and 500
- radius in [5, 30)
- each color channel in [0.5, 1.0), used through ``default_material``

Example:
    >>> from phong_tracer.scene.demo import build_demo_scene
    >>> scene = build_demo_scene(seed=7)
    >>> len(scene.geometry)
    102
"""

from __future__ import annotations

import numpy as np

from phong_tracer.core.vector import Color, Vector3
from phong_tracer.geometry.plane import Plane
from phong_tracer.geometry.sphere import Sphere
from phong_tracer.materials.phong import CheckerboardMaterial, default_material
from phong_tracer.materials.sampler import Sampler
from phong_tracer.scene.scene import ImagePlane, PointLight, Scene

# =============================================================================
# Demo Scene Parameters
# =============================================================================

DEMO_SPHERE_COUNT = 100

# Bounds of the random sphere centers (min, max) per axis
DEMO_X_RANGE = (-100.0, 100.0)
DEMO_Y_RANGE = (-70.0, 70.0)
DEMO_Z_RANGE = (50.0, 500.0)

DEMO_RADIUS_RANGE = (5.0, 30.0)
DEMO_COLOR_RANGE = (0.5, 1.0)

DEMO_AMBIENT = Color(0.2, 0.2, 0.2)
DEMO_LIGHT = PointLight(
    location=Vector3(30.0, 30.0, 20.0),
    diffuse=Color(0.8, 0.8, 0.8),
    specular=Color(0.8, 0.8, 0.8),
)


def build_demo_scene(
    seed: int | None = None,
    sphere_count: int = DEMO_SPHERE_COUNT,
    texture: Sampler | None = None,
) -> Scene:
    """Create the demo scene.

    Args:
        seed: Seed for the random sphere field. None draws fresh entropy.
        sphere_count: Number of random spheres added after the fixed ones.
        texture: Optional sampler (typically an ImageSampler) wrapped onto
            the center sphere in place of its cyan color.

    Returns:
        The scene, geometry ordered floor, center sphere, random spheres.
    """
    if sphere_count < 0:
        raise ValueError(f"sphere_count must be non-negative, got {sphere_count}")

    rng = np.random.default_rng(seed)

    center_surface = texture if texture is not None else Color(0.0, 1.0, 1.0)
    geometry: list = [
        Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0), CheckerboardMaterial()),
        Sphere(Vector3(0.0, 0.0, 50.0), 20.0, default_material(center_surface)),
    ]

    centers = np.column_stack(
        [
            rng.uniform(*DEMO_X_RANGE, size=sphere_count),
            rng.uniform(*DEMO_Y_RANGE, size=sphere_count),
            rng.uniform(*DEMO_Z_RANGE, size=sphere_count),
        ]
    )
    radii = rng.uniform(*DEMO_RADIUS_RANGE, size=sphere_count)
    colors = rng.uniform(*DEMO_COLOR_RANGE, size=(sphere_count, 3))

    for center, radius, color in zip(centers, radii, colors):
        geometry.append(
            Sphere(
                Vector3.of(center.tolist()),
                float(radius),
                default_material(Color.of(color.tolist())),
            )
        )

    return Scene(
        image_plane=ImagePlane.default(),
        camera_origin=Vector3(0.0, 0.0, -1.0),
        ambient=DEMO_AMBIENT,
        lights=[DEMO_LIGHT],
        geometry=geometry,
    )
