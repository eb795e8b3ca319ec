"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def white_floor_scene():
    """A floor at y = -30 with a white ambient material, no lights.

    Every pixel whose primary ray points downward sees the floor at
    ambient 0.2, i.e. discrete (51, 51, 51); every other pixel is black.
    """
    from phong_tracer.core.vector import Color, Vector3
    from phong_tracer.geometry.plane import Plane
    from phong_tracer.materials.phong import UniformMaterial, default_material
    from phong_tracer.scene.scene import ImagePlane, Scene

    floor = Plane(
        Vector3(0.0, -30.0, 0.0),
        Vector3(0.0, 1.0, 0.0),
        UniformMaterial(default_material(Color.WHITE)),
    )
    return Scene(
        image_plane=ImagePlane.default(),
        camera_origin=Vector3(0.0, 0.0, -1.0),
        ambient=Color(0.2, 0.2, 0.2),
        lights=[],
        geometry=[floor],
    )


@pytest.fixture
def lit_sphere_scene():
    """A cyan sphere over a checkerboard floor, lit by one point light."""
    from phong_tracer.core.vector import Color, Vector3
    from phong_tracer.geometry.plane import Plane
    from phong_tracer.geometry.sphere import Sphere
    from phong_tracer.materials.phong import default_material
    from phong_tracer.scene.scene import ImagePlane, PointLight, Scene

    return Scene(
        image_plane=ImagePlane.default(),
        camera_origin=Vector3(0.0, 0.0, -1.0),
        ambient=Color(0.2, 0.2, 0.2),
        lights=[
            PointLight(
                Vector3(30.0, 30.0, 20.0),
                Color(0.8, 0.8, 0.8),
                Color(0.8, 0.8, 0.8),
            )
        ],
        geometry=[
            Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0)),
            Sphere(Vector3(0.0, 0.0, 50.0), 20.0, default_material(Color(0.0, 1.0, 1.0))),
        ],
    )
