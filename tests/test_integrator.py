"""Tests for the Taichi integrator.

Tests cover:
- Packing scenes into arrays (surface kinds, materials, texel atlas)
- Rejecting scenes the kernel cannot represent
- Device renders matching the host path
- Failure mask for non-finite pixels
- Fallback to the python backend through the render driver
"""

import math

import numpy as np
import pytest

from phong_tracer.core.errors import UnsupportedOnDevice
from phong_tracer.core.render import FrameBuffer, RenderDriver, RenderSettings, render_scene
from phong_tracer.core.vector import Color, Vector3
from phong_tracer.geometry.box import BoundingBox
from phong_tracer.geometry.plane import Plane
from phong_tracer.geometry.sphere import Sphere
from phong_tracer.materials.phong import CheckerboardMaterial, UniformMaterial, default_material
from phong_tracer.materials.sampler import ImageSampler
from phong_tracer.preview.export import frame_rmse
from phong_tracer.scene.scene import ImagePlane, PointLight, Scene


def _scene(geometry, lights=(), ambient=0.2):
    return Scene(
        image_plane=ImagePlane.default(),
        camera_origin=Vector3(0.0, 0.0, -1.0),
        ambient=Color(ambient, ambient, ambient),
        lights=lights,
        geometry=geometry,
    )


def _mismatched_pixels(a, b, tolerance=2):
    """Count pixels whose channels differ by more than ``tolerance`` levels."""
    diff = np.abs(a.astype(np.int32) - b.astype(np.int32)).max(axis=2)
    return int(np.count_nonzero(diff > tolerance))


class TestPackScene:
    """Tests for host-side packing."""

    def test_surface_kinds_in_scene_order(self):
        """Test each primitive gets its kind code in order."""
        from phong_tracer.core.integrator import (
            SURFACE_BOX,
            SURFACE_PLANE,
            SURFACE_SPHERE,
            pack_scene,
        )

        white = default_material(Color.WHITE)
        scene = _scene(
            [
                Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0)),
                Sphere(Vector3(0.0, 0.0, 50.0), 20.0, white),
                BoundingBox(Vector3(30.0, 30.0, 60.0), Vector3(10.0, 10.0, 40.0), white),
            ]
        )
        packed = pack_scene(scene)

        assert packed.num_surfaces == 3
        assert list(packed.surface_kind) == [SURFACE_PLANE, SURFACE_SPHERE, SURFACE_BOX]
        # Box corners are stored as (min, max)
        assert np.allclose(packed.surface_a[2], (10.0, 10.0, 40.0))
        assert np.allclose(packed.surface_b[2], (30.0, 30.0, 60.0))

    def test_materials_are_deduplicated(self):
        """Test equal materials share one table entry."""
        from phong_tracer.core.integrator import pack_scene

        scene = _scene(
            [
                Sphere(Vector3(0.0, 0.0, 50.0), 5.0, default_material(Color(1.0, 0.0, 0.0))),
                Sphere(Vector3(0.0, 20.0, 50.0), 5.0, default_material(Color(1.0, 0.0, 0.0))),
                Sphere(Vector3(0.0, -20.0, 50.0), 5.0, default_material(Color(0.0, 1.0, 0.0))),
            ]
        )
        packed = pack_scene(scene)
        assert packed.num_materials == 2
        assert packed.surface_material[0] == packed.surface_material[1]

    def test_checkerboard_packs_both_materials(self):
        """Test a checkerboard plane stores even, odd and cell size."""
        from phong_tracer.core.integrator import pack_scene

        board = CheckerboardMaterial(cell_size=4.0)
        packed = pack_scene(_scene([Plane(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0), board)]))
        assert packed.num_materials == 2
        assert packed.surface_material[0] != packed.surface_material_odd[0]
        assert packed.surface_cell[0] == 4.0

    def test_texture_atlas(self):
        """Test image samplers are concatenated into one texel array."""
        from phong_tracer.core.integrator import SAMPLER_IMAGE, SLOT_DIFFUSE, pack_scene

        first = ImageSampler(np.full((2, 3, 3), 0.25))
        second = ImageSampler(np.full((4, 1, 3), 0.75))
        scene = _scene(
            [
                Sphere(Vector3(0.0, 0.0, 50.0), 5.0, default_material(first)),
                Sphere(Vector3(0.0, 20.0, 50.0), 5.0, default_material(second)),
            ]
        )
        packed = pack_scene(scene)

        assert packed.texels.shape == (2 * 3 + 4 * 1, 3)
        m = packed.surface_material[1]
        assert packed.material_sampler[m, SLOT_DIFFUSE] == SAMPLER_IMAGE
        assert packed.material_tex_offset[m, SLOT_DIFFUSE] == 6
        assert packed.material_tex_width[m, SLOT_DIFFUSE] == 4

    def test_empty_scene_packs(self):
        """Test that a scene without geometry or lights can be packed."""
        from phong_tracer.core.integrator import pack_scene

        packed = pack_scene(_scene([]))
        assert packed.num_surfaces == 0
        assert packed.num_lights == 0
        assert packed.surface_kind.shape == (1,)

    def test_arbitrary_plane_material_unsupported(self):
        """Test a plain callable plane material cannot be packed."""
        from phong_tracer.core.integrator import pack_scene

        white = default_material(Color.WHITE)
        plane = Plane(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0), lambda p: white)
        with pytest.raises(UnsupportedOnDevice):
            pack_scene(_scene([plane]))

    def test_custom_sampler_unsupported(self):
        """Test a sampler other than constant or image cannot be packed."""
        from phong_tracer.core.integrator import pack_scene

        class Stripes:
            def evaluate(self, u, v):
                return Color.WHITE if u < 0.5 else Color.BLACK

        sphere = Sphere(Vector3(0.0, 0.0, 50.0), 5.0, default_material(Stripes()))
        with pytest.raises(UnsupportedOnDevice):
            pack_scene(_scene([sphere]))


class TestDeviceRender:
    """Tests for DeviceScene.render."""

    def test_output_shapes(self, white_floor_scene):
        """Test colors are (W, H, 3) and the mask is (W, H)."""
        from phong_tracer.core.integrator import DeviceScene

        device = DeviceScene(white_floor_scene, 4, 6)
        colors, failed = device.render()
        assert colors.shape == (4, 6, 3)
        assert failed.shape == (4, 6)
        assert failed.dtype == np.bool_
        assert not failed.any()

    def test_floor_scene_values(self, white_floor_scene):
        """Test floor pixels are 0.2 and sky pixels black."""
        from phong_tracer.core.integrator import DeviceScene

        colors, _ = DeviceScene(white_floor_scene, 4, 6).render()
        assert np.allclose(colors[:, 4:], 0.2, atol=1e-6)
        assert np.allclose(colors[:, :4], 0.0)

    def test_matches_host_pixel(self, lit_sphere_scene):
        """Test a lit sphere pixel agrees with the host shading."""
        from phong_tracer.camera.image_plane import CameraRayGenerator
        from phong_tracer.core.integrator import DeviceScene
        from phong_tracer.core.shading import shade

        colors, failed = DeviceScene(lit_sphere_scene, 32, 24).render()
        camera = CameraRayGenerator.for_scene(lit_sphere_scene, 32, 24)
        for x, y in [(16, 12), (12, 10), (20, 14)]:
            host = shade(lit_sphere_scene, camera.primary_ray(x, y))
            assert not failed[x, y]
            assert np.allclose(colors[x, y], host.to_tuple(), atol=1e-4), (x, y)

    def test_textured_sphere_matches_host(self):
        """Test image sampling on the device agrees with the host."""
        from phong_tracer.camera.image_plane import CameraRayGenerator
        from phong_tracer.core.integrator import DeviceScene
        from phong_tracer.core.shading import shade

        rng = np.random.default_rng(5)
        texture = ImageSampler(rng.uniform(size=(8, 4, 3)))
        scene = _scene(
            [Sphere(Vector3(0.0, 0.0, 50.0), 20.0, default_material(texture))],
            ambient=1.0,
        )
        colors, _ = DeviceScene(scene, 16, 12).render()
        camera = CameraRayGenerator.for_scene(scene, 16, 12)
        host = shade(scene, camera.primary_ray(8, 6))
        assert np.allclose(colors[8, 6], host.to_tuple(), atol=1e-4)

    def test_non_finite_pixels_flagged(self, white_floor_scene):
        """Test infinite colors are flagged and replaced by the background."""
        from phong_tracer.core.integrator import DeviceScene

        scene = Scene(
            image_plane=white_floor_scene.image_plane,
            camera_origin=white_floor_scene.camera_origin,
            ambient=Color(math.inf, 0.0, 0.0),
            geometry=white_floor_scene.geometry,
        )
        colors, failed = DeviceScene(scene, 4, 6).render()
        assert failed[:, 4:].all()
        assert not failed[:, :4].any()
        assert np.all(np.isfinite(colors))

    def test_repr(self, white_floor_scene):
        """Test the repr names the raster and scene size."""
        from phong_tracer.core.integrator import DeviceScene

        assert "surfaces=1" in repr(DeviceScene(white_floor_scene, 2, 2))


class TestTaichiBackend:
    """Tests for the render driver's taichi backend."""

    def test_floor_scene_end_to_end(self, white_floor_scene):
        """Test the reference scene gives the same pixels as the host."""
        frame, report = render_scene(white_floor_scene, 4, 6, backend="taichi")
        assert report.backend == "taichi"
        assert report.failed_pixels == 0
        assert np.all(frame.pixels[4:] == 51)
        assert np.all(frame.pixels[:4] == 0)

    def test_lit_scene_matches_python_backend(self, lit_sphere_scene):
        """Test the whole frame agrees with the host up to float precision."""
        host, _ = render_scene(lit_sphere_scene, 32, 24, backend="python")
        device, report = render_scene(lit_sphere_scene, 32, 24, backend="taichi")

        assert report.backend == "taichi"
        assert _mismatched_pixels(host.pixels, device.pixels) <= 0.02 * 32 * 24
        # At most 2% of pixels fully off and the rest within 2 levels
        assert frame_rmse(host, device) < 40.0

    def test_box_scene_matches_python_backend(self):
        """Test boxes and lights agree between backends."""
        white = default_material(Color(0.9, 0.6, 0.3))
        scene = _scene(
            [
                Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0)),
                BoundingBox(Vector3(-20.0, -20.0, 60.0), Vector3(10.0, 10.0, 90.0), white),
            ],
            lights=[PointLight(Vector3(30.0, 30.0, 20.0), Color.WHITE, Color.WHITE)],
        )
        host, _ = render_scene(scene, 24, 18, backend="python")
        device, _ = render_scene(scene, 24, 18, backend="taichi")
        assert _mismatched_pixels(host.pixels, device.pixels) <= 0.02 * 24 * 18
        assert frame_rmse(host, device) < 40.0

    def test_device_failures_become_diagnostics(self, white_floor_scene):
        """Test flagged device pixels are reported like host failures."""
        scene = Scene(
            image_plane=white_floor_scene.image_plane,
            camera_origin=white_floor_scene.camera_origin,
            ambient=Color(math.inf, 0.0, 0.0),
            geometry=white_floor_scene.geometry,
        )
        frame, report = render_scene(scene, 4, 6, backend="taichi")
        assert report.failed_pixels == 8
        assert np.all(frame.pixels == 0)

    def test_unsupported_scene_falls_back(self, caplog):
        """Test scenes the kernel cannot represent render on the host."""
        white = default_material(Color.WHITE)
        plane = Plane(
            Vector3(0.0, -30.0, 0.0),
            Vector3(0.0, 1.0, 0.0),
            lambda p: white,
        )
        scene = _scene([plane])

        frame = FrameBuffer(4, 6)
        with caplog.at_level("WARNING", logger="phong_tracer.core.render"):
            report = RenderDriver(scene, RenderSettings(4, 6, "taichi")).render(frame)

        assert report.backend == "python"
        assert any("Falling back" in message for message in caplog.messages)
        assert np.all(frame.pixels[4:] == 51)

    def test_uniform_plane_runs_on_device(self, white_floor_scene):
        """Test a UniformMaterial plane does not trigger the fallback."""
        assert isinstance(white_floor_scene.geometry[0].material, UniformMaterial)
        _, report = render_scene(white_floor_scene, 2, 2, backend="taichi")
        assert report.backend == "taichi"
