"""Unit tests for the one-sided plane and its material functions.

Tests cover:
- Front-face hits, back-face and parallel misses
- Crossings behind the ray origin
- Normal normalization
- Checkerboard and uniform material functions
- Plane texture coordinates
"""

import math

import pytest

from phong_tracer.core.errors import DegenerateGeometry
from phong_tracer.core.ray import Ray
from phong_tracer.core.vector import Color, Vector3
from phong_tracer.geometry.plane import Plane, plane_uv
from phong_tracer.materials.phong import CheckerboardMaterial, UniformMaterial, default_material


def _floor(material=None):
    if material is None:
        return Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0))
    return Plane(Vector3(0.0, -30.0, 0.0), Vector3(0.0, 1.0, 0.0), material)


class TestPlaneIntersection:
    """Tests for Plane.intersect."""

    def test_hit_from_front(self):
        """Test a downward ray hits the floor at the expected distance."""
        plane = _floor()
        hit = plane.intersect(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, -1.0, 0.0)))

        assert hit is not None
        assert abs(hit.distance - 30.0) < 1e-9
        assert abs(hit.point.y + 30.0) < 1e-9
        assert hit.normal == Vector3(0.0, 1.0, 0.0)
        assert hit.surface is plane

    def test_oblique_hit(self):
        """Test distance along an oblique ray."""
        hit = _floor().intersect(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, -3.0, 4.0)))
        assert hit is not None
        # 30 units down at slope 3/5 -> 50 units along the ray
        assert abs(hit.distance - 50.0) < 1e-9
        assert abs(hit.point.z - 40.0) < 1e-9

    def test_back_face_misses(self):
        """Test a ray from below travelling up does not hit."""
        ray = Ray(Vector3(0.0, -40.0, 0.0), Vector3(0.0, 1.0, 0.0))
        assert _floor().intersect(ray) is None

    def test_ray_moving_away_misses(self):
        """Test a ray above the plane pointing up does not hit."""
        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0))
        assert _floor().intersect(ray) is None

    def test_parallel_ray_misses(self):
        """Test a ray parallel to the plane does not hit."""
        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, 1.0))
        assert _floor().intersect(ray) is None

    def test_crossing_behind_origin_misses(self):
        """Test a ray starting below the plane facing down does not hit."""
        # Origin on the back side, direction against the normal: t < 0
        ray = Ray(Vector3(0.0, -40.0, 0.0), Vector3(0.0, -1.0, 0.0))
        assert _floor().intersect(ray) is None

    def test_normal_is_normalized(self):
        """Test that a non-unit normal is stored normalized."""
        plane = Plane(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 5.0, 0.0))
        assert plane.normal == Vector3(0.0, 1.0, 0.0)

    def test_zero_normal_raises(self):
        """Test that a zero normal is rejected."""
        with pytest.raises(DegenerateGeometry):
            Plane(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, 0.0))

    def test_non_finite_normal_raises(self):
        """Test that a normal with NaN or infinite components is rejected."""
        for normal in (Vector3(math.nan, 1.0, 0.0), Vector3(0.0, math.inf, 0.0)):
            with pytest.raises(DegenerateGeometry):
                Plane(Vector3(0.0, 0.0, 0.0), normal)


class TestPlaneMaterials:
    """Tests for material functions evaluated at plane hits."""

    def test_default_is_checkerboard(self):
        """Test that planes default to the black/white checkerboard."""
        assert isinstance(_floor().material, CheckerboardMaterial)

    def test_checkerboard_parity(self):
        """Test the cell index sum decides odd (white) and even (black)."""
        board = CheckerboardMaterial()
        assert board.parity(Vector3(5.0, 0.0, 5.0)) == 0
        assert board.parity(Vector3(15.0, 0.0, 5.0)) == 1
        assert board.parity(Vector3(15.0, 0.0, 15.0)) == 0
        # floor(-5 / 10) = -1
        assert board.parity(Vector3(-5.0, 0.0, 5.0)) == 1

    def test_checkerboard_colors(self):
        """Test odd cells are white and even cells black by default."""
        board = CheckerboardMaterial()
        assert board(Vector3(15.0, 0.0, 5.0)).ambient.evaluate(0.0, 0.0) == Color.WHITE
        assert board(Vector3(5.0, 0.0, 5.0)).ambient.evaluate(0.0, 0.0) == Color.BLACK

    def test_checkerboard_custom_cell_size(self):
        """Test a non-default cell size."""
        board = CheckerboardMaterial(cell_size=1.0)
        assert board.parity(Vector3(1.5, 0.0, 0.5)) == 1

    def test_checkerboard_rejects_non_positive_cell(self):
        """Test that a zero cell size is rejected."""
        with pytest.raises(ValueError):
            CheckerboardMaterial(cell_size=0.0)

    def test_hit_uses_material_at_hit_position(self):
        """Test that the plane evaluates its material function per hit."""
        plane = _floor()
        # Hits at x = 15, z = 5 (odd cell)
        white = plane.intersect(Ray(Vector3(15.0, 0.0, 5.0), Vector3(0.0, -1.0, 0.0)))
        # Hits at x = 5, z = 5 (even cell)
        black = plane.intersect(Ray(Vector3(5.0, 0.0, 5.0), Vector3(0.0, -1.0, 0.0)))
        assert white is not None and black is not None
        assert white.ambient == Color.WHITE
        assert black.ambient == Color.BLACK

    def test_uniform_material(self):
        """Test a uniform material gives the same colors everywhere."""
        material = default_material(Color(0.3, 0.6, 0.9))
        plane = _floor(UniformMaterial(material))
        for x in (-25.0, 5.0, 15.0):
            hit = plane.intersect(Ray(Vector3(x, 0.0, 0.0), Vector3(0.0, -1.0, 0.0)))
            assert hit is not None
            assert hit.diffuse == Color(0.3, 0.6, 0.9)

    def test_arbitrary_callable(self):
        """Test that any position -> Material callable is accepted."""
        red = default_material(Color(1.0, 0.0, 0.0))
        blue = default_material(Color(0.0, 0.0, 1.0))
        plane = _floor(lambda p: red if p.x < 0 else blue)
        hit = plane.intersect(Ray(Vector3(-1.0, 0.0, 0.0), Vector3(0.0, -1.0, 0.0)))
        assert hit is not None
        assert hit.ambient == Color(1.0, 0.0, 0.0)


class TestPlaneTextureCoordinates:
    """Tests for plane (u, v) mapping."""

    def test_fractional_parts(self):
        """Test that u and v are the fractional parts of x and z."""
        u, v = plane_uv(Vector3(2.25, -30.0, 7.75))
        assert abs(u - 0.25) < 1e-12
        assert abs(v - 0.75) < 1e-12

    def test_negative_coordinates_wrap(self):
        """Test that negative coordinates still map into [0, 1)."""
        u, v = plane_uv(Vector3(-0.25, 0.0, -3.5))
        assert abs(u - 0.75) < 1e-12
        assert abs(v - 0.5) < 1e-12
