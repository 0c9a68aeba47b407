"""Unit tests for one-sided plane intersection and texture coordinates."""

import math

import pytest
import taichi as ti


def _intersect(origin, direction, plane_origin, plane_normal):
    from src.whitted.core.ray import vec3
    from src.whitted.geometry.plane import Plane, intersect_plane

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, po: vec3, pn: vec3):
        h, t = intersect_plane(o, d, Plane(origin=po, normal=pn))
        hit[None] = h
        distance[None] = t

    test_kernel(vec3(*origin), vec3(*direction), vec3(*plane_origin), vec3(*plane_normal))
    return hit[None], distance[None]


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_hit_facing_plane(self):
        """Test a ray travelling along the stored normal hits the plane."""
        hit, t = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -30.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(30.0)

    def test_floor_below_camera(self):
        """Test the y-down floor convention: normal (0, 1, 0) at y = 2.5."""
        hit, t = _intersect((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 2.5, 0.0), (0.0, 1.0, 0.0))
        assert hit == 1
        assert t == pytest.approx(2.5)

    def test_back_side_is_invisible(self):
        """Test a ray against the stored normal does not hit."""
        hit, _ = _intersect((0.0, 0.0, -40.0), (0.0, 0.0, 1.0), (0.0, 0.0, -30.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_parallel_ray_misses(self):
        """Test a ray parallel to the plane does not hit."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 2.5, 0.0), (0.0, 1.0, 0.0))
        assert hit == 0

    def test_plane_behind_origin_misses(self):
        """Test a plane behind the ray origin yields no hit."""
        hit, _ = _intersect((0.0, 0.0, -40.0), (0.0, 0.0, -1.0), (0.0, 0.0, -30.0), (0.0, 0.0, -1.0))
        assert hit == 0


class TestPlaneShading:
    """Tests for the plane's shading normal and texture coordinates."""

    def test_shading_normal_is_negated(self):
        """Test the shading normal faces back toward the viewer."""
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.plane import make_plane, plane_normal

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = plane_normal(make_plane(vec3(0.0, 2.5, 0.0), vec3(0.0, 1.0, 0.0)))

        test_kernel()
        n = result[None]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, -1.0, 0.0))

    def test_texture_coords_floor(self):
        """Test planar coordinates on a floor plane."""
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.plane import make_plane, plane_texture_coords

        uv = ti.Vector.field(2, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            plane = make_plane(vec3(0.0, 2.5, 0.0), vec3(0.0, 1.0, 0.0))
            u, v = plane_texture_coords(plane, vec3(3.0, 2.5, -4.0))
            uv[None] = ti.Vector([u, v])

        test_kernel()
        # x_axis = (0,1,0) x (0,0,1) = (1,0,0); y_axis = (0,1,0) x (1,0,0) = (0,0,-1)
        assert uv[None][0] == pytest.approx(3.0)
        assert uv[None][1] == pytest.approx(4.0)

    def test_texture_coords_fallback_axis(self):
        """Test a plane whose normal is parallel to z uses the fallback axis."""
        from src.whitted.core.ray import vec3
        from src.whitted.geometry.plane import make_plane, plane_texture_coords

        uv = ti.Vector.field(2, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            plane = make_plane(vec3(0.0, 0.0, -30.0), vec3(0.0, 0.0, -1.0))
            u, v = plane_texture_coords(plane, vec3(2.0, 5.0, -30.0))
            uv[None] = ti.Vector([u, v])

        test_kernel()
        # x_axis = (0,0,-1) x (0,1,0) = (1,0,0); y_axis = (0,0,-1) x (1,0,0) = (0,-1,0)
        assert uv[None][0] == pytest.approx(2.0)
        assert uv[None][1] == pytest.approx(-5.0)


def _unit(v):
    norm = math.sqrt(sum(c * c for c in v))
    return tuple(c / norm for c in v)


@pytest.mark.parametrize(
    "plane_origin,plane_normal,origin,direction",
    [
        ((0.0, 2.5, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 0.0), (0.3, 1.0, -0.5)),
        ((0.0, 2.5, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 0.0), (-1.0, 0.2, -2.0)),
        ((0.0, 0.0, -30.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), (0.4, -0.3, -1.0)),
        ((0.0, 0.0, -10.0), (0.2, 0.3, -1.0), (0.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
        ((0.0, 0.0, -10.0), (0.2, 0.3, -1.0), (1.0, 2.0, 0.0), (0.1, -0.1, -1.0)),
        ((5.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, -3.0), (1.0, 0.5, 0.5)),
    ],
)
def test_hit_point_lies_on_plane(plane_origin, plane_normal, origin, direction):
    """origin + direction * distance satisfies (p - plane_origin) . n = 0."""
    plane_normal = _unit(plane_normal)
    direction = _unit(direction)

    hit, t = _intersect(origin, direction, plane_origin, plane_normal)

    assert hit == 1
    assert t >= 0.0
    point = [o + d * t for o, d in zip(origin, direction)]
    offset = sum((p - q) * n for p, q, n in zip(point, plane_origin, plane_normal))
    assert offset == pytest.approx(0.0, abs=1e-9)
