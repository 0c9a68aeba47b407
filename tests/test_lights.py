"""Tests for directional and spherical lights."""

import math

import pytest
import taichi as ti


def _sample(index, hit_point):
    from src.whitted.core.ray import vec3
    from src.whitted.scene.lights import light_sample

    kind = ti.field(dtype=ti.i32, shape=())
    direction = ti.field(dtype=vec3, shape=())
    distance_squared = ti.field(dtype=ti.f64, shape=())
    intensity = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(i: ti.i32, p: vec3):
        k, d, d2, e = light_sample(i, p)
        kind[None] = k
        direction[None] = d
        distance_squared[None] = d2
        intensity[None] = e

    test_kernel(index, vec3(*hit_point))
    d = direction[None]
    return kind[None], (d[0], d[1], d[2]), distance_squared[None], intensity[None]


class TestAddLight:
    """Test light validation and storage."""

    def test_directional_direction_is_normalized(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import DirectionalLight, LightKind, add_light

        idx = add_light(DirectionalLight((0.0, 3.0, 0.0), WHITE, 2.0))
        kind, to_light, d2, intensity = _sample(idx, (0.0, 0.0, 0.0))

        assert kind == LightKind.DIRECTIONAL
        assert to_light == pytest.approx((0.0, -1.0, 0.0))
        assert d2 == 0.0
        assert intensity == pytest.approx(2.0)

    def test_rejects_negative_intensity(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import SphericalLight, add_light

        with pytest.raises(ValueError, match="intensity"):
            add_light(SphericalLight((0.0, 0.0, 0.0), WHITE, -1.0))

    def test_rejects_zero_direction(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import DirectionalLight, add_light

        with pytest.raises(ValueError, match="zero-length"):
            add_light(DirectionalLight((0.0, 0.0, 0.0), WHITE, 1.0))

    def test_count_and_capacity(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import MAX_LIGHTS, DirectionalLight, add_light, get_light_count

        light = DirectionalLight((0.0, 0.0, -1.0), WHITE, 1.0)
        for _ in range(MAX_LIGHTS):
            add_light(light)
        assert get_light_count() == MAX_LIGHTS
        with pytest.raises(RuntimeError, match="Maximum number of lights"):
            add_light(light)


class TestSphericalLight:
    """Test the inverse-square falloff of spherical lights."""

    def test_falloff(self):
        from src.whitted.core.color import RED
        from src.whitted.scene.lights import LightKind, SphericalLight, add_light

        idx = add_light(SphericalLight((0.0, 0.0, -3.0), RED, 200.0))
        kind, to_light, d2, intensity = _sample(idx, (0.0, 0.0, 1.0))

        assert kind == LightKind.SPHERICAL
        assert to_light == pytest.approx((0.0, 0.0, -1.0))
        assert d2 == pytest.approx(16.0)
        assert intensity == pytest.approx(200.0 / (4.0 * math.pi * 16.0))

    def test_doubling_distance_quarters_intensity(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import SphericalLight, add_light

        idx = add_light(SphericalLight((0.0, 0.0, 0.0), WHITE, 100.0))
        _, _, _, near = _sample(idx, (1.0, 0.0, 0.0))
        _, _, _, far = _sample(idx, (2.0, 0.0, 0.0))

        assert far == pytest.approx(near / 4.0)
