"""Tests for scene-level primitive storage and nearest-hit queries."""

import pytest


class TestPrimitiveStorage:
    """Test adding primitives to the table."""

    def test_indices_follow_insertion_order(self):
        from src.whitted.scene.intersection import add_plane, add_sphere, get_primitive_count

        assert add_sphere((0.0, 0.0, -5.0), 1.0) == 0
        assert add_plane((0.0, 2.5, 0.0), (0.0, 1.0, 0.0)) == 1
        assert add_sphere((0.0, 0.0, -9.0), 1.0) == 2
        assert get_primitive_count() == 3

    def test_clear_scene(self):
        from src.whitted.scene.intersection import add_sphere, clear_scene, get_primitive_count

        add_sphere((0.0, 0.0, -5.0), 1.0)
        clear_scene()
        assert get_primitive_count() == 0

    def test_capacity(self):
        from src.whitted.scene.intersection import MAX_PRIMITIVES, add_sphere

        for _ in range(MAX_PRIMITIVES):
            add_sphere((0.0, 0.0, -5.0), 1.0)
        with pytest.raises(RuntimeError, match="Maximum number of primitives"):
            add_sphere((0.0, 0.0, -5.0), 1.0)


class TestTrace:
    """Test the nearest-hit query."""

    def test_empty_scene_misses(self):
        from src.whitted.scene.intersection import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_single_sphere(self):
        from src.whitted.scene.intersection import add_sphere, trace_ray

        add_sphere((0.0, 0.0, -5.0), 1.0)
        index, distance = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == 0
        assert distance == pytest.approx(4.0)

    def test_nearer_sphere_wins_regardless_of_order(self):
        """Two spheres along one ray: the strictly nearer one is reported."""
        from src.whitted.scene.intersection import add_sphere, trace_ray

        far = add_sphere((0.0, 0.0, -10.0), 1.0)
        near = add_sphere((0.0, 0.0, -5.0), 1.0)

        index, distance = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == near
        assert index != far
        assert distance == pytest.approx(4.0)

    def test_tie_goes_to_first_primitive(self):
        from src.whitted.scene.intersection import add_sphere, trace_ray

        first = add_sphere((0.0, 0.0, -5.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)

        index, _ = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == first

    def test_sphere_in_front_of_plane(self):
        from src.whitted.scene.intersection import add_plane, add_sphere, trace_ray

        plane = add_plane((0.0, 0.0, -30.0), (0.0, 0.0, -1.0))
        sphere = add_sphere((0.0, 0.0, -5.0), 1.0)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))[0] == sphere
        # Beside the sphere the plane is visible
        index, distance = trace_ray((3.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == plane
        assert distance == pytest.approx(30.0)

    def test_distance_is_minimum_over_primitives(self):
        from src.whitted.scene.intersection import add_plane, add_sphere, trace_ray

        add_sphere((0.0, 0.0, -8.0), 2.0)
        add_plane((0.0, 0.0, -3.0), (0.0, 0.0, -1.0))
        add_sphere((0.0, 0.0, -20.0), 1.0)

        index, distance = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert index == 1
        assert distance == pytest.approx(3.0)
