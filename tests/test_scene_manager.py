"""Tests for the unified scene manager.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import json

import numpy as np
import pytest
import taichi as ti


def _kernel_max_recursion_depth():
    from src.whitted.scene.settings import get_max_recursion_depth

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def read_depth():
        result[None] = get_max_recursion_depth()

    read_depth()
    return result[None]


class TestSceneManagerMaterials:
    """Test material creation through the manager."""

    def test_default_albedo(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager(default_albedo=0.5)
        mid = scene.add_solid_material(WHITE)

        assert scene.get_material(mid).albedo == 0.5
        assert scene.get_material_count() == 1

    def test_explicit_albedo_overrides_default(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        mid = scene.add_solid_material(WHITE, albedo=0.3)
        assert scene.get_material(mid).albedo == 0.3

    def test_rejects_invalid_default_albedo(self):
        from src.whitted.scene.manager import SceneManager

        with pytest.raises(ValueError, match="default_albedo"):
            SceneManager(default_albedo=0.0)

    def test_texture_material(self):
        from src.whitted.materials.material import Texture
        from src.whitted.materials.texture import checkerboard_texture
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        tid = scene.add_texture(checkerboard_texture(16, 16))
        mid = scene.add_texture_material(tid, scale=0.2)

        material = scene.get_material(mid)
        assert isinstance(material.coloration, Texture)
        assert material.coloration.scale == 0.2
        assert scene.get_texture_count() == 1

    def test_get_unknown_material(self):
        from src.whitted.scene.manager import SceneManager

        assert SceneManager().get_material(5) is None


class TestSceneManagerPrimitives:
    """Test primitive validation."""

    def test_add_sphere_and_plane(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.manager import PlaneInfo, SceneManager, SphereInfo

        scene = SceneManager()
        mid = scene.add_solid_material(WHITE)

        assert scene.add_sphere((0, 0, -5), 1.0, mid) == 0
        assert scene.add_plane((0, 2.5, 0), (0, 2, 0), mid) == 1
        assert scene.get_primitive_count() == 2
        assert isinstance(scene.primitives[0], SphereInfo)
        assert isinstance(scene.primitives[1], PlaneInfo)
        # Plane normals are normalized on the way in
        assert scene.primitives[1].normal == pytest.approx((0.0, 1.0, 0.0))

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_rejects_non_positive_radius(self, radius):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        mid = scene.add_solid_material(WHITE)
        with pytest.raises(ValueError, match="radius"):
            scene.add_sphere((0, 0, -5), radius, mid)

    def test_rejects_zero_plane_normal(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        mid = scene.add_solid_material(WHITE)
        with pytest.raises(ValueError, match="zero-length"):
            scene.add_plane((0, 0, 0), (0, 0, 0), mid)

    def test_rejects_unknown_material(self):
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="material_id"):
            scene.add_sphere((0, 0, -5), 1.0, 0)

    def test_convenience_helpers(self):
        from src.whitted.core.color import MAGENTA
        from src.whitted.materials.surface import Reflective
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        index, mid = scene.add_solid_sphere((0, 0, -5), 1.0, MAGENTA, surface=Reflective(0.5))

        assert (index, mid) == (0, 0)
        assert scene.get_material(mid).surface == Reflective(0.5)

    def test_clear(self):
        from src.whitted.core.color import WHITE
        from src.whitted.scene.lights import DirectionalLight
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_solid_sphere((0, 0, -5), 1.0, WHITE)
        scene.add_light(DirectionalLight((0, 0, -1), WHITE, 1.0))
        scene.clear()

        assert scene.get_primitive_count() == 0
        assert scene.get_material_count() == 0
        assert scene.get_light_count() == 0
        assert scene.primitives == []


class TestSceneManagerSettings:
    """Test render settings."""

    def test_configure(self):
        from src.whitted.camera.pinhole import get_camera_info
        from src.whitted.scene.manager import SceneManager
        from src.whitted.scene.settings import RenderSettings

        scene = SceneManager()
        scene.configure(RenderSettings(width=64, height=32, max_recursion_depth=3))

        assert scene.settings.max_recursion_depth == 3
        assert _kernel_max_recursion_depth() == 3
        assert get_camera_info()["width"] == 64
        assert get_camera_info()["aspect_ratio"] == pytest.approx(2.0)

    @pytest.mark.parametrize(
        "kwargs,match",
        [
            ({"width": 0, "height": 10}, "positive"),
            ({"width": 10, "height": 10, "max_recursion_depth": -1}, "max_recursion_depth"),
            ({"width": 10, "height": 10, "max_recursion_depth": 99}, "max_recursion_depth"),
            ({"width": 10, "height": 10, "shadow_bias": -1.0}, "shadow_bias"),
        ],
    )
    def test_rejects_invalid_settings(self, kwargs, match):
        from src.whitted.scene.manager import SceneManager
        from src.whitted.scene.settings import RenderSettings

        with pytest.raises(ValueError, match=match):
            SceneManager().configure(RenderSettings(**kwargs))


class TestSceneManagerSerialization:
    """Test scene export and import."""

    def _build(self):
        from src.whitted.core.color import LIGHT_GREEN, RED, WHITE
        from src.whitted.core.ray import ReflectanceModel
        from src.whitted.materials.surface import Refractive
        from src.whitted.materials.texture import checkerboard_texture
        from src.whitted.scene.lights import DirectionalLight, SphericalLight
        from src.whitted.scene.manager import SceneManager
        from src.whitted.scene.settings import RenderSettings

        scene = SceneManager()
        tid = scene.add_texture(checkerboard_texture(8, 8))
        glass = scene.add_solid_material(LIGHT_GREEN, surface=Refractive(0.9, 1.5))
        floor = scene.add_texture_material(tid, scale=0.2)
        scene.add_sphere((0, -1.5, -3), 1.0, glass)
        scene.add_plane((0, 2.5, 0), (0, 1, 0), floor)
        scene.add_light(DirectionalLight((5, 5, -5), WHITE, 2.5))
        scene.add_light(SphericalLight((0, -1, -3), RED, 200.0))
        scene.configure(
            RenderSettings(width=80, height=60, reflectance_model=ReflectanceModel.SCHLICK)
        )
        return scene

    def test_to_dict_is_json_serializable(self):
        scene = self._build()
        data = scene.to_dict()

        text = json.dumps(data)
        assert "refractive" in text
        assert data["settings"]["reflectance_model"] == "schlick"
        assert [p["type"] for p in data["primitives"]] == ["sphere", "plane"]

    def test_round_trip(self):
        from src.whitted.materials.texture import checkerboard_texture
        from src.whitted.scene.manager import SceneManager

        scene = self._build()
        data = json.loads(json.dumps(scene.to_dict()))

        restored = SceneManager()
        # Textures are referenced by ID and must be uploaded again
        restored.add_texture(checkerboard_texture(8, 8))
        restored.from_dict(data)

        assert restored.to_dict() == data
        assert restored.get_primitive_count() == 2
        assert restored.get_light_count() == 2
        assert restored.settings == scene.settings
        assert _kernel_max_recursion_depth() == 5

    def test_from_dict_rejects_unknown_types(self):
        from src.whitted.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError, match="Unknown primitive type"):
            scene.from_dict({"primitives": [{"type": "cube"}]})
        with pytest.raises(ValueError, match="Unknown light type"):
            scene.from_dict({"lights": [{"type": "area"}]})

    @pytest.mark.parametrize(
        "section,index,key,value,match",
        [
            ("primitives", 1, "material_id", 5, "Invalid material_id"),
            ("primitives", 0, "radius", -1.0, "radius"),
            ("primitives", 1, "normal", [0.0, 0.0, 0.0], "zero-length"),
            ("materials", 0, "albedo", 1.5, "Albedo"),
            ("lights", 0, "intensity", -2.0, "intensity"),
            ("settings", None, "reflectance_model", "phong", "Unknown reflectance model"),
            ("settings", None, "max_recursion_depth", 99, "max_recursion_depth"),
        ],
    )
    def test_invalid_load_keeps_current_scene(self, section, index, key, value, match):
        """A config that fails validation leaves the loaded scene as it was."""
        from src.whitted.materials.material import get_material_count
        from src.whitted.materials.texture import get_texture_count
        from src.whitted.scene.intersection import get_primitive_count
        from src.whitted.scene.lights import get_light_count

        scene = self._build()
        before = scene.to_dict()

        data = json.loads(json.dumps(before))
        target = data[section] if index is None else data[section][index]
        target[key] = value

        with pytest.raises(ValueError, match=match):
            scene.from_dict(data)

        assert scene.to_dict() == before
        assert get_primitive_count() == 2
        assert get_material_count() == 2
        assert get_light_count() == 2
        assert get_texture_count() == 1
        assert _kernel_max_recursion_depth() == 5


class TestSceneManagerCapacity:
    """Test capacity information."""

    def test_capacities(self):
        from src.whitted.scene.manager import SceneManager

        assert SceneManager.get_max_primitives() == 1024
        assert SceneManager.get_max_materials() == 256
        assert SceneManager.get_max_lights() == 64
        assert SceneManager.get_max_textures() == 16

    def test_load_texture(self, tmp_path):
        from PIL import Image as PILImage

        from src.whitted.scene.manager import SceneManager

        path = tmp_path / "wood.png"
        PILImage.fromarray(np.full((4, 4, 3), 120, dtype=np.uint8)).save(path)

        scene = SceneManager()
        assert scene.load_texture(path) == 0
