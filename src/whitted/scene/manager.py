"""Unified scene manager for coordinating primitives, materials and lights.

This module provides a high-level scene management API on top of the
Taichi-side tables (textures, materials, primitives, lights and render
settings). It validates input before anything reaches the kernels and keeps a
host-side record of the scene so it can be inspected and serialized.

The SceneManager maintains:
- A material_id space shared by all primitives
- High-level methods for adding objects with materials in one call
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.color import MAGENTA
    >>> from src.whitted.scene.manager import SceneManager
    >>> from src.whitted.scene.settings import RenderSettings
    >>> scene = SceneManager()
    >>> mat_id = scene.add_solid_material(MAGENTA)
    >>> scene.add_sphere(center=(0, 0, -5), radius=1.0, material_id=mat_id)
    >>> scene.configure(RenderSettings(width=800, height=600))
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt

from src.whitted.camera.pinhole import PinholeCamera, setup_camera
from src.whitted.core.color import Color, as_rgb
from src.whitted.core.ray import ReflectanceModel
from src.whitted.materials.material import (
    MAX_MATERIALS,
    Material,
    SolidColor,
    Texture,
    add_material,
    clear_materials,
    get_material_count,
    validate_material,
)
from src.whitted.materials.surface import Diffusive, Reflective, Refractive, Surface
from src.whitted.materials.texture import (
    MAX_TEXTURES,
    add_texture,
    clear_textures,
    get_texture_count,
    load_texture,
)
from src.whitted.scene.intersection import (
    MAX_PRIMITIVES,
    add_plane,
    add_sphere,
    clear_scene,
    get_primitive_count,
)
from src.whitted.scene.lights import (
    MAX_LIGHTS,
    DirectionalLight,
    Light,
    SphericalLight,
    add_light,
    clear_lights,
    get_light_count,
    validate_light,
)
from src.whitted.scene.settings import RenderSettings, apply_settings, reset_settings

logger = logging.getLogger(__name__)

# Albedo used by the convenience material helpers when none is given
DEFAULT_ALBEDO = 0.8


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        primitive_index: The index in the primitive table.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    primitive_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        primitive_index: The index in the primitive table.
        origin: A point on the plane.
        normal: Unit normal pointing into the surface.
        material_id: The material ID assigned to the plane.
    """

    primitive_index: int
    origin: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        primitives: List of primitive configurations, in table order.
        lights: List of light configurations.
        settings: Render settings, or None if the scene was never configured.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    primitives: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    settings: dict[str, Any] | None = None


def _vec3(values: Any) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


def _check_radius(radius: float) -> None:
    if not radius > 0.0:
        raise ValueError(f"Sphere radius = {radius} must be positive")


def _unit_normal(normal: Any) -> tuple[float, float, float]:
    x, y, z = _vec3(normal)
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0:
        raise ValueError("Plane normal must not be zero-length")
    return (x / norm, y / norm, z / norm)


# =============================================================================
# Serialization helpers
# =============================================================================


def _material_to_dict(material: Material) -> dict[str, Any]:
    coloration = material.coloration
    if isinstance(coloration, Texture):
        coloration_config: dict[str, Any] = {
            "type": "texture",
            "texture_id": coloration.texture_id,
            "scale": coloration.scale,
            "offset": coloration.offset,
        }
    else:
        coloration_config = {"type": "solid", "color": list(as_rgb(coloration.color))}

    surface = material.surface
    if isinstance(surface, Reflective):
        surface_config: dict[str, Any] = {"type": "reflective", "reflectivity": surface.reflectivity}
    elif isinstance(surface, Refractive):
        surface_config = {
            "type": "refractive",
            "transparency": surface.transparency,
            "index": surface.index,
        }
    else:
        surface_config = {"type": "diffusive"}

    return {
        "coloration": coloration_config,
        "albedo": material.albedo,
        "surface": surface_config,
    }


def _material_from_dict(data: dict[str, Any], default_albedo: float) -> Material:
    coloration_config = data.get("coloration", {})
    coloration_type = coloration_config.get("type", "solid").lower()
    if coloration_type == "solid":
        coloration: SolidColor | Texture = SolidColor(
            _vec3(coloration_config.get("color", [1.0, 1.0, 1.0]))
        )
    elif coloration_type == "texture":
        coloration = Texture(
            texture_id=int(coloration_config["texture_id"]),
            scale=float(coloration_config.get("scale", 1.0)),
            offset=float(coloration_config.get("offset", 0.0)),
        )
    else:
        raise ValueError(f"Unknown coloration type: {coloration_type}")

    surface_config = data.get("surface", {})
    surface_type = surface_config.get("type", "diffusive").lower()
    if surface_type == "diffusive":
        surface: Surface = Diffusive()
    elif surface_type == "reflective":
        surface = Reflective(reflectivity=float(surface_config["reflectivity"]))
    elif surface_type == "refractive":
        surface = Refractive(
            transparency=float(surface_config["transparency"]),
            index=float(surface_config["index"]),
        )
    else:
        raise ValueError(f"Unknown surface type: {surface_type}")

    return Material(
        coloration=coloration,
        albedo=float(data.get("albedo", default_albedo)),
        surface=surface,
    )


def _light_to_dict(light: Light) -> dict[str, Any]:
    if isinstance(light, DirectionalLight):
        return {
            "type": "directional",
            "direction": list(_vec3(light.direction)),
            "color": list(as_rgb(light.color)),
            "intensity": light.intensity,
        }
    return {
        "type": "spherical",
        "position": list(_vec3(light.position)),
        "color": list(as_rgb(light.color)),
        "intensity": light.intensity,
    }


def _light_from_dict(data: dict[str, Any]) -> Light:
    light_type = data.get("type", "").lower()
    color = _vec3(data.get("color", [1.0, 1.0, 1.0]))
    intensity = float(data.get("intensity", 1.0))
    if light_type == "directional":
        return DirectionalLight(_vec3(data["direction"]), color, intensity)
    if light_type == "spherical":
        return SphericalLight(_vec3(data["position"]), color, intensity)
    raise ValueError(f"Unknown light type: {light_type}")


def _settings_to_dict(settings: RenderSettings) -> dict[str, Any]:
    data = asdict(settings)
    data["reflectance_model"] = settings.reflectance_model.name.lower()
    return data


def _settings_from_dict(data: dict[str, Any]) -> RenderSettings:
    values = dict(data)
    model = values.get("reflectance_model", "fresnel")
    try:
        values["reflectance_model"] = (
            ReflectanceModel[model.upper()] if isinstance(model, str) else ReflectanceModel(model)
        )
    except KeyError:
        raise ValueError(f"Unknown reflectance model: {model}") from None
    settings = RenderSettings(**values)
    settings.validate()
    return settings


class SceneManager:
    """Unified scene manager coordinating textures, materials, primitives and lights.

    The SceneManager provides a high-level API for building scenes. Every add_*
    method validates its input, writes it to the Taichi tables and records it
    locally. Primitives are kept in insertion order, which is also the order
    the nearest-hit query visits them.

    Only one scene exists at a time: the tables are module-level Taichi fields,
    and constructing a SceneManager clears them.

    Attributes:
        default_albedo: Albedo used by add_solid_material and
            add_texture_material when none is given.
        materials: Materials in material_id order.
        primitives: SphereInfo/PlaneInfo records in table order.
        lights: Lights in table order.
        settings: The last applied RenderSettings, or None.

    Example:
        >>> scene = SceneManager()
        >>> green = scene.add_solid_material(LIGHT_GREEN)
        >>> mirror = scene.add_solid_material(WHITE, surface=Reflective(0.6))
        >>> scene.add_sphere((0, -1.5, -3), 1.0, green)
        >>> scene.add_plane((0, 2.5, 0), (0, 1, 0), mirror)
        >>> scene.add_light(DirectionalLight((0, 1, -1), WHITE, 2.0))
    """

    def __init__(self, default_albedo: float = DEFAULT_ALBEDO) -> None:
        """Initialize an empty scene.

        Raises:
            ValueError: If default_albedo is outside (0, 1].
        """
        if not 0.0 < default_albedo <= 1.0:
            raise ValueError(f"default_albedo = {default_albedo} is outside (0, 1]")
        self.default_albedo = default_albedo
        self.materials: list[Material] = []
        self.primitives: list[SphereInfo | PlaneInfo] = []
        self.lights: list[Light] = []
        self.settings: RenderSettings | None = None
        self._clear_all(keep_textures=False)

    def _clear_all(self, keep_textures: bool) -> None:
        clear_scene()
        clear_materials()
        clear_lights()
        reset_settings()
        if not keep_textures:
            clear_textures()
        self.materials.clear()
        self.primitives.clear()
        self.lights.clear()
        self.settings = None

    def clear(self) -> None:
        """Clear the entire scene, including textures and settings."""
        self._clear_all(keep_textures=False)
        logger.debug("Cleared scene")

    # =========================================================================
    # Textures and Materials
    # =========================================================================

    def add_texture(self, pixels: npt.NDArray[np.uint8]) -> int:
        """Upload an RGBA8 image of shape (height, width, 4) and return its ID."""
        return add_texture(pixels)

    def load_texture(self, path: str | Path) -> int:
        """Decode an image file and upload it as a texture.

        Raises:
            FileNotFoundError: If the file does not exist.
            PIL.UnidentifiedImageError: If the file is not a readable image.
        """
        texture_id = add_texture(load_texture(path))
        logger.debug("Loaded texture %d from %s", texture_id, path)
        return texture_id

    def add_material(self, material: Material) -> int:
        """Add a material and return its ID.

        Raises:
            ValueError: If the material is invalid.
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = add_material(material)
        self.materials.append(material)
        logger.debug("Added material %d: %s", material_id, material)
        return material_id

    def add_solid_material(
        self,
        color: Color | tuple[float, float, float],
        albedo: float | None = None,
        surface: Surface | None = None,
    ) -> int:
        """Add a solid-colored material.

        Args:
            color: The surface color.
            albedo: Diffuse reflectance. Defaults to default_albedo.
            surface: Surface behaviour. Defaults to Diffusive.

        Returns:
            The material ID.
        """
        return self.add_material(
            Material(
                coloration=SolidColor(color),
                albedo=self.default_albedo if albedo is None else albedo,
                surface=Diffusive() if surface is None else surface,
            )
        )

    def add_texture_material(
        self,
        texture_id: int,
        scale: float = 1.0,
        offset: float = 0.0,
        albedo: float | None = None,
        surface: Surface | None = None,
    ) -> int:
        """Add a textured material.

        Args:
            texture_id: ID returned by add_texture or load_texture.
            scale: Tiling scale applied to texture coordinates.
            offset: Offset added to texture coordinates after scaling.
            albedo: Diffuse reflectance. Defaults to default_albedo.
            surface: Surface behaviour. Defaults to Diffusive.

        Returns:
            The material ID.
        """
        return self.add_material(
            Material(
                coloration=Texture(texture_id, scale, offset),
                albedo=self.default_albedo if albedo is None else albedo,
                surface=Diffusive() if surface is None else surface,
            )
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material(self, material_id: int) -> Material | None:
        """Get a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added primitive.

        Raises:
            ValueError: If the radius is not positive or material_id is invalid.
            RuntimeError: If the maximum number of primitives is exceeded.
        """
        _check_radius(radius)
        self._check_material_id(material_id)

        center = _vec3(center)
        index = add_sphere(center, float(radius), material_id)
        self.primitives.append(SphereInfo(index, center, float(radius), material_id))
        logger.debug("Added sphere %d at %s, r=%g, material %d", index, center, radius, material_id)
        return index

    def add_plane(
        self,
        origin: tuple[float, float, float],
        normal: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add a one-sided plane to the scene.

        Args:
            origin: A point on the plane as (x, y, z).
            normal: Normal pointing into the surface, away from the viewer.
                Normalized before upload.
            material_id: The material ID to assign to the plane.

        Returns:
            The index of the added primitive.

        Raises:
            ValueError: If the normal has zero length or material_id is invalid.
            RuntimeError: If the maximum number of primitives is exceeded.
        """
        unit_normal = _unit_normal(normal)
        self._check_material_id(material_id)

        origin = _vec3(origin)
        index = add_plane(origin, unit_normal, material_id)
        self.primitives.append(PlaneInfo(index, origin, unit_normal, material_id))
        logger.debug("Added plane %d at %s, n=%s, material %d", index, origin, unit_normal, material_id)
        return index

    def add_solid_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: Color | tuple[float, float, float],
        surface: Surface | None = None,
    ) -> tuple[int, int]:
        """Add a sphere with a new solid-colored material.

        Returns:
            Tuple of (primitive_index, material_id).
        """
        material_id = self.add_solid_material(color, surface=surface)
        return self.add_sphere(center, radius, material_id), material_id

    def add_solid_plane(
        self,
        origin: tuple[float, float, float],
        normal: tuple[float, float, float],
        color: Color | tuple[float, float, float],
        surface: Surface | None = None,
    ) -> tuple[int, int]:
        """Add a plane with a new solid-colored material.

        Returns:
            Tuple of (primitive_index, material_id).
        """
        material_id = self.add_solid_material(color, surface=surface)
        return self.add_plane(origin, normal, material_id), material_id

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return get_primitive_count()

    # =========================================================================
    # Lights and Settings
    # =========================================================================

    def add_light(self, light: Light) -> int:
        """Add a directional or spherical light.

        Raises:
            ValueError: If the light is invalid.
            RuntimeError: If the maximum number of lights is exceeded.
        """
        index = add_light(light)
        self.lights.append(light)
        logger.debug("Added light %d: %s", index, light)
        return index

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def configure(self, settings: RenderSettings) -> None:
        """Apply render settings and set up the camera for them.

        Raises:
            ValueError: If the settings are invalid.
        """
        apply_settings(settings)
        setup_camera(PinholeCamera(settings.width, settings.height, settings.fov))
        self.settings = settings
        logger.debug("Configured scene: %s", settings)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Textures are referenced by ID and not exported.
        """
        config = SceneConfig()
        config.materials = [_material_to_dict(m) for m in self.materials]
        for info in self.primitives:
            if isinstance(info, SphereInfo):
                config.primitives.append(
                    {
                        "type": "sphere",
                        "center": list(info.center),
                        "radius": info.radius,
                        "material_id": info.material_id,
                    }
                )
            else:
                config.primitives.append(
                    {
                        "type": "plane",
                        "origin": list(info.origin),
                        "normal": list(info.normal),
                        "material_id": info.material_id,
                    }
                )
        config.lights = [_light_to_dict(light) for light in self.lights]
        if self.settings is not None:
            config.settings = _settings_to_dict(self.settings)
        return config

    def _parse_config(
        self, config: SceneConfig
    ) -> tuple[list[Material], list[SphereInfo | PlaneInfo], list[Light], RenderSettings | None]:
        """Decode and validate a configuration without touching the tables.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds a table capacity.
        """
        materials = [_material_from_dict(m, self.default_albedo) for m in config.materials]
        for material in materials:
            validate_material(material)

        primitives: list[SphereInfo | PlaneInfo] = []
        for index, primitive_config in enumerate(config.primitives):
            primitive_type = primitive_config.get("type", "").lower()
            material_id = int(primitive_config.get("material_id", 0))
            if primitive_type == "sphere":
                radius = float(primitive_config["radius"])
                _check_radius(radius)
                info: SphereInfo | PlaneInfo = SphereInfo(
                    index, _vec3(primitive_config["center"]), radius, material_id
                )
            elif primitive_type == "plane":
                info = PlaneInfo(
                    index,
                    _vec3(primitive_config["origin"]),
                    _unit_normal(primitive_config["normal"]),
                    material_id,
                )
            else:
                raise ValueError(f"Unknown primitive type: {primitive_type}")
            if not 0 <= material_id < len(materials):
                raise ValueError(f"Invalid material_id: {material_id}")
            primitives.append(info)

        lights = [_light_from_dict(light_config) for light_config in config.lights]
        for light in lights:
            validate_light(light)

        settings = None
        if config.settings is not None:
            settings = _settings_from_dict(config.settings)

        for name, count, limit in (
            ("materials", len(materials), MAX_MATERIALS),
            ("primitives", len(primitives), MAX_PRIMITIVES),
            ("lights", len(lights), MAX_LIGHTS),
        ):
            if count > limit:
                raise RuntimeError(f"Maximum number of {name} ({limit}) exceeded")

        return materials, primitives, lights, settings

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        The whole configuration is validated first. If it is invalid the
        current scene is left untouched; otherwise the current materials,
        primitives and lights are replaced. Uploaded textures are kept so
        texture IDs in the configuration stay valid.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds a table capacity.
        """
        materials, primitives, lights, settings = self._parse_config(config)

        self._clear_all(keep_textures=True)
        for material in materials:
            self.add_material(material)
        for info in primitives:
            if isinstance(info, SphereInfo):
                self.add_sphere(info.center, info.radius, info.material_id)
            else:
                self.add_plane(info.origin, info.normal, info.material_id)
        for light in lights:
            self.add_light(light)
        if settings is not None:
            self.configure(settings)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return asdict(self.to_config())

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'primitives', 'lights' and
                optional 'settings' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            primitives=data.get("primitives", []),
            lights=data.get("lights", []),
            settings=data.get("settings"),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_primitives() -> int:
        """Get the maximum number of primitives supported."""
        return MAX_PRIMITIVES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES

    def get_texture_count(self) -> int:
        """Get the number of uploaded textures."""
        return get_texture_count()
