"""Scene module for scene tables, settings and management.

Components:
    intersection: Primitive table and nearest-hit scene query
    lights: Directional and spherical light table
    settings: Render settings shared by the camera and the tracer
    manager: Unified scene manager with validation and serialization
    demo: The standard demo scene

Scene data lives in module-level Taichi fields laid out as
Structure-of-Arrays, so only one scene exists at a time.
"""

from .demo import DemoSceneParams, create_demo_scene, glass_demo_params
from .intersection import (
    MAX_PRIMITIVES,
    PrimitiveKind,
    SceneHitRecord,
    add_plane,
    add_sphere,
    clear_scene,
    get_primitive_count,
    trace,
    trace_ray,
)
from .lights import (
    MAX_LIGHTS,
    DirectionalLight,
    Light,
    LightKind,
    SphericalLight,
    add_light,
    clear_lights,
    get_light_count,
    light_sample,
    validate_light,
)
from .manager import PlaneInfo, SceneConfig, SceneManager, SphereInfo
from .settings import (
    MAX_RECURSION_DEPTH,
    RenderSettings,
    apply_settings,
    reset_settings,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "PrimitiveKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_primitive_count",
    "trace",
    "trace_ray",
    "MAX_PRIMITIVES",
    # Lights module
    "DirectionalLight",
    "SphericalLight",
    "Light",
    "LightKind",
    "add_light",
    "clear_lights",
    "get_light_count",
    "light_sample",
    "validate_light",
    "MAX_LIGHTS",
    # Settings module
    "RenderSettings",
    "apply_settings",
    "reset_settings",
    "MAX_RECURSION_DEPTH",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "PlaneInfo",
    "SceneConfig",
    # Demo module
    "DemoSceneParams",
    "create_demo_scene",
    "glass_demo_params",
]
