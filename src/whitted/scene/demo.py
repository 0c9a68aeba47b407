"""Demo scene configuration.

This module provides a factory function for the tracer's standard test scene:

- A light green sphere in front of the camera, with a red spherical light
  sitting inside it
- A magenta sphere to the right, optionally reflective
- A checkerboard-textured sphere to the left
- A textured floor plane at y = 2.5 and a grey background plane at z = -30
- Two directional lights (white and yellow)

World +y points down the image, so the floor appears at the bottom of the frame.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> scene, settings = create_demo_scene()
    >>> renderer = Renderer(settings.width, settings.height)
    >>> renderer.render()
"""

from dataclasses import dataclass, field

from src.whitted.core.color import LIGHT_GREEN, MAGENTA, RED, WHITE, YELLOW
from src.whitted.core.ray import ReflectanceModel
from src.whitted.materials.surface import Diffusive, Reflective, Refractive, Surface
from src.whitted.materials.texture import checkerboard_texture
from src.whitted.scene.lights import DirectionalLight, SphericalLight
from src.whitted.scene.manager import SceneManager
from src.whitted.scene.settings import RenderSettings

# Edge length of the generated checkerboard texture in texels
CHECKERBOARD_SIZE = 256


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_recursion_depth: Ray levels traced per pixel.
        reflectance_model: Reflectance used at refractive boundaries.
        magenta_surface: Surface of the magenta sphere.
        green_surface: Surface of the green sphere. A Refractive surface lets
            the red light inside it shine through.
        albedo: Albedo shared by every material.
    """

    width: int = 800
    height: int = 600
    max_recursion_depth: int = 5
    reflectance_model: ReflectanceModel = ReflectanceModel.FRESNEL
    magenta_surface: Surface = field(default_factory=lambda: Reflective(0.4))
    green_surface: Surface = field(default_factory=Diffusive)
    albedo: float = 0.8


def create_demo_scene(
    params: DemoSceneParams | None = None,
) -> tuple[SceneManager, RenderSettings]:
    """Create and configure the demo scene.

    Clears any existing scene data, builds the scene and applies its render
    settings (which also sets up the camera).

    Args:
        params: Scene parameters. Defaults to DemoSceneParams().

    Returns:
        Tuple of (SceneManager, RenderSettings).
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager(default_albedo=params.albedo)

    checkerboard = scene.add_texture(
        checkerboard_texture(CHECKERBOARD_SIZE, CHECKERBOARD_SIZE, cells=8)
    )

    # Materials
    green = scene.add_solid_material(LIGHT_GREEN, surface=params.green_surface)
    magenta = scene.add_solid_material(MAGENTA, surface=params.magenta_surface)
    checkered = scene.add_texture_material(checkerboard, scale=10.0)
    floor = scene.add_texture_material(checkerboard, scale=0.2)
    background = scene.add_solid_material(WHITE * 0.8)

    # Primitives
    scene.add_sphere((0.0, -1.5, -3.0), 1.0, green)
    scene.add_sphere((4.0, 0.0, -5.0), 2.0, magenta)
    scene.add_sphere((-3.0, 0.0, -7.0), 2.0, checkered)
    scene.add_plane((0.0, 2.5, 0.0), (0.0, 1.0, 0.0), floor)
    scene.add_plane((0.0, 0.0, -30.0), (0.0, 0.0, -1.0), background)

    # Lights
    scene.add_light(DirectionalLight((5.0, 5.0, -5.0), WHITE, 2.5))
    scene.add_light(DirectionalLight((-2.0, 3.0, -5.0), YELLOW, 1.5))
    scene.add_light(SphericalLight((0.0, -1.0, -3.0), RED, 200.0))

    settings = RenderSettings(
        width=params.width,
        height=params.height,
        fov=90.0,
        max_recursion_depth=params.max_recursion_depth,
        reflectance_model=params.reflectance_model,
    )
    scene.configure(settings)
    return scene, settings


def glass_demo_params(**overrides) -> DemoSceneParams:
    """Demo parameters with a glass green sphere and a mirror magenta sphere."""
    values = {
        "magenta_surface": Reflective(0.8),
        "green_surface": Refractive(transparency=0.9, index=1.5),
    }
    values.update(overrides)
    return DemoSceneParams(**values)
