"""Whitted-style ray tracer built on Taichi.

This package renders scenes of spheres and planes with recursive reflection
and refraction, hard shadows and Lambertian shading:
- Directional and spherical (point) lights
- Solid and textured materials
- Diffusive, reflective and refractive surfaces
- Fresnel or Schlick reflectance at refractive boundaries

Subpackages:
    core: Rays, colors, the tracing engine and the band renderer
    geometry: Sphere and plane primitives
    materials: Textures, surfaces, materials and Lambertian shading
    scene: Primitive/light tables, render settings and the scene manager
    camera: Fixed pinhole camera
    preview: PNG export
"""

__version__ = "0.1.0"
