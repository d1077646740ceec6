"""Whitted-style recursive ray tracer built on Taichi.

This package renders static scenes of spheres and bounded floor planes with:
- Phong-style local illumination from point lights with hard shadows
- Recursive mirror reflection and refraction up to a bounded depth
- A flat or equirectangular environment for escaping rays
- Parallel per-pixel rendering into an 8-bit RGB image

Subpackages:
    core: Vector/ray math, the shading engine and the render driver
    geometry: Sphere and plane intersection routines
    materials: Material table shared by all primitives
    scene: Primitive tables, lights, environment and the scene manager
    camera: Render settings and primary ray generation
    output: PNG export and environment texture loading

Taichi must be initialized (with ``default_fp=ti.f64``) before importing the
modules that declare fields (scene, materials, integrator).
"""

__version__ = "0.1.0"
