"""prism: a Whitted-style ray tracer built on Taichi.

This package renders static scenes of spheres, planes and finite cylinders
lit by point lights, with clamped Lambertian shading and recursive mirror
reflection, to square PPM or PNG images.

Subpackages:
    core: Ray and vector utilities, the shading integrator and the renderer
    geometry: Shape primitives and intersection algorithms
    scene: Primitive storage, closest-hit search, scene construction and reading
    camera: Pinhole camera with primary ray generation
    preview: Image export and Matplotlib preview

Modules that declare Taichi fields must be imported after ``ti.init()``;
this top-level package imports none of them.
"""

__version__ = "0.1.0"
