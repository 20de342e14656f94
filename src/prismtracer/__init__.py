"""Taichi-based stochastic path tracer with wavelength dispersion.

This package renders scenes of spheres and bounded planes with diffuse, metal,
dielectric and dispersive (prism-like) materials, using Taichi for the
parallel render kernels.

Subpackages:
    core: Ray and vector utilities, radiance integrator, render scheduler
    geometry: Sphere and plane primitives with intersection routines
    materials: Scattering models and the material response record
    scene: Body storage, nearest-hit queries and the scene manager
    camera: Viewport camera producing primary rays
    output: Framebuffer encoding and persistence
"""

__version__ = "0.1.0"
