"""Taichi-based progressive Monte Carlo path tracer.

This package renders a static scene of diffuse planes and spheres by tracing
random light paths and refining a running per-pixel mean:
- Bounce-capped path tracing with a diffuse bounce weight
- Single-sided planes and spheres, tested linearly
- An axis-scaled film camera with k x k multisampling
- Progressive accumulation with pluggable frame sinks

Subpackages:
    core: Vector utilities, rays, sampler, integrator and rendering loop
    geometry: Shape primitives and intersection algorithms
    materials: The diffuse material with emission
    scene: Scene storage, scene descriptions and the Cornell box
    camera: Film camera with ray generation
    preview: Tone mapping, PNG export and preview windows
"""

__version__ = "0.1.0"
