"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    sampler: Per-sample random streams
    integrator: Radiance estimator and render target
    progressive: Progressive sample accumulation

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    ray_at,
    reflect,
    vec3,
)
from .sampler import next_random, random_in_cube, random_range, seed_stream

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.spheretrace.core.integrator or src.spheretrace.core.progressive.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "reflect",
    "seed_stream",
    "next_random",
    "random_range",
    "random_in_cube",
]
