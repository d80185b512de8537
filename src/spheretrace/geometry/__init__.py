"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be
called from the parallel render kernels.
"""

from .sphere import EPSILON, T_MAX, HitRecord, Sphere, hit_sphere, make_sphere, sphere_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "sphere_normal",
    "EPSILON",
    "T_MAX",
]
