"""Taichi-based Monte Carlo sphere path tracer.

Renders scenes made only of spheres with three materials (Lambertian,
metal, dielectric) through a pinhole camera, averaging jittered samples
per pixel, and writes PPM or PNG images.

Subpackages:
    core: Rays, random streams, the radiance estimator and render loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material scatter and attenuation rules
    scene: Sphere list, material registry and built-in scenes
    camera: Pinhole camera with ray generation
    preview: Image output
"""

__version__ = "0.1.0"
