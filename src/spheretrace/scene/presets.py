"""Built-in scene configurations.

Each factory clears the global scene, registers its materials and spheres,
and returns the scene together with the camera it was composed for.

The camera looks down -z from (0, 0, 5). Image rows grow with +y, so
spheres with a large positive y appear at the bottom of the picture.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.presets import create_default_scene
    >>> from src.spheretrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

from src.spheretrace.camera.pinhole import PinholeCamera
from src.spheretrace.scene.manager import SceneManager

# =============================================================================
# Default Scene Constants
# =============================================================================

BLUE_SPHERE_CENTER = (0.0, 0.0, -8.0)
BLUE_SPHERE_RADIUS = 8.0
BLUE_SPHERE_COLOR = (0.0, 0.5, 1.0)

# A very large sphere whose top surface acts as the ground
EARTH_CENTER = (0.0, 1000.0, -8.0)
EARTH_RADIUS = 992.0
EARTH_COLOR = (0.1, 0.7, 0.1)

DIFFUSE_REFLECTANCE = 0.5

# =============================================================================
# Materials Scene Constants
# =============================================================================

# Ground level (top of the earth sphere)
GROUND_Y = EARTH_CENTER[1] - EARTH_RADIUS

SMALL_SPHERE_RADIUS = 4.0
SMALL_SPHERE_Z = -10.0

DIFFUSE_SPHERE_COLOR = (0.8, 0.3, 0.3)
METAL_SPHERE_COLOR = (0.9, 0.9, 0.9)
GLASS_REFRACTION_INDEX = 1.5


def create_default_scene() -> tuple[SceneManager, PinholeCamera]:
    """Create the two-sphere scene: a blue diffuse sphere above the earth.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere(
        center=BLUE_SPHERE_CENTER,
        radius=BLUE_SPHERE_RADIUS,
        base_color=BLUE_SPHERE_COLOR,
        reflectance_factor=DIFFUSE_REFLECTANCE,
    )
    scene.add_lambertian_sphere(
        center=EARTH_CENTER,
        radius=EARTH_RADIUS,
        base_color=EARTH_COLOR,
        reflectance_factor=DIFFUSE_REFLECTANCE,
    )

    return scene, PinholeCamera()


def create_materials_scene() -> tuple[SceneManager, PinholeCamera]:
    """Create a scene with one sphere of each material resting on the earth.

    From left to right: metal, diffuse, glass. The small spheres are added
    before the earth so that first-hit traversal resolves them correctly
    where they overlap it in view.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    small_y = GROUND_Y - SMALL_SPHERE_RADIUS
    spacing = 2.25 * SMALL_SPHERE_RADIUS

    scene.add_metal_sphere(
        center=(-spacing, small_y, SMALL_SPHERE_Z),
        radius=SMALL_SPHERE_RADIUS,
        base_color=METAL_SPHERE_COLOR,
    )
    scene.add_lambertian_sphere(
        center=(0.0, small_y, SMALL_SPHERE_Z),
        radius=SMALL_SPHERE_RADIUS,
        base_color=DIFFUSE_SPHERE_COLOR,
        reflectance_factor=DIFFUSE_REFLECTANCE,
    )
    scene.add_dielectric_sphere(
        center=(spacing, small_y, SMALL_SPHERE_Z),
        radius=SMALL_SPHERE_RADIUS,
        refraction_index=GLASS_REFRACTION_INDEX,
    )
    scene.add_lambertian_sphere(
        center=EARTH_CENTER,
        radius=EARTH_RADIUS,
        base_color=EARTH_COLOR,
        reflectance_factor=DIFFUSE_REFLECTANCE,
    )

    return scene, PinholeCamera()


SCENES = {
    "default": create_default_scene,
    "materials": create_materials_scene,
}
