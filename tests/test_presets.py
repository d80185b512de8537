"""Tests for the built-in scenes.

Tests cover:
- The two-sphere default scene layout and materials
- The materials scene ordering and material types
- Returned cameras
"""

import pytest


class TestDefaultScene:
    """Tests for create_default_scene."""

    def test_layout(self):
        """A blue sphere followed by the earth sphere."""
        from src.spheretrace.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        assert scene.get_sphere_count() == 2

        blue, earth = scene.spheres
        assert blue.center == (0.0, 0.0, -8.0)
        assert blue.radius == 8.0
        assert earth.center == (0.0, 1000.0, -8.0)
        assert earth.radius == 992.0

    def test_materials(self):
        """Both spheres are diffuse with reflectance 0.5."""
        from src.spheretrace.scene.manager import MaterialType
        from src.spheretrace.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        blue = scene.get_material_info(scene.spheres[0].material_id)
        earth = scene.get_material_info(scene.spheres[1].material_id)

        assert blue.material_type == MaterialType.LAMBERTIAN
        assert blue.params == {"base_color": (0.0, 0.5, 1.0), "reflectance_factor": 0.5}
        assert earth.params == {"base_color": (0.1, 0.7, 0.1), "reflectance_factor": 0.5}

    def test_camera(self):
        """The default camera is a 20x20 view from z = 5."""
        from src.spheretrace.scene.presets import create_default_scene

        _, camera = create_default_scene()
        assert (camera.view_width, camera.view_height, camera.camera_z) == (20.0, 20.0, 5.0)

    def test_first_hit_mode(self):
        """Preset scenes use first-hit traversal."""
        from src.spheretrace.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        assert scene.nearest_hit is False


class TestMaterialsScene:
    """Tests for create_materials_scene."""

    def test_one_sphere_per_material(self):
        """Metal, diffuse and glass spheres, then the earth."""
        from src.spheretrace.scene.manager import MaterialType
        from src.spheretrace.scene.presets import create_materials_scene

        scene, _ = create_materials_scene()
        types = [scene.get_material_info(s.material_id).material_type for s in scene.spheres]
        assert types == [
            MaterialType.METAL,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.LAMBERTIAN,
        ]

    def test_small_spheres_rest_on_ground(self):
        """The small spheres touch the top of the earth sphere."""
        from src.spheretrace.scene.presets import GROUND_Y, create_materials_scene

        scene, _ = create_materials_scene()
        for sphere in scene.spheres[:3]:
            assert sphere.center[1] + sphere.radius == pytest.approx(GROUND_Y)

    def test_replaces_previous_scene(self):
        """Building a preset clears whatever was loaded before."""
        from src.spheretrace.scene.presets import create_default_scene, create_materials_scene

        create_materials_scene()
        scene, _ = create_default_scene()
        assert scene.get_sphere_count() == 2
        assert scene.get_material_count() == 2

    def test_registry(self):
        """SCENES maps names to factories."""
        from src.spheretrace.scene.presets import (
            SCENES,
            create_default_scene,
            create_materials_scene,
        )

        assert SCENES == {"default": create_default_scene, "materials": create_materials_scene}
