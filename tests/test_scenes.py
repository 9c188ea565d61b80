"""Tests for the built-in scenes."""

import pytest

from mirrorcast.vec3 import Vec3, Point3, Color
from mirrorcast.shapes import Sphere, Plane, Cube, Cylinder
from mirrorcast.scenes import (
    SCENE_NAMES, DEFAULT_SCENE, DEFAULT_LIGHT_POSITION,
    SceneOverrides, build_scene, resolve_scene_name, default_output_name
)


def kinds(scene):
    return [type(obj) for obj in scene.world]


class TestSceneNames:
    """Test scene selection."""

    def test_known_names(self):
        assert SCENE_NAMES == ('sphere', 'cube_plane_dim', 'all', 'all_alt_cam', 'custom')

    def test_unknown_falls_back_to_default(self):
        assert resolve_scene_name('nonsense') == DEFAULT_SCENE == 'all'

    def test_objects_force_custom(self):
        overrides = SceneOverrides(spheres=[(Point3(0, 0, -1), 0.5, Color(1, 1, 1), 0.0)])
        assert resolve_scene_name('sphere', overrides) == 'custom'

    def test_camera_override_keeps_preset(self):
        overrides = SceneOverrides(fov=30.0)
        assert resolve_scene_name('sphere', overrides) == 'sphere'

    def test_default_output_name(self):
        assert default_output_name('all_alt_cam') == 'scene_all_alt_cam.ppm'


class TestPresets:
    """Test the contents of each preset."""

    def test_sphere_scene(self):
        scene = build_scene('sphere', 4 / 3)
        assert kinds(scene) == [Plane, Sphere]
        floor, sphere = list(scene.world)
        assert floor.reflectivity == 0.15
        assert sphere.center == Point3(0, 0, -1.3)
        assert sphere.radius == 0.5
        assert sphere.reflectivity == 0.05
        assert scene.light.position == DEFAULT_LIGHT_POSITION
        assert scene.light.intensity == Color(1, 1, 1)
        assert scene.camera.origin == Point3(0, 0, 0)

    def test_cube_plane_dim_scene(self):
        scene = build_scene('cube_plane_dim', 4 / 3)
        assert kinds(scene) == [Plane, Cube]
        cube = list(scene.world)[1]
        assert cube.reflectivity == 0.0
        assert cube.bounds.minimum == Point3(-0.3, -0.5, -1.6)
        assert scene.light.intensity == Color(0.6, 0.6, 0.6)

    def test_all_scene(self):
        scene = build_scene('all', 4 / 3)
        assert kinds(scene) == [Plane, Sphere, Cube, Cylinder]
        _, sphere, _, cylinder = list(scene.world)
        assert sphere.reflectivity == 0.10
        assert cylinder.reflectivity == 0.05
        assert cylinder.half_height == 0.4

    def test_all_alt_cam_scene(self):
        scene = build_scene('all_alt_cam', 4 / 3)
        assert kinds(scene) == [Plane, Sphere, Cube, Cylinder]
        _, sphere, _, cylinder = list(scene.world)
        assert sphere.reflectivity == 0.02
        assert cylinder.reflectivity == 0.08
        assert scene.camera.origin == Point3(1.6, 0.5, 1.2)

    def test_floor_is_shared(self):
        for name in ('sphere', 'cube_plane_dim', 'all', 'all_alt_cam'):
            floor = list(build_scene(name, 1.0).world)[0]
            assert floor.point == Point3(0, -0.5, 0)
            assert floor.normal == Vec3(0, 1, 0)
            assert floor.albedo == Color(0.82, 0.82, 0.82)

    def test_unknown_name_builds_all(self):
        assert kinds(build_scene('missing', 1.0)) == kinds(build_scene('all', 1.0))

    @pytest.mark.parametrize("name", SCENE_NAMES)
    def test_every_preset_builds(self, name):
        scene = build_scene(name, 16 / 9)
        assert len(scene.world) >= 1


class TestOverrides:
    """Test camera, light and object overrides."""

    def test_light_override(self):
        overrides = SceneOverrides(light_position=Point3(0, 3, 0), light_intensity=Color(0.2, 0.2, 0.2))
        scene = build_scene('sphere', 1.0, overrides)
        assert scene.light.position == Point3(0, 3, 0)
        assert scene.light.intensity == Color(0.2, 0.2, 0.2)

    def test_partial_light_override_keeps_preset_intensity(self):
        overrides = SceneOverrides(light_position=Point3(0, 3, 0))
        scene = build_scene('cube_plane_dim', 1.0, overrides)
        assert scene.light.intensity == Color(0.6, 0.6, 0.6)

    def test_camera_override(self):
        overrides = SceneOverrides(look_from=Point3(0, 2, 2), look_at=Point3(0, 0, 0))
        scene = build_scene('all', 1.0, overrides)
        assert scene.camera.origin == Point3(0, 2, 2)
        center = scene.camera.get_ray(0.5, 0.5).direction.normalize()
        assert center == Vec3(0, -2, -2).normalize()

    def test_custom_scene_adds_default_floor(self):
        overrides = SceneOverrides(
            spheres=[(Point3(0, 0, -1), 0.5, Color(1, 0, 0), 0.3)],
            cubes=[(Point3(1, 0, -2), 0.5, Color(0, 1, 0), 0.0)],
            cylinders=[(Point3(-1, 0, -2), 0.2, 0.5, Color(0, 0, 1), 0.0)],
        )
        scene = build_scene('sphere', 1.0, overrides)
        assert kinds(scene) == [Sphere, Cube, Cylinder, Plane]
        floor = list(scene.world)[-1]
        assert floor.reflectivity == 0.05

    def test_custom_planes_replace_floor(self):
        overrides = SceneOverrides(
            planes=[(Point3(0, -1, 0), Vec3(0, 1, 0), Color(1, 1, 1), 0.0)],
            spheres=[(Point3(0, 0, -1), 0.5, Color(1, 0, 0), 0.0)],
        )
        scene = build_scene('all', 1.0, overrides)
        assert kinds(scene) == [Plane, Sphere]
        assert list(scene.world)[0].point == Point3(0, -1, 0)

    def test_custom_camera_defaults(self):
        overrides = SceneOverrides(spheres=[(Point3(0, 0, -1), 0.5, Color(1, 0, 0), 0.0)])
        scene = build_scene('custom', 1.0, overrides)
        assert scene.camera.origin == Point3(0, 0.5, 1)
