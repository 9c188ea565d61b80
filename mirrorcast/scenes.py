"""
Built-in scenes.

Each preset fixes its objects, light and camera; SceneOverrides can replace
the camera and light parameters and append custom objects. Supplying any
custom object switches to the ``custom`` scene.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, Plane, Cube, Cylinder, HittableList
from .lights import PointLight


SCENE_NAMES = ('sphere', 'cube_plane_dim', 'all', 'all_alt_cam', 'custom')
DEFAULT_SCENE = 'all'

DEFAULT_LIGHT_POSITION = Point3(5.0, 5.0, -2.0)
WHITE = Color(1.0, 1.0, 1.0)

FLOOR_POINT = Point3(0.0, -0.5, 0.0)
FLOOR_NORMAL = Vec3(0.0, 1.0, 0.0)
FLOOR_ALBEDO = Color(0.82, 0.82, 0.82)

# (center, radius, albedo, reflectivity)
SphereSpec = Tuple[Point3, float, Color, float]
# (point, normal, albedo, reflectivity)
PlaneSpec = Tuple[Point3, Vec3, Color, float]
# (center, size, albedo, reflectivity)
CubeSpec = Tuple[Point3, float, Color, float]
# (center, radius, half_height, albedo, reflectivity)
CylinderSpec = Tuple[Point3, float, float, Color, float]


@dataclass
class SceneDescription:
    """Everything the renderer needs besides its settings."""
    world: HittableList
    light: PointLight
    camera: Camera


@dataclass
class SceneOverrides:
    """Optional replacements for a preset's camera and light, plus extra objects."""
    look_from: Optional[Point3] = None
    look_at: Optional[Point3] = None
    vup: Optional[Vec3] = None
    fov: Optional[float] = None
    light_position: Optional[Point3] = None
    light_intensity: Optional[Color] = None
    spheres: List[SphereSpec] = field(default_factory=list)
    planes: List[PlaneSpec] = field(default_factory=list)
    cubes: List[CubeSpec] = field(default_factory=list)
    cylinders: List[CylinderSpec] = field(default_factory=list)

    def has_objects(self) -> bool:
        return bool(self.spheres or self.planes or self.cubes or self.cylinders)

    def make_light(self, position: Point3, intensity: Color) -> PointLight:
        return PointLight(
            self.light_position if self.light_position is not None else position,
            self.light_intensity if self.light_intensity is not None else intensity
        )

    def make_camera(self, look_from: Point3, look_at: Point3, fov: float, aspect_ratio: float) -> Camera:
        return Camera(
            look_from=self.look_from if self.look_from is not None else look_from,
            look_at=self.look_at if self.look_at is not None else look_at,
            vup=self.vup if self.vup is not None else Vec3(0, 1, 0),
            vfov=self.fov if self.fov is not None else fov,
            aspect_ratio=aspect_ratio
        )


def resolve_scene_name(name: str, overrides: Optional[SceneOverrides] = None) -> str:
    """Return the scene that will actually be built for a requested name."""
    if overrides is not None and overrides.has_objects():
        return 'custom'
    return name if name in SCENE_NAMES else DEFAULT_SCENE


def default_output_name(name: str) -> str:
    return f"scene_{name}.ppm"


def _floor(reflectivity: float) -> Plane:
    return Plane(FLOOR_POINT, FLOOR_NORMAL, FLOOR_ALBEDO, reflectivity)


def _sphere_scene(o: SceneOverrides, aspect_ratio: float) -> SceneDescription:
    world = HittableList()
    world.add(_floor(0.15))
    world.add(Sphere(Point3(0.0, 0.0, -1.3), 0.5, Color(0.9, 0.2, 0.2), 0.05))
    light = o.make_light(DEFAULT_LIGHT_POSITION, WHITE)
    camera = o.make_camera(Point3(0, 0, 0), Point3(0, 0, -1), 90.0, aspect_ratio)
    return SceneDescription(world, light, camera)


def _cube_plane_dim_scene(o: SceneOverrides, aspect_ratio: float) -> SceneDescription:
    # Matte cube under a dimmer light than the sphere scene
    world = HittableList()
    world.add(_floor(0.05))
    world.add(Cube.from_center_size(Point3(0.0, -0.2, -1.3), 0.6, Color(0.25, 0.28, 0.35), 0.0))
    light = o.make_light(DEFAULT_LIGHT_POSITION, Color(0.6, 0.6, 0.6))
    camera = o.make_camera(Point3(0, 0, 0), Point3(0.0, -0.1, -1.3), 90.0, aspect_ratio)
    return SceneDescription(world, light, camera)


def _all_objects(sphere_refl: float, cylinder_refl: float) -> HittableList:
    world = HittableList()
    world.add(_floor(0.05))
    world.add(Sphere(Point3(-0.8, 0.0, -1.3), 0.5, Color(0.9, 0.2, 0.2), sphere_refl))
    world.add(Cube.from_center_size(Point3(0.3, -0.2, -1.4), 0.6, Color(0.35, 0.42, 0.65), 0.0))
    world.add(Cylinder(Point3(1.4, -0.1, -1.6), 0.3, 0.4, Color(0.2, 0.7, 0.4), cylinder_refl))
    return world


def _all_scene(o: SceneOverrides, aspect_ratio: float) -> SceneDescription:
    world = _all_objects(0.10, 0.05)
    light = o.make_light(DEFAULT_LIGHT_POSITION, WHITE)
    camera = o.make_camera(Point3(0, 0, 0), Point3(0, 0, -1), 90.0, aspect_ratio)
    return SceneDescription(world, light, camera)


def _all_alt_cam_scene(o: SceneOverrides, aspect_ratio: float) -> SceneDescription:
    world = _all_objects(0.02, 0.08)
    light = o.make_light(DEFAULT_LIGHT_POSITION, WHITE)
    camera = o.make_camera(Point3(1.6, 0.5, 1.2), Point3(0.1, -0.2, -1.5), 75.0, aspect_ratio)
    return SceneDescription(world, light, camera)


def _custom_scene(o: SceneOverrides, aspect_ratio: float) -> SceneDescription:
    world = HittableList()
    for point, normal, albedo, refl in o.planes:
        world.add(Plane(point, normal, albedo, refl))
    for center, radius, albedo, refl in o.spheres:
        world.add(Sphere(center, radius, albedo, refl))
    for center, size, albedo, refl in o.cubes:
        world.add(Cube.from_center_size(center, size, albedo, refl))
    for center, radius, half_height, albedo, refl in o.cylinders:
        world.add(Cylinder(center, radius, half_height, albedo, refl))

    if not o.planes:
        world.add(_floor(0.05))

    light = o.make_light(DEFAULT_LIGHT_POSITION, WHITE)
    camera = o.make_camera(Point3(0.0, 0.5, 1.0), Point3(0, 0, -1), 75.0, aspect_ratio)
    return SceneDescription(world, light, camera)


_BUILDERS: Dict[str, Callable[[SceneOverrides, float], SceneDescription]] = {
    'sphere': _sphere_scene,
    'cube_plane_dim': _cube_plane_dim_scene,
    'all': _all_scene,
    'all_alt_cam': _all_alt_cam_scene,
    'custom': _custom_scene,
}


def build_scene(
    name: str,
    aspect_ratio: float,
    overrides: Optional[SceneOverrides] = None
) -> SceneDescription:
    """Build a preset scene.

    Args:
        name: One of SCENE_NAMES (unknown names fall back to 'all')
        aspect_ratio: Image width / height for the camera
        overrides: Camera/light replacements and custom objects

    Returns:
        The scene's objects, light and camera
    """
    if overrides is None:
        overrides = SceneOverrides()
    builder = _BUILDERS[resolve_scene_name(name, overrides)]
    return builder(overrides, aspect_ratio)
