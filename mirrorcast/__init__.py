"""
Mirrorcast - A Python Ray Tracing Renderer

A recursive Whitted-style ray tracer with support for:
- Spheres, planes, axis-aligned cubes and capped cylinders
- A point light with hard shadows and an ambient term
- Mirror reflection up to a bounce limit
- Jittered multi-sample anti-aliasing
- PPM (P3) and Pillow image output
"""

__version__ = "0.1.0"
__author__ = "Mirrorcast Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import (
    HitRecord, AABB, Sphere, Plane, Cube, Cylinder,
    Primitive, PRIMITIVE_TYPES, HittableList
)
from .camera import Camera
from .lights import PointLight, LightSample
from .integrator import Integrator, sky_color
from .renderer import Renderer, RenderSettings
from .ppm import PPMError, write_ppm, read_ppm
from .scenes import SceneDescription, SceneOverrides, build_scene, SCENE_NAMES
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
