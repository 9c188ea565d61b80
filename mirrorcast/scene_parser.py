"""
Scene files.

A scene file is a YAML (or, with a ``.json`` suffix, JSON) mapping. Every
section is optional::

    camera:
      look_from: [0, 0.5, 1]
      look_at: [0, 0, -1]
      vfov: 75
    render:
      width: 400
      height: 300
      samples: 16
      max_depth: 5
      seed: 7
    light:
      position: [5, 5, -2]
      intensity: [1, 1, 1]
    objects:
      - type: plane
        point: [0, -0.5, 0]
        normal: [0, 1, 0]
        reflectivity: 0.05
      - type: sphere
        center: [0, 0, -1.3]
        radius: 0.5
        albedo: "#e63333"

Vectors are 3-element lists or ``{x, y, z}`` mappings. Colors may also be
``{r, g, b}`` mappings or ``#rrggbb`` strings. Cubes take either
``center``/``size`` or ``min``/``max``; cylinders take ``center``,
``radius`` and ``half_height``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
import json
import logging

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Sphere, Plane, Cube, Cylinder, HittableList, Primitive
from .lights import PointLight
from .renderer import RenderSettings
from .scenes import SceneDescription, DEFAULT_LIGHT_POSITION

logger = logging.getLogger(__name__)

DEFAULT_ALBEDO = (0.8, 0.8, 0.8)

# render section key -> (RenderSettings field, converter)
_RENDER_KEYS: Dict[str, Tuple[str, Callable[[Any], Any]]] = {
    'width': ('width', int),
    'height': ('height', int),
    'samples': ('samples_per_pixel', int),
    'max_depth': ('max_depth', int),
    'tile_size': ('tile_size', int),
    'threads': ('num_threads', int),
    'seed': ('seed', int),
    'gamma': ('gamma', float),
}


class SceneParseError(Exception):
    """A scene file or mapping that cannot be turned into a scene."""


def to_vec3(value: Any, keys: str = 'xyz') -> Vec3:
    """Vec3 from a 3-sequence or a mapping keyed by the letters of ``keys``."""
    if isinstance(value, Mapping):
        value = [value.get(k, 0) for k in keys]
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise SceneParseError(f"Expected 3 components, got {value!r}")
    try:
        return Vec3(*(float(c) for c in value))
    except (TypeError, ValueError) as e:
        raise SceneParseError(f"Non-numeric component in {value!r}") from e


def to_color(value: Any) -> Color:
    if not isinstance(value, str):
        return to_vec3(value, 'rgb')
    digits = value[1:] if value.startswith('#') else ''
    try:
        if len(digits) != 6:
            raise ValueError(value)
        return Color(*(int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4)))
    except ValueError as e:
        raise SceneParseError(f"Colors given as text must be #rrggbb, got {value!r}") from e


def to_float(section: Mapping, key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise SceneParseError(f"'{key}' must be a number, got {value!r}") from e


def _section(data: Mapping, name: str, kind: type = dict) -> Any:
    value = data.get(name, kind())
    if not isinstance(value, kind):
        raise SceneParseError(f"'{name}' must be a {'mapping' if kind is dict else 'list'}")
    return value


def _sphere(entry: Mapping, albedo: Color, reflectivity: float) -> Primitive:
    return Sphere(
        to_vec3(entry.get('center', [0, 0, 0])),
        to_float(entry, 'radius', 1.0),
        albedo, reflectivity
    )


def _plane(entry: Mapping, albedo: Color, reflectivity: float) -> Primitive:
    normal = to_vec3(entry.get('normal', [0, 1, 0]))
    if normal.near_zero():
        raise SceneParseError("Plane normal must not be zero")
    return Plane(to_vec3(entry.get('point', [0, 0, 0])), normal, albedo, reflectivity)


def _cube(entry: Mapping, albedo: Color, reflectivity: float) -> Primitive:
    if 'min' in entry or 'max' in entry:
        return Cube(
            to_vec3(entry.get('min', [0, 0, 0])),
            to_vec3(entry.get('max', [1, 1, 1])),
            albedo, reflectivity
        )
    return Cube.from_center_size(
        to_vec3(entry.get('center', [0, 0, 0])),
        to_float(entry, 'size', 1.0),
        albedo, reflectivity
    )


def _cylinder(entry: Mapping, albedo: Color, reflectivity: float) -> Primitive:
    return Cylinder(
        to_vec3(entry.get('center', [0, 0, 0])),
        to_float(entry, 'radius', 0.5),
        to_float(entry, 'half_height', 0.5),
        albedo, reflectivity
    )


OBJECT_BUILDERS: Dict[str, Callable[[Mapping, Color, float], Primitive]] = {
    'sphere': _sphere,
    'plane': _plane,
    'cube': _cube,
    'cylinder': _cylinder,
}


class SceneParser:
    """Builds a scene and its render settings from a description.

    The parser keeps what it built in ``objects``, ``light`` and
    ``settings``, so one instance should parse one description. A given
    ``aspect_ratio`` replaces the render section's as the camera default,
    for callers that resize the image afterwards; an explicit
    ``camera.aspect_ratio`` still wins.
    """

    def __init__(self, aspect_ratio: Optional[float] = None):
        self.aspect_ratio = aspect_ratio
        self.objects = HittableList()
        self.light = PointLight(DEFAULT_LIGHT_POSITION)
        self.settings = RenderSettings()

    def parse_file(self, filepath: str) -> Tuple[SceneDescription, RenderSettings]:
        path = Path(filepath)
        decode = json.loads if path.suffix.lower() == '.json' else yaml.safe_load
        try:
            data = decode(path.read_text())
        except OSError as e:
            raise SceneParseError(f"Cannot open scene file {filepath}: {e}") from e
        except (ValueError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")
        logger.debug("Loaded scene description from %s", filepath)
        return self.parse_dict(data)

    def parse_dict(self, data: Mapping[str, Any]) -> Tuple[SceneDescription, RenderSettings]:
        # The camera's default aspect ratio comes from the render section
        self.settings = self.build_settings(_section(data, 'render'))
        for entry in _section(data, 'objects', list):
            self.objects.add(self.build_object(entry))
        if 'light' in data:
            self.light = self.build_light(_section(data, 'light'))
        camera = self.build_camera(_section(data, 'camera'))

        logger.debug("Parsed %d objects", len(self.objects))
        return SceneDescription(self.objects, self.light, camera), self.settings

    def build_object(self, entry: Any) -> Primitive:
        """One ``objects`` entry; untyped entries are spheres."""
        if not isinstance(entry, Mapping):
            raise SceneParseError(f"Invalid object entry: {entry!r}")
        kind = str(entry.get('type', 'sphere')).lower()
        builder = OBJECT_BUILDERS.get(kind)
        if builder is None:
            raise SceneParseError(f"Unknown object type: {kind}")

        albedo = to_color(entry.get('albedo', DEFAULT_ALBEDO)).clamp(0.0, 1.0)
        reflectivity = min(max(to_float(entry, 'reflectivity', 0.0), 0.0), 1.0)
        return builder(entry, albedo, reflectivity)

    def build_light(self, section: Mapping) -> PointLight:
        position = to_vec3(section.get('position', list(DEFAULT_LIGHT_POSITION)))
        intensity = to_color(section.get('intensity', [1, 1, 1]))
        return PointLight(position, intensity.clamp(0.0, float('inf')))

    def build_camera(self, section: Mapping) -> Camera:
        aspect = self.aspect_ratio if self.aspect_ratio is not None else self.settings.aspect_ratio
        return Camera(
            look_from=to_vec3(section.get('look_from', [0, 0, 0])),
            look_at=to_vec3(section.get('look_at', [0, 0, -1])),
            vup=to_vec3(section.get('vup', [0, 1, 0])),
            vfov=to_float(section, 'vfov', 90.0),
            aspect_ratio=to_float(section, 'aspect_ratio', aspect)
        )

    def build_settings(self, section: Mapping) -> RenderSettings:
        kwargs = {}
        try:
            for key, (field_name, convert) in _RENDER_KEYS.items():
                if section.get(key) is not None:
                    kwargs[field_name] = convert(section[key])
            return RenderSettings(**kwargs)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e


def load_scene(
    filepath: str,
    aspect_ratio: Optional[float] = None
) -> Tuple[SceneDescription, RenderSettings]:
    """Read a YAML or JSON scene file."""
    return SceneParser(aspect_ratio).parse_file(filepath)


def parse_scene(
    data: Mapping[str, Any],
    aspect_ratio: Optional[float] = None
) -> Tuple[SceneDescription, RenderSettings]:
    """Build a scene from an already-loaded mapping."""
    return SceneParser(aspect_ratio).parse_dict(data)
