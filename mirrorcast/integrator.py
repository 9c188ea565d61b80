"""
Shading and the recursive ray integrator.

The color of a ray is resolved as:
- miss: a vertical sky gradient
- hit: ambient + shadow-tested Lambert diffuse from the point light,
  blended with a mirror-reflected ray for reflective surfaces

Reflection recursion is bounded by an explicit depth; an exhausted depth
contributes black.
"""

from __future__ import annotations
from typing import Optional

from .vec3 import Color
from .ray import Ray
from .shapes import HitRecord, HittableList
from .lights import LightSample, PointLight

AMBIENT = 0.12
BIAS = 1e-4
T_MIN = 0.001
MAX_DEPTH = 5

SKY_HORIZON = Color(1.0, 1.0, 1.0)
SKY_ZENITH = Color(0.5, 0.7, 1.0)


def sky_color(ray: Ray) -> Color:
    """Generate a sky gradient background.

    Args:
        ray: The ray direction to use for gradient

    Returns:
        White looking straight down, blue looking straight up
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return SKY_HORIZON.lerp(SKY_ZENITH, t)


class Integrator:
    """Whitted-style integrator with one point light and mirror bounces."""

    def __init__(
        self,
        world: HittableList,
        light: PointLight,
        max_depth: int = MAX_DEPTH,
        ambient: float = AMBIENT,
        bias: float = BIAS
    ):
        """Create an integrator.

        Args:
            world: Scene aggregate to trace against
            light: The single light source
            max_depth: Number of bounces before a ray contributes black
            ambient: Constant lighting term added to the diffuse term
            bias: Offset along the normal for secondary ray origins
        """
        self.world = world
        self.light = light
        self.max_depth = max_depth
        self.ambient = ambient
        self.bias = bias

    def in_shadow(self, hit: HitRecord, sample: LightSample) -> bool:
        """Test whether anything blocks the segment from the hit to the light."""
        shadow_ray = Ray.spawn(hit.point, hit.normal, sample.direction, self.bias)
        return self.world.hit(shadow_ray, self.bias, sample.distance - self.bias) is not None

    def lighting(self, hit: HitRecord) -> float:
        """Return the scalar lighting factor (ambient + diffuse) at a hit."""
        sample = self.light.sample(hit.point)
        if self.in_shadow(hit, sample):
            diffuse = 0.0
        else:
            diffuse = max(0.0, hit.normal.dot(sample.direction))
        return self.ambient + diffuse

    def shade(self, hit: HitRecord) -> Color:
        """Local color: albedo * (ambient + diffuse) * light intensity."""
        return (hit.albedo * self.lighting(hit)) * self.light.intensity

    def trace(self, ray: Ray, depth: Optional[int] = None) -> Color:
        """Compute the color seen along a ray.

        Args:
            ray: The ray to trace
            depth: Remaining bounces (defaults to max_depth)

        Returns:
            The pre-gamma color for this ray
        """
        if depth is None:
            depth = self.max_depth
        if depth <= 0:
            return Color(0, 0, 0)

        hit = self.world.hit(ray, T_MIN, float('inf'))
        if hit is None:
            return sky_color(ray)

        local = self.shade(hit)

        reflectivity = min(max(hit.reflectivity, 0.0), 1.0)
        if reflectivity <= 0.0:
            return local

        reflect_dir = ray.direction.normalize().reflect(hit.normal).normalize()
        reflect_ray = Ray.spawn(hit.point, hit.normal, reflect_dir, self.bias)
        reflected = self.trace(reflect_ray, depth - 1)
        return local.lerp(reflected, reflectivity)
