"""
The scene's single point light.

Intensity is a plain color multiplier: there is no distance falloff and no
area, so shadows are hard.
"""

from __future__ import annotations
from dataclasses import dataclass

from .vec3 import Vec3, Point3, Color


@dataclass(frozen=True)
class LightSample:
    """What a surface point sees of the light."""
    direction: Vec3   # unit, hit point toward light
    distance: float
    intensity: Color


@dataclass(frozen=True)
class PointLight:
    position: Point3
    intensity: Color = Color(1, 1, 1)

    def sample(self, hit_point: Point3) -> LightSample:
        """Direction and distance from ``hit_point`` to the light.

        A point on top of the light gets a zero direction, which zeroes
        the diffuse term rather than producing NaNs.
        """
        offset = self.position - hit_point
        return LightSample(offset.normalize(), offset.length(), self.intensity)
