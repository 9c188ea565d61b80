"""
Rays: half-lines ``origin + t * direction`` for t > 0.

Primary rays come from the camera with an unnormalized direction; shadow
and reflection rays are spawned just off a surface.
"""

from __future__ import annotations
from dataclasses import dataclass

from .vec3 import Vec3, Point3


@dataclass(frozen=True)
class Ray:
    """A ray with an origin and a direction of any nonzero length.

    ``t`` is measured in multiples of ``direction``, so it is a distance
    only when the direction has unit length.
    """
    origin: Point3
    direction: Vec3

    @classmethod
    def spawn(cls, point: Point3, normal: Vec3, direction: Vec3, bias: float) -> Ray:
        """Start a secondary ray ``bias`` above a surface along its normal."""
        return cls(point + normal * bias, direction)

    def at(self, t: float) -> Point3:
        return self.origin + self.direction * t
