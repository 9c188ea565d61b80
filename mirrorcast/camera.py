"""
Pinhole camera producing primary rays.
"""

from __future__ import annotations
import math
from typing import Tuple

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera aimed with look-at parameters.

    The image plane sits one unit in front of the eye along the view
    direction. ``get_ray(s, t)`` maps (0, 0) to the plane's lower-left
    corner and (1, 1) to its upper-right corner.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0
    ):
        """Create a camera.

        Args:
            look_from: Eye position
            look_at: Point the view direction passes through
            vup: Approximate up direction, need not be orthogonal to the view
            vfov: Vertical field of view in degrees
            aspect_ratio: Image width / height
        """
        self.origin = look_from
        self.vfov = vfov
        self.aspect_ratio = aspect_ratio
        self.w, self.u, self.v = self.orthonormal_basis(look_from, look_at, vup)

        half_height = math.tan(math.radians(vfov) / 2)
        half_width = aspect_ratio * half_height
        self.horizontal = self.u * (2.0 * half_width)
        self.vertical = self.v * (2.0 * half_height)
        self.lower_left_corner = (
            self.origin - self.u * half_width - self.v * half_height - self.w
        )

    @staticmethod
    def orthonormal_basis(look_from: Point3, look_at: Point3, vup: Vec3) -> Tuple[Vec3, Vec3, Vec3]:
        """Return (w, u, v): unit vectors pointing backward, right and up."""
        w = (look_from - look_at).normalize()
        u = vup.cross(w).normalize()
        return w, u, w.cross(u)

    def get_ray(self, s: float, t: float) -> Ray:
        """Ray from the eye through image-plane point (s, t).

        The direction is left unnormalized; its length grows toward the
        edges of the image plane.
        """
        target = self.lower_left_corner + self.horizontal * s + self.vertical * t
        return Ray(self.origin, target - self.origin)

    def __repr__(self) -> str:
        return (f"Camera(origin={self.origin}, vfov={self.vfov}, "
                f"aspect_ratio={self.aspect_ratio:.4f})")
