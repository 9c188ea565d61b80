"""
Geometric shapes for the ray tracer.

The set of primitives is closed: Sphere, Plane, Cube and Cylinder. Each one
implements ``hit(ray, t_min, t_max)`` returning the nearest intersection
strictly inside the open interval ``(t_min, t_max)``, or None.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union
import math

from .vec3 import Vec3, Point3, Color
from .ray import Ray


PLANE_PARALLEL_EPS = 1e-6
SLAB_PARALLEL_EPS = 1e-12
CYLINDER_EPS = 1e-6
CAP_RADIUS_EPS = 1e-12


@dataclass(frozen=True)
class HitRecord:
    """The nearest surface a ray met.

    ``normal`` is unit length and faces back along the ray; ``front_face``
    records whether that meant flipping the geometric normal.
    """
    point: Point3
    normal: Vec3
    t: float
    albedo: Color
    reflectivity: float
    front_face: bool = True

    @classmethod
    def from_outward_normal(
        cls,
        ray: Ray,
        point: Point3,
        outward_normal: Vec3,
        t: float,
        albedo: Color,
        reflectivity: float
    ) -> HitRecord:
        """Orient ``outward_normal`` against ``ray`` and build the record."""
        front_face = ray.direction.dot(outward_normal) < 0
        normal = outward_normal if front_face else -outward_normal
        return cls(
            point=point,
            normal=normal,
            t=t,
            albedo=albedo,
            reflectivity=reflectivity,
            front_face=front_face
        )


class Sphere:
    """Sphere; a negative radius turns its normals inward."""

    __slots__ = ('center', 'radius', 'albedo', 'reflectivity')

    def __init__(self, center: Point3, radius: float, albedo: Color, reflectivity: float = 0.0):
        self.center = center
        self.radius = radius
        self.albedo = albedo
        self.reflectivity = reflectivity

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Smaller root of |O + tD - C|^2 = r^2 inside the interval, else the larger."""
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0 or a == 0:
            return None

        sqrt_d = math.sqrt(discriminant)
        for root in ((-half_b - sqrt_d) / a, (-half_b + sqrt_d) / a):
            if t_min < root < t_max:
                point = ray.at(root)
                return HitRecord.from_outward_normal(
                    ray, point, (point - self.center) / self.radius,
                    root, self.albedo, self.reflectivity
                )
        return None

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane:
    """Unbounded plane through ``point``; the normal is stored normalized."""

    __slots__ = ('point', 'normal', 'albedo', 'reflectivity')

    def __init__(self, point: Point3, normal: Vec3, albedo: Color, reflectivity: float = 0.0):
        self.point = point
        self.normal = normal.normalize()
        self.albedo = albedo
        self.reflectivity = reflectivity

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        denom = ray.direction.dot(self.normal)

        # grazing rays never meet the plane
        if abs(denom) < PLANE_PARALLEL_EPS:
            return None

        t = (self.point - ray.origin).dot(self.normal) / denom
        if t <= t_min or t >= t_max:
            return None

        return HitRecord.from_outward_normal(
            ray, ray.at(t), self.normal, t, self.albedo, self.reflectivity
        )

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"


class AABB:
    """Box given by its low and high corners."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        self.minimum = minimum
        self.maximum = maximum

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Optional[Tuple[float, Vec3]]:
        """Slab test returning the ray parameter and outward face normal.

        The running interval starts as (t_min, t_max) and is narrowed per
        axis. The face reported is the one whose entry bound was tightest;
        when the ray starts inside the box there is no entry inside the
        interval and the exit face is reported instead.
        """
        t_near = t_min
        t_far = t_max
        enter_normal: Optional[Vec3] = None
        exit_normal: Optional[Vec3] = None

        for axis in range(3):
            origin = ray.origin[axis]
            direction = ray.direction[axis]
            lo = self.minimum[axis]
            hi = self.maximum[axis]

            if abs(direction) < SLAB_PARALLEL_EPS:
                # Parallel to this slab: origin must already be inside it
                if origin < lo or origin > hi:
                    return None
                continue

            inv_d = 1.0 / direction
            t0 = (lo - origin) * inv_d
            t1 = (hi - origin) * inv_d

            axis_normal = [0.0, 0.0, 0.0]
            axis_normal[axis] = -1.0
            candidate = Vec3(*axis_normal)
            if t0 > t1:
                t0, t1 = t1, t0
                candidate = -candidate

            if t0 > t_near:
                t_near = t0
                enter_normal = candidate
            if t1 < t_far:
                t_far = t1
                exit_normal = -candidate

            if t_far <= t_near:
                return None

        if enter_normal is not None:
            return t_near, enter_normal
        if exit_normal is not None:
            return t_far, exit_normal
        return None

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Cube:
    """An axis-aligned box with a material attached."""

    __slots__ = ('bounds', 'albedo', 'reflectivity')

    def __init__(self, minimum: Point3, maximum: Point3, albedo: Color, reflectivity: float = 0.0):
        """Corners may be given in any order; they are sorted per axis."""
        lo = Point3(min(minimum.x, maximum.x), min(minimum.y, maximum.y), min(minimum.z, maximum.z))
        hi = Point3(max(minimum.x, maximum.x), max(minimum.y, maximum.y), max(minimum.z, maximum.z))
        self.bounds = AABB(lo, hi)
        self.albedo = albedo
        self.reflectivity = reflectivity

    @classmethod
    def from_center_size(cls, center: Point3, size: float, albedo: Color, reflectivity: float = 0.0) -> Cube:
        """Cube of edge ``size`` centred on ``center``."""
        h = size * 0.5
        offset = Vec3(h, h, h)
        return cls(center - offset, center + offset, albedo, reflectivity)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        found = self.bounds.intersect(ray, t_min, t_max)
        if found is None:
            return None
        t, outward_normal = found
        return HitRecord.from_outward_normal(
            ray, ray.at(t), outward_normal, t, self.albedo, self.reflectivity
        )

    def __repr__(self) -> str:
        return f"Cube(min={self.bounds.minimum}, max={self.bounds.maximum})"


class Cylinder:
    """A capped cylinder aligned along the Y axis.

    ``center`` sits halfway up the cylinder, which spans
    ``center.y - half_height`` to ``center.y + half_height``.
    """

    __slots__ = ('center', 'radius', 'half_height', 'albedo', 'reflectivity')

    def __init__(
        self,
        center: Point3,
        radius: float,
        half_height: float,
        albedo: Color,
        reflectivity: float = 0.0
    ):
        self.center = center
        self.radius = radius
        self.half_height = half_height
        self.albedo = albedo
        self.reflectivity = reflectivity

    @property
    def y_min(self) -> float:
        return self.center.y - self.half_height

    @property
    def y_max(self) -> float:
        return self.center.y + self.half_height

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-cylinder intersection against the side and both caps."""
        # Ray origin relative to the cylinder center
        ro = ray.origin - self.center
        rd = ray.direction

        best_hit: Optional[HitRecord] = None
        t_hit = t_max

        # Side: (ro.x + t rd.x)^2 + (ro.z + t rd.z)^2 = r^2, half-b form
        a = rd.x * rd.x + rd.z * rd.z
        if abs(a) > CYLINDER_EPS:
            half_b = ro.x * rd.x + ro.z * rd.z
            c = ro.x * ro.x + ro.z * ro.z - self.radius * self.radius
            discriminant = half_b * half_b - a * c
            if discriminant >= 0:
                sqrt_d = math.sqrt(discriminant)
                for root in ((-half_b - sqrt_d) / a, (-half_b + sqrt_d) / a):
                    if not (t_min < root < t_hit):
                        continue
                    local_y = ro.y + rd.y * root
                    if abs(local_y) > self.half_height + CYLINDER_EPS:
                        continue
                    point = ray.at(root)
                    outward = Vec3(point.x - self.center.x, 0.0, point.z - self.center.z).normalize()
                    best_hit = HitRecord.from_outward_normal(
                        ray, point, outward, root, self.albedo, self.reflectivity
                    )
                    t_hit = root

        # Caps: disks at y_min and y_max
        if abs(rd.y) > CYLINDER_EPS:
            r_sq = self.radius * self.radius + CAP_RADIUS_EPS
            for cap_y, cap_normal in ((self.y_min, Vec3(0, -1, 0)), (self.y_max, Vec3(0, 1, 0))):
                t = (cap_y - ray.origin.y) / rd.y
                if not (t_min < t < t_hit):
                    continue
                point = ray.at(t)
                dx = point.x - self.center.x
                dz = point.z - self.center.z
                if dx * dx + dz * dz <= r_sq:
                    best_hit = HitRecord.from_outward_normal(
                        ray, point, cap_normal, t, self.albedo, self.reflectivity
                    )
                    t_hit = t

        return best_hit

    def __repr__(self) -> str:
        return (f"Cylinder(center={self.center}, radius={self.radius}, "
                f"half_height={self.half_height})")


Primitive = Union[Sphere, Plane, Cube, Cylinder]
PRIMITIVE_TYPES = (Sphere, Plane, Cube, Cylinder)


class HittableList:
    """The scene aggregate: a collection of primitives.

    Every primitive is tested for every ray; there is no acceleration
    structure, so cost grows linearly with the object count. When two
    primitives report exactly the same ``t``, the one added first wins.
    """

    def __init__(self, objects: Optional[Iterable[Primitive]] = None):
        self.objects: list[Primitive] = []
        for obj in objects or ():
            self.add(obj)

    def add(self, obj: Primitive) -> None:
        """Append; anything outside the four primitive types is a TypeError."""
        if not isinstance(obj, PRIMITIVE_TYPES):
            raise TypeError(f"Not a scene primitive: {type(obj).__name__}")
        self.objects.append(obj)

    def clear(self) -> None:
        self.objects.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Nearest hit over all primitives, each queried with the shrinking bound."""
        nearest: Optional[HitRecord] = None
        bound = t_max
        for obj in self.objects:
            record = obj.hit(ray, t_min, bound)
            if record is not None and record.t < bound:
                nearest, bound = record, record.t
        return nearest

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self.objects)
