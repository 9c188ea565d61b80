"""
Three-component vectors shared by geometry and shading.

One type serves as a position (Point3), a direction and an RGB value
(Color). Values are immutable: the backing numpy buffer is read-only and
every operation builds a new vector.
"""

from __future__ import annotations
from typing import Iterator, Union
import numpy as np

Operand = Union['Vec3', float]


def _wrap(data: np.ndarray) -> Vec3:
    # Takes ownership of a freshly computed buffer
    v = Vec3.__new__(Vec3)
    data.flags.writeable = False
    v._data = data
    return v


def _operand(value: Operand):
    return value._data if isinstance(value, Vec3) else value


def _component(index: int, doc: str) -> property:
    return property(lambda self: float(self._data[index]), doc=doc)


class Vec3:
    """An immutable 3D vector backed by a float64 numpy array.

    ``*`` and ``/`` between two vectors act per component, which is what
    tinting one color by another needs.
    """

    __slots__ = ('_data',)

    # numpy scalars defer to our reflected operators instead of broadcasting
    __array_ufunc__ = None

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        data = np.array((x, y, z), dtype=np.float64)
        data.flags.writeable = False
        self._data = data

    @classmethod
    def from_array(cls, arr) -> Vec3:
        """Copy any 3-element sequence or array into a new vector."""
        data = np.array(arr, dtype=np.float64).reshape(3)
        return _wrap(data)

    x = _component(0, "First component")
    y = _component(1, "Second component")
    z = _component(2, "Third component")
    r = _component(0, "Red channel (alias of x)")
    g = _component(1, "Green channel (alias of y)")
    b = _component(2, "Blue channel (alias of z)")

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    def __hash__(self) -> int:
        return hash(self._data.tobytes())

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return (float(c) for c in self._data)

    def __neg__(self) -> Vec3:
        return _wrap(-self._data)

    def __add__(self, other: Operand) -> Vec3:
        return _wrap(self._data + _operand(other))

    def __sub__(self, other: Operand) -> Vec3:
        return _wrap(self._data - _operand(other))

    def __mul__(self, other: Operand) -> Vec3:
        return _wrap(self._data * _operand(other))

    def __truediv__(self, other: Operand) -> Vec3:
        return _wrap(self._data / _operand(other))

    def __radd__(self, other: float) -> Vec3:
        return _wrap(other + self._data)

    def __rsub__(self, other: float) -> Vec3:
        return _wrap(other - self._data)

    def __rmul__(self, other: float) -> Vec3:
        return _wrap(other * self._data)

    def dot(self, other: Vec3) -> float:
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        return _wrap(np.cross(self._data, other._data))

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return float(np.sqrt(self.length_squared()))

    def normalize(self) -> Vec3:
        """Unit vector with the same direction.

        The zero vector has no direction and comes back unchanged, so callers
        never see NaN components.
        """
        length = self.length()
        if length == 0:
            return _wrap(self._data.copy())
        return _wrap(self._data / length)

    def reflect(self, normal: Vec3) -> Vec3:
        """Mirror about a unit normal: v - 2(v.n)n."""
        return self - normal * (2.0 * self.dot(normal))

    def lerp(self, other: Vec3, t: float) -> Vec3:
        """Blend ``self * (1 - t) + other * t``."""
        return self * (1.0 - t) + other * t

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        return bool(np.all(np.abs(self._data) < epsilon))

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        return _wrap(np.clip(self._data, min_val, max_val))

    def to_array(self) -> np.ndarray:
        """Writable copy of the components."""
        return self._data.copy()


Point3 = Vec3
Color = Vec3
