"""Core spatial models: Vector3, Quaternion."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    """Immutable 3D float coordinate."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, k: float) -> Vector3:
        return Vector3(self.x * k, self.y * k, self.z * k)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __repr__(self) -> str:
        return f"({self.x:g}, {self.y:g}, {self.z:g})"


@dataclass(frozen=True, slots=True)
class Quaternion:
    """Immutable rotation quaternion (x, y, z, w). Defaults to identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def from_euler(cls, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Quaternion:
        """Build from Euler angles in degrees, applied Z, then X, then Y."""
        hx, hy, hz = (math.radians(a) * 0.5 for a in (x, y, z))
        cx, sx = math.cos(hx), math.sin(hx)
        cy, sy = math.cos(hy), math.sin(hy)
        cz, sz = math.cos(hz), math.sin(hz)
        return cls(
            x=cy * sx * cz + sy * cx * sz,
            y=sy * cx * cz - cy * sx * sz,
            z=cy * cx * sz - sy * sx * cz,
            w=cy * cx * cz + sy * sx * sz,
        )

    def __mul__(self, other: Quaternion) -> Quaternion:
        return Quaternion(
            x=self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            y=self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            z=self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
            w=self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
        )

    def rotate(self, v: Vector3) -> Vector3:
        """Rotate *v* by this quaternion."""
        # t = 2 * cross(q.xyz, v); v' = v + w * t + cross(q.xyz, t)
        tx = 2.0 * (self.y * v.z - self.z * v.y)
        ty = 2.0 * (self.z * v.x - self.x * v.z)
        tz = 2.0 * (self.x * v.y - self.y * v.x)
        return Vector3(
            v.x + self.w * tx + (self.y * tz - self.z * ty),
            v.y + self.w * ty + (self.z * tx - self.x * tz),
            v.z + self.w * tz + (self.x * ty - self.y * tx),
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.w)


ZERO = Vector3()
IDENTITY = Quaternion()
