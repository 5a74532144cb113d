"""Quads, the drawing primitive, and the 4x4 matrices that place them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np

Vec2 = tuple[float, float]
Vec4 = tuple[float, float, float, float]


class QuadType(IntEnum):
    """How the renderer shades a quad."""

    REGULAR = 0
    CIRCLE = 1
    TEXT = 2


class FilterMode(IntEnum):
    """Texture filtering applied when sampling a quad's image."""

    NEAREST = 0
    LINEAR = 1


def orthographic_projection(
    left: float, right: float, bottom: float, top: float, near: float, far: float
) -> np.ndarray:
    """Return an orthographic projection mapping the box onto [-1, 1]."""
    m = np.identity(4)
    m[0, 0] = 2.0 / (right - left)
    m[1, 1] = 2.0 / (top - bottom)
    m[2, 2] = -2.0 / (far - near)
    m[0, 3] = -(right + left) / (right - left)
    m[1, 3] = -(top + bottom) / (top - bottom)
    m[2, 3] = -(far + near) / (far - near)
    return m


def translation(x: float, y: float, z: float) -> np.ndarray:
    """Return a matrix that translates by (x, y, z)."""
    m = np.identity(4)
    m[:3, 3] = (x, y, z)
    return m


def rotation_z(radians: float) -> np.ndarray:
    """Return a counter-clockwise rotation about the z axis."""
    c, s = math.cos(radians), math.sin(radians)
    m = np.identity(4)
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def transform_point(matrix: Any, x: float, y: float) -> Vec2:
    """Transform (x, y, 0, 1) by matrix and return the resulting x and y."""
    v = np.asarray(matrix, dtype=float) @ np.array([x, y, 0.0, 1.0])
    return (float(v[0]), float(v[1]))


@dataclass
class DrawQuad:
    """A four-cornered shape with color, optional image and sorting data."""

    bottom_left: Vec2 = (0.0, 0.0)
    top_left: Vec2 = (0.0, 0.0)
    top_right: Vec2 = (0.0, 0.0)
    bottom_right: Vec2 = (0.0, 0.0)
    color: Vec4 = (0.0, 0.0, 0.0, 0.0)
    image: Any = None
    image_min_filter: FilterMode = FilterMode.NEAREST
    image_mag_filter: FilterMode = FilterMode.NEAREST
    z: int = 0
    type: QuadType = QuadType.REGULAR
    has_scissor: bool = False
    uv: Vec4 = (0.0, 0.0, 0.0, 0.0)
    scissor: Vec4 = (0.0, 0.0, 0.0, 0.0)
    userdata: list = field(default_factory=list)

    @classmethod
    def from_rect(
        cls,
        position: Vec2,
        size: Vec2,
        color: Vec4,
        quad_type: QuadType = QuadType.REGULAR,
    ) -> "DrawQuad":
        """Build an axis-aligned quad with its bottom-left corner at position."""
        left, bottom = position
        right = left + size[0]
        top = bottom + size[1]
        return cls(
            bottom_left=(left, bottom),
            top_left=(left, top),
            top_right=(right, top),
            bottom_right=(right, bottom),
            color=tuple(color),
            type=quad_type,
        )

    @classmethod
    def from_size(
        cls, size: Vec2, color: Vec4, quad_type: QuadType = QuadType.REGULAR
    ) -> "DrawQuad":
        """Build a quad spanning (0, 0) to size, to be placed by a transform."""
        return cls.from_rect((0.0, 0.0), size, color, quad_type)

    def corners(self) -> tuple[Vec2, Vec2, Vec2, Vec2]:
        """Return bottom-left, top-left, top-right and bottom-right in order."""
        return (self.bottom_left, self.top_left, self.top_right, self.bottom_right)