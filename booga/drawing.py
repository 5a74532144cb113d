"""Immediate-mode drawing into a frame of quads in normalized device coordinates."""

from __future__ import annotations

import dataclasses
import logging
import math
from typing import Any, Optional

import numpy as np

from booga.quad import (
    DrawQuad,
    FilterMode,
    QuadType,
    Vec2,
    Vec4,
    orthographic_projection,
    rotation_z,
    transform_point,
    translation,
)

logger = logging.getLogger(__name__)

# Quads are sorted with a radix sort, so the number of z bits matters.
MAX_Z_BITS = 21
MAX_Z = (1 << MAX_Z_BITS) // 2
Z_STACK_MAX = 4096
SCISSOR_STACK_MAX = 4096
MAX_BOUND_IMAGES = 16

COLOR_RED: Vec4 = (1.0, 0.0, 0.0, 1.0)
COLOR_GREEN: Vec4 = (0.0, 1.0, 0.0, 1.0)
COLOR_BLUE: Vec4 = (0.0, 0.0, 1.0, 1.0)
COLOR_WHITE: Vec4 = (1.0, 1.0, 1.0, 1.0)
COLOR_BLACK: Vec4 = (0.0, 0.0, 0.0, 1.0)


def _round_half_away(x: float) -> float:
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _all_beyond(values: list[float], low: bool) -> bool:
    return all(v < -1 for v in values) if low else all(v > 1 for v in values)


class DrawFrame:
    """Collects the quads drawn during one frame, along with camera and layer state."""

    def __init__(self, width: int = 1280, height: int = 720) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"frame size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.quads: list[DrawQuad] = []
        self.reset()

    def reset(self) -> None:
        """Drop every quad and restore the default camera, projection and stacks."""
        self.quads.clear()
        half_w = self.width // 2
        half_h = self.height // 2
        self.projection = orthographic_projection(-half_w, half_w, -half_h, half_h, -1, 10)
        self.camera_xform = np.identity(4)
        self.cbuffer: Any = None
        self.scissor_stack: list[Vec4] = []
        self.z_stack: list[int] = []
        self.enable_z_sorting = False
        self.shader_extension: Any = None
        self.bound_images: list[Any] = [None] * MAX_BOUND_IMAGES
        self.highest_bound_slot_index = -1

    def bind_image(self, image: Any, slot_index: int) -> None:
        """Bind image to a shader slot for the custom shader of this frame."""
        if not 0 <= slot_index < MAX_BOUND_IMAGES:
            raise ValueError(
                f"The highest bind image slot is {MAX_BOUND_IMAGES - 1}, "
                f"you tried to bind to {slot_index}"
            )
        self.bound_images[slot_index] = image
        self.highest_bound_slot_index = max(slot_index, self.highest_bound_slot_index)

    def _world_to_clip(self, xform: Optional[np.ndarray] = None) -> np.ndarray:
        m = np.asarray(self.projection, dtype=float) @ np.linalg.inv(
            np.asarray(self.camera_xform, dtype=float)
        )
        if xform is not None:
            m = m @ np.asarray(xform, dtype=float)
        return m

    def draw_quad_projected(self, quad: DrawQuad, world_to_clip: Any) -> DrawQuad:
        """Project quad into clip space and add it, unless it lies fully off screen.

        A culled quad is returned detached from the frame.
        """
        q = dataclasses.replace(quad)
        q.bottom_left, q.top_left, q.top_right, q.bottom_right = (
            transform_point(world_to_clip, x, y) for x, y in quad.corners()
        )
        xs = [c[0] for c in q.corners()]
        ys = [c[1] for c in q.corners()]
        if (
            _all_beyond(xs, True)
            or _all_beyond(xs, False)
            or _all_beyond(ys, True)
            or _all_beyond(ys, False)
        ):
            return DrawQuad()

        q.image_min_filter = FilterMode.NEAREST
        q.image_mag_filter = FilterMode.NEAREST
        q.z = self.z_stack[-1] if self.z_stack else 0
        q.has_scissor = bool(self.scissor_stack)
        if q.has_scissor:
            q.scissor = self.scissor_stack[-1]
        q.userdata = []

        # Snapping to whole pixels avoids artifacts when sampling from a large atlas.
        pixel_width = 2.0 / self.width
        pixel_height = 2.0 / self.height

        def snap(corner: Vec2) -> Vec2:
            return (
                _round_half_away(corner[0] / pixel_width) * pixel_width,
                _round_half_away(corner[1] / pixel_height) * pixel_height,
            )

        q.bottom_left = snap(q.bottom_left)
        q.top_left = snap(q.top_left)
        q.top_right = snap(q.top_right)
        q.bottom_right = snap(q.bottom_right)

        self.quads.append(q)
        return q

    def draw_quad(self, quad: DrawQuad) -> DrawQuad:
        """Add a quad given in world coordinates."""
        return self.draw_quad_projected(quad, self._world_to_clip())

    def draw_quad_xform(self, quad: DrawQuad, xform: Any) -> DrawQuad:
        """Add a quad placed in the world by xform."""
        return self.draw_quad_projected(quad, self._world_to_clip(xform))

    def draw_rect(self, position: Vec2, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw an axis-aligned rectangle with its bottom-left corner at position."""
        return self.draw_quad(DrawQuad.from_rect(position, size, color, QuadType.REGULAR))

    def draw_rect_xform(self, xform: Any, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw a rectangle of size placed by xform."""
        return self.draw_quad_xform(DrawQuad.from_size(size, color, QuadType.REGULAR), xform)

    def draw_circle(self, position: Vec2, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw an ellipse filling the rectangle at position."""
        return self.draw_quad(DrawQuad.from_rect(position, size, color, QuadType.CIRCLE))

    def draw_circle_xform(self, xform: Any, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw an ellipse of size placed by xform."""
        return self.draw_quad_xform(DrawQuad.from_size(size, color, QuadType.CIRCLE), xform)

    def draw_image(self, image: Any, position: Vec2, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw image stretched over the rectangle at position."""
        q = self.draw_rect(position, size, color)
        q.image = image
        q.uv = (0.0, 0.0, 1.0, 1.0)
        return q

    def draw_image_xform(self, image: Any, xform: Any, size: Vec2, color: Vec4) -> DrawQuad:
        """Draw image over a rectangle of size placed by xform."""
        q = self.draw_rect_xform(xform, size, color)
        q.image = image
        q.uv = (0.0, 0.0, 1.0, 1.0)
        return q

    def draw_line(self, p0: Vec2, p1: Vec2, line_width: float, color: Vec4) -> DrawQuad:
        """Draw a straight line of line_width from p0 to p1."""
        dx, dy = p1[0] - p0[0], p1[1] - p0[1]
        length = math.hypot(dx, dy)
        xform = (
            translation(p0[0], p0[1], 0.0)
            @ rotation_z(math.atan2(dy, dx))
            @ translation(0.0, -line_width / 2, 0.0)
        )
        return self.draw_rect_xform(xform, (length, line_width), color)

    def push_z_layer(self, z: int) -> None:
        """Give quads drawn from now on the sorting value z."""
        if len(self.z_stack) >= Z_STACK_MAX:
            raise OverflowError(
                "Too many z layers pushed. You can pop with pop_z_layer() "
                "when you are done drawing to it."
            )
        self.z_stack.append(z)

    def pop_z_layer(self) -> int:
        """Return to the previous z layer."""
        if not self.z_stack:
            raise IndexError("No Z layers to pop!")
        return self.z_stack.pop()

    def push_scissor(self, minimum: Vec2, maximum: Vec2) -> None:
        """Crop quads drawn from now on to the window box minimum..maximum."""
        if len(self.scissor_stack) >= SCISSOR_STACK_MAX:
            raise OverflowError(
                "Too many scissors pushed. You can pop with pop_scissor() "
                "when you are done drawing to it."
            )
        self.scissor_stack.append((minimum[0], minimum[1], maximum[0], maximum[1]))

    def pop_scissor(self) -> Vec4:
        """Return to the previous scissor box."""
        if not self.scissor_stack:
            raise IndexError("No scissors to pop!")
        return self.scissor_stack.pop()