import math

import numpy as np
import pytest

from booga.quad import (
    DrawQuad,
    FilterMode,
    QuadType,
    orthographic_projection,
    rotation_z,
    transform_point,
    translation,
)


def test_orthographic_maps_box_corners_to_ndc():
    proj = orthographic_projection(-640, 640, -360, 360, -1, 10)
    assert transform_point(proj, 640, 360) == pytest.approx((1.0, 1.0))
    assert transform_point(proj, -640, -360) == pytest.approx((-1.0, -1.0))
    assert transform_point(proj, 0, 0) == pytest.approx((0.0, 0.0))


def test_orthographic_off_center_box():
    proj = orthographic_projection(0, 200, 0, 100, -1, 10)
    assert transform_point(proj, 0, 0) == pytest.approx((-1.0, -1.0))
    assert transform_point(proj, 200, 100) == pytest.approx((1.0, 1.0))


def test_translation_moves_point_and_inverts():
    move = translation(3.0, -2.0, 5.0)
    assert transform_point(move, 1.0, 1.0) == pytest.approx((4.0, -1.0))
    back = translation(-3.0, 2.0, -5.0)
    np.testing.assert_allclose(move @ back, np.identity(4))


def test_rotation_quarter_turn():
    assert transform_point(rotation_z(math.pi / 2), 1.0, 0.0) == pytest.approx(
        (0.0, 1.0), abs=1e-12
    )


@pytest.mark.parametrize("angle", [0.3, 1.0, -2.5, math.pi])
def test_rotation_preserves_length_and_inverts(angle):
    rot = rotation_z(angle)
    x, y = transform_point(rot, 3.0, 4.0)
    assert math.hypot(x, y) == pytest.approx(math.hypot(3.0, 4.0))
    np.testing.assert_allclose(rot @ rotation_z(-angle), np.identity(4), atol=1e-12)


def test_from_rect_corners():
    quad = DrawQuad.from_rect((1.0, 2.0), (3.0, 4.0), (1.0, 0.0, 0.0, 1.0))
    assert quad.corners() == ((1.0, 2.0), (1.0, 6.0), (4.0, 6.0), (4.0, 2.0))
    assert quad.color == (1.0, 0.0, 0.0, 1.0)
    assert quad.type is QuadType.REGULAR
    assert quad.image is None


def test_from_size_starts_at_origin():
    quad = DrawQuad.from_size((5.0, 2.0), (0.0, 1.0, 0.0, 1.0), QuadType.CIRCLE)
    assert quad.corners() == ((0.0, 0.0), (0.0, 2.0), (5.0, 2.0), (5.0, 0.0))
    assert quad.type is QuadType.CIRCLE


def test_new_quad_defaults():
    quad = DrawQuad.from_size((1.0, 1.0), (1.0, 1.0, 1.0, 1.0))
    assert quad.z == 0
    assert quad.has_scissor is False
    assert quad.uv == (0.0, 0.0, 0.0, 0.0)
    assert quad.image_min_filter is FilterMode.NEAREST
    assert quad.image_mag_filter is FilterMode.NEAREST


def test_quad_userdata_not_shared():
    a = DrawQuad()
    b = DrawQuad()
    a.userdata.append((1.0, 2.0, 3.0, 4.0))
    assert b.userdata == []