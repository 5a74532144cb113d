import numpy as np
import pytest

from booga.drawing import COLOR_GREEN, MAX_BOUND_IMAGES, Z_STACK_MAX, DrawFrame
from booga.quad import QuadType, orthographic_projection, transform_point, translation


def approx_point(p):
    return pytest.approx(p, abs=1e-9)


def test_reset_defaults():
    frame = DrawFrame(200, 100)
    expected = orthographic_projection(-100, 100, -50, 50, -1, 10)
    assert np.allclose(frame.projection, expected)
    assert np.allclose(frame.camera_xform, np.identity(4))
    assert frame.highest_bound_slot_index == -1
    assert frame.quads == []


def test_draw_rect_projects_corners():
    frame = DrawFrame(200, 100)
    q = frame.draw_rect((0, 0), (50, 25), COLOR_GREEN)
    assert frame.quads == [q]
    assert q.bottom_left == approx_point(transform_point(frame.projection, 0, 0))
    assert q.top_right == approx_point(transform_point(frame.projection, 50, 25))
    assert q.color == COLOR_GREEN
    assert q.type is QuadType.REGULAR


def test_offscreen_quad_is_culled():
    frame = DrawFrame(200, 100)
    q = frame.draw_rect((1000, 0), (10, 10), COLOR_GREEN)
    assert frame.quads == []
    assert q not in frame.quads or q is not frame.quads


def test_culled_quad_is_detached():
    frame = DrawFrame(200, 100)
    frame.draw_rect((-5000, -5000), (10, 10), COLOR_GREEN)
    assert len(frame.quads) == 0


def test_corners_snap_to_pixels():
    frame = DrawFrame(200, 100)
    q = frame.draw_rect((0.3, 0.3), (10.2, 10.2), COLOR_GREEN)
    pw, ph = 2.0 / 200, 2.0 / 100
    for x, y in q.corners():
        assert x / pw == pytest.approx(round(x / pw), abs=1e-6)
        assert y / ph == pytest.approx(round(y / ph), abs=1e-6)


def test_z_layers():
    frame = DrawFrame(200, 100)
    frame.push_z_layer(5)
    assert frame.draw_rect((0, 0), (10, 10), COLOR_GREEN).z == 5
    assert frame.pop_z_layer() == 5
    assert frame.draw_rect((0, 0), (10, 10), COLOR_GREEN).z == 0
    with pytest.raises(IndexError):
        frame.pop_z_layer()


def test_z_stack_overflow():
    frame = DrawFrame()
    for i in range(Z_STACK_MAX):
        frame.push_z_layer(i)
    with pytest.raises(OverflowError):
        frame.push_z_layer(0)


def test_scissor():
    frame = DrawFrame(200, 100)
    frame.push_scissor((1, 2), (3, 4))
    q = frame.draw_rect((0, 0), (10, 10), COLOR_GREEN)
    assert q.has_scissor
    assert q.scissor == (1, 2, 3, 4)
    frame.pop_scissor()
    assert frame.draw_rect((0, 0), (10, 10), COLOR_GREEN).has_scissor is False
    with pytest.raises(IndexError):
        frame.pop_scissor()


def test_image_sets_full_uv():
    frame = DrawFrame(200, 100)
    image = object()
    q = frame.draw_image(image, (0, 0), (10, 10), COLOR_GREEN)
    assert q.image is image
    assert q.uv == (0.0, 0.0, 1.0, 1.0)
    qx = frame.draw_image_xform(image, np.identity(4), (10, 10), COLOR_GREEN)
    assert qx.uv == (0.0, 0.0, 1.0, 1.0)


def test_circle_type():
    frame = DrawFrame(200, 100)
    assert frame.draw_circle((0, 0), (10, 10), COLOR_GREEN).type is QuadType.CIRCLE
    assert frame.draw_circle_xform(np.identity(4), (10, 10), COLOR_GREEN).type is QuadType.CIRCLE


def test_bind_image():
    frame = DrawFrame()
    image = object()
    frame.bind_image(image, 3)
    assert frame.bound_images[3] is image
    assert frame.highest_bound_slot_index == 3
    frame.bind_image(image, 1)
    assert frame.highest_bound_slot_index == 3
    with pytest.raises(ValueError):
        frame.bind_image(image, MAX_BOUND_IMAGES)


def test_camera_moves_world():
    frame = DrawFrame(200, 100)
    frame.camera_xform = translation(10, 0, 0)
    q = frame.draw_rect((10, 0), (10, 10), COLOR_GREEN)
    assert q.bottom_left == approx_point(transform_point(frame.projection, 0, 0))


def test_rect_xform_matches_rect():
    frame = DrawFrame(200, 100)
    a = frame.draw_rect((20, 10), (30, 20), COLOR_GREEN)
    b = frame.draw_rect_xform(translation(20, 10, 0), (30, 20), COLOR_GREEN)
    for ca, cb in zip(a.corners(), b.corners()):
        assert ca == approx_point(cb)


def test_line_spans_endpoints():
    frame = DrawFrame(400, 400)
    q = frame.draw_line((0, 0), (40, 0), 4, COLOR_GREEN)
    assert q.bottom_left == approx_point(transform_point(frame.projection, 0, -2))
    assert q.top_right == approx_point(transform_point(frame.projection, 40, 2))


def test_reset_clears_state():
    frame = DrawFrame(200, 100)
    frame.push_z_layer(2)
    frame.push_scissor((0, 0), (1, 1))
    frame.draw_rect((0, 0), (10, 10), COLOR_GREEN)
    frame.reset()
    assert frame.quads == []
    assert frame.z_stack == []
    assert frame.scissor_stack == []