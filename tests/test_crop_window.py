from __future__ import annotations

import numpy as np
import pytest

from affine_crop.geometry.linear import Point
from affine_crop.model.pose import ObjectPose
from affine_crop.ops.crop_window import MIN_EXTENT, begin_crop_window_drag, solve_crop_window

BACKING = ObjectPose(left=0, top=0, width=400, height=400)
CROP = ObjectPose(left=100, top=100, width=200, height=200)


def _apply(pose: ObjectPose, result) -> ObjectPose:
    return pose.with_changes(
        left=result.left,
        top=result.top,
        width=result.width,
        height=result.height,
        scale_x=result.scale_x,
        scale_y=result.scale_y,
    )


def test_inner_drag_follows_pointer() -> None:
    drag = begin_crop_window_drag(CROP, "tl")
    out = solve_crop_window(drag, Point(150, 120), BACKING, 50, 50)

    assert (out.left, out.top) == pytest.approx((150, 120))
    assert (out.width, out.height) == pytest.approx((150, 180))
    assert (out.scale_x, out.scale_y) == (1.0, 1.0)


def test_drag_below_minimum_is_clamped() -> None:
    drag = begin_crop_window_drag(CROP, "tl")
    # Would leave a 10x10 window.
    out = solve_crop_window(drag, Point(290, 290), BACKING, 50, 50)

    assert (out.width, out.height) == pytest.approx((50, 50))
    assert (out.left, out.top) == pytest.approx((250, 250))


def test_drag_outside_backing_snaps_to_backing_corner() -> None:
    drag = begin_crop_window_drag(CROP, "br")
    out = solve_crop_window(drag, Point(900, 700), BACKING, 50, 50)

    assert (out.left, out.top) == pytest.approx((100, 100))
    assert (out.width, out.height) == pytest.approx((300, 300))


def test_one_axis_outside_slides_along_edge() -> None:
    drag = begin_crop_window_drag(CROP, "tr")
    out = solve_crop_window(drag, Point(250, -80), BACKING, 50, 50)

    assert out.top == pytest.approx(0)
    assert out.width == pytest.approx(150)
    assert out.height == pytest.approx(300)


def test_mixed_region_uses_edge_and_minimum_line() -> None:
    drag = begin_crop_window_drag(CROP, "bl")
    # Past the minimum on x, outside the bottom edge on y.
    out = solve_crop_window(drag, Point(280, 500), BACKING, 50, 50)

    assert out.width == pytest.approx(50)
    assert out.height == pytest.approx(300)
    assert (out.left, out.top) == pytest.approx((250, 100))


def test_flips_follow_backing() -> None:
    backing = BACKING.with_changes(flip_x=True)
    drag = begin_crop_window_drag(CROP, "tl")
    out = solve_crop_window(drag, Point(120, 120), backing)

    assert out.flip_x is True
    assert out.flip_y is False


@pytest.mark.parametrize("corner", ["tl", "tr", "br", "bl"])
@pytest.mark.parametrize("angle", [0, 30, 90, 135, 200, 270, 315])
def test_minimum_size_and_containment_hold_everywhere(corner: str, angle: float) -> None:
    backing = ObjectPose(width=400, height=300, angle=angle, scale_x=1.5, scale_y=1.5)
    crop = backing.with_changes(width=200, height=150, scale_x=1, scale_y=1)
    crop = crop.with_position_by_origin(backing.from_local(Point(150, 100)), "left", "top")
    drag = begin_crop_window_drag(crop, corner)

    rng = np.random.default_rng(int(angle) * 10 + ("tl", "tr", "br", "bl").index(corner))
    center = backing.center()
    for dx, dy in rng.uniform(-1500, 1500, size=(200, 2)):
        pointer = Point(center.x + float(dx), center.y + float(dy))
        out = solve_crop_window(drag, pointer, backing, 60, 40)

        assert out.width >= 60 - 1e-9
        assert out.height >= 40 - 1e-9
        result = _apply(crop, out)
        for p in result.corners():
            assert backing.contains(p, tol=1e-6)


def test_zero_minimum_never_collapses_window() -> None:
    drag = begin_crop_window_drag(CROP, "tl")
    out = solve_crop_window(drag, Point(390, 390), BACKING)

    assert (out.width, out.height) == pytest.approx((MIN_EXTENT, MIN_EXTENT))
    assert (out.left, out.top) == pytest.approx((300 - MIN_EXTENT, 300 - MIN_EXTENT))
