from __future__ import annotations

import numpy as np
import pytest

from affine_crop.geometry.linear import Point
from affine_crop.model.pose import ObjectPose
from affine_crop.ops.backing_move import (
    begin_backing_move,
    movable_region,
    rotation_quadrant,
    screen_side,
    solve_backing_move,
)

BACKING = ObjectPose(left=0, top=0, width=400, height=400)
CROP = ObjectPose(left=100, top=100, width=200, height=200)


def _covers(backing: ObjectPose, crop: ObjectPose) -> bool:
    return all(backing.contains(p, tol=1e-6) for p in crop.corners())


@pytest.mark.parametrize(
    ("angle", "quadrant"),
    [(0, 0), (89.9, 0), (90, 1), (180, 2), (269, 2), (270, 3), (359.5, 3), (360, 0), (-10, 3)],
)
def test_rotation_quadrant(angle: float, quadrant: int) -> None:
    assert rotation_quadrant(angle) == quadrant


def test_screen_side_permutes_with_quadrant() -> None:
    assert screen_side("left", 0) == "left"
    assert screen_side("left", 1) == "top"
    assert screen_side("top", 1) == "right"
    assert screen_side("bottom", 3) == "right"


def test_movable_region_ends_at_crop_top_left() -> None:
    region = movable_region(BACKING, CROP)

    assert (region.width, region.height) == (200, 200)
    assert region.corners().tl.is_close(Point(-100, -100))
    assert region.corners().br.is_close(Point(100, 100))


def test_free_move_inside_region() -> None:
    drag = begin_backing_move(BACKING, CROP, Point(200, 200))
    out = solve_backing_move(drag, Point(250, 250))
    assert (out.left, out.top) == pytest.approx((50, 50))


def test_one_axis_out_slides_along_boundary() -> None:
    drag = begin_backing_move(BACKING, CROP, Point(200, 200))
    out = solve_backing_move(drag, Point(400, 250))
    assert (out.left, out.top) == pytest.approx((100, 50))

    out = solve_backing_move(drag, Point(130, -300))
    assert (out.left, out.top) == pytest.approx((-70, -100))


def test_both_axes_out_snap_to_region_corner() -> None:
    drag = begin_backing_move(BACKING, CROP, Point(200, 200))
    out = solve_backing_move(drag, Point(600, -400))
    assert (out.left, out.top) == pytest.approx((100, -100))


def test_boundaries_are_keyed_by_screen_side() -> None:
    backing = BACKING.with_changes(angle=90)
    crop = CROP.with_changes(angle=90)
    drag = begin_backing_move(backing, crop, Point(0, 0))

    assert drag.quadrant == 1
    assert set(drag.boundaries) == {"left", "top", "right", "bottom"}
    # The region's local right side sits on the crop window's local left edge.
    c = crop.corners()
    right = drag.boundary("right")
    assert right.start.is_close(c.tl)
    assert right.end.is_close(c.bl)
    # At 90 degrees the local right side faces the bottom of the screen.
    assert drag.boundaries["bottom"] is right


@pytest.mark.parametrize("angle", [0, 20, 90, 110, 180, 233, 270, 300])
def test_backing_covers_crop_along_any_path(angle: float) -> None:
    backing = ObjectPose(width=500, height=300, angle=angle, scale_x=1.1, scale_y=1.3)
    backing = backing.with_position_by_origin(Point(0, 0), "center", "center")
    crop = backing.with_changes(width=150, height=120, scale_x=1, scale_y=1)
    crop = crop.with_position_by_origin(backing.from_local(Point(200, 100)), "left", "top")
    assert _covers(backing, crop)

    rng = np.random.default_rng(int(angle))
    start = Point(10, 10)
    drag = begin_backing_move(backing, crop, start)
    # A random walk that crosses several boundary regions in one drag.
    steps = rng.normal(0, 120, size=(300, 2)).cumsum(axis=0)
    for dx, dy in steps:
        out = solve_backing_move(drag, Point(start.x + float(dx), start.y + float(dy)))
        moved = backing.with_changes(left=out.left, top=out.top)
        assert _covers(moved, crop)


def test_collapsed_crop_window_starts_no_move() -> None:
    collapsed = CROP.with_changes(width=0, height=0)
    assert begin_backing_move(BACKING, collapsed, Point(200, 200)) is None
