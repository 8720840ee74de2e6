from __future__ import annotations

import numpy as np
import pytest

from affine_crop.geometry.linear import Point
from affine_crop.model.pose import ObjectPose
from affine_crop.ops.backing_scale import (
    begin_backing_scale,
    minimum_scale,
    propose_backing_scale,
    solve_backing_scale,
)

BACKING = ObjectPose(left=0, top=0, width=400, height=400)
CROP = ObjectPose(left=100, top=100, width=200, height=200)


def _covers(backing: ObjectPose, crop: ObjectPose) -> bool:
    return all(backing.contains(p, tol=1e-6) for p in crop.corners())


def test_minimum_scale_reaches_crop_from_far_edge() -> None:
    assert minimum_scale(BACKING, CROP, "tl") == pytest.approx((0.75, 0.75))
    assert minimum_scale(BACKING, CROP, "br") == pytest.approx((0.75, 0.75))

    off_center = ObjectPose(left=50, top=120, width=100, height=100)
    assert minimum_scale(BACKING, off_center, "tr") == pytest.approx((150 / 400, 280 / 400))


def test_radio_and_pinned_corner() -> None:
    backing = BACKING.with_changes(scale_x=2, scale_y=3)
    drag = begin_backing_scale(backing, CROP, "tl")

    assert drag.radio == pytest.approx(1.5)
    assert drag.pinned.is_close(backing.corners().br)
    assert drag.pinned_corner == "br"


def test_uniform_growth_is_anchored_at_pinned_corner() -> None:
    drag = begin_backing_scale(BACKING, CROP, "tl")
    proposed = propose_backing_scale(BACKING, drag, Point(-100, -100))
    out = solve_backing_scale(drag, proposed)

    assert (out.scale_x, out.scale_y) == pytest.approx((1.25, 1.25))
    assert out.corners().br.is_close(Point(400, 400))
    assert (out.left, out.top) == pytest.approx((-100, -100))


def test_shrink_below_minimum_clamps_onto_crop_edge() -> None:
    drag = begin_backing_scale(BACKING, CROP, "tl")
    proposed = propose_backing_scale(BACKING, drag, Point(350, 350))
    assert proposed.scale_x < 0.75

    out = solve_backing_scale(drag, proposed)
    assert (out.scale_x, out.scale_y) == pytest.approx((0.75, 0.75))
    assert out.corners().tl.is_close(Point(100, 100))
    assert out.corners().br.is_close(Point(400, 400))


def test_clamp_on_y_keeps_aspect() -> None:
    crop = ObjectPose(left=150, top=20, width=100, height=300)
    drag = begin_backing_scale(BACKING, crop, "br")
    out = solve_backing_scale(drag, BACKING.with_changes(scale_x=0.1, scale_y=0.1))

    # Taller than wide: the height limit wins.
    assert out.scale_y == pytest.approx(320 / 400)
    assert out.scale_x == pytest.approx(out.scale_y)
    assert _covers(out, crop)


@pytest.mark.parametrize("corner", ["tl", "tr", "br", "bl"])
@pytest.mark.parametrize("angle", [0, 45, 120, 250])
def test_backing_always_covers_crop(corner: str, angle: float) -> None:
    backing = ObjectPose(width=300, height=200, angle=angle, scale_x=1.2, scale_y=0.9)
    backing = backing.with_position_by_origin(Point(500, 500), "center", "center")
    crop = backing.with_changes(width=120, height=60, scale_x=1, scale_y=1)
    crop = crop.with_position_by_origin(backing.from_local(Point(90, 50)), "left", "top")
    assert _covers(backing, crop)

    drag = begin_backing_scale(backing, crop, corner)
    rng = np.random.default_rng(int(angle) + ("tl", "tr", "br", "bl").index(corner))
    pose = backing
    for dx, dy in rng.uniform(-800, 800, size=(150, 2)):
        pointer = Point(500 + float(dx), 500 + float(dy))
        pose = solve_backing_scale(drag, propose_backing_scale(pose, drag, pointer))
        assert _covers(pose, crop)
        assert pose.corners()[drag.pinned_corner].is_close(drag.pinned, 1e-6)


def test_any_scale_sequence_stays_covering() -> None:
    drag = begin_backing_scale(BACKING, CROP, "bl")
    rng = np.random.default_rng(42)
    for sx, sy in rng.uniform(0.0, 2.0, size=(200, 2)):
        out = solve_backing_scale(drag, BACKING.with_changes(scale_x=float(sx), scale_y=float(sy)))
        assert out.scale_x >= drag.min_scale_x - 1e-12
        assert out.scale_y >= drag.min_scale_y - 1e-12
        assert _covers(out, CROP)


@pytest.mark.parametrize("corner", ["tl", "tr", "br", "bl"])
def test_collapsed_crop_window_starts_no_scale(corner: str) -> None:
    collapsed = CROP.with_changes(width=0, height=0)
    assert begin_backing_scale(BACKING, collapsed, corner) is None
