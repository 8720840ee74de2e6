from __future__ import annotations

import pytest

from affine_crop.geometry.linear import Point
from affine_crop.model.pose import ObjectPose
from affine_crop.ops.crop_rect import project_crop_rect, reference_corner


@pytest.mark.parametrize(
    ("flip_x", "flip_y", "corner"),
    [(False, False, "tl"), (True, False, "tr"), (False, True, "bl"), (True, True, "br")],
)
def test_reference_corner(flip_x: bool, flip_y: bool, corner: str) -> None:
    assert reference_corner(flip_x, flip_y) == corner


def test_projection_at_unit_scale() -> None:
    backing = ObjectPose(width=400, height=400)
    target = ObjectPose(left=100, top=120, width=200, height=150)
    rect = project_crop_rect(target, backing)

    assert (rect.crop_x, rect.crop_y) == pytest.approx((100, 120))
    assert (rect.width, rect.height) == pytest.approx((200, 150))
    assert (rect.scale_x, rect.scale_y) == (1, 1)


def test_projection_normalizes_to_backing_scale() -> None:
    backing = ObjectPose(width=200, height=200, scale_x=2, scale_y=2)
    target = ObjectPose(left=100, top=100, width=200, height=100)
    rect = project_crop_rect(target, backing)

    assert (rect.crop_x, rect.crop_y) == pytest.approx((50, 50))
    assert (rect.width, rect.height) == pytest.approx((100, 50))
    assert (rect.scale_x, rect.scale_y) == (2, 2)


def test_projection_of_flipped_image_measures_from_mirrored_corner() -> None:
    backing = ObjectPose(width=400, height=400, flip_x=True)
    target = ObjectPose(left=100, top=100, width=200, height=200, flip_x=True)
    rect = project_crop_rect(target, backing)

    # 100px from the right edge of the backing image on screen.
    assert rect.crop_x == pytest.approx(100)
    assert rect.crop_y == pytest.approx(100)

    shifted = target.with_changes(left=150)
    assert project_crop_rect(shifted, backing).crop_x == pytest.approx(50)


def test_projection_is_rotation_invariant() -> None:
    backing = ObjectPose(width=400, height=300, angle=57)
    backing = backing.with_position_by_origin(Point(20, 30), "center", "center")
    target = backing.with_changes(width=100, height=80)
    target = target.with_position_by_origin(backing.from_local(Point(60, 70)), "left", "top")
    rect = project_crop_rect(target, backing)

    assert (rect.crop_x, rect.crop_y) == pytest.approx((60, 70))
