"""Pan the backing image behind the crop window, clamped so it keeps covering it.

The set of legal top-left positions is itself a rectangle (the movable region)
in the backing image's rotated frame: its bottom-right corner is the crop
window's top-left corner and its size is the backing image's scaled size minus
the crop window's.
"""

from __future__ import annotations

from dataclasses import dataclass

from affine_crop.errors import DegenerateLine
from affine_crop.geometry.affine import normalize_angle
from affine_crop.geometry.linear import (
    LinearFunction,
    Point,
    corresponding_point,
    intersection,
    line,
    pedal_point,
    perpendicular_line,
    shift_parallel,
)
from affine_crop.logger import get_logger
from affine_crop.model.pose import ObjectPose

_logger = get_logger("backing_move")

SIDES = ("left", "top", "right", "bottom")


def rotation_quadrant(angle: float) -> int:
    """Bucket ``angle mod 360`` into 0..3 for [0,90) [90,180) [180,270) [270,360)."""
    return int(normalize_angle(angle) // 90) % 4


def screen_side(local_side: str, quadrant: int) -> str:
    """Side of the screen that a local side of a rotated rectangle faces."""
    return SIDES[(SIDES.index(local_side) + quadrant) % 4]


@dataclass(frozen=True, slots=True)
class BackingMoveDrag:
    region: ObjectPose
    # Keyed by the side of the screen each boundary faces, for hosts that
    # draw or hit-test in screen terms.
    boundaries: dict[str, LinearFunction]
    quadrant: int
    start_position: Point
    start_pointer: Point

    def boundary(self, local_side: str) -> LinearFunction:
        # The solver classifies in the region's local frame, so it looks a
        # boundary up by local side; mapping through the quadrant here undoes
        # the screen-side keying and the pairing is the same at any rotation.
        return self.boundaries[screen_side(local_side, self.quadrant)]


@dataclass(frozen=True, slots=True)
class BackingMoveResult:
    left: float
    top: float


def movable_region(backing: ObjectPose, crop: ObjectPose) -> ObjectPose:
    off_x = max(backing.scaled_width - crop.scaled_width, 0.0)
    off_y = max(backing.scaled_height - crop.scaled_height, 0.0)
    region = ObjectPose(width=off_x, height=off_y, angle=backing.angle)
    return region.with_position_by_origin(crop.corners().tl, "right", "bottom")


def begin_backing_move(backing: ObjectPose, crop: ObjectPose, pointer: Point) -> BackingMoveDrag | None:
    """Capture the movable region and its boundaries.

    Returns ``None`` when the crop window has collapsed to a line or a point.
    """
    region = movable_region(backing, crop)
    c = crop.corners()
    try:
        crop_left = line(c.tl, c.bl)
        crop_top = line(c.tl, c.tr)
    except DegenerateLine as e:
        _logger.debug("backing move ignored: %s", e)
        return None
    delta = region.corners().tl - c.tl

    quadrant = rotation_quadrant(backing.angle)
    by_local = {
        "left": shift_parallel(crop_left, delta),
        "top": shift_parallel(crop_top, delta),
        "right": crop_left,
        "bottom": crop_top,
    }
    boundaries = {screen_side(side, quadrant): boundary for side, boundary in by_local.items()}
    _logger.debug(
        "backing move: region=%.2fx%.2f quadrant=%d",
        region.width,
        region.height,
        quadrant,
    )
    return BackingMoveDrag(
        region=region,
        boundaries=boundaries,
        quadrant=quadrant,
        start_position=Point(backing.left, backing.top),
        start_pointer=pointer,
    )


def _outside(value: float, size: float, low: str, high: str) -> str | None:
    if value < 0:
        return low
    if value > size:
        return high
    return None


def solve_backing_move(drag: BackingMoveDrag, pointer: Point) -> BackingMoveResult:
    desired = corresponding_point(pointer, drag.start_pointer, drag.start_position)
    region = drag.region
    local = region.to_local(desired)
    side_x = _outside(local.x, region.width, "left", "right")
    side_y = _outside(local.y, region.height, "top", "bottom")

    if side_x is None and side_y is None:
        return BackingMoveResult(desired.x, desired.y)

    if side_x is not None and side_y is not None:
        corner = region.corners()[side_y[0] + side_x[0]]
        return BackingMoveResult(corner.x, corner.y)

    boundary = drag.boundary(side_x or side_y)
    hit = intersection(perpendicular_line(desired, boundary), boundary)
    if hit is None:
        hit = pedal_point(desired, boundary)
    return BackingMoveResult(hit.x, hit.y)
