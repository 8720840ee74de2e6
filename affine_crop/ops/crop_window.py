"""Resize the crop window by one corner while it stays inside the backing image.

The pointer is classified per axis against two boundaries, both expressed in
the backing image's rotated frame:

- the backing image edge on the dragged side (OUTSIDE when the pointer is past it);
- the minimum-size line, the fixed corner shifted inward by ``min_width`` /
  ``min_height`` (PAST when the pointer has crossed it).

That gives nine regions. Each one picks its own construction for the new
dragged corner, so the window never leaves the backing image and never shrinks
below the minimum size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from affine_crop.geometry.linear import (
    LinearFunction,
    Point,
    intersection,
    line,
    pedal_point,
    perpendicular_line,
)
from affine_crop.logger import get_logger
from affine_crop.model.pose import CORNER_SIGNS, OPPOSITE, Corners, ObjectPose

_logger = get_logger("crop_window")

# Smallest side a crop window can be dragged down to when no minimum size is set.
MIN_EXTENT = 1.0


class AxisState(Enum):
    INSIDE = "inside"
    OUTSIDE = "outside"
    PAST = "past"


@dataclass(frozen=True, slots=True)
class CropWindowDrag:
    """Crop-window corners captured when the corner drag started."""

    corner: str
    corners: Corners

    @property
    def fixed_corner(self) -> Point:
        return self.corners[OPPOSITE[self.corner]]


@dataclass(frozen=True, slots=True)
class CropWindowResult:
    left: float
    top: float
    width: float
    height: float
    flip_x: bool
    flip_y: bool
    scale_x: float = 1.0
    scale_y: float = 1.0


def begin_crop_window_drag(pose: ObjectPose, corner: str) -> CropWindowDrag:
    if corner not in CORNER_SIGNS:
        raise ValueError(f"not a corner handle: {corner!r}")
    return CropWindowDrag(corner=corner, corners=pose.corners())


def _classify(inward: float, limit: float) -> AxisState:
    # PAST wins: when the window already touches the edge both tests hold.
    if inward >= limit:
        return AxisState.PAST
    if inward <= 0:
        return AxisState.OUTSIDE
    return AxisState.INSIDE


def _backing_edges(backing: ObjectPose, sign_x: int, sign_y: int) -> tuple[LinearFunction, LinearFunction]:
    """Backing-image edges on the dragged side: (vertical edge, horizontal edge)."""
    c = backing.corners()
    x_edge = line(c.tl, c.bl) if sign_x < 0 else line(c.tr, c.br)
    y_edge = line(c.tl, c.tr) if sign_y < 0 else line(c.bl, c.br)
    return x_edge, y_edge


def _anchor(
    state_x: AxisState,
    state_y: AxisState,
    pointer: Point,
    edges: tuple[LinearFunction, LinearFunction],
    min_lines: tuple[LinearFunction, LinearFunction],
    backing_corner: Point,
    min_corner: Point,
) -> Point:
    x_edge, y_edge = edges
    min_x_line, min_y_line = min_lines
    inside, outside, past = AxisState.INSIDE, AxisState.OUTSIDE, AxisState.PAST

    if state_x is inside and state_y is inside:
        return pointer
    if state_x is outside and state_y is outside:
        return backing_corner
    if state_x is past and state_y is past:
        return min_corner
    if state_y is inside:
        return pedal_point(pointer, x_edge if state_x is outside else min_x_line)
    if state_x is inside:
        return pedal_point(pointer, y_edge if state_y is outside else min_y_line)

    # Mixed: one axis beyond the backing edge, the other beyond the minimum size.
    if state_x is outside:
        hit, fallback = intersection(x_edge, min_y_line), min_y_line
    else:
        hit, fallback = intersection(min_x_line, y_edge), min_x_line
    if hit is None:
        _logger.debug("parallel boundaries in mixed region, projecting instead")
        return pedal_point(pointer, fallback)
    return hit


def solve_crop_window(
    drag: CropWindowDrag,
    pointer: Point,
    backing: ObjectPose,
    min_width: float = 0.0,
    min_height: float = 0.0,
) -> CropWindowResult:
    """Compute the crop window's new geometry for a corner drag.

    The crop window is aligned with ``backing``; its drag-start corners come
    from ``drag``. The result is in canvas units with a unit scale, and its
    flips follow the backing image. Sides never drop below ``MIN_EXTENT``.
    """
    min_width = max(min_width, MIN_EXTENT)
    min_height = max(min_height, MIN_EXTENT)
    sign_x, sign_y = CORNER_SIGNS[drag.corner]
    bw, bh = backing.scaled_width, backing.scaled_height

    fixed = backing.to_local(drag.fixed_corner)
    local = backing.to_local(pointer)

    # Inward distance from the dragged-side edge, per axis.
    if sign_x < 0:
        inward_x, limit_x = local.x, fixed.x - min_width
    else:
        inward_x, limit_x = bw - local.x, (bw - fixed.x) - min_width
    if sign_y < 0:
        inward_y, limit_y = local.y, fixed.y - min_height
    else:
        inward_y, limit_y = bh - local.y, (bh - fixed.y) - min_height
    state_x = _classify(inward_x, limit_x)
    state_y = _classify(inward_y, limit_y)

    min_corner = backing.from_local(Point(fixed.x + sign_x * min_width, fixed.y + sign_y * min_height))
    edges = _backing_edges(backing, sign_x, sign_y)
    x_edge, y_edge = edges
    min_lines = (perpendicular_line(min_corner, y_edge), perpendicular_line(min_corner, x_edge))
    backing_corner = backing.corners()[drag.corner]

    anchor = _anchor(state_x, state_y, pointer, edges, min_lines, backing_corner, min_corner)
    a = backing.to_local(anchor)

    width = max(abs(fixed.x - a.x), min_width)
    height = max(abs(fixed.y - a.y), min_height)
    tl_local = Point(
        fixed.x - width if sign_x < 0 else fixed.x,
        fixed.y - height if sign_y < 0 else fixed.y,
    )
    tl = backing.from_local(tl_local)

    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug(
            "crop window %s: regions=(%s, %s) size=%.2fx%.2f",
            drag.corner,
            state_x.value,
            state_y.value,
            width,
            height,
        )

    return CropWindowResult(
        left=tl.x,
        top=tl.y,
        width=width,
        height=height,
        flip_x=backing.flip_x,
        flip_y=backing.flip_y,
    )
