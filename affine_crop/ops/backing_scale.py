"""Scale the backing image by a corner without uncovering the crop window.

The limits are captured once when the drag starts: the smallest scale per
axis that still reaches from the pinned far edge to the crop window. On every
tick a proposal below a limit is clamped uniformly, and the dragged corner is
put back where the diagonal meets the crop window's edge, so the pinned side
never visibly moves.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from affine_crop.errors import DegenerateLine
from affine_crop.geometry.linear import LinearFunction, Point, distance, intersection, line
from affine_crop.logger import get_logger
from affine_crop.model.pose import CORNER_ORIGINS, CORNER_SIGNS, OPPOSITE, Corners, ObjectPose

_logger = get_logger("backing_scale")


@dataclass(frozen=True, slots=True)
class BackingScaleDrag:
    corner: str
    min_scale_x: float
    min_scale_y: float
    # (tl-br, tr-bl) of the backing image at drag start
    diagonals: tuple[LinearFunction, LinearFunction]
    # scale_y / scale_x at drag start
    radio: float
    pinned: Point
    crop_corners: Corners
    # Crop-window edges on the dragged side: (vertical edge, horizontal edge)
    crop_edges: tuple[LinearFunction, LinearFunction]
    start_pose: ObjectPose

    @property
    def pinned_corner(self) -> str:
        return OPPOSITE[self.corner]

    @property
    def diagonal(self) -> LinearFunction:
        """The diagonal the dragged corner travels along."""
        return self.diagonals[0] if self.corner in ("tl", "br") else self.diagonals[1]


def minimum_scale(backing: ObjectPose, crop: ObjectPose, corner: str) -> tuple[float, float]:
    """Smallest (scale_x, scale_y) that keeps ``crop`` covered when ``corner`` is dragged."""
    b = backing.corners()
    crop_corner = crop.corners()[corner]
    sign_x, sign_y = CORNER_SIGNS[corner]
    far_x = line(b.tr, b.br) if sign_x < 0 else line(b.tl, b.bl)
    far_y = line(b.bl, b.br) if sign_y < 0 else line(b.tl, b.tr)
    min_x = abs(distance(crop_corner, far_x)) / backing.width if backing.width else 0.0
    min_y = abs(distance(crop_corner, far_y)) / backing.height if backing.height else 0.0
    return min_x, min_y


def begin_backing_scale(backing: ObjectPose, crop: ObjectPose, corner: str) -> BackingScaleDrag | None:
    """Capture the scale limits for a corner drag.

    Returns ``None`` when the crop window has collapsed to a line or a point.
    """
    if corner not in CORNER_SIGNS:
        raise ValueError(f"not a corner handle: {corner!r}")
    crop_corners = crop.corners()
    try:
        crop_edges = _crop_edges(crop_corners, corner)
    except DegenerateLine as e:
        _logger.debug("backing scale ignored: %s", e)
        return None
    min_x, min_y = minimum_scale(backing, crop, corner)
    c = backing.corners()
    drag = BackingScaleDrag(
        corner=corner,
        min_scale_x=min_x,
        min_scale_y=min_y,
        diagonals=(line(c.tl, c.br), line(c.tr, c.bl)),
        radio=backing.scale_y / backing.scale_x,
        pinned=c[OPPOSITE[corner]],
        crop_corners=crop_corners,
        crop_edges=crop_edges,
        start_pose=backing,
    )
    _logger.debug("backing scale %s: min=(%.4f, %.4f) radio=%.4f", corner, min_x, min_y, drag.radio)
    return drag


def propose_backing_scale(pose: ObjectPose, drag: BackingScaleDrag, pointer: Point) -> ObjectPose:
    """Scale proposed by a uniform corner drag, anchored at the pinned corner.

    The pointer's extent from the pinned corner, summed over both axes, is
    compared with the start size; the ratio scales both axes alike.
    """
    start = drag.start_pose
    sign_x, sign_y = CORNER_SIGNS[drag.corner]
    local = start.to_local(pointer, *CORNER_ORIGINS[drag.pinned_corner])
    reach = max(sign_x * local.x, 0.0) + max(sign_y * local.y, 0.0)
    extent = start.scaled_width + start.scaled_height
    ratio = reach / extent if extent else 1.0
    return replace(pose, scale_x=start.scale_x * ratio, scale_y=start.scale_y * ratio)


def _crop_edges(c: Corners, corner: str) -> tuple[LinearFunction, LinearFunction]:
    sign_x, sign_y = CORNER_SIGNS[corner]
    vertical = line(c.tl, c.bl) if sign_x < 0 else line(c.tr, c.br)
    horizontal = line(c.tl, c.tr) if sign_y < 0 else line(c.bl, c.br)
    return vertical, horizontal


def solve_backing_scale(drag: BackingScaleDrag, proposed: ObjectPose) -> ObjectPose:
    """Clamp ``proposed`` so it still covers the crop window, and place it.

    Returns the backing-image pose with the final scale; its position keeps the
    pinned corner where it was at drag start.
    """
    scale_x, scale_y = proposed.scale_x, proposed.scale_y
    vertical, horizontal = drag.crop_edges
    edge: LinearFunction | None = None

    if scale_x <= drag.min_scale_x:
        scale_x = drag.min_scale_x
        scale_y = drag.min_scale_x * drag.radio
        edge = vertical
    if scale_y <= drag.min_scale_y:
        scale_x = drag.min_scale_y / drag.radio
        scale_y = drag.min_scale_y
        edge = horizontal

    pose = replace(proposed, scale_x=scale_x, scale_y=scale_y)
    if edge is not None:
        hit = intersection(drag.diagonal, edge)
        if hit is not None:
            _logger.debug("backing scale clamped to (%.4f, %.4f)", scale_x, scale_y)
            return pose.with_position_by_origin(hit, *CORNER_ORIGINS[drag.corner])
        _logger.debug("diagonal parallel to crop edge, pinning instead")
    return pose.with_position_by_origin(drag.pinned, *CORNER_ORIGINS[drag.pinned_corner])
