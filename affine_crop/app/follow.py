"""Keep a confirmed crop's hidden backing image aligned with the visible crop window.

``bind_follow`` snapshots the backing image's transform relative to the crop
window; ``update_minions`` replays that relationship whenever the crop window
has been moved, rotated, scaled or flipped.
"""

from __future__ import annotations

from affine_crop.geometry.affine import (
    AffineTransform,
    apply_flip_correction,
    compose,
    decompose,
    invert,
)
from affine_crop.geometry.linear import Point
from affine_crop.logger import get_logger
from affine_crop.model.objects import SceneObject

_logger = get_logger("follow")


def bind_follow(target: SceneObject, *, cropping: bool = False) -> AffineTransform | None:
    """Store ``invert(target) * backing`` on the target's crop link.

    A no-op (returning ``None``) while the target is being cropped or when it
    has no backing image.
    """
    if cropping or target.link is None:
        _logger.debug("bind_follow skipped: cropping=%s linked=%s", cropping, target.link is not None)
        return None
    backing = target.link.backing
    relationship = compose(invert(target.transform()), backing.transform())
    target.link.relationship = relationship
    return relationship


def update_minions(target: SceneObject, *, cropping: bool = False) -> bool:
    """Re-pose the backing image from the stored relationship.

    Returns ``True`` when the backing image was moved.
    """
    link = target.link
    if cropping or link is None or link.relationship is None:
        return False

    combined = compose(target.transform(), link.relationship)
    parts = decompose(combined)
    parts, flip_x, flip_y = apply_flip_correction(parts, target.pose.flip_x, target.pose.flip_y)

    backing = link.backing
    pose = backing.pose.with_changes(
        scale_x=parts.scale_x,
        scale_y=parts.scale_y,
        skew_x=parts.skew_x,
        skew_y=parts.skew_y,
        angle=parts.angle,
        flip_x=flip_x,
        flip_y=flip_y,
    )
    backing.pose = pose.with_position_by_origin(Point(parts.translate_x, parts.translate_y), "center", "center")
    return True


def follow_targets(obj: SceneObject | None) -> list[SceneObject]:
    """Objects whose backing image should follow ``obj``.

    For a multi-selection group that is every child carrying a relationship;
    group children keep absolute poses.
    """
    if obj is None:
        return []
    if obj.kind == "group":
        return [
            child
            for child in obj.children
            if child.is_image and child.link is not None and child.link.relationship is not None
        ]
    if obj.is_image and obj.link is not None:
        return [obj]
    return []
