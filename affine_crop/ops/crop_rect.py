from __future__ import annotations

from dataclasses import dataclass

from affine_crop.model.pose import CORNER_ORIGINS, ObjectPose


@dataclass(frozen=True, slots=True)
class CropRect:
    """Crop rectangle in the backing image's unscaled pixels, plus the scale to draw it at."""

    crop_x: float
    crop_y: float
    width: float
    height: float
    scale_x: float
    scale_y: float


def reference_corner(flip_x: bool, flip_y: bool) -> str:
    """Backing-image corner the crop offset is measured from.

    Flipping mirrors which on-screen corner holds the source image's origin.
    """
    if flip_x and flip_y:
        return "br"
    if flip_x:
        return "tr"
    if flip_y:
        return "bl"
    return "tl"


def project_crop_rect(target: ObjectPose, backing: ObjectPose) -> CropRect:
    """Express the crop window as a rectangle of the backing image.

    The crop window's scale is normalized to the backing image's scale, so the
    returned width/height are in the same unscaled units as ``crop_x``/``crop_y``.
    """
    corner = reference_corner(target.flip_x, target.flip_y)
    origin_x, origin_y = CORNER_ORIGINS[corner]
    local = target.to_local(backing.corners()[corner], origin_x, origin_y)
    return CropRect(
        crop_x=abs(local.x) / backing.scale_x,
        crop_y=abs(local.y) / backing.scale_y,
        width=target.width * target.scale_x / backing.scale_x,
        height=target.height * target.scale_y / backing.scale_y,
        scale_x=backing.scale_x,
        scale_y=backing.scale_y,
    )
