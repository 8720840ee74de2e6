"""Scene objects and the editable-object variants the crop session works with."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, fields, replace

from affine_crop.geometry.affine import AffineTransform
from affine_crop.geometry.linear import Point
from affine_crop.model.pose import Corners, ObjectPose

CONTROL_NAMES = ("tl", "tr", "br", "bl", "ml", "mt", "mr", "mb", "mtr")

# Controls hidden while an object is being cropped: the side handles and the rotate handle.
CROPPING_HIDDEN_CONTROLS = ("ml", "mt", "mr", "mb", "mtr")


def _all_controls() -> dict[str, bool]:
    return {name: True for name in CONTROL_NAMES}


@dataclass(slots=True)
class Affordances:
    """Interaction locks and control visibility of one object."""

    lock_movement_x: bool = False
    lock_movement_y: bool = False
    lock_skewing_x: bool = False
    lock_skewing_y: bool = False
    lock_scaling_flip: bool = False
    centered_scaling: bool = False
    controls: dict[str, bool] = field(default_factory=_all_controls)

    def copy(self) -> Affordances:
        return replace(self, controls=dict(self.controls))

    def is_control_visible(self, name: str) -> bool:
        return bool(self.controls.get(name, False))

    def set_controls_visibility(self, **visibility: bool) -> None:
        self.controls.update(visibility)


@dataclass(eq=False)
class CropLink:
    """Ties a cropped image to its full backing image.

    ``relationship`` is the backing image's transform relative to the cropped
    image's transform, captured when a crop is confirmed.
    """

    backing: SceneObject
    relationship: AffineTransform | None = None


@dataclass(eq=False)
class SceneObject:
    """A renderable object on the canvas.

    Compared by identity so it can live in sets and weak collections; use
    :meth:`snapshot` for a value comparison.
    """

    kind: str = "image"
    pose: ObjectPose = field(default_factory=ObjectPose)
    name: str = ""
    opacity: float = 1.0
    crop_x: float = 0.0
    crop_y: float = 0.0
    min_scale_limit: float | None = None
    affordances: Affordances = field(default_factory=Affordances)
    link: CropLink | None = None
    children: list[SceneObject] = field(default_factory=list)

    def __repr__(self) -> str:
        label = self.name or hex(id(self))
        return f"<SceneObject {self.kind} {label} {self.pose}>"

    @property
    def is_image(self) -> bool:
        return self.kind == "image"

    def corners(self) -> Corners:
        return self.pose.corners()

    def to_local(self, point: Point, origin_x: str = "left", origin_y: str = "top") -> Point:
        return self.pose.to_local(point, origin_x, origin_y)

    def transform(self) -> AffineTransform:
        return self.pose.transform()

    def clone(self) -> SceneObject:
        """Copy the object's own state.

        The link (and so the backing image behind it) is shared, not copied:
        a clone of a cropped image points at the same backing image.
        """
        return SceneObject(
            kind=self.kind,
            pose=self.pose,
            name=self.name,
            opacity=self.opacity,
            crop_x=self.crop_x,
            crop_y=self.crop_y,
            min_scale_limit=self.min_scale_limit,
            affordances=self.affordances.copy(),
            link=self.link,
            children=list(self.children),
        )

    def snapshot(self) -> dict:
        """Plain-value view of the object, for equality checks."""
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name not in ("link", "children")}
        data["affordances"] = copy.deepcopy(self.affordances)
        data["link"] = None if self.link is None else (id(self.link.backing), self.link.relationship)
        data["children"] = [id(child) for child in self.children]
        return data


@dataclass(frozen=True, slots=True)
class Plain:
    """An image that has never been cropped."""

    image: SceneObject


@dataclass(frozen=True, slots=True)
class Cropped:
    """An image showing a window onto ``backing``."""

    image: SceneObject
    backing: SceneObject
    relationship: AffineTransform | None = None


EditableObject = Plain | Cropped


def classify(obj: SceneObject | None) -> EditableObject | None:
    """Return the editable variant of ``obj``, or ``None`` when it cannot be cropped."""
    if obj is None or not obj.is_image:
        return None
    if obj.link is None:
        return Plain(obj)
    return Cropped(obj, obj.link.backing, obj.link.relationship)
