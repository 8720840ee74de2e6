"""Object poses and the scene objects the crop session edits."""

from .objects import Affordances, CropLink, Cropped, EditableObject, Plain, SceneObject, classify
from .pose import CORNER_ORIGINS, OPPOSITE, Corners, ObjectPose

__all__ = [
    "CORNER_ORIGINS",
    "OPPOSITE",
    "Affordances",
    "Corners",
    "CropLink",
    "Cropped",
    "EditableObject",
    "ObjectPose",
    "Plain",
    "SceneObject",
    "classify",
]
