"""Constrained affine crop-editing engine.

Keep this module lightweight: it only re-exports the pure geometry and model
types. Import the Qt-bound session directly:
    - `from affine_crop.app.session import CropSession`
"""

from .errors import CropEngineError, DegenerateLine, SingularTransform
from .geometry import AffineTransform, LinearFunction, Point
from .model import ObjectPose, SceneObject

__all__ = [
    "AffineTransform",
    "CropEngineError",
    "DegenerateLine",
    "LinearFunction",
    "ObjectPose",
    "Point",
    "SceneObject",
    "SingularTransform",
]
