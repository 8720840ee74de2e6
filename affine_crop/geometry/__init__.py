"""Pure plane geometry: lines and 2D affine transforms.

Nothing in here knows about scene objects or Qt widgets; `affine` only touches
`QTransform` for conversion.
"""

from .affine import AffineTransform, Decomposition, compose, decompose, invert
from .linear import LinearFunction, Point, line

__all__ = [
    "AffineTransform",
    "Decomposition",
    "LinearFunction",
    "Point",
    "compose",
    "decompose",
    "invert",
    "line",
]
