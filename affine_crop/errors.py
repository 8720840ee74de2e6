"""Exceptions raised by the crop engine.

Interactive misuse (no active object, wrong object kind, a drag-move without a
drag-start) is never raised: the session treats it as a silent no-op. Only
math errors that would corrupt positioning surface as exceptions.
"""

from __future__ import annotations


class CropEngineError(Exception):
    """Base class for crop engine errors."""


class SingularTransform(CropEngineError, ValueError):
    """An affine transform with a (near) zero determinant cannot be inverted."""

    def __init__(self, determinant: float) -> None:
        super().__init__(f"transform is not invertible (det={determinant:.3g})")
        self.determinant = determinant


class DegenerateLine(CropEngineError, ValueError):
    """A line was requested through two coincident points."""

    def __init__(self, x: float, y: float) -> None:
        super().__init__(f"cannot build a line through a single point ({x:g}, {y:g})")
        self.x = x
        self.y = y
