"""2D affine transforms in the six-number ``(a, b, c, d, e, f)`` form.

A point maps as ``x' = a*x + c*y + e`` and ``y' = b*x + d*y + f``, the same
layout as ``QTransform(m11, m12, m21, m22, dx, dy)``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from PySide6.QtGui import QTransform

from affine_crop.errors import SingularTransform
from affine_crop.geometry.linear import Point
from affine_crop.logger import get_logger

_logger = get_logger("affine")

_SINGULAR_EPS = 1e-12


@dataclass(frozen=True, slots=True)
class AffineTransform:
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    def __iter__(self):
        return iter((self.a, self.b, self.c, self.d, self.e, self.f))

    def __matmul__(self, other: AffineTransform) -> AffineTransform:
        return compose(self, other)

    @classmethod
    def identity(cls) -> AffineTransform:
        return cls()

    @classmethod
    def translation(cls, x: float, y: float) -> AffineTransform:
        return cls(e=x, f=y)

    @property
    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def apply(self, point: Point) -> Point:
        return transform_point(point, self)

    def is_close(self, other: AffineTransform, tol: float = 1e-9) -> bool:
        return all(abs(x - y) <= tol for x, y in zip(self, other))


@dataclass(frozen=True, slots=True)
class Decomposition:
    """Result of :func:`decompose`. Angles are in degrees."""

    scale_x: float
    scale_y: float
    skew_x: float
    skew_y: float
    angle: float
    translate_x: float
    translate_y: float


def normalize_angle(angle: float) -> float:
    """Map ``angle`` into ``[0, 360)``."""
    value = angle % 360.0
    # -1e-15 % 360 rounds to 360.0
    return 0.0 if value >= 360.0 else value


def compose(first: AffineTransform, second: AffineTransform) -> AffineTransform:
    """Matrix product ``first * second``: ``second`` is applied, then ``first``."""
    a1, b1, c1, d1, e1, f1 = first
    a2, b2, c2, d2, e2, f2 = second
    return AffineTransform(
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def invert(transform: AffineTransform) -> AffineTransform:
    """Inverse of ``transform``.

    Raises:
        SingularTransform: if the determinant is (close to) zero.
    """
    a, b, c, d, e, f = transform
    det = a * d - b * c
    if abs(det) < _SINGULAR_EPS:
        raise SingularTransform(det)
    return AffineTransform(
        d / det,
        -b / det,
        -c / det,
        a / det,
        (c * f - d * e) / det,
        (b * e - a * f) / det,
    )


def decompose(transform: AffineTransform) -> Decomposition:
    """QR-style decomposition into translation, rotation, scale and horizontal skew.

    ``scale_x`` is always non-negative; a mirrored transform comes back with a
    negative ``scale_y``. See :func:`apply_flip_correction`.
    """
    a, b, c, d, e, f = transform
    denom = a * a + b * b
    scale_x = math.sqrt(denom)
    if scale_x == 0:
        return Decomposition(0.0, 0.0, 0.0, 0.0, 0.0, e, f)
    scale_y = (a * d - c * b) / scale_x
    skew_x = math.degrees(math.atan2(a * c + b * d, denom))
    angle = normalize_angle(math.degrees(math.atan2(b, a)))
    return Decomposition(scale_x, scale_y, skew_x, 0.0, angle, e, f)


def apply_flip_correction(
    decomposition: Decomposition, flip_x: bool, flip_y: bool
) -> tuple[Decomposition, bool, bool]:
    """Reconcile decomposed scale signs with the flip flags the caller expects.

    A negative scale is first turned into a flip flag. If both flags then
    disagree with ``(flip_x, flip_y)``, the transform is re-expressed as the
    expected flips rotated by -180 degrees, which is the same matrix. This keeps
    a mirrored backing image right-side-up after a follow update.
    """
    scale_x, scale_y = decomposition.scale_x, decomposition.scale_y
    got_x = got_y = False
    if scale_x < 0:
        scale_x, got_x = -scale_x, True
    if scale_y < 0:
        scale_y, got_y = -scale_y, True
    angle = decomposition.angle

    if got_x != flip_x and got_y != flip_y:
        got_x, got_y = flip_x, flip_y
        angle = normalize_angle(angle - 180.0)
    elif (got_x, got_y) != (flip_x, flip_y):
        # Opposite handedness: a rotation cannot reconcile it, keep what the matrix says.
        _logger.debug("flip parity differs: matrix=(%s, %s) expected=(%s, %s)", got_x, got_y, flip_x, flip_y)

    corrected = replace(decomposition, scale_x=scale_x, scale_y=scale_y, angle=angle)
    return corrected, got_x, got_y


def compose_matrix(
    *,
    translate_x: float = 0.0,
    translate_y: float = 0.0,
    angle: float = 0.0,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
    flip_x: bool = False,
    flip_y: bool = False,
    skew_x: float = 0.0,
    skew_y: float = 0.0,
) -> AffineTransform:
    """Build ``translate * rotate * scale(flip) * skewX * skewY``."""
    matrix = AffineTransform.translation(translate_x, translate_y)
    if angle:
        rad = math.radians(angle)
        cos, sin = math.cos(rad), math.sin(rad)
        matrix = compose(matrix, AffineTransform(cos, sin, -sin, cos))
    dims = AffineTransform(-scale_x if flip_x else scale_x, 0.0, 0.0, -scale_y if flip_y else scale_y)
    if skew_x:
        dims = compose(dims, AffineTransform(1.0, 0.0, math.tan(math.radians(skew_x)), 1.0))
    if skew_y:
        dims = compose(dims, AffineTransform(1.0, math.tan(math.radians(skew_y)), 0.0, 1.0))
    return compose(matrix, dims)


def transform_point(point: Point, transform: AffineTransform) -> Point:
    a, b, c, d, e, f = transform
    return Point(a * point.x + c * point.y + e, b * point.x + d * point.y + f)


def to_qtransform(transform: AffineTransform) -> QTransform:
    a, b, c, d, e, f = transform
    return QTransform(a, b, c, d, e, f)


def from_qtransform(qt: QTransform) -> AffineTransform:
    if not qt.isAffine():
        _logger.debug("dropping projective terms of %s", qt)
    return AffineTransform(qt.m11(), qt.m12(), qt.m21(), qt.m22(), qt.dx(), qt.dy())
