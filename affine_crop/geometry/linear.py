"""Plane line geometry used by the crop solvers.

Lines are kept as two defining points plus their direction vector. Slope and
intercept are exposed for callers that want the ``y = kx + b`` form, but every
projection is computed from the direction vector so that near-vertical edges
(a 90 degree rotation leaves ``cos`` at ~6e-17, not 0) stay well conditioned.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from affine_crop.errors import DegenerateLine

# Relative tolerance for treating two directions as parallel.
_PARALLEL_EPS = 1e-12


@dataclass(frozen=True, slots=True)
class Point:
    """2D coordinate in canvas space."""

    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = point"""
        return iter((self.x, self.y))

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def is_close(self, other: Point, tol: float = 1e-9) -> bool:
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol


@dataclass(frozen=True, slots=True)
class LinearFunction:
    """Line through ``start`` and ``end``.

    ``k`` is ``0`` for horizontal lines and ``+-inf`` for vertical ones; ``b`` is
    NaN for vertical lines. On an axis-aligned line only one of
    ``forward``/``inverse`` is meaningful, the other returns an infinity whose
    sign follows the direction from ``start`` to ``end``.
    """

    start: Point
    end: Point
    k: float = field(init=False, compare=False)
    b: float = field(init=False, compare=False)

    def __post_init__(self) -> None:
        dx = self.end.x - self.start.x
        dy = self.end.y - self.start.y
        if dx == 0 and dy == 0:
            raise DegenerateLine(self.start.x, self.start.y)
        if dx == 0:
            k = math.copysign(math.inf, dy)
            b = math.nan
        else:
            k = dy / dx
            b = self.start.y - k * self.start.x
        object.__setattr__(self, "k", k)
        object.__setattr__(self, "b", b)

    @property
    def dx(self) -> float:
        return self.end.x - self.start.x

    @property
    def dy(self) -> float:
        return self.end.y - self.start.y

    @property
    def is_vertical(self) -> bool:
        return self.dx == 0

    @property
    def is_horizontal(self) -> bool:
        return self.dy == 0

    def forward(self, x: float) -> float:
        """Return y for ``x``."""
        if self.is_vertical:
            return math.copysign(math.inf, self.dy)
        if self.is_horizontal:
            return self.start.y
        return self.start.y + (x - self.start.x) * self.dy / self.dx

    def inverse(self, y: float) -> float:
        """Return x for ``y``."""
        if self.is_horizontal:
            return math.copysign(math.inf, self.dx)
        if self.is_vertical:
            return self.start.x
        return self.start.x + (y - self.start.y) * self.dx / self.dy


def line(a: Point, b: Point) -> LinearFunction:
    return LinearFunction(a, b)


def point_distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def distance(point: Point, linear: LinearFunction) -> float:
    """Signed distance from ``point`` to ``linear``.

    The sign is the sign of the cross product ``(A - P) x (B - P)``, so two
    points on the same side of a line always get the same sign.
    """
    a, b = linear.start, linear.end
    cross = (a.x - point.x) * (b.y - point.y) - (a.y - point.y) * (b.x - point.x)
    return cross / math.hypot(linear.dx, linear.dy)


def intersection(line1: LinearFunction, line2: LinearFunction) -> Point | None:
    """Intersection of two lines, or ``None`` when they are parallel."""
    d1x, d1y = line1.dx, line1.dy
    d2x, d2y = line2.dx, line2.dy
    det = d1x * d2y - d1y * d2x
    if abs(det) <= _PARALLEL_EPS * math.hypot(d1x, d1y) * math.hypot(d2x, d2y):
        return None

    ox = line2.start.x - line1.start.x
    oy = line2.start.y - line1.start.y
    t = (ox * d2y - oy * d2x) / det
    x = line1.start.x + t * d1x
    y = line1.start.y + t * d1y

    # Axis-aligned lines pin one coordinate exactly.
    if line1.is_vertical:
        x = line1.inverse(0)
    elif line2.is_vertical:
        x = line2.inverse(0)
    if line1.is_horizontal:
        y = line1.forward(0)
    elif line2.is_horizontal:
        y = line2.forward(0)
    return Point(x, y)


def pedal_point(point: Point, linear: LinearFunction) -> Point:
    """Foot of the perpendicular from ``point`` onto ``linear``."""
    if linear.is_vertical:
        return Point(linear.inverse(0), point.y)
    if linear.is_horizontal:
        return Point(point.x, linear.forward(0))

    dx, dy = linear.dx, linear.dy
    t = ((point.x - linear.start.x) * dx + (point.y - linear.start.y) * dy) / (dx * dx + dy * dy)
    return Point(linear.start.x + t * dx, linear.start.y + t * dy)


def perpendicular_line(point: Point, linear: LinearFunction) -> LinearFunction:
    """Line through ``point`` perpendicular to ``linear``.

    Built from the normal vector rather than the pedal point, so it is defined
    even when ``point`` already lies on ``linear``.
    """
    return LinearFunction(point, Point(point.x - linear.dy, point.y + linear.dx))


def mirror(point: Point, linear: LinearFunction) -> Point:
    """Reflection of ``point`` across ``linear``."""
    foot = pedal_point(point, linear)
    return Point(2 * foot.x - point.x, 2 * foot.y - point.y)


def shift_parallel(linear: LinearFunction, offset: Point) -> LinearFunction:
    """Translate ``linear`` by the vector ``offset``; slope is kept, intercept moves."""
    return LinearFunction(linear.start + offset, linear.end + offset)


def corresponding_point(point: Point, start: Point, end: Point) -> Point:
    """Given that ``start`` maps to ``end``, return where ``point`` maps to."""
    return Point(point.x - start.x + end.x, point.y - start.y + end.y)


def rotate_point(origin: Point, point: Point, angle: float) -> Point:
    """Rotate ``point`` around ``origin`` by ``angle`` degrees (clockwise on screen)."""
    rad = math.radians(angle)
    cos, sin = math.cos(rad), math.sin(rad)
    px, py = point.x - origin.x, point.y - origin.y
    return Point(px * cos - py * sin + origin.x, px * sin + py * cos + origin.y)
