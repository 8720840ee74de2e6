"""Pose of a transformed rectangle and the coordinate helpers derived from it.

``left``/``top`` is the position of the unrotated top-left origin, the
convention of fabric-style renderers: the object is rotated around that point,
so after a rotation it is still where the top-left corner ends up. Corners and
the center ignore skew and flips; the transform matrix includes both.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from affine_crop.geometry.affine import AffineTransform, compose_matrix
from affine_crop.geometry.linear import Point

CORNER_NAMES = ("tl", "tr", "br", "bl")

# Corner -> (origin_x, origin_y) anchoring that corner.
CORNER_ORIGINS: dict[str, tuple[str, str]] = {
    "tl": ("left", "top"),
    "tr": ("right", "top"),
    "br": ("right", "bottom"),
    "bl": ("left", "bottom"),
}

OPPOSITE: dict[str, str] = {"tl": "br", "tr": "bl", "br": "tl", "bl": "tr"}

# Unit direction of each corner from the center, in the object's local frame.
CORNER_SIGNS: dict[str, tuple[int, int]] = {
    "tl": (-1, -1),
    "tr": (1, -1),
    "br": (1, 1),
    "bl": (-1, 1),
}

_ORIGIN_FACTOR = {"left": -0.5, "top": -0.5, "center": 0.0, "right": 0.5, "bottom": 0.5}


def _origin_factor(origin: str) -> float:
    try:
        return _ORIGIN_FACTOR[origin]
    except KeyError:
        raise ValueError(f"unknown origin: {origin!r}") from None


@dataclass(frozen=True, slots=True)
class Corners:
    tl: Point
    tr: Point
    br: Point
    bl: Point

    def __getitem__(self, name: str) -> Point:
        if name not in CORNER_ORIGINS:
            raise KeyError(name)
        return getattr(self, name)

    def __iter__(self):
        return iter((self.tl, self.tr, self.br, self.bl))


@dataclass(frozen=True, slots=True)
class ObjectPose:
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    angle: float = 0.0
    flip_x: bool = False
    flip_y: bool = False
    skew_x: float = 0.0
    skew_y: float = 0.0

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale_x

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale_y

    def _rotate(self, x: float, y: float) -> Point:
        rad = math.radians(self.angle)
        cos, sin = math.cos(rad), math.sin(rad)
        return Point(x * cos - y * sin, x * sin + y * cos)

    def _origin_offset(self, origin_x: str, origin_y: str) -> Point:
        """Offset of an origin from the center, unrotated."""
        return Point(
            _origin_factor(origin_x) * self.scaled_width,
            _origin_factor(origin_y) * self.scaled_height,
        )

    def center(self) -> Point:
        half = self._rotate(self.scaled_width / 2, self.scaled_height / 2)
        return Point(self.left + half.x, self.top + half.y)

    def corners(self) -> Corners:
        c = self.center()
        hw, hh = self.scaled_width / 2, self.scaled_height / 2
        points = {name: c + self._rotate(sx * hw, sy * hh) for name, (sx, sy) in CORNER_SIGNS.items()}
        return Corners(**points)

    def transform(self) -> AffineTransform:
        """Matrix mapping center-origin local coordinates to canvas space."""
        c = self.center()
        return compose_matrix(
            translate_x=c.x,
            translate_y=c.y,
            angle=self.angle,
            scale_x=self.scale_x,
            scale_y=self.scale_y,
            flip_x=self.flip_x,
            flip_y=self.flip_y,
            skew_x=self.skew_x,
            skew_y=self.skew_y,
        )

    def to_local(self, point: Point, origin_x: str = "left", origin_y: str = "top") -> Point:
        """Project a canvas point into the rotated frame anchored at the given origin.

        With the default ``("left", "top")`` the object's own area maps to
        ``[0, scaled_width] x [0, scaled_height]``.
        """
        c = self.center()
        rad = math.radians(-self.angle)
        cos, sin = math.cos(rad), math.sin(rad)
        px, py = point.x - c.x, point.y - c.y
        offset = self._origin_offset(origin_x, origin_y)
        return Point(px * cos - py * sin - offset.x, px * sin + py * cos - offset.y)

    def from_local(self, point: Point, origin_x: str = "left", origin_y: str = "top") -> Point:
        """Inverse of :meth:`to_local`."""
        offset = self._origin_offset(origin_x, origin_y)
        return self.center() + self._rotate(point.x + offset.x, point.y + offset.y)

    def point_at(self, origin_x: str, origin_y: str) -> Point:
        return self.from_local(Point(0.0, 0.0), origin_x, origin_y)

    def with_position_by_origin(self, point: Point, origin_x: str, origin_y: str) -> ObjectPose:
        """Return a copy moved so that the given origin lands on ``point``."""
        offset = self._origin_offset(origin_x, origin_y)
        center = point - self._rotate(offset.x, offset.y)
        half = self._rotate(self.scaled_width / 2, self.scaled_height / 2)
        return replace(self, left=center.x - half.x, top=center.y - half.y)

    def with_changes(self, **changes) -> ObjectPose:
        return replace(self, **changes)

    def contains(self, point: Point, tol: float = 1e-6) -> bool:
        local = self.to_local(point)
        return (
            -tol <= local.x <= self.scaled_width + tol
            and -tol <= local.y <= self.scaled_height + tol
        )
