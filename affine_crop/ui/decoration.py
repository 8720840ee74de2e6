"""Corner brackets and borders drawn over objects while they are being cropped."""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainter, QPen, QPolygonF

from affine_crop.logger import get_logger
from affine_crop.model.objects import SceneObject
from affine_crop.model.pose import CORNER_SIGNS
from affine_crop.settings_manager import CropOptions, SettingsManager

_logger = get_logger("decoration")


def corner_bracket_points(
    sign_x: int, sign_y: int, scaled_w: float, scaled_h: float, length: float
) -> list[tuple[float, float]]:
    """L-shaped bracket at a corner, relative to the corner, in the object's rotated frame.

    ``sign_x``/``sign_y`` give the corner's direction from the center; both arms
    point back into the object and are never longer than the object itself.
    """
    arm_w = min(scaled_w, length)
    arm_h = min(scaled_h, length)
    return [(-sign_x * arm_w, 0.0), (0.0, 0.0), (0.0, -sign_y * arm_h)]


class DecorationRenderer(ABC):
    """Draws crop affordances for the objects it is attached to."""

    def __init__(self) -> None:
        self._attached: weakref.WeakSet[SceneObject] = weakref.WeakSet()

    def attach(self, obj: SceneObject) -> None:
        self._attached.add(obj)

    def detach(self, obj: SceneObject) -> None:
        self._attached.discard(obj)

    def is_attached(self, obj: SceneObject) -> bool:
        return obj in self._attached

    @abstractmethod
    def render_corners(self, painter: QPainter, obj: SceneObject) -> None: ...

    @abstractmethod
    def render_border(self, painter: QPainter, obj: SceneObject) -> None: ...


class QtCornerDecoration(DecorationRenderer):
    def __init__(self, options: CropOptions | None = None, color: QColor | None = None) -> None:
        super().__init__()
        self.options = options or CropOptions()
        self.color = QColor(color) if color is not None else QColor(255, 255, 255)

    @classmethod
    def from_settings(cls, settings: SettingsManager) -> QtCornerDecoration:
        """Decoration using the saved corner size and color."""
        return cls(settings.crop_options(), settings.corner_color())

    def _corner_pen(self) -> QPen:
        pen = QPen(self.color, self.options.corner_width)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        return pen

    def render_corners(self, painter: QPainter, obj: SceneObject) -> None:
        if not self.is_attached(obj):
            return
        pose = obj.pose
        corners = pose.corners()
        pen = self._corner_pen()
        for name, (sign_x, sign_y) in CORNER_SIGNS.items():
            if not obj.affordances.is_control_visible(name):
                continue
            points = corner_bracket_points(
                sign_x, sign_y, pose.scaled_width, pose.scaled_height, self.options.corner_length
            )
            corner = corners[name]
            painter.save()
            try:
                painter.translate(corner.x, corner.y)
                painter.rotate(pose.angle)
                painter.setPen(pen)
                painter.drawPolyline(QPolygonF([QPointF(x, y) for x, y in points]))
            finally:
                painter.restore()

    def render_border(self, painter: QPainter, obj: SceneObject) -> None:
        polygon = QPolygonF([QPointF(p.x, p.y) for p in obj.corners()])
        painter.save()
        try:
            border = QColor(self.color)
            border.setAlphaF(obj.opacity)
            painter.setPen(QPen(border, 1, Qt.PenStyle.SolidLine))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawPolygon(polygon)
        finally:
            painter.restore()
