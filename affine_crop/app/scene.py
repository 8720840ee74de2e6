"""In-memory reference scene: object stack, active object and the event bus.

Hosts with their own renderer can mirror these signals instead; the crop
session only talks to a scene through them and the z-order helpers below.
"""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QObject, Signal

from affine_crop.geometry.linear import Point
from affine_crop.logger import get_logger
from affine_crop.model.objects import SceneObject

_logger = get_logger("scene")


@dataclass(frozen=True, slots=True)
class PointerEvent:
    pointer: Point
    target: SceneObject | None = None
    # Corner handle under the pointer (tl/tr/br/bl), None for the object body.
    corner: str | None = None
    primary: bool = True


class Scene(QObject):
    mouseDown = Signal(object)
    mouseMove = Signal(object)
    mouseUp = Signal(object)
    doubleClicked = Signal(object)

    # Payload: the transformed SceneObject (or multi-selection group).
    objectModified = Signal(object)
    objectRotating = Signal(object)
    objectScaling = Signal(object)
    objectFlipped = Signal(object)
    selectionCleared = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._objects: list[SceneObject] = []
        self._active: SceneObject | None = None
        self.centered_scaling = False

        # Pointer capture between press and release
        self._pressed: PointerEvent | None = None

        self._object_signals = {
            "modified": self.objectModified,
            "rotating": self.objectRotating,
            "scaling": self.objectScaling,
            "flipped": self.objectFlipped,
        }

    # ---- object stack ----
    def objects(self) -> list[SceneObject]:
        return list(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, obj: object) -> bool:
        return self.index_of(obj) >= 0

    def add(self, obj: SceneObject, index: int | None = None) -> None:
        if obj in self:
            return
        if index is None:
            self._objects.append(obj)
        else:
            self._objects.insert(max(0, min(index, len(self._objects))), obj)

    def remove(self, obj: SceneObject) -> bool:
        i = self.index_of(obj)
        if i < 0:
            return False
        del self._objects[i]
        if self._active is obj:
            self._active = None
        return True

    def index_of(self, obj: object) -> int:
        """Stack index of ``obj`` (by identity), -1 when it is not in the scene."""
        for i, candidate in enumerate(self._objects):
            if candidate is obj:
                return i
        return -1

    def move_to_index(self, obj: SceneObject, index: int) -> None:
        if self.remove_from_stack(obj):
            self._objects.insert(max(0, min(index, len(self._objects))), obj)

    def bring_to_front(self, obj: SceneObject) -> None:
        if self.remove_from_stack(obj):
            self._objects.append(obj)

    def remove_from_stack(self, obj: SceneObject) -> bool:
        """Take ``obj`` out of the stack without touching the selection."""
        i = self.index_of(obj)
        if i < 0:
            return False
        del self._objects[i]
        return True

    # ---- selection ----
    @property
    def active_object(self) -> SceneObject | None:
        return self._active

    def set_active_object(self, obj: SceneObject | None) -> None:
        if obj is not None and obj not in self and obj.kind != "group":
            _logger.debug("set_active_object: %r is not in the scene", obj)
            return
        self._active = obj

    def discard_active_object(self) -> None:
        previous = self._active
        self._active = None
        if previous is not None:
            self.selectionCleared.emit(previous)

    def object_at(self, pointer: Point) -> SceneObject | None:
        """Topmost object whose area contains ``pointer``."""
        for obj in reversed(self._objects):
            if obj.pose.contains(pointer):
                return obj
        return None

    # ---- object transforms ----
    def modify(self, obj: SceneObject, event: str = "modified", **changes) -> None:
        """Change ``obj``'s pose and announce it on the matching object signal.

        ``min_scale_limit`` is honored the way an interactive scale would be.
        """
        signal = self._object_signals[event]
        limit = obj.min_scale_limit
        if limit is not None:
            for key in ("scale_x", "scale_y"):
                if key in changes and changes[key] < limit:
                    changes[key] = limit
        obj.pose = obj.pose.with_changes(**changes)
        if obj.kind == "group":
            # Group transforms are applied to the children by the host.
            _logger.debug("modify on group with %d children", len(obj.children))
        signal.emit(obj)

    # ---- pointer input ----
    def press(
        self,
        pointer: Point,
        *,
        target: SceneObject | None = None,
        corner: str | None = None,
        primary: bool = True,
    ) -> PointerEvent:
        if target is None:
            target = self.object_at(pointer)
        event = PointerEvent(pointer, target, corner, primary)
        self._pressed = event
        self.mouseDown.emit(event)
        return event

    def move(self, pointer: Point) -> PointerEvent:
        pressed = self._pressed
        if pressed is None:
            event = PointerEvent(pointer, self.object_at(pointer))
        else:
            event = PointerEvent(pointer, pressed.target, pressed.corner, pressed.primary)
        self.mouseMove.emit(event)
        return event

    def release(self, pointer: Point) -> PointerEvent:
        pressed = self._pressed
        self._pressed = None
        if pressed is None:
            event = PointerEvent(pointer, self.object_at(pointer))
        else:
            event = PointerEvent(pointer, pressed.target, pressed.corner, pressed.primary)
        self.mouseUp.emit(event)
        return event

    def drag(
        self,
        start: Point,
        end: Point,
        *,
        target: SceneObject | None = None,
        corner: str | None = None,
        steps: int = 1,
    ) -> None:
        """Press at ``start``, move to ``end`` in ``steps`` even moves, release."""
        self.press(start, target=target, corner=corner)
        for i in range(1, max(steps, 1) + 1):
            t = i / max(steps, 1)
            self.move(Point(start.x + (end.x - start.x) * t, start.y + (end.y - start.y) * t))
        self.release(end)

    def double_click(self, pointer: Point, *, target: SceneObject | None = None) -> PointerEvent:
        if target is None:
            target = self.object_at(pointer)
        event = PointerEvent(pointer, target)
        self.doubleClicked.emit(event)
        return event
