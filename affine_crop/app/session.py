"""Crop session state machine.

One session serves one scene. It subscribes to the scene's signals once and
routes each gesture to a solver:

- a corner of the crop window -> crop-window resize;
- a corner of the backing image -> backing-image scale;
- the body of either -> backing-image pan.

Outside a session it keeps confirmed crops in sync with their backing images.
"""

from __future__ import annotations

import weakref
from enum import Enum

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QPainter

from affine_crop.app.follow import bind_follow, follow_targets, update_minions
from affine_crop.app.scene import PointerEvent, Scene
from affine_crop.logger import get_logger
from affine_crop.model.objects import (
    CROPPING_HIDDEN_CONTROLS,
    Affordances,
    CropLink,
    Cropped,
    SceneObject,
    classify,
)
from affine_crop.model.pose import CORNER_SIGNS
from affine_crop.ops.backing_move import BackingMoveDrag, begin_backing_move, solve_backing_move
from affine_crop.ops.backing_scale import (
    BackingScaleDrag,
    begin_backing_scale,
    propose_backing_scale,
    solve_backing_scale,
)
from affine_crop.ops.crop_rect import project_crop_rect
from affine_crop.ops.crop_window import CropWindowDrag, begin_crop_window_drag, solve_crop_window
from affine_crop.settings_manager import CropOptions
from affine_crop.ui.decoration import DecorationRenderer

_logger = get_logger("session")

GestureContext = CropWindowDrag | BackingScaleDrag | BackingMoveDrag


class Phase(str, Enum):
    IDLE = "idle"
    CROPPING = "cropping"


class CropSession(QObject):
    phaseChanged = Signal(str)
    cropConfirmed = Signal(object)
    cropCancelled = Signal(object)

    def __init__(
        self,
        scene: Scene,
        options: CropOptions | None = None,
        decoration: DecorationRenderer | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._scene = scene
        self.options = options or CropOptions()
        self.decoration = decoration

        self._phase = Phase.IDLE
        self._target: SceneObject | None = None
        self._origin: SceneObject | None = None
        self._target_backup: SceneObject | None = None
        self._origin_backup: CropLink | None = None
        self._z_index = -1

        self._gesture: GestureContext | None = None
        self._pending_cancel = False

        # Restored on confirm
        self._saved_affordances: Affordances | None = None
        self._saved_centered_scaling = False

        # Objects the decoration has been installed on
        self._bound: weakref.WeakSet[SceneObject] = weakref.WeakSet()

        self._connections = [
            (scene.mouseDown, self._on_mouse_down),
            (scene.mouseMove, self._on_mouse_move),
            (scene.mouseUp, self._on_mouse_up),
            (scene.doubleClicked, self._on_double_click),
            (scene.objectModified, self._on_object_changed),
            (scene.objectRotating, self._on_object_changed),
            (scene.objectScaling, self._on_object_changed),
            (scene.objectFlipped, self._on_object_changed),
            (scene.selectionCleared, self._on_object_changed),
        ]
        for signal, slot in self._connections:
            signal.connect(slot)

    # ---- read-only state ----
    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_cropping(self) -> bool:
        return self._phase is Phase.CROPPING

    @property
    def target(self) -> SceneObject | None:
        return self._target

    @property
    def origin(self) -> SceneObject | None:
        return self._origin

    @property
    def target_backup(self) -> SceneObject | None:
        return self._target_backup

    @property
    def origin_backup(self) -> CropLink | None:
        return self._origin_backup

    @property
    def z_index(self) -> int:
        return self._z_index

    @property
    def gesture(self) -> GestureContext | None:
        return self._gesture

    @property
    def cancel_pending(self) -> bool:
        return self._pending_cancel

    def _set_phase(self, phase: Phase) -> None:
        if phase is self._phase:
            return
        self._phase = phase
        _logger.debug("phase -> %s", phase.value)
        self.phaseChanged.emit(phase.value)

    # ---- transitions ----
    def enter_cropping(self, obj: SceneObject | None = None) -> bool:
        """Start cropping ``obj`` (default: the scene's active object)."""
        if self.is_cropping:
            _logger.debug("enter_cropping ignored: a session is already active")
            return False
        scene = self._scene
        if obj is None:
            obj = scene.active_object
        variant = classify(obj)
        if variant is None or obj not in scene:
            _logger.debug("enter_cropping ignored: %r is not a croppable image", obj)
            return False

        if isinstance(variant, Cropped):
            origin = variant.backing.clone()
        else:
            origin = obj.clone()
            origin.crop_x = origin.crop_y = 0.0
        origin.link = None
        origin.opacity = self.options.origin_opacity
        origin.name = f"{obj.name}:origin" if obj.name else "origin"

        self._target_backup = obj.clone()
        self._origin_backup = obj.link
        self._z_index = scene.index_of(obj)
        obj.link = CropLink(origin)

        self._install_affordances(obj, origin)
        if obj not in self._bound:
            self._bound.add(obj)
            if self.decoration is not None:
                self.decoration.attach(obj)

        scene.add(origin)
        scene.bring_to_front(obj)
        scene.set_active_object(obj)

        self._target, self._origin = obj, origin
        self._set_phase(Phase.CROPPING)
        _logger.debug("enter_cropping: %r (z=%d)", obj, self._z_index)
        return True

    def confirm_cropping(self) -> bool:
        if not self.is_cropping:
            _logger.debug("confirm_cropping ignored: not cropping")
            return False
        target, origin = self._target, self._origin
        assert target is not None and origin is not None
        if self._gesture is not None:
            _logger.debug("confirm_cropping drops the gesture in progress")
            self._gesture = None
        self._pending_cancel = False
        self._project()

        scene = self._scene
        target.link = CropLink(origin)
        origin.opacity = target.opacity
        scene.remove(origin)
        scene.move_to_index(target, self._z_index)
        scene.set_active_object(target)

        self._restore_affordances(target)
        target.min_scale_limit = self._min_scale_limit(target)

        self._clear()
        self._set_phase(Phase.IDLE)
        bind_follow(target)
        _logger.debug("confirm_cropping: %r crop=(%.2f, %.2f)", target, target.crop_x, target.crop_y)
        self.cropConfirmed.emit(target)
        return True

    def cancel_cropping(self) -> bool:
        """Discard the session's edits.

        While a pointer gesture is in progress the cancel is deferred until
        the pointer is released.
        """
        if not self.is_cropping:
            _logger.debug("cancel_cropping ignored: not cropping")
            return False
        if self._gesture is not None:
            _logger.debug("cancel_cropping deferred until pointer-up")
            self._pending_cancel = True
            return True

        target, origin, backup = self._target, self._origin, self._target_backup
        assert target is not None and origin is not None and backup is not None
        scene = self._scene
        target.link = self._origin_backup
        scene.remove(origin)
        scene.remove(target)
        backup.link = self._origin_backup
        scene.add(backup, self._z_index)
        scene.set_active_object(backup)
        scene.centered_scaling = self._saved_centered_scaling
        if self.decoration is not None:
            self.decoration.detach(target)

        self._clear()
        self._set_phase(Phase.IDLE)
        _logger.debug("cancel_cropping: restored %r at z=%d", backup, scene.index_of(backup))
        self.cropCancelled.emit(backup)
        return True

    def detach(self) -> None:
        """Disconnect from the scene. An active session is cancelled first."""
        if self.is_cropping:
            self._gesture = None
            self.cancel_cropping()
        for signal, slot in self._connections:
            signal.disconnect(slot)
        self._connections = []
        if self.decoration is not None:
            for obj in list(self._bound):
                self.decoration.detach(obj)
        _logger.debug("session detached")

    def render_decorations(self, painter: QPainter) -> bool:
        if self.decoration is None or not self.is_cropping:
            return False
        assert self._target is not None and self._origin is not None
        self.decoration.render_border(painter, self._origin)
        self.decoration.render_border(painter, self._target)
        self.decoration.render_corners(painter, self._target)
        return True

    # ---- helpers ----
    def _clear(self) -> None:
        self._target = self._origin = None
        self._target_backup = None
        self._origin_backup = None
        self._z_index = -1
        self._gesture = None
        self._pending_cancel = False
        self._saved_affordances = None

    def _install_affordances(self, target: SceneObject, origin: SceneObject) -> None:
        self._saved_affordances = target.affordances.copy()
        self._saved_centered_scaling = self._scene.centered_scaling
        self._scene.centered_scaling = False

        hidden = {name: False for name in CROPPING_HIDDEN_CONTROLS}
        for obj in (target, origin):
            aff = obj.affordances
            aff.set_controls_visibility(**hidden)
            aff.lock_movement_x = aff.lock_movement_y = True
            aff.lock_skewing_x = aff.lock_skewing_y = True
        origin.affordances.lock_scaling_flip = True
        origin.affordances.centered_scaling = False
        target.min_scale_limit = None

    def _restore_affordances(self, target: SceneObject) -> None:
        if self._saved_affordances is not None:
            target.affordances = self._saved_affordances
        self._scene.centered_scaling = self._saved_centered_scaling

    def _min_scale_limit(self, target: SceneObject) -> float | None:
        pose = target.pose
        if pose.scaled_width <= 0 or pose.scaled_height <= 0:
            return None
        min_x = self.options.min_width / pose.scaled_width * pose.scale_x
        min_y = self.options.min_height / pose.scaled_height * pose.scale_y
        return max(min_x, min_y)

    def _project(self) -> None:
        target, origin = self._target, self._origin
        if target is None or origin is None:
            return
        rect = project_crop_rect(target.pose, origin.pose)
        target.crop_x = rect.crop_x
        target.crop_y = rect.crop_y
        target.pose = target.pose.with_changes(
            width=rect.width,
            height=rect.height,
            scale_x=rect.scale_x,
            scale_y=rect.scale_y,
        )

    def _is_session_object(self, obj: SceneObject | None) -> bool:
        return obj is not None and (obj is self._target or obj is self._origin)

    # ---- scene events ----
    def _on_mouse_down(self, event: PointerEvent) -> None:
        if not self.is_cropping or not event.primary:
            return
        if not self._is_session_object(event.target):
            self.confirm_cropping()
            return

        target, origin = self._target, self._origin
        assert target is not None and origin is not None
        if event.corner in CORNER_SIGNS:
            if event.target is target:
                self._gesture = begin_crop_window_drag(target.pose, event.corner)
            else:
                self._gesture = begin_backing_scale(origin.pose, target.pose, event.corner)
        else:
            self._gesture = begin_backing_move(origin.pose, target.pose, event.pointer)
        if self._gesture is None:
            _logger.debug("gesture ignored: crop window is degenerate")
            return
        _logger.debug("gesture start: %s", type(self._gesture).__name__)

    def _on_mouse_move(self, event: PointerEvent) -> None:
        drag = self._gesture
        if drag is None or not self.is_cropping:
            return
        target, origin = self._target, self._origin
        assert target is not None and origin is not None

        if isinstance(drag, CropWindowDrag):
            result = solve_crop_window(
                drag,
                event.pointer,
                origin.pose,
                self.options.min_width,
                self.options.min_height,
            )
            target.pose = target.pose.with_changes(
                left=result.left,
                top=result.top,
                width=result.width,
                height=result.height,
                scale_x=result.scale_x,
                scale_y=result.scale_y,
                angle=origin.pose.angle,
                flip_x=result.flip_x,
                flip_y=result.flip_y,
            )
        elif isinstance(drag, BackingScaleDrag):
            proposed = propose_backing_scale(origin.pose, drag, event.pointer)
            origin.pose = solve_backing_scale(drag, proposed)
        else:
            moved = solve_backing_move(drag, event.pointer)
            origin.pose = origin.pose.with_changes(left=moved.left, top=moved.top)
        self._project()

    def _on_mouse_up(self, event: PointerEvent) -> None:  # noqa: ARG002
        if self._gesture is None:
            return
        self._gesture = None
        self._project()
        if self._pending_cancel:
            self._pending_cancel = False
            self.cancel_cropping()

    def _on_double_click(self, event: PointerEvent) -> None:
        if self.is_cropping:
            if self._is_session_object(event.target):
                self.confirm_cropping()
            return
        if classify(event.target) is None:
            return
        self._scene.set_active_object(event.target)
        self.enter_cropping(event.target)

    def _on_object_changed(self, obj: SceneObject) -> None:
        for target in follow_targets(obj):
            update_minions(target, cropping=target is self._target)
