from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

from PySide6.QtGui import QColor

from .logger import get_logger

_logger = get_logger("settings")


@dataclass(frozen=True, slots=True)
class CropOptions:
    """Tunables of a crop session."""

    min_width: float = 0.0
    min_height: float = 0.0
    corner_width: float = 4.0
    corner_length: float = 10.0
    origin_opacity: float = 0.8


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "min_width": 0,
        "min_height": 0,
        "corner_width": 4,
        "corner_length": 10,
        "origin_opacity": 0.8,
        "corner_color": "#ffffff",
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    def _number(self, key: str) -> float:
        value = self.get(key)
        try:
            return float(value)
        except (TypeError, ValueError):
            _logger.warning("saved %s invalid: %r", key, value)
            return float(self.DEFAULTS[key])

    def crop_options(self) -> CropOptions:
        opacity = min(max(self._number("origin_opacity"), 0.0), 1.0)
        return CropOptions(
            min_width=max(self._number("min_width"), 0.0),
            min_height=max(self._number("min_height"), 0.0),
            corner_width=self._number("corner_width"),
            corner_length=self._number("corner_length"),
            origin_opacity=opacity,
        )

    def corner_color(self) -> QColor:
        hexcol = self.get("corner_color")
        if isinstance(hexcol, str):
            color = QColor(hexcol)
            if color.isValid():
                return color
        _logger.warning("saved corner_color invalid: %s", hexcol)
        return QColor(self.DEFAULTS["corner_color"])
