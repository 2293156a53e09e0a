"""User settings for the editor.

Settings live in a JSON file in the user's config directory and survive
application restarts.  Missing or invalid entries fall back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants
from .meta import SpanMeta, default_meta

logger = logging.getLogger(__name__)


@dataclass
class EditorSettings:
    """Editor preferences.

    Attributes:
        blink_interval: Seconds between caret visibility flips
        view_width: Columns used by the terminal shell
        max_undo_entries: Depth of the undo history
        meta_defaults: Style renderers use for attributes a span leaves unset
    """
    blink_interval: float = EditorConstants.BLINK_INTERVAL
    view_width: int = EditorConstants.DEFAULT_VIEW_WIDTH
    max_undo_entries: int = EditorConstants.MAX_UNDO_ENTRIES
    meta_defaults: SpanMeta = field(default_factory=default_meta)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blink_interval": self.blink_interval,
            "view_width": self.view_width,
            "max_undo_entries": self.max_undo_entries,
            "meta_defaults": self.meta_defaults.to_dict(),
        }


class SettingsPersistence:
    """Loads and saves ``EditorSettings`` as JSON."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir("spantext"))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Any]] = None

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_raw(self) -> Dict[str, Any]:
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            data = {}

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def load_settings(self) -> EditorSettings:
        """Load settings, skipping entries that fail validation."""
        settings = EditorSettings()
        for key, value in self._load_raw().items():
            if not self.validate_setting(key, value):
                logger.warning(f"Ignoring invalid setting {key}={value!r}")
                continue
            if key == "meta_defaults":
                overrides = SpanMeta.from_dict(value)
                for name in overrides.keys():
                    settings.meta_defaults.set_attribute(name, overrides.get_attribute(name))
            elif hasattr(settings, key):
                setattr(settings, key, value)
        return settings

    def save_settings(self, settings: EditorSettings) -> bool:
        """Save settings atomically (temp file + rename).

        Returns:
            True if save was successful, False otherwise.
        """
        self._ensure_config_dir()
        data = settings.to_dict()
        temp_file = self._settings_file.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self._settings_file)
            self._settings_cache = data
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def validate_setting(self, key: str, value: Any) -> bool:
        if key == "blink_interval":
            return isinstance(value, (int, float)) and not isinstance(value, bool) and 0.05 <= value <= 5
        if key == "view_width":
            return isinstance(value, int) and not isinstance(value, bool) and 20 <= value <= 400
        if key == "max_undo_entries":
            return isinstance(value, int) and not isinstance(value, bool) and value >= 1
        if key == "meta_defaults":
            if not isinstance(value, dict):
                return False
            try:
                SpanMeta.from_dict(value)
            except (KeyError, TypeError, ValueError, AttributeError):
                return False
            return True
        # Unknown settings are considered valid (forward compatibility)
        return True

    def clear_cache(self) -> None:
        self._settings_cache = None


_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Return the process-wide ``SettingsPersistence``."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
