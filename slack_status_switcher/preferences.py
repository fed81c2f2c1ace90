"""Preset persistence in a plain JSON key-value file."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import StoreError, ValidationError
from .logging_config import get_logger
from .models import StatusPreset, default_presets

logger = get_logger(__name__)

PRESETS_KEY = "StatusPresets"


class PreferenceFile:
    """A small JSON object on disk, read and replaced as a whole."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read preferences {self.path}: {e}")
        if not isinstance(data, dict):
            raise StoreError(f"Preferences {self.path} is not a JSON object")
        return data

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except StoreError:
            data = {}
        data[key] = value

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".prefs-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"Cannot write preferences {self.path}: {e}")


class PresetStore:
    """Loads and saves the ordered preset list.

    Missing or corrupt data falls back to the built-in presets.
    """

    def __init__(self, preferences: PreferenceFile, key: str = PRESETS_KEY):
        self.preferences = preferences
        self.key = key

    def load(self) -> List[StatusPreset]:
        try:
            raw = self.preferences.get(self.key)
        except StoreError as e:
            logger.warning("Failed to read presets, using defaults", error=str(e))
            return default_presets()

        if raw is None:
            return default_presets()
        if not isinstance(raw, list):
            logger.warning("Stored presets are not a list, using defaults")
            return default_presets()

        try:
            return [StatusPreset.from_dict(item) for item in raw]
        except ValidationError as e:
            logger.warning("Stored presets are corrupt, using defaults", error=str(e))
            return default_presets()

    def save(self, presets: List[StatusPreset]) -> bool:
        """Replace the stored list. Returns False if it could not be written."""
        try:
            self.preferences.set(self.key, [preset.to_dict() for preset in presets])
        except StoreError as e:
            logger.error("Failed to save presets", error=str(e))
            return False
        return True
