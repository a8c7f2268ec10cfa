from __future__ import annotations

import json
import logging
import os
import stat
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

log = logging.getLogger(__name__)

SETTINGS_RELATIVE_PATH = "ProjectSettings/NotificationsSettings.asset"

ANDROID_VALUES_KEY = "AndroidNotificationSettingsValues"
IOS_VALUES_KEY = "iOSNotificationSettingsValues"
DRAWABLES_KEY = "DrawableResources"

# Older files used these field names.
LEGACY_KEYS = {
    "AndroidNotificationEditorSettingsValues": ANDROID_VALUES_KEY,
    "TrackedResourceAssets": DRAWABLES_KEY,
}


def default_document() -> Dict[str, Any]:
    return {
        "schema_version": 1,
        ANDROID_VALUES_KEY: {},
        IOS_VALUES_KEY: {},
        DRAWABLES_KEY: [],
    }


def make_editable(path: Path) -> bool:
    """Make sure *path* can be written.

    Version-controlled projects often keep checked-in files read-only until
    they are checked out; here that means adding the owner write bit. The
    parent directory is created when missing.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists() and not os.access(path, os.W_OK):
            mode = path.stat().st_mode
            os.chmod(path, mode | stat.S_IWUSR)
        if path.exists():
            return os.access(path, os.W_OK)
        return os.access(path.parent, os.W_OK)
    except OSError as e:
        log.debug("make_editable(%s) failed: %s", path, e)
        return False


@dataclass
class SettingsStore:
    """Load/save the notification settings document.

    The document is kept as a plain dict so unknown keys written by newer
    versions survive a load/save cycle.
    """

    project_root: Path = field(default_factory=Path.cwd)
    relative_path: str = SETTINGS_RELATIVE_PATH

    def path(self) -> Path:
        return Path(self.project_root) / self.relative_path

    def load(self) -> Dict[str, Any]:
        path = self.path()
        base = default_document()

        if not path.exists():
            return base

        try:
            raw = path.read_text(encoding="utf-8")
            if not raw.strip():
                return base
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"{path.name} root is not an object")

            for old, new in LEGACY_KEYS.items():
                if old in data and new not in data:
                    data[new] = data.pop(old)

            merged = dict(base)
            merged.update(data)
            return merged
        except (OSError, ValueError) as e:
            log.warning("Failed to read %s (%s); starting from empty settings", path, e)
            try:
                ts = time.strftime("%Y%m%d_%H%M%S")
                bak = path.with_name(f"{path.name}.bak.{ts}")
                bak.write_bytes(path.read_bytes())
            except OSError:
                log.debug("Could not back up %s", path)
            return base

    def save(self, data: Dict[str, Any]) -> bool:
        """Write *data* atomically. Returns False if the file could not be made editable."""
        path = self.path()
        if not make_editable(path):
            log.error("Failed to make file %s editable", path)
            return False

        payload = dict(data or {})
        payload.setdefault("schema_version", 1)

        txt = json.dumps(payload, indent=2, sort_keys=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(txt + "\n", encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            log.error("Failed to write %s: %s", path, e)
            return False
        return True

    def exists(self) -> bool:
        return self.path().exists()
