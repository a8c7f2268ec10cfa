from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..icons import DrawableResource, NotificationIconType, generate_icons, write_icons
from .catalog import CATALOGS
from .model import Platform, Setting, SettingValue, flatten_settings
from .store import ANDROID_VALUES_KEY, DRAWABLES_KEY, IOS_VALUES_KEY, SettingsStore

log = logging.getLogger(__name__)

_VALUES_KEYS = {
    Platform.ANDROID: ANDROID_VALUES_KEY,
    Platform.IOS: IOS_VALUES_KEY,
}


class NotificationSettingsManager:
    """In-memory notification settings backed by a :class:`SettingsStore`.

    Construct one per project and pass it to whatever needs settings. Nothing
    is read from disk until :meth:`load` is called; every mutation is written
    back immediately.
    """

    def __init__(self, store: SettingsStore):
        self.store = store
        self.drawable_resources: List[DrawableResource] = []
        self._document: Dict[str, Any] = {}
        self._values: Dict[Platform, Dict[str, Any]] = {}
        self._settings: Dict[Platform, List[Setting]] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def project_root(self) -> Path:
        return Path(self.store.project_root)

    # Loading / saving ----------------------------------------------------
    def load(self) -> "NotificationSettingsManager":
        """Read the settings file once and seed defaults for missing keys.

        Calling it again returns the already loaded manager unchanged.
        """
        if self._loaded:
            return self

        existed = self.store.exists()
        self._document = self.store.load()

        for platform, doc_key in _VALUES_KEYS.items():
            values = self._document.get(doc_key)
            if not isinstance(values, dict):
                values = {}
                self._document[doc_key] = values
            self._values[platform] = values
            self._settings[platform] = CATALOGS[platform](
                lambda key, default, _values=values: self._get_or_add_value(_values, key, default)
            )

        self.drawable_resources = []
        items = self._document.get(DRAWABLES_KEY)
        if items is None:
            items = []
        elif not isinstance(items, list):
            log.warning("Ignoring %s: expected a list, got %s", DRAWABLES_KEY, type(items).__name__)
            items = []
            self._document[DRAWABLES_KEY] = items
        for item in items:
            try:
                self.drawable_resources.append(DrawableResource.from_dict(item))
            except (AttributeError, ValueError) as e:
                log.warning("Ignoring malformed drawable resource entry %r: %s", item, e)

        self._loaded = True
        # Only create the file here; an existing one is left alone until a value changes.
        if not existed:
            self.save()
        return self

    def _get_or_add_value(self, values: Dict[str, Any], key: str, default: SettingValue) -> SettingValue:
        raw = values.get(key)
        if raw is not None:
            value = default.coerce(raw)
            if value is not None:
                return value
            log.warning(
                "Failed loading : %s for type:%s Expected : %s",
                key,
                default.kind.value,
                type(raw).__name__,
            )

        values[key] = default.to_raw()
        return default

    def save(self) -> bool:
        self._require_loaded()
        self._document[DRAWABLES_KEY] = [d.to_dict() for d in self.drawable_resources]
        return self.store.save(self._document)

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise RuntimeError("Settings are not loaded; call load() first")

    # Settings --------------------------------------------------------------
    def settings(self, platform: Platform) -> List[Setting]:
        """Top-level settings of *platform* (dependencies nested)."""
        self._require_loaded()
        return self._settings[platform]

    def settings_flat(self, platform: Platform) -> List[Setting]:
        return flatten_settings(self.settings(platform))

    def raw_values(self, platform: Platform) -> Dict[str, Any]:
        """Copy of the persisted key -> scalar mapping for *platform*."""
        self._require_loaded()
        return dict(self._values[platform])

    def find_setting(self, key: str) -> Optional[Setting]:
        for platform in Platform:
            for setting in self.settings_flat(platform):
                if setting.key == key:
                    return setting
        return None

    def _platform_of(self, key: str) -> Optional[Platform]:
        for platform in Platform:
            if any(s.key == key for s in self.settings_flat(platform)):
                return platform
        return None

    def get(self, key: str) -> Any:
        setting = self.find_setting(key)
        if setting is None:
            return None
        return setting.value.value

    def set(self, key: str, value: Any) -> bool:
        """Set *key* and persist if the value changed. Returns True if it was written."""
        setting = self.find_setting(key)
        platform = self._platform_of(key)
        if setting is None or platform is None:
            log.warning("Unknown notification setting %s; value not set", key)
            return False

        new_value = setting.value.coerce(value)
        if new_value is None:
            raise TypeError(
                f"Setting {key} expects a {setting.kind.value} value, got {type(value).__name__}"
            )
        setting.value = new_value
        return self.save_setting(platform, setting)

    def save_setting(self, platform: Platform, setting: Setting) -> bool:
        values = self._values[platform]
        if setting.key in values and str(values[setting.key]) == setting.value.as_text():
            return False
        values[setting.key] = setting.value.to_raw()
        return self.save()

    # Drawable resources ----------------------------------------------------
    def add_drawable_resource(
        self,
        id: str,
        image: Optional[Union[str, Path]],
        type: NotificationIconType,
    ) -> DrawableResource:
        # Duplicate ids are allowed.
        self._require_loaded()
        resource = DrawableResource(id=id, type=type, asset=self._asset_ref(image))
        self.drawable_resources.append(resource)
        self.save()
        return resource

    def _asset_ref(self, image: Optional[Union[str, Path]]) -> Optional[str]:
        if image is None:
            return None
        p = Path(image)
        if p.is_absolute():
            try:
                return p.resolve().relative_to(self.project_root.resolve()).as_posix()
            except ValueError:
                return str(p)
        return p.as_posix()

    def remove_drawable_resource_by_index(self, index: int) -> bool:
        self._require_loaded()
        if 0 <= index < len(self.drawable_resources):
            del self.drawable_resources[index]
            self.save()
            return True
        log.warning("Invalid drawable index provided, drawable not removed.")
        return False

    def remove_drawable_resource_by_id(self, id: str) -> bool:
        self._require_loaded()
        for i, drawable in enumerate(self.drawable_resources):
            if drawable.id == id:
                del self.drawable_resources[i]
                self.save()
                return True
        log.warning("Drawable with Id %s not found. Drawable not removed.", id)
        return False

    def clear_drawable_resources(self) -> None:
        self._require_loaded()
        self.drawable_resources.clear()
        self.save()

    def generate_drawable_resources_for_export(self) -> Dict[str, bytes]:
        self._require_loaded()
        return generate_icons(self.drawable_resources, self.project_root)

    def write_drawable_resources(self, res_dir: Union[str, Path]) -> List[Path]:
        return write_icons(self.generate_drawable_resources_for_export(), Path(res_dir))


def open_settings(project_root: Union[str, Path, None] = None) -> NotificationSettingsManager:
    """Create and load the manager for the project at *project_root* (default: cwd)."""
    store = SettingsStore() if project_root is None else SettingsStore(project_root=Path(project_root))
    return NotificationSettingsManager(store).load()
