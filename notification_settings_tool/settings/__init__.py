"""Persistent notification settings.

All values live in a single JSON document inside the project
(``ProjectSettings/NotificationsSettings.asset``), next to the list of
notification icons. Labels, tooltips and defaults are not persisted; they are
rebuilt from the catalog on every load.
"""

from .access import AndroidSettings, IOSSettings
from .catalog import AndroidKeys, IOSKeys
from .manager import NotificationSettingsManager, open_settings
from .model import (
    AndroidExactSchedulingOption,
    AuthorizationOption,
    Platform,
    PresentationOption,
    Setting,
    SettingValue,
    ValueKind,
    flatten_settings,
)
from .store import SettingsStore

__all__ = [
    "AndroidExactSchedulingOption",
    "AndroidKeys",
    "AndroidSettings",
    "AuthorizationOption",
    "IOSKeys",
    "IOSSettings",
    "NotificationSettingsManager",
    "Platform",
    "PresentationOption",
    "Setting",
    "SettingValue",
    "SettingsStore",
    "ValueKind",
    "flatten_settings",
    "open_settings",
]
