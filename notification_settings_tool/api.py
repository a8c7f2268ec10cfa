"""Public API surface.

Re-exports the commonly used functions/classes so build scripts can simply
import a single module.
"""

from __future__ import annotations

from . import __version__

# Settings
from .settings import (
    AndroidExactSchedulingOption,
    AndroidKeys,
    AndroidSettings,
    AuthorizationOption,
    IOSKeys,
    IOSSettings,
    NotificationSettingsManager,
    Platform,
    PresentationOption,
    Setting,
    SettingValue,
    SettingsStore,
    ValueKind,
    flatten_settings,
    open_settings,
)

# Icons
from .icons import DrawableResource, NotificationIconType, generate_icons, write_icons

# Build post-processing
from .ios import PBXProject, patch_pbx_project, patch_plist, patch_preprocessor
from .postprocess import PostprocessResult, on_postprocess_build

__all__ = [
    "__version__",
    # settings
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
    # icons
    "DrawableResource",
    "NotificationIconType",
    "generate_icons",
    "write_icons",
    # post-processing
    "PBXProject",
    "patch_pbx_project",
    "patch_plist",
    "patch_preprocessor",
    "PostprocessResult",
    "on_postprocess_build",
]
