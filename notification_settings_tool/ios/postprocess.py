"""Patch an exported Xcode project for notifications.

Each pass reads one artifact, changes it only where the current content does
not already match the settings, and writes it back only if something
changed. Running the passes twice is therefore a no-op the second time.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import Any, Dict, List, Union
from xml.parsers.expat import ExpatError

from ..settings.model import Setting, ValueKind
from .pbxproj import PBXProject, pbx_project_path

log = logging.getLogger(__name__)

USER_NOTIFICATIONS_FRAMEWORK = "UserNotifications.framework"
CORE_LOCATION_FRAMEWORK = "CoreLocation.framework"

ENTITLEMENTS_FILE_NAME = "ios.entitlements"
PUSH_CAPABILITY = "com.apple.Push"
APS_ENVIRONMENT_KEY = "aps-environment"
APS_ENVIRONMENT = "production"

BACKGROUND_MODES_KEY = "UIBackgroundModes"
REMOTE_NOTIFICATION_MODE = "remote-notification"

LOCATION_MACRO = "UNITY_USES_LOCATION"
REMOTE_NOTIFICATIONS_MACRO = "UNITY_USES_REMOTE_NOTIFICATIONS"


def _read_plist(path: Path) -> Dict[str, Any]:
    with path.open("rb") as f:
        data = plistlib.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} root is not a dictionary")
    return data


def _write_plist(path: Path, data: Dict[str, Any]) -> None:
    with path.open("wb") as f:
        plistlib.dump(data, f, fmt=plistlib.FMT_XML)


def write_entitlements(build_path: Union[str, Path], aps_environment: str) -> bool:
    """Ensure ``aps-environment`` in the entitlements file. Returns True if written."""
    path = Path(build_path) / ENTITLEMENTS_FILE_NAME
    data: Dict[str, Any] = {}
    if path.exists():
        data = _read_plist(path)
    if data.get(APS_ENVIRONMENT_KEY) == aps_environment:
        return False
    data[APS_ENVIRONMENT_KEY] = aps_environment
    _write_plist(path, data)
    return True


def patch_pbx_project(
    build_path: Union[str, Path],
    need_location_framework: bool,
    add_push_notification_capability: bool,
) -> bool:
    """Link required frameworks and, if requested, add the push capability.

    The entitlements file is only written once every project edit succeeded.
    """
    pbx_path = pbx_project_path(build_path)
    if not pbx_path.is_file():
        log.warning("Xcode project not found at %s; skipping project patch", pbx_path)
        return False

    original = pbx_path.read_text(encoding="utf-8")
    project = PBXProject(original)
    try:
        framework_target = project.unity_framework_target_guid()

        if not project.contains_framework(framework_target, USER_NOTIFICATIONS_FRAMEWORK):
            project.add_framework_to_project(framework_target, USER_NOTIFICATIONS_FRAMEWORK, weak=True)
        if need_location_framework and not project.contains_framework(framework_target, CORE_LOCATION_FRAMEWORK):
            project.add_framework_to_project(framework_target, CORE_LOCATION_FRAMEWORK, weak=False)

        if add_push_notification_capability:
            main_target = project.main_target_guid()
            if not project.contains_file(ENTITLEMENTS_FILE_NAME):
                project.add_file(ENTITLEMENTS_FILE_NAME, "text.plist.entitlements")
            project.set_build_property(main_target, "CODE_SIGN_ENTITLEMENTS", ENTITLEMENTS_FILE_NAME)
            project.add_capability(main_target, PUSH_CAPABILITY)
        updated = project.write_to_string()
    except (ValueError, ExpatError) as e:
        log.error("Could not patch %s: %s", pbx_path, e)
        return False

    changed = False
    if add_push_notification_capability:
        try:
            changed = write_entitlements(build_path, APS_ENVIRONMENT)
        except (ValueError, ExpatError) as e:
            log.error("Could not update %s: %s", ENTITLEMENTS_FILE_NAME, e)
            return False
        if changed:
            log.info("Wrote %s (aps-environment=%s)", ENTITLEMENTS_FILE_NAME, APS_ENVIRONMENT)

    if updated == original:
        return changed
    pbx_path.write_text(updated, encoding="utf-8")
    return True


def _should_add_setting_to_plist(setting: Setting, root: Dict[str, Any]) -> bool:
    # Absent or different -> (over)write. Strings are not written.
    if setting.kind is ValueKind.STRING:
        return False
    if setting.key not in root:
        return True
    current = root[setting.key]
    if setting.kind is ValueKind.BOOL:
        return not (isinstance(current, bool) and current == setting.value.value)
    return isinstance(current, bool) or not isinstance(current, int) or current != setting.value.to_raw()


def patch_plist(
    build_path: Union[str, Path],
    settings: List[Setting],
    add_push_notification_capability: bool,
) -> bool:
    plist_path = Path(build_path) / "Info.plist"
    if not plist_path.is_file():
        log.warning("Info.plist not found at %s; skipping plist patch", plist_path)
        return False

    try:
        root = _read_plist(plist_path)
    except (ValueError, ExpatError) as e:
        log.error("Could not parse %s: %s", plist_path, e)
        return False

    needs_to_write_changes = False
    for setting in settings:
        if _should_add_setting_to_plist(setting, root):
            root[setting.key] = setting.value.to_raw()
            needs_to_write_changes = True

    if add_push_notification_capability:
        modes = root.get(BACKGROUND_MODES_KEY)
        if not isinstance(modes, list):
            modes = []
            root[BACKGROUND_MODES_KEY] = modes
        if REMOTE_NOTIFICATION_MODE not in modes:
            modes.append(REMOTE_NOTIFICATION_MODE)
            needs_to_write_changes = True

    if needs_to_write_changes:
        _write_plist(plist_path, root)
    return needs_to_write_changes


def patch_preprocessor(
    build_path: Union[str, Path],
    need_location_framework: bool,
    add_push_notification_capability: bool,
) -> bool:
    preprocessor_path = Path(build_path) / "Classes" / "Preprocessor.h"
    if not preprocessor_path.is_file():
        log.warning("Preprocessor.h not found at %s; skipping preprocessor patch", preprocessor_path)
        return False

    original = preprocessor_path.read_text(encoding="utf-8")
    preprocessor = original

    if need_location_framework and LOCATION_MACRO in preprocessor:
        preprocessor = preprocessor.replace(f"{LOCATION_MACRO} 0", f"{LOCATION_MACRO} 1")
    if add_push_notification_capability and REMOTE_NOTIFICATIONS_MACRO in preprocessor:
        preprocessor = preprocessor.replace(f"{REMOTE_NOTIFICATIONS_MACRO} 0", f"{REMOTE_NOTIFICATIONS_MACRO} 1")

    if preprocessor == original:
        return False
    preprocessor_path.write_text(preprocessor, encoding="utf-8")
    return True
