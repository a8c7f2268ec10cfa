from __future__ import annotations

import plistlib
from pathlib import Path

from notification_settings_tool.ios import PBXProject, patch_pbx_project, patch_plist, patch_preprocessor
from notification_settings_tool.ios import postprocess as ios_postprocess
from notification_settings_tool.postprocess import on_postprocess_build
from notification_settings_tool.settings import IOSKeys, Platform

FRAMEWORK_TARGET = "AA0000000000000000000031"
MAIN_TARGET = "AA0000000000000000000030"


def _pbx(build: Path) -> PBXProject:
    return PBXProject.read(build / "Unity-iPhone.xcodeproj" / "project.pbxproj")


def _plist(build: Path) -> dict:
    with (build / "Info.plist").open("rb") as f:
        return plistlib.load(f)


def test_pbxproj_links_user_notifications_once(ios_build: Path) -> None:
    assert patch_pbx_project(ios_build, need_location_framework=False, add_push_notification_capability=False)

    project = _pbx(ios_build)
    assert project.target_guid("UnityFramework") == FRAMEWORK_TARGET
    assert project.contains_framework(FRAMEWORK_TARGET, "UserNotifications.framework")
    assert not project.contains_framework(FRAMEWORK_TARGET, "CoreLocation.framework")
    assert not project.contains_framework(MAIN_TARGET, "UserNotifications.framework")
    text = project.write_to_string()
    assert "ATTRIBUTES = (Weak, );" in text
    assert "path = System/Library/Frameworks/UserNotifications.framework; sourceTree = SDKROOT;" in text

    before = text
    assert patch_pbx_project(ios_build, False, False) is False
    assert _pbx(ios_build).write_to_string() == before


def test_pbxproj_adds_core_location_only_when_requested(ios_build: Path) -> None:
    patch_pbx_project(ios_build, need_location_framework=True, add_push_notification_capability=False)

    project = _pbx(ios_build)
    assert project.contains_framework(FRAMEWORK_TARGET, "CoreLocation.framework")
    text = project.write_to_string()
    location_line = next(ln for ln in text.splitlines() if "CoreLocation.framework in Frameworks */ = {isa" in ln)
    assert "Weak" not in location_line
    # Added to the Frameworks group too.
    assert text.count("/* CoreLocation.framework */,") == 1


def test_pbxproj_push_capability(ios_build: Path) -> None:
    changed = patch_pbx_project(ios_build, need_location_framework=False, add_push_notification_capability=True)
    assert changed

    project = _pbx(ios_build)
    assert project.has_capability(MAIN_TARGET, "com.apple.Push")
    for config in project.build_configurations(MAIN_TARGET):
        assert project.get_build_property(config, "CODE_SIGN_ENTITLEMENTS") == "ios.entitlements"
    for config in project.build_configurations(FRAMEWORK_TARGET):
        assert project.get_build_property(config, "CODE_SIGN_ENTITLEMENTS") is None
    assert project.contains_file("ios.entitlements")

    with (ios_build / "ios.entitlements").open("rb") as f:
        assert plistlib.load(f) == {"aps-environment": "production"}

    before = project.write_to_string()
    assert patch_pbx_project(ios_build, False, True) is False
    assert _pbx(ios_build).write_to_string() == before


def test_push_entitlements_use_production_even_without_release_flag(ios_build: Path, manager) -> None:
    manager.set(IOSKeys.ADD_PUSH_CAPABILITY, True)
    assert manager.get(IOSKeys.USE_APS_RELEASE) is False

    on_postprocess_build(Platform.IOS, ios_build, manager)

    with (ios_build / "ios.entitlements").open("rb") as f:
        assert plistlib.load(f) == {"aps-environment": "production"}
    assert _plist(ios_build)[IOSKeys.USE_APS_RELEASE] is False


def test_entitlements_not_written_when_project_edit_fails(ios_build: Path, caplog) -> None:
    pbx_path = ios_build / "Unity-iPhone.xcodeproj" / "project.pbxproj"
    broken = pbx_path.read_text(encoding="utf-8").replace("Unity-iPhone", "Game-iPhone")
    pbx_path.write_text(broken, encoding="utf-8")

    with caplog.at_level("ERROR"):
        assert patch_pbx_project(ios_build, False, True) is False

    assert any("Target Unity-iPhone not found" in r.getMessage() for r in caplog.records)
    assert not (ios_build / "ios.entitlements").exists()
    assert pbx_path.read_text(encoding="utf-8") == broken


def test_pbxproj_missing_is_skipped(tmp_path: Path, caplog) -> None:
    with caplog.at_level("WARNING"):
        assert patch_pbx_project(tmp_path, True, True) is False
    assert any("Xcode project not found" in r.getMessage() for r in caplog.records)


def test_plist_patch_is_idempotent(ios_build: Path, manager, monkeypatch) -> None:
    settings = manager.settings_flat(Platform.IOS)
    assert patch_plist(ios_build, settings, add_push_notification_capability=False) is True

    root = _plist(ios_build)
    assert root[IOSKeys.REQUEST_AUTHORIZATION_ON_APP_LAUNCH] is True
    assert root[IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS] == 7
    assert root[IOSKeys.ADD_PUSH_CAPABILITY] is False
    assert root["CFBundleIdentifier"] == "com.example.game"
    assert root["UIBackgroundModes"] == ["audio"]

    writes = []
    monkeypatch.setattr(ios_postprocess, "_write_plist", lambda path, data: writes.append(path))
    assert patch_plist(ios_build, settings, add_push_notification_capability=False) is False
    assert writes == []


def test_plist_overwrites_changed_values_and_adds_background_mode(ios_build: Path, manager) -> None:
    patch_plist(ios_build, manager.settings_flat(Platform.IOS), False)

    manager.set(IOSKeys.ADD_PUSH_CAPABILITY, True)
    manager.set(IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS, 5)
    settings = manager.settings_flat(Platform.IOS)

    assert patch_plist(ios_build, settings, True) is True
    root = _plist(ios_build)
    assert root[IOSKeys.ADD_PUSH_CAPABILITY] is True
    assert root[IOSKeys.DEFAULT_AUTHORIZATION_OPTIONS] == 5
    assert root["UIBackgroundModes"] == ["audio", "remote-notification"]

    assert patch_plist(ios_build, settings, True) is False
    assert _plist(ios_build)["UIBackgroundModes"].count("remote-notification") == 1


def test_preprocessor_flags(ios_build: Path) -> None:
    header = ios_build / "Classes" / "Preprocessor.h"

    assert patch_preprocessor(ios_build, False, False) is False

    assert patch_preprocessor(ios_build, need_location_framework=False, add_push_notification_capability=True)
    text = header.read_text(encoding="utf-8")
    assert "#define UNITY_USES_REMOTE_NOTIFICATIONS 1" in text
    assert "#define UNITY_USES_LOCATION 0" in text

    assert patch_preprocessor(ios_build, True, True)
    assert "#define UNITY_USES_LOCATION 1" in header.read_text(encoding="utf-8")

    assert patch_preprocessor(ios_build, True, True) is False


def test_on_postprocess_build_ios(ios_build: Path, manager) -> None:
    manager.set(IOSKeys.USE_LOCATION_TRIGGER, True)

    result = on_postprocess_build("ios", ios_build, manager)

    assert result.platform is Platform.IOS
    assert result.passes == {"pbxproj": True, "plist": True, "preprocessor": True}
    assert _pbx(ios_build).contains_framework(FRAMEWORK_TARGET, "CoreLocation.framework")
    assert not (ios_build / "ios.entitlements").exists()

    again = on_postprocess_build(Platform.IOS, ios_build, manager)
    assert not again.changed


def test_on_postprocess_build_android_writes_icons(tmp_path: Path, manager) -> None:
    from PIL import Image

    asset = manager.project_root / "Assets" / "icon.png"
    asset.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (192, 192), (10, 20, 30, 255)).save(asset)
    from notification_settings_tool.icons import NotificationIconType

    manager.add_drawable_resource("large_icon", "Assets/icon.png", NotificationIconType.LARGE)

    build = tmp_path / "build_android"
    result = on_postprocess_build("android", build, manager)

    assert len(result.written_files) == 5
    assert (build / "unityLibrary" / "src" / "main" / "res" / "drawable-xxhdpi-v11" / "large_icon.png").is_file()
    assert result.passes == {}


def test_on_postprocess_build_ignores_other_targets(tmp_path: Path, manager) -> None:
    build = tmp_path / "build_desktop"
    build.mkdir()

    result = on_postprocess_build("standalone", build, manager)

    assert result.platform is None
    assert result.passes == {} and result.written_files == []
    assert not result.changed
    assert list(build.iterdir()) == []
