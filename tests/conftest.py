from __future__ import annotations

import plistlib
import shutil
from pathlib import Path

import pytest

FIXTURES = Path(__file__).resolve().parent / "fixtures"

PREPROCESSOR_H = """\
#pragma once

#define UNITY_USES_REMOTE_NOTIFICATIONS 0
#define UNITY_USES_LOCATION 0
#define UNITY_USES_GLES 0
"""


@pytest.fixture
def manager(tmp_path: Path):
    from notification_settings_tool.settings import NotificationSettingsManager, SettingsStore

    return NotificationSettingsManager(SettingsStore(project_root=tmp_path / "project")).load()


@pytest.fixture
def ios_build(tmp_path: Path) -> Path:
    """A minimal exported Xcode project layout."""
    build = tmp_path / "build_ios"
    (build / "Unity-iPhone.xcodeproj").mkdir(parents=True)
    shutil.copyfile(FIXTURES / "project.pbxproj", build / "Unity-iPhone.xcodeproj" / "project.pbxproj")

    with (build / "Info.plist").open("wb") as f:
        plistlib.dump({"CFBundleIdentifier": "com.example.game", "UIBackgroundModes": ["audio"]}, f)

    (build / "Classes").mkdir()
    (build / "Classes" / "Preprocessor.h").write_text(PREPROCESSOR_H, encoding="utf-8")
    return build
