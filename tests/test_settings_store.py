import json
import os
import stat
from pathlib import Path

import pytest


def test_settings_defaults_load_when_missing(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    data = store.load()
    assert data.get("schema_version") == 1
    assert data["AndroidNotificationSettingsValues"] == {}
    assert data["DrawableResources"] == []
    assert not store.exists()


def test_settings_empty_file_is_treated_as_missing(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    p = store.path()
    p.parent.mkdir(parents=True)
    p.write_text("", encoding="utf-8")

    assert store.load()["iOSNotificationSettingsValues"] == {}
    assert not list(p.parent.glob(p.name + ".bak.*"))


def test_settings_roundtrip_save_load(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    assert store.save(
        {
            "AndroidNotificationSettingsValues": {"UnityNotificationAndroidScheduleExactAlarms": 3},
            "DrawableResources": [{"Id": "icon_0", "Type": "Large", "Asset": "Assets/icon.png"}],
            "SomethingNewer": {"keep": True},
        }
    )

    assert store.path() == tmp_path / "ProjectSettings" / "NotificationsSettings.asset"
    loaded = store.load()
    assert loaded["AndroidNotificationSettingsValues"]["UnityNotificationAndroidScheduleExactAlarms"] == 3
    assert loaded["DrawableResources"][0]["Id"] == "icon_0"
    assert loaded["SomethingNewer"] == {"keep": True}
    assert loaded["schema_version"] == 1


def test_settings_legacy_field_names_are_accepted(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    store.path().parent.mkdir(parents=True)
    store.path().write_text(
        json.dumps(
            {
                "AndroidNotificationEditorSettingsValues": {"UnityNotificationAndroidRescheduleOnDeviceRestart": True},
                "TrackedResourceAssets": [{"Id": "old", "Type": "Small", "Asset": None}],
            }
        ),
        encoding="utf-8",
    )

    loaded = store.load()
    assert loaded["AndroidNotificationSettingsValues"] == {"UnityNotificationAndroidRescheduleOnDeviceRestart": True}
    assert loaded["DrawableResources"][0]["Id"] == "old"
    assert "TrackedResourceAssets" not in loaded


def test_settings_corrupt_json_is_backed_up(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    p = store.path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("{not valid json", encoding="utf-8")

    loaded = store.load()
    assert loaded.get("schema_version") == 1

    baks = sorted(p.parent.glob(p.name + ".bak.*"))
    assert baks, "Expected a backup to be created for corrupt settings"


@pytest.mark.skipif(os.name == "nt" or getattr(os, "geteuid", lambda: 1)() == 0, reason="needs POSIX permissions as non-root")
def test_settings_read_only_file_is_made_editable(tmp_path: Path):
    from notification_settings_tool.settings import SettingsStore

    store = SettingsStore(project_root=tmp_path)
    store.save({"AndroidNotificationSettingsValues": {}})
    os.chmod(store.path(), stat.S_IRUSR)

    assert store.save({"AndroidNotificationSettingsValues": {"k": "v"}})
    assert store.load()["AndroidNotificationSettingsValues"] == {"k": "v"}


def test_settings_save_reports_error_when_not_editable(tmp_path: Path, monkeypatch, caplog):
    from notification_settings_tool.settings import SettingsStore
    from notification_settings_tool.settings import store as store_mod

    monkeypatch.setattr(store_mod, "make_editable", lambda path: False)
    store = SettingsStore(project_root=tmp_path)

    with caplog.at_level("ERROR"):
        assert store.save({"AndroidNotificationSettingsValues": {}}) is False

    assert not store.exists()
    assert any("editable" in r.getMessage() for r in caplog.records)
