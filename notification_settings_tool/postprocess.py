"""Post-build hook: apply notification settings to an exported native project."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .ios import patch_pbx_project, patch_plist, patch_preprocessor
from .settings import IOSKeys, NotificationSettingsManager, Platform

log = logging.getLogger(__name__)

# Where the exported Gradle project keeps Android resources.
ANDROID_RES_DIR = Path("unityLibrary") / "src" / "main" / "res"


@dataclass
class PostprocessResult:
    # None for build targets this tool does not handle
    platform: Optional[Platform]
    # pass name -> whether the artifact was rewritten
    passes: Dict[str, bool] = field(default_factory=dict)
    written_files: List[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(self.passes.values()) or bool(self.written_files)


def _resolve_platform(build_target: Union[Platform, str]) -> Optional[Platform]:
    if isinstance(build_target, Platform):
        return build_target
    try:
        return Platform.parse(build_target)
    except ValueError:
        return None


def on_postprocess_build(
    build_target: Union[Platform, str],
    path: Union[str, Path],
    manager: NotificationSettingsManager,
) -> PostprocessResult:
    """Run once after the engine finished exporting *build_target* to *path*.

    Targets other than iOS and Android are left untouched.
    """
    platform = _resolve_platform(build_target)
    result = PostprocessResult(platform=platform)
    if platform is None:
        log.debug("Nothing to post-process for build target %r", build_target)
        return result
    path = Path(path)

    if platform is Platform.IOS:
        settings = manager.settings_flat(Platform.IOS)
        flags = {s.key: s.value.value for s in settings}
        need_location_framework = bool(flags[IOSKeys.USE_LOCATION_TRIGGER])
        add_push_notification_capability = bool(flags[IOSKeys.ADD_PUSH_CAPABILITY])

        result.passes["pbxproj"] = patch_pbx_project(path, need_location_framework, add_push_notification_capability)
        result.passes["plist"] = patch_plist(path, settings, add_push_notification_capability)
        result.passes["preprocessor"] = patch_preprocessor(
            path, need_location_framework, add_push_notification_capability
        )
    elif platform is Platform.ANDROID:
        result.written_files = manager.write_drawable_resources(path / ANDROID_RES_DIR)

    log.info(
        "Post-processed %s export at %s: %s",
        platform.value,
        path,
        ", ".join(f"{k}={'patched' if v else 'unchanged'}" for k, v in result.passes.items())
        or f"{len(result.written_files)} file(s) written",
    )
    return result
