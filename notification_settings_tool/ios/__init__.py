"""Xcode project patching for iOS exports."""

from .pbxproj import PBXProject, PBXProjectError, pbx_project_path
from .postprocess import patch_pbx_project, patch_plist, patch_preprocessor, write_entitlements

__all__ = [
    "PBXProject",
    "PBXProjectError",
    "patch_pbx_project",
    "patch_plist",
    "patch_preprocessor",
    "pbx_project_path",
    "write_entitlements",
]
