"""Minimal in-place editor for Xcode ``project.pbxproj`` files.

Only the handful of edits the post-processor needs are supported: linking
system frameworks, adding a file reference, setting a build setting and
enabling a system capability. Edits are textual and keep the rest of the file
byte-for-byte, so a project that already contains an item is left untouched.
Object ids for new entries are derived from their content, which keeps the
output deterministic across runs.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

PROJECT_DIR_NAME = "Unity-iPhone.xcodeproj"
MAIN_TARGET_NAME = "Unity-iPhone"
FRAMEWORK_TARGET_NAME = "UnityFramework"

_GUID = r"[0-9A-F]{24}"
_UNQUOTED_RE = re.compile(r"[A-Za-z0-9_$/:.]+")
_LIST_ENTRY_RE = re.compile(rf"({_GUID})(?: /\* (.*?) \*/)?,")


class PBXProjectError(ValueError):
    """The project file does not have the structure an edit expects."""


def pbx_project_path(build_path: Union[str, Path]) -> Path:
    return Path(build_path) / PROJECT_DIR_NAME / "project.pbxproj"


def uuid_for(prefix: str, key: str) -> str:
    """Deterministic 24-char object id from prefix:key."""
    return hashlib.md5(f"{prefix}:{key}".encode()).hexdigest()[:24].upper()


def quote(value: str) -> str:
    if value and _UNQUOTED_RE.fullmatch(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _matching_brace(text: str, open_idx: int) -> int:
    """Index of the ``}`` closing the ``{`` at *open_idx* (quoted strings skipped)."""
    depth = 0
    i = open_idx
    in_quote = False
    while i < len(text):
        ch = text[i]
        if in_quote:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_quote = False
        elif ch == '"':
            in_quote = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise PBXProjectError("Unbalanced braces in project file")


def _line_start(text: str, idx: int) -> int:
    return text.rfind("\n", 0, idx) + 1


class PBXProject:
    def __init__(self, text: str):
        self.text = text

    @classmethod
    def read(cls, path: Union[str, Path]) -> "PBXProject":
        return cls(Path(path).read_text(encoding="utf-8"))

    def write_to_string(self) -> str:
        return self.text

    # Object lookup -------------------------------------------------------
    def _section_span(self, section: str) -> Optional[Tuple[int, int]]:
        begin = f"/* Begin {section} section */\n"
        end = f"/* End {section} section */"
        start = self.text.find(begin)
        if start < 0:
            return None
        stop = self.text.find(end, start)
        if stop < 0:
            raise PBXProjectError(f"Unterminated {section} section")
        return start + len(begin), stop

    def _section_objects(self, section: str) -> List[Tuple[str, Optional[str], int, int]]:
        """(guid, comment, start, end) of every object defined in *section*."""
        span = self._section_span(section)
        if span is None:
            return []
        out = []
        pattern = re.compile(rf"^\t\t({_GUID})(?: /\* (.*?) \*/)? = \{{", re.M)
        pos = span[0]
        while True:
            m = pattern.search(self.text, pos, span[1])
            if not m:
                break
            close = _matching_brace(self.text, m.end() - 1)
            out.append((m.group(1), m.group(2), m.start(), close + 1))
            pos = close + 1
        return out

    def _object_span(self, guid: str) -> Tuple[int, int]:
        m = re.search(rf"^\t\t{guid}(?: /\* .*? \*/)? = \{{", self.text, re.M)
        if not m:
            raise PBXProjectError(f"Object {guid} not found")
        return m.start(), _matching_brace(self.text, m.end() - 1) + 1

    def _object_field(self, guid: str, name: str) -> Optional[str]:
        start, end = self._object_span(guid)
        m = re.compile(rf"\b{re.escape(name)} = ({_GUID}|\"[^\"]*\"|[^;\s]+)").search(self.text, start, end)
        if not m:
            return None
        return m.group(1).strip('"')

    def _list_span(self, guid: str, name: str) -> Optional[Tuple[int, int, str]]:
        """(open, close, indent) of the ``name = ( ... );`` list inside object *guid*."""
        start, end = self._object_span(guid)
        m = re.compile(rf"^(\t*){re.escape(name)} = \(", re.M).search(self.text, start, end)
        if not m:
            return None
        close = self.text.find(");", m.end())
        if close < 0 or close > end:
            raise PBXProjectError(f"Unterminated list {name} in {guid}")
        return m.end(), close, m.group(1)

    def _list_entries(self, guid: str, name: str) -> List[Tuple[str, Optional[str]]]:
        span = self._list_span(guid, name)
        if span is None:
            return []
        return [(m.group(1), m.group(2)) for m in _LIST_ENTRY_RE.finditer(self.text, span[0], span[1])]

    def _append_to_list(self, guid: str, name: str, entry: str) -> None:
        span = self._list_span(guid, name)
        if span is None:
            raise PBXProjectError(f"Object {guid} has no {name} list")
        _, close, indent = span
        at = _line_start(self.text, close)
        self.text = self.text[:at] + f"{indent}\t{entry},\n" + self.text[at:]

    def _add_section_line(self, section: str, line: str) -> None:
        span = self._section_span(section)
        if span is None:
            anchor = self.text.find("\tobjects = {\n")
            if anchor < 0:
                raise PBXProjectError("No objects dictionary in project file")
            at = anchor + len("\tobjects = {\n")
            block = f"\n/* Begin {section} section */\n{line}\n/* End {section} section */\n"
            self.text = self.text[:at] + block + self.text[at:]
            return
        self.text = self.text[: span[1]] + line + "\n" + self.text[span[1]:]

    def _new_guid(self, prefix: str, key: str) -> str:
        guid = uuid_for(prefix, key)
        n = 0
        while guid in self.text:
            n += 1
            guid = uuid_for(prefix, f"{key}#{n}")
        return guid

    # Targets -------------------------------------------------------------
    def target_guid(self, name: str) -> Optional[str]:
        for guid, comment, start, end in self._section_objects("PBXNativeTarget"):
            body = self.text[start:end]
            if comment == name or re.search(rf"\n\t\t\tname = \"?{re.escape(name)}\"?;", body):
                return guid
        return None

    def main_target_guid(self) -> str:
        guid = self.target_guid(MAIN_TARGET_NAME)
        if guid is None:
            raise PBXProjectError(f"Target {MAIN_TARGET_NAME} not found")
        return guid

    def unity_framework_target_guid(self) -> str:
        """Target the native plugin code is compiled into (main target on old exports)."""
        guid = self.target_guid(FRAMEWORK_TARGET_NAME)
        return guid if guid is not None else self.main_target_guid()

    def project_guid(self) -> str:
        objs = self._section_objects("PBXProject")
        if not objs:
            raise PBXProjectError("No PBXProject object")
        return objs[0][0]

    # Frameworks ----------------------------------------------------------
    def _frameworks_phase(self, target: str) -> str:
        for guid, comment in self._list_entries(target, "buildPhases"):
            if comment == "Frameworks":
                return guid
        raise PBXProjectError(f"Target {target} has no Frameworks build phase")

    def contains_framework(self, target: str, name: str) -> bool:
        phase = self._frameworks_phase(target)
        return any(c == f"{name} in Frameworks" for _, c in self._list_entries(phase, "files"))

    def _file_ref(self, name: str) -> Optional[str]:
        for guid, comment, _, _ in self._section_objects("PBXFileReference"):
            if comment == name:
                return guid
        return None

    def _group_guid(self, name: str) -> Optional[str]:
        for guid, comment, _, _ in self._section_objects("PBXGroup"):
            if comment == name:
                return guid
        return None

    def add_framework_to_project(self, target: str, name: str, weak: bool) -> None:
        phase = self._frameworks_phase(target)

        ref = self._file_ref(name)
        if ref is None:
            ref = self._new_guid("fileref", name)
            self._add_section_line(
                "PBXFileReference",
                f"\t\t{ref} /* {name} */ = {{isa = PBXFileReference; lastKnownFileType = wrapper.framework; "
                f"name = {quote(name)}; path = {quote('System/Library/Frameworks/' + name)}; sourceTree = SDKROOT; }};",
            )
            group = self._group_guid("Frameworks")
            if group is not None:
                self._append_to_list(group, "children", f"{ref} /* {name} */")

        build = self._new_guid("buildfile", f"{target}:{name}")
        settings = " settings = {ATTRIBUTES = (Weak, ); };" if weak else ""
        self._add_section_line(
            "PBXBuildFile",
            f"\t\t{build} /* {name} in Frameworks */ = {{isa = PBXBuildFile; fileRef = {ref} /* {name} */;{settings} }};",
        )
        self._append_to_list(phase, "files", f"{build} /* {name} in Frameworks */")

    # Files -----------------------------------------------------------------
    def contains_file(self, path: str) -> bool:
        return self._file_ref(Path(path).name) is not None

    def add_file(self, path: str, file_type: str) -> str:
        """Reference *path* (relative to the project) from the main group."""
        name = Path(path).name
        ref = self._file_ref(name)
        if ref is not None:
            return ref
        ref = self._new_guid("fileref", path)
        self._add_section_line(
            "PBXFileReference",
            f"\t\t{ref} /* {name} */ = {{isa = PBXFileReference; lastKnownFileType = {file_type}; "
            f"name = {quote(name)}; path = {quote(path)}; sourceTree = SOURCE_ROOT; }};",
        )
        main_group = self._object_field(self.project_guid(), "mainGroup")
        if main_group:
            self._append_to_list(main_group, "children", f"{ref} /* {name} */")
        return ref

    # Build settings --------------------------------------------------------
    def build_configurations(self, target: str) -> List[str]:
        config_list = self._object_field(target, "buildConfigurationList")
        if not config_list:
            raise PBXProjectError(f"Target {target} has no buildConfigurationList")
        return [guid for guid, _ in self._list_entries(config_list, "buildConfigurations")]

    def _build_settings_span(self, config: str) -> Tuple[int, int]:
        start, end = self._object_span(config)
        m = re.compile(r"buildSettings = \{").search(self.text, start, end)
        if not m:
            raise PBXProjectError(f"Configuration {config} has no buildSettings")
        return m.end(), _matching_brace(self.text, m.end() - 1)

    def get_build_property(self, config: str, key: str) -> Optional[str]:
        open_, close = self._build_settings_span(config)
        m = re.compile(rf"^\t*{re.escape(key)} = (.*);$", re.M).search(self.text, open_, close)
        return m.group(1) if m else None

    def set_build_property(self, target: str, key: str, value: str) -> bool:
        """Set *key* on every configuration of *target*. Returns True if anything changed."""
        rendered = quote(value)
        changed = False
        for config in self.build_configurations(target):
            open_, close = self._build_settings_span(config)
            m = re.compile(rf"^(\t*){re.escape(key)} = (.*);$", re.M).search(self.text, open_, close)
            if m:
                if m.group(2) == rendered:
                    continue
                self.text = self.text[: m.start(2)] + rendered + self.text[m.end(2):]
            else:
                indent = "\t" * 4
                self.text = self.text[:open_] + f"\n{indent}{key} = {rendered};" + self.text[open_:]
            changed = True
        return changed

    # Capabilities ----------------------------------------------------------
    def _child_block(self, parent_open: int, key: str) -> Optional[Tuple[int, int, str]]:
        parent_close = _matching_brace(self.text, parent_open)
        m = re.compile(rf"^(\t*){re.escape(key)}(?: /\* .*? \*/)? = \{{", re.M).search(
            self.text, parent_open, parent_close
        )
        if not m:
            return None
        return m.end() - 1, _matching_brace(self.text, m.end() - 1), m.group(1)

    def _ensure_child_block(self, parent_open: int, key: str) -> int:
        found = self._child_block(parent_open, key)
        if found is not None:
            return found[0]
        parent_close = _matching_brace(self.text, parent_open)
        at = _line_start(self.text, parent_close)
        indent = self.text[at:parent_close] + "\t"
        self.text = self.text[:at] + f"{indent}{key} = {{\n{indent}}};\n" + self.text[at:]
        return at + len(indent) + len(key) + len(" = ")

    def has_capability(self, target: str, capability: str) -> bool:
        start, _ = self._object_span(self.project_guid())
        attributes = self._child_block(self.text.index("{", start), "attributes")
        if attributes is None:
            return False
        node = attributes
        for key in ("TargetAttributes", target, "SystemCapabilities", capability):
            node = self._child_block(node[0], key)
            if node is None:
                return False
        return re.search(r"\benabled = 1;", self.text[node[0]:node[1]]) is not None

    def add_capability(self, target: str, capability: str) -> bool:
        """Enable *capability* in the target's SystemCapabilities. Returns True if changed."""
        if self.has_capability(target, capability):
            return False
        start, _ = self._object_span(self.project_guid())
        node = self.text.index("{", start)
        for key in ("attributes", "TargetAttributes", target, "SystemCapabilities", capability):
            node = self._ensure_child_block(node, key)

        open_, close = node, _matching_brace(self.text, node)
        m = re.compile(r"\benabled = \d+;").search(self.text, open_, close)
        if m:
            self.text = self.text[: m.start()] + "enabled = 1;" + self.text[m.end():]
        else:
            at = _line_start(self.text, close)
            indent = self.text[at:close] + "\t"
            self.text = self.text[:at] + f"{indent}enabled = 1;\n" + self.text[at:]
        return True
