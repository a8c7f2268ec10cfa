"""Command line interface for the Notification Settings Tool."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, List, Optional

from .icons import NotificationIconType
from .log_utils import setup_logging
from .postprocess import on_postprocess_build
from .settings import NotificationSettingsManager, Platform, Setting, SettingsStore, ValueKind

log = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _parse_value(setting: Setting, text: str) -> Any:
    """Turn command line *text* into a raw value of the setting's kind."""
    kind = setting.kind
    if kind is ValueKind.BOOL:
        t = text.strip().lower()
        if t in _TRUE:
            return True
        if t in _FALSE:
            return False
        raise ValueError(f"Expected a boolean (true/false), got {text!r}")

    if kind is ValueKind.ENUM:
        t = text.strip()
        try:
            return int(t, 0)
        except ValueError:
            pass
        enum_type = setting.value.enum_type
        if enum_type is None:
            raise ValueError(f"{setting.key} has no options to choose from")
        total = 0
        for part in t.replace(",", "|").split("|"):
            name = part.strip().upper().replace("-", "_")
            if not name:
                continue
            try:
                total |= int(enum_type[name])
            except KeyError:
                choices = ", ".join(m.name for m in enum_type if m.name and m.value)
                raise ValueError(f"Unknown option {part.strip()!r}; choose from {choices}") from None
        return total

    return text


def _format_value(setting: Setting) -> str:
    v = setting.value
    if v.kind is ValueKind.ENUM:
        names = [m.name for m in type(v.value) if m.value and (int(v.value) & int(m.value)) == int(m.value)]
        return f"{int(v.value)} ({'|'.join(names) or 'NONE'})"
    return str(v.value)


def _cmd_show(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    platforms = [Platform.parse(args.platform)] if args.platform else list(Platform)
    for platform in platforms:
        print(f"[{platform.value}]")
        for s in manager.settings_flat(platform):
            indent = "  " * (s.depth + 1)
            print(f"{indent}{s.key} = {_format_value(s)}    # {s.label}")
    print("[drawables]")
    for i, d in enumerate(manager.drawable_resources):
        print(f"  {i}: {d.id} ({d.type.value}) {d.asset or '-'}")
    return 0


def _cmd_get(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    setting = manager.find_setting(args.key)
    if setting is None:
        log.error("Unknown setting: %s", args.key)
        return 1
    print(_format_value(setting))
    return 0


def _cmd_set(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    setting = manager.find_setting(args.key)
    if setting is None:
        log.error("Unknown setting: %s", args.key)
        return 1
    try:
        value = _parse_value(setting, args.value)
        changed = manager.set(args.key, value)
    except (TypeError, ValueError) as e:
        log.error("Invalid value for %s: %s", args.key, e)
        return 1
    log.info("%s = %s (%s)", args.key, _format_value(setting), "saved" if changed else "unchanged")
    return 0


def _cmd_add_icon(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    manager.add_drawable_resource(args.id, args.image, NotificationIconType.parse(args.type))
    return 0


def _cmd_remove_icon(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    if args.index is not None:
        manager.remove_drawable_resource_by_index(args.index)
    else:
        manager.remove_drawable_resource_by_id(args.id)
    return 0


def _cmd_clear_icons(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    manager.clear_drawable_resources()
    return 0


def _cmd_export_icons(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    written = manager.write_drawable_resources(Path(args.out_dir))
    print(f"Wrote {len(written)} icon file(s) to: {args.out_dir}")
    return 0


def _cmd_postprocess(manager: NotificationSettingsManager, args: argparse.Namespace) -> int:
    result = on_postprocess_build(args.target, Path(args.build_path), manager)
    for name, changed in result.passes.items():
        print(f"{name}: {'patched' if changed else 'unchanged'}")
    for p in result.written_files:
        print(f"wrote {p}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="notification-settings",
        description="Manage mobile notification settings and patch exported native projects.",
    )
    ap.add_argument("--project", type=str, default=".", help="Project root containing ProjectSettings/")
    ap.add_argument("--log-file", type=str, default=None, help="Also append log output to this file")
    ap.add_argument("-v", "--verbose", action="store_true")

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("show", help="List all settings and icons")
    p.add_argument("--platform", type=str, default=None, choices=[pl.value for pl in Platform])
    p.set_defaults(func=_cmd_show)

    p = sub.add_parser("get", help="Print the value of one setting")
    p.add_argument("key")
    p.set_defaults(func=_cmd_get)

    p = sub.add_parser("set", help="Change one setting")
    p.add_argument("key")
    p.add_argument("value", help="true/false, an integer or FLAG|FLAG, or a string")
    p.set_defaults(func=_cmd_set)

    p = sub.add_parser("add-icon", help="Register a notification icon")
    p.add_argument("id")
    p.add_argument("image", help="Image path, relative to the project root or absolute")
    p.add_argument("--type", type=str, default="small", choices=["small", "large"])
    p.set_defaults(func=_cmd_add_icon)

    p = sub.add_parser("remove-icon", help="Remove a notification icon")
    grp = p.add_mutually_exclusive_group(required=True)
    grp.add_argument("--index", type=int, default=None)
    grp.add_argument("--id", type=str, default=None)
    p.set_defaults(func=_cmd_remove_icon)

    p = sub.add_parser("clear-icons", help="Remove all notification icons")
    p.set_defaults(func=_cmd_clear_icons)

    p = sub.add_parser("export-icons", help="Write density-scaled icons under an Android res/ directory")
    p.add_argument("out_dir")
    p.set_defaults(func=_cmd_export_icons)

    p = sub.add_parser("postprocess", help="Patch an exported native project")
    p.add_argument("target", choices=[pl.value for pl in Platform])
    p.add_argument("build_path")
    p.set_defaults(func=_cmd_postprocess)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, verbose=bool(args.verbose))

    manager = NotificationSettingsManager(SettingsStore(project_root=Path(args.project))).load()
    return int(args.func(manager, args))


if __name__ == "__main__":
    raise SystemExit(main())
