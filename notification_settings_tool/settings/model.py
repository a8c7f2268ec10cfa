"""Setting types: typed values, display tree and flattening."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Type


class Platform(str, enum.Enum):
    ANDROID = "android"
    IOS = "ios"

    @classmethod
    def parse(cls, text: str) -> "Platform":
        key = str(text or "").strip().lower()
        if key in ("ios", "iphone"):
            return cls.IOS
        if key == "android":
            return cls.ANDROID
        raise ValueError(f"Unknown platform: {text!r}")


class AndroidExactSchedulingOption(enum.IntFlag):
    NONE = 0
    EXACT_WHEN_AVAILABLE = 1
    ADD_SCHEDULE_EXACT_PERMISSION = 2
    ADD_USE_EXACT_ALARM_PERMISSION = 4
    ADD_REQUEST_IGNORE_BATTERY_OPTIMIZATIONS_PERMISSION = 8


class AuthorizationOption(enum.IntFlag):
    NONE = 0
    BADGE = 1
    SOUND = 2
    ALERT = 4
    CAR_PLAY = 8


class PresentationOption(enum.IntFlag):
    NONE = 0
    BADGE = 1
    SOUND = 2
    ALERT = 4


class ValueKind(str, enum.Enum):
    BOOL = "bool"
    ENUM = "enum"
    STRING = "string"


@dataclass(frozen=True)
class SettingValue:
    """A setting value tagged with its kind.

    ENUM values carry the ``IntFlag`` type they belong to so that persisted
    integers can be turned back into flags.
    """

    kind: ValueKind
    value: Any
    enum_type: Optional[Type[enum.IntFlag]] = None

    def __post_init__(self) -> None:
        if self.kind is ValueKind.ENUM and self.enum_type is None:
            raise ValueError("ENUM setting values need an enum_type")

    @classmethod
    def of_bool(cls, value: bool) -> "SettingValue":
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def of_enum(cls, value: enum.IntFlag) -> "SettingValue":
        return cls(ValueKind.ENUM, value, type(value))

    @classmethod
    def of_string(cls, value: str) -> "SettingValue":
        return cls(ValueKind.STRING, str(value))

    def coerce(self, raw: Any) -> Optional["SettingValue"]:
        """Build a value of the same kind from *raw*, or None if it does not fit.

        JSON booleans are ints in Python, so BOOL and ENUM are checked strictly.
        """
        if self.kind is ValueKind.BOOL:
            if isinstance(raw, bool):
                return SettingValue.of_bool(raw)
            return None
        if self.kind is ValueKind.ENUM:
            if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
                return None
            try:
                return SettingValue.of_enum(self.enum_type(raw))
            except ValueError:
                return None
        if isinstance(raw, str):
            return SettingValue.of_string(raw)
        return None

    def to_raw(self) -> Any:
        """Scalar form stored in the settings file."""
        if self.kind is ValueKind.ENUM:
            return int(self.value)
        return self.value

    def as_text(self) -> str:
        return str(self.to_raw())


@dataclass
class Setting:
    key: str
    label: str
    tooltip: str
    value: SettingValue
    dependencies: List["Setting"] = field(default_factory=list)
    # Filled in by flatten_settings().
    parent_key: Optional[str] = None
    depth: int = 0

    @property
    def kind(self) -> ValueKind:
        return self.value.kind


def flatten_settings(roots: Iterable[Setting]) -> List[Setting]:
    """Collapse a display tree into a pre-order list.

    Each entry gets ``parent_key``/``depth`` so the nesting can still be
    drawn. Keys must be unique across the whole tree.
    """
    out: List[Setting] = []
    seen = set()

    def _visit(nodes: Iterable[Setting], parent: Optional[Setting]) -> None:
        for s in nodes:
            if s.key in seen:
                raise ValueError(f"Duplicate setting key: {s.key}")
            seen.add(s.key)
            s.parent_key = parent.key if parent is not None else None
            s.depth = parent.depth + 1 if parent is not None else 0
            out.append(s)
            if s.dependencies:
                _visit(s.dependencies, s)

    _visit(roots, None)
    return out
