"""Android notification icon (drawable) resources.

Icons are registered by id and exported as PNGs for every density bucket the
notification runtime looks up. Small icons are rendered as a white silhouette
(Android tints them and ignores colour); large icons keep their colours.
"""

from __future__ import annotations

import enum
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)

# Android resource file names: lowercase letters, digits and underscores.
RESOURCE_ID_RE = re.compile(r"[a-z_][a-z0-9_]*")


class NotificationIconType(str, enum.Enum):
    SMALL = "Small"
    LARGE = "Large"

    @classmethod
    def parse(cls, text: str) -> "NotificationIconType":
        key = str(text or "").strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown icon type: {text!r}")


MIN_ICON_SIZE = {
    NotificationIconType.SMALL: 48,
    NotificationIconType.LARGE: 192,
}

SMALL_ICON_SCALE = 0.375

# (bucket, size of a large icon); small icons use size * SMALL_ICON_SCALE.
DENSITY_BUCKETS: List[Tuple[str, int]] = [
    ("drawable-xhdpi-v11", 128),
    ("drawable-hdpi-v11", 96),
    ("drawable-mdpi-v11", 64),
    ("drawable-ldpi-v11", 48),
]

# Only exported for large icons.
LARGE_ONLY_BUCKETS: List[Tuple[str, int]] = [
    ("drawable-xxhdpi-v11", 192),
]


@dataclass
class DrawableResource:
    id: str
    type: NotificationIconType
    asset: Optional[str] = None

    def asset_path(self, project_root: Path) -> Optional[Path]:
        if not self.asset:
            return None
        p = Path(self.asset)
        return p if p.is_absolute() else Path(project_root) / p

    def to_dict(self) -> Dict[str, Any]:
        return {"Id": self.id, "Type": self.type.value, "Asset": self.asset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DrawableResource":
        return cls(
            id=str(data.get("Id") or ""),
            type=NotificationIconType.parse(data.get("Type") or "Small"),
            asset=data.get("Asset") or None,
        )

    def verify(self, project_root: Path) -> List[str]:
        """Return the reasons this resource cannot be exported (empty if valid)."""
        errors: List[str] = []
        if not self.id:
            errors.append("- An icon without an id will not be exported")
        elif not RESOURCE_ID_RE.fullmatch(self.id):
            errors.append(f"- Id {self.id!r} is not a valid Android resource name (use a-z, 0-9 and _)")

        path = self.asset_path(project_root)
        if path is None:
            errors.append("- No image assigned")
            return errors
        if not path.is_file():
            errors.append(f"- Image file not found: {path}")
            return errors

        try:
            with Image.open(path) as img:
                img.load()
                width, height = img.size
        except (OSError, UnidentifiedImageError):
            errors.append(f"- Image is not readable: {path}")
            return errors

        if width != height:
            errors.append(f"- Image is not square ({width}x{height})")
        min_size = MIN_ICON_SIZE[self.type]
        if width < min_size or height < min_size:
            errors.append(f"- Image is too small, should be at least {min_size}x{min_size}")
        return errors


def process_for_type(img: Image.Image, icon_type: NotificationIconType) -> Image.Image:
    rgba = img.convert("RGBA")
    if icon_type is NotificationIconType.LARGE:
        return rgba

    arr = np.array(rgba, dtype=np.uint8)
    arr[:, :, :3] = 255
    return Image.fromarray(arr)


def scale_image(img: Image.Image, width: int, height: int) -> Image.Image:
    return img.resize((int(width), int(height)), Image.Resampling.BILINEAR)


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def export_sizes(icon_type: NotificationIconType) -> List[Tuple[str, int]]:
    scale = SMALL_ICON_SCALE if icon_type is NotificationIconType.SMALL else 1.0
    buckets = list(DENSITY_BUCKETS)
    if icon_type is NotificationIconType.LARGE:
        buckets += LARGE_ONLY_BUCKETS
    return [(bucket, int(size * scale)) for bucket, size in buckets]


def generate_icons(resources: List[DrawableResource], project_root: Path) -> Dict[str, bytes]:
    """Map ``"<bucket>/<id>.png"`` to PNG bytes for every valid resource.

    Invalid resources are logged and skipped.
    """
    icons: Dict[str, bytes] = {}
    for res in resources:
        errors = res.verify(project_root)
        if errors:
            log.warning(
                "Failed exporting: '%s' Android notification icon because:\n %s",
                res.id,
                "\n ".join(errors),
            )
            continue

        path = res.asset_path(project_root)
        if path is None:
            continue
        with Image.open(path) as src:
            texture = process_for_type(src, res.type)

        for bucket, size in export_sizes(res.type):
            icons[f"{bucket}/{res.id}.png"] = encode_png(scale_image(texture, size, size))
    return icons


def write_icons(icons: Dict[str, bytes], res_dir: Path) -> List[Path]:
    """Write an icon mapping under an Android ``res/`` directory."""
    res_dir = Path(res_dir)
    written: List[Path] = []
    for rel, data in sorted(icons.items()):
        out = res_dir / rel
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(data)
        written.append(out)
    return written
