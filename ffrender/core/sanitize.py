"""Filter-graph safe colors and literals."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from ffrender.core.errors import UnsafeValueError


TRANSPARENT = "black@0.0"

_HEX_COLOR_RE = re.compile(r"^[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")
_SAFE_COLOR_RE = re.compile(r"^[A-Za-z0-9#@._-]+$")


def parse_hex_color(color: str) -> Optional[Tuple[str, Optional[float]]]:
    """Return ``(rrggbb, alpha)`` for ``#RRGGBB[AA]`` literals, else None."""
    text = str(color or "").strip()
    if not text.startswith("#"):
        return None
    digits = text[1:]
    if not _HEX_COLOR_RE.match(digits):
        return None
    rgb = digits[:6].lower()
    if len(digits) == 8:
        return rgb, int(digits[6:8], 16) / 255.0
    return rgb, None


def to_ffmpeg_color(color: Optional[str] = None) -> str:
    """Map a user color onto the ffmpeg color syntax.

    ``None``, ``""`` and ``transparent`` become fully transparent black. Hex
    literals become ``0xrrggbb[@alpha]``. Named colors pass through only when
    they stay inside ``[A-Za-z0-9#@._-]``; anything else is rejected.
    """
    if color is None:
        return TRANSPARENT
    if not isinstance(color, str):
        raise UnsafeValueError(f"unsafe color value: {color!r}")
    text = color.strip()
    if not text or text == "transparent":
        return TRANSPARENT
    parsed = parse_hex_color(text)
    if parsed is None:
        if not _SAFE_COLOR_RE.match(text):
            raise UnsafeValueError(f"unsafe color value: {text!r}")
        return text
    rgb, alpha = parsed
    if alpha is not None:
        return f"0x{rgb}@{alpha:.6f}"
    return f"0x{rgb}"


def escape_filter_value(value: str) -> str:
    # Only ' and : are significant inside a quoted filter option value.
    normalized = str(value).replace("\\", "/")
    escaped = normalized.replace("'", "\\'").replace(":", "\\:")
    return f"'{escaped}'"
