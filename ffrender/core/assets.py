"""Asset reference resolution and default font probing."""

from __future__ import annotations

import os
import re
import sys
from typing import Optional, Sequence
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname


_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_FILE_URL_RE = re.compile(r"^file://", re.IGNORECASE)
_SLASH_DRIVE_RE = re.compile(r"^/[A-Za-z]:[\\/]")
_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")
_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}

_WINDOWS_FONTS = (
    "C:/Windows/Fonts/msyh.ttc",
    "C:/Windows/Fonts/msyh.ttf",
    "C:/Windows/Fonts/simhei.ttf",
    "C:/Windows/Fonts/arial.ttf",
)
_MACOS_FONTS = (
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Helvetica.ttf",
)
_LINUX_FONTS = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
)


def is_http_url(value: str) -> bool:
    return bool(_HTTP_URL_RE.match(str(value or "")))


def is_file_url(value: str) -> bool:
    return bool(_FILE_URL_RE.match(str(value or "")))


def to_fs_path(value: str) -> str:
    """Convert a ``file://`` URL to a native path; other values pass through."""
    text = str(value or "")
    if not is_file_url(text):
        return text
    stripped = _FILE_URL_RE.sub("", text, count=1)
    if _SLASH_DRIVE_RE.match(stripped):
        return unquote(stripped[1:])
    if _DRIVE_RE.match(stripped):
        return unquote(stripped)
    parsed = urlparse(text)
    if parsed.netloc not in ("", "localhost"):
        return stripped
    return url2pathname(parsed.path)


def is_likely_image(value: str) -> bool:
    """Guess from the extension, ignoring any query string or fragment."""
    clean = str(value or "").split("?", 1)[0].split("#", 1)[0]
    ext = os.path.splitext(clean)[1].lower()
    return ext in _IMAGE_EXTENSIONS


def resolve_asset(src: str, base_dir: str) -> str:
    """Resolve a layer ``src`` into a URL or an absolute filesystem path.

    Remote ``http(s)`` references are handed to ffmpeg unchanged. Existence is
    not checked here; a missing file surfaces as an ffmpeg process error.
    """
    text = str(src or "").strip()
    if is_http_url(text):
        return text
    fs_path = to_fs_path(text)
    if os.path.isabs(fs_path):
        return fs_path
    return os.path.abspath(os.path.join(str(base_dir or "."), fs_path))


def default_font_candidates(platform: Optional[str] = None) -> Sequence[str]:
    name = platform or sys.platform
    if name.startswith("win"):
        return _WINDOWS_FONTS
    if name == "darwin":
        return _MACOS_FONTS
    return _LINUX_FONTS


def find_default_font_file(configured: str = "", candidates: Optional[Sequence[str]] = None) -> Optional[str]:
    configured_path = str(configured or "").strip()
    if configured_path and os.path.isfile(configured_path):
        return configured_path
    for candidate in candidates if candidates is not None else default_font_candidates():
        if os.path.isfile(candidate):
            return candidate
    return None


def resolve_font_file(
    layer_font: Optional[str],
    configured_font: str,
    base_dir: str,
    *,
    candidates: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """Pick the layer font, then the configured font, then a platform default."""
    explicit = str(layer_font or "").strip()
    if explicit:
        return resolve_asset(explicit, base_dir)
    return find_default_font_file(configured_font, candidates)
