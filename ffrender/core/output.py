"""Encoder arguments for the single still frame piped out of ffmpeg."""

from __future__ import annotations

import math
from typing import Any, List

OUTPUT_TYPES = ("png", "jpeg", "webp")
DEFAULT_OUTPUT_TYPE = "png"
DEFAULT_JPEG_QUALITY = 90.0

# One still frame; audio and subtitle streams dropped.
FRAME_ARGS = ("-frames:v", "1", "-an", "-sn")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, lo: float, hi: float) -> float:
    if value < lo:
        return float(lo)
    if value > hi:
        return float(hi)
    return float(value)


def normalize_output_type(value: Any) -> str:
    text = str(value or "").strip().lower()
    if text == "jpg":
        return "jpeg"
    if text in OUTPUT_TYPES:
        return text
    return DEFAULT_OUTPUT_TYPE


def jpeg_qscale(quality: Any) -> int:
    """Invert a 1-100 quality onto mjpeg's 2-31 ``-q:v`` scale (lower is better)."""
    if isinstance(quality, bool) or not isinstance(quality, (int, float)) or not math.isfinite(quality):
        q = DEFAULT_JPEG_QUALITY
    else:
        q = _clamp(float(quality), 1.0, 100.0)
    return _round_half_up(31 - (q / 100.0) * 29)


def output_args(output_type: Any, quality: Any = None) -> List[str]:
    kind = normalize_output_type(output_type)
    if kind == "png":
        return ["-f", "image2pipe", "-vcodec", "png", "-pix_fmt", "rgba", "-"]
    if kind == "webp":
        return ["-f", "image2pipe", "-vcodec", "libwebp", "-pix_fmt", "yuva420p", "-"]
    return ["-q:v", str(jpeg_qscale(quality)), "-f", "image2pipe", "-vcodec", "mjpeg", "-"]
