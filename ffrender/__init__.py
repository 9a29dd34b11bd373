"""JSON composition specs rendered to still images with ffmpeg."""

from ffrender.core import (
    FfmpegRenderer,
    RenderConfig,
    RendererRegistry,
    RenderRequest,
    compile_filter_graph,
    parse_spec,
    register_ffmpeg_renderer,
)

__version__ = "0.1.0"

__all__ = [
    "FfmpegRenderer",
    "RenderConfig",
    "RenderRequest",
    "RendererRegistry",
    "compile_filter_graph",
    "parse_spec",
    "register_ffmpeg_renderer",
    "__version__",
]
