"""ffmpeg composition render core."""

from ffrender.core.config import ConfigProvider, RenderConfig, StaticConfigProvider, YamlConfigProvider
from ffrender.core.errors import (
    ConfigError,
    MissingFontError,
    ProcessError,
    RenderError,
    RenderTimeoutError,
    SpecDecodeError,
    ToolNotFoundError,
    UnsafeValueError,
    UnsupportedInputError,
    ValidationError,
)
from ffrender.core.graph import FilterGraph, build_spec_args, compile_filter_graph
from ffrender.core.registry import RendererRegistry
from ffrender.core.renderer import RENDERER_ID, FfmpegRenderer, register_ffmpeg_renderer, render_spec
from ffrender.core.request import RenderRequest
from ffrender.core.spec import CompositionSpec, load_spec_file, parse_spec

__all__ = [
    "CompositionSpec",
    "ConfigError",
    "ConfigProvider",
    "FfmpegRenderer",
    "FilterGraph",
    "MissingFontError",
    "ProcessError",
    "RENDERER_ID",
    "RenderConfig",
    "RenderError",
    "RenderRequest",
    "RenderTimeoutError",
    "RendererRegistry",
    "SpecDecodeError",
    "StaticConfigProvider",
    "ToolNotFoundError",
    "UnsafeValueError",
    "UnsupportedInputError",
    "ValidationError",
    "YamlConfigProvider",
    "build_spec_args",
    "compile_filter_graph",
    "load_spec_file",
    "parse_spec",
    "register_ffmpeg_renderer",
    "render_spec",
]
