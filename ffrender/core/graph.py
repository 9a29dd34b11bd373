"""Filter graph compiler: composition spec -> ffmpeg ``-filter_complex`` program.

The compiler builds a small intermediate representation first:

- `Source`: the solid canvas, labelled ``base0``.
- `Chain`: per image input normalization, fit transform and opacity.
- `Overlay`: composites a chain onto the running base label.
- `DrawText`: draws one text layer (read from a scratch file) onto the base.

Stages are serialized to the textual program only in `FilterGraph.program()`,
so escaping and ordering can be checked without spawning ffmpeg.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ffrender.core.assets import resolve_asset, resolve_font_file
from ffrender.core.errors import MissingFontError
from ffrender.core.output import FRAME_ARGS, output_args
from ffrender.core.sanitize import TRANSPARENT, escape_filter_value, to_ffmpeg_color
from ffrender.core.spec import CompositionSpec, ImageLayer, TextLayer
from ffrender.core.tempdir import RunContext


BASE_ARGS = ("-hide_banner", "-loglevel", "error")


def _round(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


@dataclass(frozen=True)
class Source:
    color: str
    width: int
    height: int
    label: str = "base0"

    def render(self) -> str:
        return f"color=c={self.color}:s={self.width}x{self.height}:d=1,format=rgba[{self.label}]"


@dataclass(frozen=True)
class Chain:
    input_index: int
    filters: Tuple[str, ...]
    label: str

    def render(self) -> str:
        return f"[{self.input_index}:v]{','.join(self.filters)}[{self.label}]"


@dataclass(frozen=True)
class Overlay:
    base: str
    layer: str
    x: int
    y: int
    label: str

    def render(self) -> str:
        return f"[{self.base}][{self.layer}]overlay={self.x}:{self.y}:format=auto[{self.label}]"


@dataclass(frozen=True)
class DrawText:
    base: str
    options: Tuple[Tuple[str, str], ...]
    label: str

    def render(self) -> str:
        opts = ":".join(f"{key}={value}" for key, value in self.options)
        return f"[{self.base}]drawtext={opts}[{self.label}]"


Stage = Union[Source, Chain, Overlay, DrawText]


@dataclass(frozen=True)
class FilterGraph:
    stages: Tuple[Stage, ...]
    inputs: Tuple[str, ...]
    output_label: str

    def program(self) -> str:
        return ";".join(stage.render() for stage in self.stages)


def image_chain_filters(layer: ImageLayer) -> List[str]:
    """Return the per-layer filter chain: rgba, fit transform, optional alpha."""
    w = _round(layer.width)
    h = _round(layer.height)
    filters = ["format=rgba"]
    if layer.fit == "contain":
        filters.append(f"scale=w={w}:h={h}:force_original_aspect_ratio=decrease")
        filters.append(f"pad=w={w}:h={h}:x=(ow-iw)/2:y=(oh-ih)/2:color={TRANSPARENT}")
    elif layer.fit == "cover":
        filters.append(f"scale=w={w}:h={h}:force_original_aspect_ratio=increase")
        filters.append(f"crop=w={w}:h={h}")
    else:
        filters.append(f"scale=w={w}:h={h}")
    opacity = layer.opacity
    if opacity is not None and math.isfinite(opacity) and 0 <= opacity < 1:
        filters.append(f"colorchannelmixer=aa={opacity:.6f}")
    return filters


def drawtext_options(
    layer: TextLayer,
    *,
    font_file: str,
    text_file: str,
) -> Tuple[Tuple[str, str], ...]:
    options: List[Tuple[str, str]] = [
        ("fontfile", escape_filter_value(font_file)),
        ("textfile", escape_filter_value(text_file)),
        ("reload", "0"),
        ("x", str(_round(layer.x))),
        ("y", str(_round(layer.y))),
        ("fontsize", str(_round(layer.font_size))),
        ("fontcolor", to_ffmpeg_color(layer.color or "#ffffff")),
    ]
    box = layer.box
    if box is not None and box.color:
        options.append(("box", "1"))
        options.append(("boxcolor", to_ffmpeg_color(box.color)))
        if box.border is not None and box.border > 0:
            options.append(("boxborderw", str(_round(box.border))))
    return tuple(options)


def compile_filter_graph(
    spec: CompositionSpec,
    *,
    base_dir: str,
    run_context: RunContext,
    font_file: str = "",
) -> FilterGraph:
    """Compile ``spec`` into a `FilterGraph`, writing text scratch files.

    Layers are emitted strictly in declaration order (painter's order); a
    background image is folded in as an implicit first full-canvas layer.
    """
    background_color = to_ffmpeg_color(spec.background.color if spec.background else None)
    stages: List[Stage] = [Source(background_color, _round(spec.width), _round(spec.height))]
    inputs: List[str] = []
    current = "base0"
    step = 0

    layers: List[Union[ImageLayer, TextLayer]] = []
    background_image = spec.background_image
    if background_image is not None:
        layers.append(background_image)
    layers.extend(spec.layers)

    for layer in layers:
        step += 1
        label = f"base{step}"
        if isinstance(layer, ImageLayer):
            input_index = len(inputs)
            inputs.append(resolve_asset(layer.src, base_dir))
            image_label = f"img{input_index}"
            stages.append(Chain(input_index, tuple(image_chain_filters(layer)), image_label))
            stages.append(Overlay(current, image_label, _round(layer.x), _round(layer.y), label))
        else:
            resolved_font = resolve_font_file(layer.font_file, font_file, base_dir)
            if not resolved_font:
                raise MissingFontError(
                    "missing font file (set `ffmpegFontFile` in the renderer config or layer.fontFile)"
                )
            text_file = run_context.write_text(layer.text)
            stages.append(
                DrawText(current, drawtext_options(layer, font_file=resolved_font, text_file=text_file), label)
            )
        current = label

    return FilterGraph(stages=tuple(stages), inputs=tuple(inputs), output_label=current)


def build_spec_args(graph: FilterGraph, output_type: str, quality: Optional[float] = None) -> List[str]:
    """Argument vector (without the executable) for a compiled graph."""
    args: List[str] = list(BASE_ARGS)
    for source in graph.inputs:
        args.extend(["-i", source])
    args.extend(["-filter_complex", graph.program(), "-map", f"[{graph.output_label}]"])
    args.extend(FRAME_ARGS)
    args.extend(output_args(output_type, quality))
    return args


def build_image_args(source: str, output_type: str, quality: Optional[float] = None) -> List[str]:
    """Argument vector that decodes one image and re-encodes a single frame."""
    args: List[str] = [*BASE_ARGS, "-i", str(source)]
    args.extend(FRAME_ARGS)
    args.extend(output_args(output_type, quality))
    return args
