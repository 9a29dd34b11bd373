"""ffmpeg-backed renderer: request dispatch, spec compile and process run."""

from __future__ import annotations

import base64
import logging
from typing import Any, List, Mapping, Optional, Union

from ffrender.core.config import ConfigProvider, RenderConfig, StaticConfigProvider
from ffrender.core.errors import UnsupportedInputError
from ffrender.core.graph import build_image_args, build_spec_args, compile_filter_graph
from ffrender.core.process import resolve_ffmpeg_executable, run_ffmpeg
from ffrender.core.registry import RendererRegistry
from ffrender.core.request import DelegateRoute, ImageRoute, RenderRequest, Route, SpecRoute, route_request
from ffrender.core.spec import CompositionSpec
from ffrender.core.template import JinjaSpecTemplateMerger, TemplateMerger
from ffrender.core.tempdir import RunContext, resolve_temp_root


LOG = logging.getLogger(__name__)

RENDERER_ID = "ffmpeg"

RenderResult = Union[str, List[str]]


def render_spec(
    spec: CompositionSpec,
    *,
    base_dir: str,
    config: RenderConfig,
    output_type: str = "png",
    quality: Any = None,
) -> bytes:
    """Compile ``spec`` and run ffmpeg inside a private run directory.

    The run directory and its scratch files are removed before this returns
    or raises, including on compile errors and timeouts.
    """
    with RunContext(resolve_temp_root(config.temp_dir)) as run_context:
        graph = compile_filter_graph(
            spec,
            base_dir=base_dir,
            run_context=run_context,
            font_file=config.font_file,
        )
        args = build_spec_args(graph, output_type, quality)
        return run_ffmpeg(
            args,
            executable=resolve_ffmpeg_executable(config.ffmpeg_path),
            timeout_ms=config.timeout_ms,
            log_command=config.log_command,
        )


def render_image(source: str, *, config: RenderConfig, output_type: str = "png", quality: Any = None) -> bytes:
    """Decode one image (path or URL) and re-encode it as a single frame."""
    return run_ffmpeg(
        build_image_args(source, output_type, quality),
        executable=resolve_ffmpeg_executable(config.ffmpeg_path),
        timeout_ms=config.timeout_ms,
        log_command=config.log_command,
    )


class FfmpegRenderer:
    """Renders composition specs and plain images through ffmpeg.

    Inputs it cannot handle (HTML, non-image URLs, unknown files) are handed
    to another renderer from the injected registry, if one is available.
    """

    id = RENDERER_ID

    def __init__(
        self,
        config_provider: Optional[ConfigProvider] = None,
        *,
        registry: Optional[RendererRegistry] = None,
        template_merger: Optional[TemplateMerger] = None,
    ) -> None:
        self._config_provider = config_provider or StaticConfigProvider()
        self._registry = registry
        self._template_merger = template_merger or JinjaSpecTemplateMerger()

    def render(self, request: Union[RenderRequest, Mapping[str, Any]]) -> RenderResult:
        """Render to base64; a one-element list when ``multi_page`` is set."""
        req = self._decode(request)
        route = self._route(req)
        if isinstance(route, DelegateRoute):
            return self._delegate(req, route)
        payload = base64.b64encode(self._execute(req, route)).decode("ascii")
        if req.multi_page:
            return [payload]
        return payload

    def render_bytes(self, request: Union[RenderRequest, Mapping[str, Any]]) -> bytes:
        """Render to raw encoded image bytes; never delegates."""
        req = self._decode(request)
        route = self._route(req)
        if isinstance(route, DelegateRoute):
            raise UnsupportedInputError(self._unsupported_message(req, route))
        return self._execute(req, route)

    def _decode(self, request: Union[RenderRequest, Mapping[str, Any]]) -> RenderRequest:
        if isinstance(request, RenderRequest):
            return request
        return RenderRequest.from_options(request)

    def _route(self, request: RenderRequest) -> Route:
        if request.data and request.inline_spec is None:
            request = self._template_merger.merge(request)
        route = route_request(request)
        LOG.debug("render %s -> %s", request.file, type(route).__name__)
        return route

    def _execute(self, request: RenderRequest, route: Route) -> bytes:
        config = self._config_provider.get()
        if isinstance(route, ImageRoute):
            return render_image(route.source, config=config, output_type=request.output_type, quality=request.quality)
        if isinstance(route, SpecRoute):
            return render_spec(
                route.spec,
                base_dir=route.base_dir,
                config=config,
                output_type=request.output_type,
                quality=request.quality,
            )
        raise UnsupportedInputError(f"unsupported input: {request.file}")

    def _delegate(self, request: RenderRequest, route: DelegateRoute) -> Any:
        other = self._registry.find_delegate(self.id) if self._registry is not None else None
        if other is None:
            raise UnsupportedInputError(self._unsupported_message(request, route))
        LOG.debug("delegating %s to renderer %r", request.file, other.id)
        return other.render(request)

    def _unsupported_message(self, request: RenderRequest, route: DelegateRoute) -> str:
        if route.remote:
            return (
                f"http input is not an image ({request.file}); install an HTML/URL "
                "renderer for browser-based rendering"
            )
        return route.reason or f"unsupported input: {request.file}"


def register_ffmpeg_renderer(
    registry: RendererRegistry,
    config_provider: Optional[ConfigProvider] = None,
    *,
    template_merger: Optional[TemplateMerger] = None,
) -> FfmpegRenderer:
    """Register (once) and return the ffmpeg renderer for ``registry``."""
    existing = registry.get(RENDERER_ID)
    if isinstance(existing, FfmpegRenderer):
        return existing
    renderer = FfmpegRenderer(config_provider, registry=registry, template_merger=template_merger)
    if registry.add(renderer):
        LOG.info("renderer registered: %s", RENDERER_ID)
    return renderer
