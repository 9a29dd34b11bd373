"""Render request decoding and input routing."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Union

from ffrender.core.assets import is_http_url, is_likely_image, to_fs_path
from ffrender.core.errors import SpecDecodeError, ValidationError
from ffrender.core.output import normalize_output_type
from ffrender.core.spec import CompositionSpec, looks_like_spec, parse_spec, read_spec_json


LOG = logging.getLogger(__name__)

SPEC_EXTENSIONS = {".json", ".ffrender"}


@dataclass(frozen=True)
class RenderRequest:
    file: str
    output_type: str = "png"
    quality: Any = None
    multi_page: bool = False
    data: Optional[Mapping[str, Any]] = None
    inline_spec: Optional[Mapping[str, Any]] = None
    base_dir: Optional[str] = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "RenderRequest":
        """Decode a host option bag (``file``, ``type``, ``quality``, ``multiPage``, ``data``)."""
        if not isinstance(options, Mapping):
            raise ValidationError("render options must be a mapping")
        file = options.get("file")
        if not isinstance(file, str) or not file.strip():
            raise ValidationError("options.file must be a non-empty string")
        data = options.get("data")
        return cls(
            file=file.strip(),
            output_type=normalize_output_type(options.get("type")),
            quality=options.get("quality"),
            multi_page=bool(options.get("multiPage", options.get("multi_page", False))),
            data=data if isinstance(data, Mapping) and data else None,
        )

    def with_inline_spec(self, spec: Mapping[str, Any], base_dir: str) -> "RenderRequest":
        return replace(self, inline_spec=spec, base_dir=base_dir)


@dataclass(frozen=True)
class ImageRoute:
    source: str


@dataclass(frozen=True)
class SpecRoute:
    spec: CompositionSpec
    base_dir: str


@dataclass(frozen=True)
class DelegateRoute:
    reason: str
    remote: bool = False


Route = Union[ImageRoute, SpecRoute, DelegateRoute]


def is_spec_path(path: str) -> bool:
    return os.path.splitext(str(path or ""))[1].lower() in SPEC_EXTENSIONS


def route_request(request: RenderRequest) -> Route:
    """Decide how a request is handled.

    Remote images and local image files are decoded directly; inline specs and
    ``.json``/``.ffrender`` files that look like composition specs are compiled;
    everything else is left to a delegate renderer. A file that looks like a
    spec but fails validation raises `ValidationError`.
    """
    file = request.file
    if request.inline_spec is not None:
        base_dir = request.base_dir or os.path.dirname(os.path.abspath(to_fs_path(file)))
        return SpecRoute(parse_spec(request.inline_spec), base_dir)

    if is_http_url(file):
        if is_likely_image(file):
            return ImageRoute(file)
        return DelegateRoute("http input is not an image", remote=True)

    fs_path = os.path.abspath(to_fs_path(file))
    if is_likely_image(fs_path):
        return ImageRoute(fs_path)

    if is_spec_path(fs_path):
        try:
            raw = read_spec_json(fs_path)
        except (OSError, SpecDecodeError) as exc:
            LOG.debug("spec candidate %s unreadable: %s", fs_path, exc)
            return DelegateRoute(f"unsupported input: {file}")
        if looks_like_spec(raw):
            return SpecRoute(parse_spec(raw), os.path.dirname(fs_path))
        LOG.debug("json file %s is not a composition spec", fs_path)

    return DelegateRoute(f"unsupported input: {file}")
