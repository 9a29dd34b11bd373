"""Template data merge for spec files rendered with inline ``data``."""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Mapping, Optional, Protocol

from jinja2 import Environment, TemplateError

from ffrender.core.assets import is_http_url, to_fs_path
from ffrender.core.errors import SpecDecodeError, ValidationError
from ffrender.core.request import RenderRequest, is_spec_path
from ffrender.core.spec import looks_like_spec, read_spec_json


_SINGLE_EXPR_RE = re.compile(r"^\s*\{\{(?P<expr>.+?)\}\}\s*$", re.DOTALL)

# Spec keys typed as numbers; every other leaf renders to text.
_NUMERIC_KEYS = frozenset({"version", "width", "height", "x", "y", "fontSize", "opacity", "border"})


class TemplateMerger(Protocol):
    def merge(self, request: RenderRequest) -> RenderRequest:
        ...


class JinjaSpecTemplateMerger:
    """Render every string leaf of a JSON spec file as a jinja2 template.

    A numeric field written as a single ``{{ expr }}`` keeps the native type of
    the value (so ``"width": "{{ width }}"`` becomes a number); all other leaves
    render to text. Files that are not composition specs are returned untouched
    for a delegate renderer to template.
    """

    def __init__(self, environment: Optional[Environment] = None) -> None:
        self._env = environment or Environment(autoescape=False, keep_trailing_newline=True)

    def merge(self, request: RenderRequest) -> RenderRequest:
        if not request.data or is_http_url(request.file):
            return request
        fs_path = os.path.abspath(to_fs_path(request.file))
        if not is_spec_path(fs_path):
            return request
        try:
            raw = read_spec_json(fs_path)
        except (OSError, SpecDecodeError):
            return request
        if not looks_like_spec(raw):
            return request
        context = dict(request.data)
        try:
            merged = self._render_value(raw, context)
        except TemplateError as exc:
            raise ValidationError(f"{fs_path}: template error: {exc}") from exc
        return request.with_inline_spec(merged, os.path.dirname(fs_path))

    def _render_value(self, value: Any, context: Dict[str, Any], key: Optional[str] = None) -> Any:
        if isinstance(value, str):
            return self._render_string(value, context, key in _NUMERIC_KEYS)
        if isinstance(value, list):
            return [self._render_value(item, context) for item in value]
        if isinstance(value, Mapping):
            return {name: self._render_value(item, context, name) for name, item in value.items()}
        return value

    def _render_string(self, text: str, context: Dict[str, Any], numeric: bool) -> Any:
        if "{{" not in text and "{%" not in text:
            return text
        match = _SINGLE_EXPR_RE.match(text)
        if numeric and match and "{{" not in match.group("expr") and "}}" not in match.group("expr"):
            result = self._env.compile_expression(match.group("expr").strip())(**context)
            return "" if result is None else result
        return self._env.from_string(text).render(**context)
