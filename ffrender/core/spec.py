"""Composition spec loader and validator."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from ffrender.core.errors import SpecDecodeError, ValidationError


LOG = logging.getLogger(__name__)

SPEC_VERSION = 1
FIT_MODES = ("fill", "contain", "cover")
DEFAULT_FIT = "cover"
DEFAULT_TEXT_COLOR = "#ffffff"


@dataclass(frozen=True)
class Background:
    color: Optional[str] = None
    src: Optional[str] = None
    fit: str = DEFAULT_FIT


@dataclass(frozen=True)
class ImageLayer:
    src: str
    x: float
    y: float
    width: float
    height: float
    fit: str = DEFAULT_FIT
    opacity: Optional[float] = None


@dataclass(frozen=True)
class TextBox:
    color: Optional[str] = None
    border: Optional[float] = None


@dataclass(frozen=True)
class TextLayer:
    text: str
    x: float
    y: float
    font_size: float
    color: str = DEFAULT_TEXT_COLOR
    font_file: Optional[str] = None
    box: Optional[TextBox] = None


Layer = Union[ImageLayer, TextLayer]


@dataclass(frozen=True)
class CompositionSpec:
    """Validated, immutable composition document.

    ``layers`` order is the painter's order: later entries are drawn on top of
    earlier ones and on top of the background.
    """

    width: float
    height: float
    version: int = SPEC_VERSION
    background: Optional[Background] = None
    layers: Tuple[Layer, ...] = ()

    @property
    def background_image(self) -> Optional[ImageLayer]:
        """The background image as an implicit full-canvas image layer."""
        if self.background is None or not self.background.src:
            return None
        return ImageLayer(
            src=self.background.src,
            x=0,
            y=0,
            width=self.width,
            height=self.height,
            fit=self.background.fit,
        )


def parse_spec(raw: Any) -> CompositionSpec:
    """Validate parsed JSON and return a typed ``CompositionSpec``."""
    if not isinstance(raw, Mapping):
        raise ValidationError("spec must be an object")
    width = _require_dimension(raw, "width")
    height = _require_dimension(raw, "height")
    layers_raw = raw.get("layers")
    if layers_raw is not None and not isinstance(layers_raw, list):
        raise ValidationError("spec.layers must be an array")

    validator = Draft202012Validator(_load_spec_schema())
    error = best_match(validator.iter_errors(dict(raw)))
    if error is not None:
        location = "".join(f"[{part!r}]" if isinstance(part, int) else f".{part}" for part in error.absolute_path)
        raise ValidationError(f"spec{location}: {error.message}")

    layers = []
    for index, item in enumerate(layers_raw or []):
        layer = _build_layer(item, index)
        if layer is not None:
            layers.append(layer)

    return CompositionSpec(
        width=width,
        height=height,
        version=int(raw.get("version", SPEC_VERSION)),
        background=_build_background(raw.get("background")),
        layers=tuple(layers),
    )


def load_spec_file(path: Union[str, Path]) -> CompositionSpec:
    """Read a UTF-8 JSON spec file and validate it."""
    return parse_spec(read_spec_json(path))


def read_spec_json(path: Union[str, Path]) -> Any:
    spec_path = Path(path)
    try:
        return json.loads(spec_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SpecDecodeError(f"{spec_path}: invalid JSON: {exc}") from exc


def looks_like_spec(raw: Any) -> bool:
    return isinstance(raw, Mapping) and "width" in raw and "height" in raw


@lru_cache(maxsize=1)
def _load_spec_schema() -> Dict[str, Any]:
    schema_path = Path(__file__).resolve().parents[1] / "schemas" / "composition_spec.schema.json"
    return json.loads(schema_path.read_text(encoding="utf-8"))


def _require_dimension(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"spec.{key} must be a finite number")
    if value <= 0:
        raise ValidationError(f"spec.{key} must be > 0")
    return float(value)


def _build_background(raw: Any) -> Optional[Background]:
    if not isinstance(raw, Mapping):
        return None
    return Background(
        color=raw.get("color"),
        src=str(raw.get("src") or "").strip() or None,
        fit=str(raw.get("fit") or DEFAULT_FIT),
    )


def _build_layer(raw: Mapping[str, Any], index: int) -> Optional[Layer]:
    kind = raw.get("type")
    if kind == "image":
        _require_finite(raw, ("x", "y", "width", "height"), index)
        opacity = raw.get("opacity")
        return ImageLayer(
            src=str(raw["src"]),
            x=float(raw["x"]),
            y=float(raw["y"]),
            width=float(raw["width"]),
            height=float(raw["height"]),
            fit=str(raw.get("fit") or DEFAULT_FIT),
            opacity=float(opacity) if opacity is not None else None,
        )
    if kind == "text":
        _require_finite(raw, ("x", "y", "fontSize"), index)
        box_raw = raw.get("box")
        box = None
        if isinstance(box_raw, Mapping):
            border = box_raw.get("border")
            box = TextBox(
                color=box_raw.get("color"),
                border=float(border) if border is not None else None,
            )
        return TextLayer(
            text=str(raw["text"]),
            x=float(raw["x"]),
            y=float(raw["y"]),
            font_size=float(raw["fontSize"]),
            color=str(raw.get("color") or DEFAULT_TEXT_COLOR),
            font_file=raw.get("fontFile"),
            box=box,
        )
    LOG.debug("skipping layer %d with unknown type %r", index, kind)
    return None


def _require_finite(raw: Mapping[str, Any], keys: Tuple[str, ...], index: int) -> None:
    # NaN/Infinity slip through the schema's numeric comparisons.
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if not math.isfinite(float(value)):
            raise ValidationError(f"spec.layers[{index}].{key} must be a finite number")
