import json
import math
from pathlib import Path

import pytest

from ffrender.core.errors import SpecDecodeError, ValidationError
from ffrender.core.spec import ImageLayer, TextLayer, load_spec_file, looks_like_spec, parse_spec


EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples" / "ffrender"


def _spec(**overrides):
    raw = {
        "version": 1,
        "width": 320,
        "height": 200,
        "background": {"color": "#102030"},
        "layers": [
            {"type": "image", "src": "a.png", "x": 0, "y": 0, "width": 100, "height": 50},
            {"type": "text", "text": "hello", "x": 10, "y": 20, "fontSize": 24},
        ],
    }
    raw.update(overrides)
    return raw


def test_parse_spec_builds_typed_layers_in_order():
    spec = parse_spec(_spec())
    assert spec.width == 320.0
    assert spec.height == 200.0
    assert spec.background.color == "#102030"
    assert spec.background_image is None
    image, text = spec.layers
    assert isinstance(image, ImageLayer)
    assert image.fit == "cover"
    assert image.opacity is None
    assert isinstance(text, TextLayer)
    assert text.font_size == 24.0
    assert text.color == "#ffffff"


@pytest.mark.parametrize("value", [0, -5, "100", True, None, math.nan, math.inf])
def test_invalid_dimensions_are_rejected(value):
    with pytest.raises(ValidationError, match="spec.width"):
        parse_spec(_spec(width=value))


def test_missing_height_is_rejected():
    raw = _spec()
    raw.pop("height")
    with pytest.raises(ValidationError, match="spec.height"):
        parse_spec(raw)


def test_non_object_spec_is_rejected():
    with pytest.raises(ValidationError):
        parse_spec([1, 2, 3])


def test_layers_must_be_an_array():
    with pytest.raises(ValidationError, match="layers must be an array"):
        parse_spec(_spec(layers={"type": "text"}))


def test_unsupported_version_is_rejected():
    with pytest.raises(ValidationError, match="version"):
        parse_spec(_spec(version=2))


def test_image_layer_without_src_reports_its_index():
    layers = [{"type": "image", "x": 0, "y": 0, "width": 10, "height": 10}]
    with pytest.raises(ValidationError, match=r"layers\[0\]"):
        parse_spec(_spec(layers=layers))


def test_unknown_fit_is_rejected():
    layers = [{"type": "image", "src": "a.png", "x": 0, "y": 0, "width": 10, "height": 10, "fit": "stretch"}]
    with pytest.raises(ValidationError):
        parse_spec(_spec(layers=layers))


def test_text_layer_needs_positive_font_size():
    layers = [{"type": "text", "text": "x", "x": 0, "y": 0, "fontSize": 0}]
    with pytest.raises(ValidationError):
        parse_spec(_spec(layers=layers))


def test_non_finite_layer_position_is_rejected():
    layers = [{"type": "text", "text": "x", "x": math.nan, "y": 0, "fontSize": 12}]
    with pytest.raises(ValidationError, match="finite"):
        parse_spec(_spec(layers=layers))


def test_unknown_layer_types_are_skipped():
    layers = [
        {"type": "video", "src": "clip.mp4"},
        {"type": "text", "text": "kept", "x": 0, "y": 0, "fontSize": 12},
    ]
    spec = parse_spec(_spec(layers=layers))
    assert [layer.text for layer in spec.layers] == ["kept"]


def test_out_of_range_opacity_is_kept_as_given():
    layers = [{"type": "image", "src": "a.png", "x": 0, "y": 0, "width": 10, "height": 10, "opacity": 5}]
    assert parse_spec(_spec(layers=layers)).layers[0].opacity == 5.0


def test_background_image_becomes_full_canvas_layer():
    spec = parse_spec(_spec(background={"src": "bg.jpg", "fit": "contain"}, layers=[]))
    bg = spec.background_image
    assert (bg.src, bg.x, bg.y, bg.width, bg.height, bg.fit) == ("bg.jpg", 0, 0, 320.0, 200.0, "contain")


def test_text_box_is_parsed():
    layers = [{"type": "text", "text": "t", "x": 0, "y": 0, "fontSize": 12, "box": {"color": "#000000", "border": 8}}]
    box = parse_spec(_spec(layers=layers)).layers[0].box
    assert box.color == "#000000"
    assert box.border == 8.0


def test_looks_like_spec():
    assert looks_like_spec({"width": 1, "height": 1})
    assert not looks_like_spec({"width": 1})
    assert not looks_like_spec(["width", "height"])


def test_load_spec_file_reports_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SpecDecodeError):
        load_spec_file(path)


def test_load_spec_file_reads_utf8(tmp_path):
    path = tmp_path / "s.ffrender.json"
    path.write_text(
        json.dumps(_spec(layers=[{"type": "text", "text": "Grüße 日本", "x": 0, "y": 0, "fontSize": 12}])),
        encoding="utf-8",
    )
    assert load_spec_file(path).layers[0].text == "Grüße 日本"


def test_bundled_basic_example_is_valid():
    spec = load_spec_file(EXAMPLES_DIR / "basic.ffrender.json")
    assert spec.width > 0
    assert spec.layers
