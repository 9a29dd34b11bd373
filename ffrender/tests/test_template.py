import json

import pytest

from ffrender.core.errors import ValidationError
from ffrender.core.request import RenderRequest, SpecRoute, route_request
from ffrender.core.template import JinjaSpecTemplateMerger


def _write(tmp_path, name, raw):
    path = tmp_path / name
    path.write_text(json.dumps(raw) if not isinstance(raw, str) else raw, encoding="utf-8")
    return str(path)


def test_string_leaves_are_rendered(tmp_path):
    path = _write(
        tmp_path,
        "t.json",
        {"width": 100, "height": 50, "layers": [{"type": "text", "text": "Hi {{ name }}!", "x": 0, "y": 0, "fontSize": 9}]},
    )
    merged = JinjaSpecTemplateMerger().merge(RenderRequest(file=path, data={"name": "Ada"}))
    assert merged.inline_spec["layers"][0]["text"] == "Hi Ada!"
    assert merged.base_dir == str(tmp_path)


def test_single_expression_keeps_native_type(tmp_path):
    path = _write(tmp_path, "t.json", {"width": "{{ w }}", "height": "{{ h * 2 }}", "layers": []})
    merged = JinjaSpecTemplateMerger().merge(RenderRequest(file=path, data={"w": 320, "h": 90}))
    assert merged.inline_spec["width"] == 320
    assert merged.inline_spec["height"] == 180
    route = route_request(merged)
    assert isinstance(route, SpecRoute)
    assert route.spec.width == 320.0


def test_missing_values_render_empty(tmp_path):
    path = _write(tmp_path, "t.json", {"width": 1, "height": 1, "title": "{{ missing }}"})
    merged = JinjaSpecTemplateMerger().merge(RenderRequest(file=path, data={"other": 1}))
    assert merged.inline_spec["title"] == ""


def test_requests_without_data_or_spec_file_are_untouched(tmp_path):
    merger = JinjaSpecTemplateMerger()
    html = _write(tmp_path, "page.html", "<p>{{ x }}</p>")
    broken = _write(tmp_path, "broken.json", "{nope")
    for request in (
        RenderRequest(file=_write(tmp_path, "t.json", {"width": 1, "height": 1})),
        RenderRequest(file=html, data={"x": 1}),
        RenderRequest(file=broken, data={"x": 1}),
        RenderRequest(file="https://example.com/spec.json", data={"x": 1}),
    ):
        assert merger.merge(request) is request


def test_template_syntax_errors_are_validation_errors(tmp_path):
    path = _write(tmp_path, "t.json", {"width": 1, "height": 1, "title": "{{ oops("})
    with pytest.raises(ValidationError, match="template error"):
        JinjaSpecTemplateMerger().merge(RenderRequest(file=path, data={"x": 1}))


def test_only_numeric_fields_keep_native_types(tmp_path):
    path = _write(
        tmp_path,
        "t.json",
        {
            "width": 10,
            "height": 10,
            "layers": [{"type": "text", "text": "{{ n }}", "x": "{{ n }}", "y": 0, "fontSize": 9, "color": "{{ c }}"}],
        },
    )
    merged = JinjaSpecTemplateMerger().merge(RenderRequest(file=path, data={"n": 7, "c": "#ffffff"}))
    layer = merged.inline_spec["layers"][0]
    assert layer["text"] == "7"
    assert layer["x"] == 7
    assert layer["color"] == "#ffffff"


def test_json_without_canvas_size_is_not_merged(tmp_path):
    path = _write(tmp_path, "page.json", {"title": "{{ t }}"})
    request = RenderRequest(file=path, data={"t": "x"})
    assert JinjaSpecTemplateMerger().merge(request) is request
