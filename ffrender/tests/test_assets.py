import os

import pytest

from ffrender.core import assets
from ffrender.core.assets import (
    find_default_font_file,
    is_likely_image,
    resolve_asset,
    resolve_font_file,
    to_fs_path,
)


posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX path semantics")


def test_remote_references_pass_through():
    url = "https://cdn.example.com/img/banner.png?size=large"
    assert resolve_asset(url, "/srv/specs") == url
    assert resolve_asset("HTTP://example.com/a.jpg", "/srv") == "HTTP://example.com/a.jpg"


@posix_only
def test_relative_paths_resolve_against_spec_directory():
    assert resolve_asset("img/a.png", "/srv/specs") == "/srv/specs/img/a.png"
    assert resolve_asset("../shared/b.png", "/srv/specs") == "/srv/shared/b.png"
    assert resolve_asset("/abs/c.png", "/srv/specs") == "/abs/c.png"


@posix_only
def test_file_urls_become_native_paths():
    assert to_fs_path("file:///tmp/a%20b.png") == "/tmp/a b.png"
    assert to_fs_path("file://localhost/tmp/x.png") == "/tmp/x.png"
    assert resolve_asset("file:///data/bg.png", "/srv") == "/data/bg.png"


def test_file_urls_with_drive_letters():
    assert to_fs_path("file:///C:/images/bg.png") == "C:/images/bg.png"
    assert to_fs_path("file://D:/images/bg.png") == "D:/images/bg.png"


def test_non_file_references_are_untouched_by_to_fs_path():
    assert to_fs_path("relative/a.png") == "relative/a.png"


def test_is_likely_image_ignores_query_and_fragment():
    assert is_likely_image("https://x.test/a.JPG?x=1#top")
    assert is_likely_image("/tmp/a.webp")
    assert not is_likely_image("/tmp/page.html")
    assert not is_likely_image("https://x.test/render?file=a.png")


def test_configured_font_used_only_when_it_exists(tmp_path):
    font = tmp_path / "font.ttf"
    font.write_bytes(b"\0")
    assert find_default_font_file(str(font), candidates=()) == str(font)
    assert find_default_font_file(str(tmp_path / "missing.ttf"), candidates=()) is None


def test_platform_candidates_are_probed_in_order(tmp_path):
    second = tmp_path / "second.ttf"
    second.write_bytes(b"\0")
    candidates = (str(tmp_path / "first.ttf"), str(second))
    assert find_default_font_file("", candidates=candidates) == str(second)


def test_default_font_candidates_by_platform():
    assert assets.default_font_candidates("win32")[0].startswith("C:/Windows/Fonts")
    assert assets.default_font_candidates("darwin")[0].startswith("/System/Library/Fonts")
    assert "DejaVuSans" in assets.default_font_candidates("linux")[0]


@posix_only
def test_layer_font_wins_and_resolves_relative_to_spec(tmp_path):
    configured = tmp_path / "configured.ttf"
    configured.write_bytes(b"\0")
    resolved = resolve_font_file("fonts/title.ttf", str(configured), str(tmp_path), candidates=())
    assert resolved == str(tmp_path / "fonts" / "title.ttf")
    assert resolve_font_file(None, str(configured), str(tmp_path), candidates=()) == str(configured)
