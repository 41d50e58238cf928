"""텍스트 렌더링 테스트 — 기준선 배치, 알파 합성, 경계 처리, 폴백 폭."""

import os

import pytest
from PIL import ImageChops

from renderer.canvas import Canvas
from renderer.errors import FontParseError, InvalidDimensions
from renderer.text import (
    DEFAULT_MIN_WIDTH, TextRun, TextStyle, draw_runs, draw_text, find_fallback_font, load_font,
    load_font_file, measure_text,
)

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
# 어떤 폰트의 문자 맵에도 없는 코드포인트
MISSING = chr(0x10FFFD)


@pytest.fixture(scope="module")
def font(font_bytes):
    return load_font(font_bytes)


def _changed_bbox(before: Canvas, after: Canvas):
    return ImageChops.difference(before.image.convert("RGB"), after.image.convert("RGB")).getbbox()


def test_load_font(font):
    assert font.glyph_count > 0
    assert font.has_glyph("H")
    assert not font.has_glyph(MISSING)


@pytest.mark.parametrize("data", [b"", b"not a font at all", b"\x00\x01\x00\x00" + b"\xff" * 64])
def test_malformed_font_rejected(data):
    with pytest.raises(FontParseError):
        load_font(data)


def test_load_font_file(tmp_path, font_bytes):
    path = tmp_path / "font.ttf"
    path.write_bytes(font_bytes)
    assert load_font_file(path).has_glyph("A")


def test_load_font_file_missing(tmp_path):
    with pytest.raises(OSError):
        load_font_file(tmp_path / "missing.ttf")


def test_glyphs_sit_on_baseline(font):
    canvas = Canvas(200, 100, WHITE)
    before = canvas.snapshot()
    draw_text(canvas, font, TextStyle(40, BLACK), (10, 60), "HI")

    bbox = _changed_bbox(before, canvas)
    assert bbox is not None
    left, top, right, bottom = bbox
    assert 5 <= left <= 20
    assert 60 - 40 <= top < 60
    # H/I에는 디센더가 없다 — 기준선 아래로 거의 내려가지 않음
    assert bottom <= 62


def test_text_advances_left_to_right(font):
    style = TextStyle(30, BLACK)
    one = Canvas(300, 60, WHITE)
    draw_text(one, font, style, (10, 40), "H")
    two = Canvas(300, 60, WHITE)
    draw_text(two, font, style, (10, 40), "HH")
    blank = Canvas(300, 60, WHITE)
    assert _changed_bbox(blank, two)[2] > _changed_bbox(blank, one)[2] + 10


def test_fill_color_applied(font):
    canvas = Canvas(120, 80, WHITE)
    draw_text(canvas, font, TextStyle(60, (0, 0, 255, 255)), (10, 70), "I")
    colors = canvas.image.getcolors(maxcolors=100000)
    assert any(rgba == (0, 0, 255, 255) for _, rgba in colors)
    # 커버리지 블렌딩: 흰색과 파랑 사이 값만 존재
    for _, (r, g, b, a) in colors:
        assert r == g and b == 255 and a == 255


def test_transparent_fill_is_noop(font):
    canvas = Canvas(120, 80, (30, 60, 90, 255))
    before = canvas.pixels()
    draw_text(canvas, font, TextStyle(40, (255, 0, 0, 0)), (5, 50), "Hello")
    assert canvas.pixels() == before


def test_partial_alpha_keeps_layer_below(font):
    canvas = Canvas(160, 80, (255, 0, 0, 255))
    draw_text(canvas, font, TextStyle(50, (0, 0, 255, 128)), (5, 60), "HI")
    colors = canvas.image.getcolors(maxcolors=100000)
    assert len(colors) > 1
    for _, (r, g, b, a) in colors:
        assert a == 255 and g == 0
        assert r >= 126


@pytest.mark.parametrize("baseline", [(100000, 50), (-100000, 50), (10, -5000), (10, 100000)])
def test_far_outside_draws_nothing(font, baseline):
    canvas = Canvas(80, 60, WHITE)
    before = canvas.pixels()
    draw_text(canvas, font, TextStyle(24, BLACK), baseline, "Hello world")
    assert canvas.pixels() == before


def test_partially_outside_is_clipped(font):
    canvas = Canvas(40, 40, WHITE)
    draw_text(canvas, font, TextStyle(60, BLACK), (-15, 30), "HHHH")
    assert canvas.size == (40, 40)
    assert canvas.image.getcolors(maxcolors=100000) != [(1600, WHITE)]


def test_missing_glyph_skipped(font):
    canvas = Canvas(100, 60, WHITE)
    before = canvas.pixels()
    draw_text(canvas, font, TextStyle(30, BLACK), (10, 40), MISSING * 3)
    assert canvas.pixels() == before


def test_missing_glyph_advances_by_fallback_width(font):
    style = TextStyle(30, BLACK, min_width=25)
    assert measure_text(font, style, MISSING) == 25
    assert measure_text(font, style, "H" + MISSING) == measure_text(font, style, "H") + 25

    plain = Canvas(200, 60, WHITE)
    draw_text(plain, font, style, (10, 40), "H")
    shifted = Canvas(200, 60, WHITE)
    draw_text(shifted, font, style, (10, 40), MISSING + "H")
    blank = Canvas(200, 60, WHITE)
    assert _changed_bbox(blank, shifted)[0] == _changed_bbox(blank, plain)[0] + 25


def test_fallback_width_default():
    assert TextStyle(10, min_width=0).fallback_width == DEFAULT_MIN_WIDTH
    assert TextStyle(10, min_width=-4).fallback_width == DEFAULT_MIN_WIDTH
    assert TextStyle(10, min_width=7).fallback_width == 7


def test_rgb_fill_is_opaque():
    assert TextStyle(10, (1, 2, 3)).rgba == (1, 2, 3, 255)


def test_dpi_scales_size(font):
    style = TextStyle(20, BLACK)
    assert measure_text(font, style, "HHHH", dpi=144) == measure_text(font, TextStyle(40, BLACK), "HHHH")


@pytest.mark.parametrize("size", [0, -12])
def test_non_positive_size_rejected(font, size):
    with pytest.raises(InvalidDimensions):
        draw_text(Canvas(10, 10), font, TextStyle(size, BLACK), (0, 5), "H")


def test_draw_runs_each_line_at_its_baseline(font):
    style = TextStyle(20, BLACK)
    canvas = Canvas(200, 120, WHITE)
    draw_runs(canvas, font, style, [TextRun("H", (10, 30)), TextRun("H", (10, 90))])

    blank = Canvas(200, 120, WHITE)
    bbox = _changed_bbox(blank, canvas)
    assert bbox[1] < 30 and bbox[3] > 80
    middle = canvas.image.crop((0, 35, 200, 65))
    assert middle.getcolors() == [(200 * 30, WHITE)]


def test_find_fallback_font_regular_face():
    path = find_fallback_font()
    assert path == "" or os.path.exists(path)
    assert "Bold" not in path
