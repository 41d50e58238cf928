"""텍스트 렌더링 모듈 — 아웃라인 폰트로 캔버스 위에 직접 글자를 그린다.

글리프별 안티앨리어싱 커버리지에 채움색 알파를 곱해 기존 캔버스 위에 over 합성한다.
자동 줄바꿈은 없다 — 각 줄의 기준선은 호출자가 정한다.
"""

import math
import os
import sys as _sys
from dataclasses import dataclass
from io import BytesIO

import freetype
from PIL import Image, ImageDraw, ImageFont

from .canvas import Canvas
from .errors import FontParseError, InvalidDimensions
from .layout import Placement

# 72 DPI: 글자 크기 1pt = 1px
DEFAULT_DPI = 72
# 글리프가 없을 때 펜 진행 폭
DEFAULT_MIN_WIDTH = 20


def find_fallback_font() -> str:
    """OS에 맞는 폴백 폰트 경로를 반환한다. 없으면 빈 문자열."""
    if _sys.platform == "win32":
        candidates = ["C:/Windows/Fonts/arial.ttf"]
    elif _sys.platform == "darwin":
        candidates = ["/System/Library/Fonts/Supplemental/Arial.ttf", "/Library/Fonts/Arial.ttf"]
    else:
        candidates = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/TTF/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        ]
    for path in candidates:
        if os.path.exists(path):
            return path
    return ""


class FontAsset:
    """파싱된 아웃라인 폰트. 한 번 로드해 모든 그리기 호출이 읽기 전용으로 공유한다."""

    def __init__(self, data: bytes, face: freetype.Face):
        self._data = data
        self._face = face
        # 픽셀 크기별 폰트 캐시
        self._font_cache: dict[float, ImageFont.FreeTypeFont] = {}

    @property
    def family(self) -> str:
        name = self._face.family_name or b""
        return name.decode("utf-8", "replace") if isinstance(name, bytes) else name

    @property
    def glyph_count(self) -> int:
        return self._face.num_glyphs

    def has_glyph(self, ch: str) -> bool:
        """문자 맵에 글리프가 있는지 (인덱스 0 = .notdef)."""
        return self._face.get_char_index(ord(ch)) != 0

    def sized(self, pixel_size: float) -> ImageFont.FreeTypeFont:
        """지정 픽셀 크기의 래스터라이저 폰트 (캐싱)."""
        if pixel_size not in self._font_cache:
            self._font_cache[pixel_size] = ImageFont.truetype(
                BytesIO(self._data), pixel_size, layout_engine=ImageFont.Layout.BASIC,
            )
        return self._font_cache[pixel_size]


@dataclass(frozen=True)
class TextStyle:
    """글자 스타일."""
    font_size: float                                   # pt (72 DPI에서 px과 동일)
    fill: tuple[int, ...] = (0, 0, 0, 255)             # RGBA
    min_width: int = DEFAULT_MIN_WIDTH                 # 글리프 없음 폴백 폭

    @property
    def fallback_width(self) -> int:
        return self.min_width if self.min_width > 0 else DEFAULT_MIN_WIDTH

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        if len(self.fill) == 3:
            return (*self.fill, 255)
        return tuple(self.fill)


@dataclass(frozen=True)
class TextRun:
    """한 줄 텍스트와 그 기준선 좌표."""
    content: str
    baseline: tuple[int, int]


def load_font(font_bytes: bytes) -> FontAsset:
    """TrueType/OpenType 폰트 바이트를 파싱한다.

    Raises:
        FontParseError: 아웃라인 데이터가 손상됨
    """
    data = bytes(font_bytes)
    try:
        face = freetype.Face(BytesIO(data))
        # 래스터라이저 쪽에서도 열리는지 확인
        ImageFont.truetype(BytesIO(data), DEFAULT_MIN_WIDTH, layout_engine=ImageFont.Layout.BASIC)
    except (freetype.FT_Exception, OSError, ValueError) as e:
        raise FontParseError(f"폰트 파싱 실패: {e}") from e
    return FontAsset(data, face)


def load_font_file(path) -> FontAsset:
    """폰트 파일을 읽어 파싱한다. 파일을 읽지 못하면 OSError."""
    with open(path, "rb") as f:
        return load_font(f.read())


def _pixel_size(style: TextStyle, dpi: int) -> float:
    size = style.font_size * dpi / DEFAULT_DPI
    if size <= 0:
        raise InvalidDimensions(f"글자 크기가 잘못됨: {style.font_size}pt @ {dpi}dpi")
    return size


def _px(value: float) -> int:
    """반올림 (정수 이동에 대해 일관된 floor(x + 0.5))."""
    return math.floor(value + 0.5)


def _kerning(pil_font: ImageFont.FreeTypeFont, left: str, right: str) -> float:
    """폰트 자체의 글자쌍 커닝 값 (px)."""
    return pil_font.getlength(left + right) - pil_font.getlength(left) - pil_font.getlength(right)


def _pen_positions(font: FontAsset, pil_font: ImageFont.FreeTypeFont, style: TextStyle,
                   content: str) -> tuple[list[tuple[str, float | None]], float]:
    """글자별 펜 x 위치와 전체 진행 폭. 글리프가 없는 글자는 위치 None."""
    positions = []
    pen = 0.0
    prev = None
    for ch in content:
        if not font.has_glyph(ch):
            positions.append((ch, None))
            pen += style.fallback_width
            prev = None
            continue
        if prev is not None:
            pen += _kerning(pil_font, prev, ch)
        positions.append((ch, pen))
        pen += pil_font.getlength(ch)
        prev = ch
    return positions, pen


def _glyph_layer(pil_font: ImageFont.FreeTypeFont, ch: str, bbox: tuple[int, int, int, int],
                 color: tuple[int, int, int, int]) -> Image.Image:
    """기준선 기준 bbox 크기의 글리프 RGBA 타일 (알파 = 커버리지 x 채움색 알파)."""
    left, top, right, bottom = bbox
    mask = Image.new("L", (right - left, bottom - top), 0)
    ImageDraw.Draw(mask).text((-left, -top), ch, font=pil_font, fill=255, anchor="ls")
    alpha = color[3]
    if alpha < 255:
        mask = mask.point(lambda v: v * alpha // 255)
    tile = Image.new("RGBA", mask.size, (*color[:3], 0))
    tile.putalpha(mask)
    return tile


def draw_text(canvas: Canvas, font: FontAsset, style: TextStyle, baseline: tuple[int, int],
              content: str, dpi: int = DEFAULT_DPI) -> None:
    """기준선 좌표에서 시작해 왼쪽→오른쪽으로 글자를 그린다.

    캔버스 밖 좌표는 잘리며 예외를 내지 않는다. 글리프가 없는 글자는
    건너뛰고 style.fallback_width 만큼 진행한다.
    """
    pil_font = font.sized(_pixel_size(style, dpi))
    color = style.rgba
    if color[3] == 0:
        return

    origin_x, origin_y = baseline
    positions, _ = _pen_positions(font, pil_font, style, content)
    for ch, pen in positions:
        if pen is None:
            continue
        bbox = pil_font.getbbox(ch, anchor="ls")
        left, top, right, bottom = bbox
        if right <= left or bottom <= top:
            continue  # 공백
        x = origin_x + _px(pen) + left
        y = origin_y + top
        if Placement(x, y, right - left, bottom - top).clip(canvas.width, canvas.height) is None:
            continue
        canvas.blend(_glyph_layer(pil_font, ch, bbox, color), (x, y))


def draw_runs(canvas: Canvas, font: FontAsset, style: TextStyle, runs: list[TextRun],
              dpi: int = DEFAULT_DPI) -> None:
    """여러 줄을 각자의 기준선에 그린다."""
    for run in runs:
        draw_text(canvas, font, style, run.baseline, run.content, dpi=dpi)


def measure_text(font: FontAsset, style: TextStyle, content: str, dpi: int = DEFAULT_DPI) -> int:
    """draw_text가 진행할 펜 폭(px)을 반환한다."""
    pil_font = font.sized(_pixel_size(style, dpi))
    _, advance = _pen_positions(font, pil_font, style, content)
    return _px(advance)
