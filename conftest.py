"""공용 테스트 픽스처 — 메모리에서 이미지·폰트를 만든다."""

from io import BytesIO

import pytest
from PIL import Image, ImageFont

from renderer.canvas import PixelBuffer
from renderer.text import find_fallback_font


def encode(img: Image.Image, fmt: str, **params) -> bytes:
    """PIL 이미지를 지정 포맷 바이트로 인코딩한다."""
    buf = BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


@pytest.fixture
def to_bytes():
    return encode


@pytest.fixture
def solid():
    """단색 RGBA 버퍼 팩토리."""
    def _make(size: tuple[int, int], color: tuple) -> PixelBuffer:
        return PixelBuffer(Image.new("RGBA", size, color))
    return _make


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    """Pillow 내장 FreeType 폰트, 없으면 시스템 폰트."""
    try:
        data = getattr(ImageFont.load_default(size=20), "font_bytes", None)
    except (TypeError, ImportError, OSError):
        data = None
    if data:
        return data
    path = find_fallback_font()
    if path:
        with open(path, "rb") as f:
            return f.read()
    pytest.skip("사용할 TrueType 폰트 없음")
