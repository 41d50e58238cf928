"""리샘플링 모듈 — Lanczos(반경 3) 커널로 픽셀 버퍼 크기를 바꾼다."""

from PIL import Image

from .canvas import PixelBuffer
from .errors import InvalidDimensions


def resample(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """버퍼를 정확히 (width, height) 크기로 리샘플링한 새 버퍼를 반환한다.

    가로세로 비율은 유지하지 않는다 — 호출자가 최종 크기를 직접 지정한다.
    원본 버퍼는 변경하지 않는다.
    """
    if width <= 0 or height <= 0:
        raise InvalidDimensions(f"리샘플 대상 크기가 잘못됨: {width}x{height}")
    # RGBA는 Pillow가 내부적으로 premultiplied 상태로 보간한다
    resized = buffer.image.resize((width, height), Image.Resampling.LANCZOS)
    return PixelBuffer(resized)
